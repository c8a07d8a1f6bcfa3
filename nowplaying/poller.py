"""
Poller — the single writer of the SnapshotStore.

Calls WebhelperClient.status() on a fixed cadence.  The status endpoint is
a long-poll (held open up to 1 s, released early on play/pause/login/...),
so a 1 s cadence gives near-real-time updates at roughly one request per
second.  A failed fetch is logged and the previous snapshot stays in
place; the loop never gives up on its own.
"""

import asyncio
import enum
import logging

from .lib.snapshot_store import SnapshotStore
from .webhelper.errors import TransportError

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0


class PollerState(enum.Enum):
    IDLE = "idle"        # no snapshot fetched yet
    LIVE = "live"        # at least one snapshot in the store
    STOPPED = "stopped"


class Poller:
    def __init__(self, client, store: SnapshotStore, interval: float = POLL_INTERVAL):
        self._client = client
        self._store = store
        self.interval = interval
        self.state = PollerState.IDLE
        self.failures = 0          # consecutive failed fetches
        self._task: asyncio.Task | None = None

    async def poll_once(self) -> bool:
        """Fetch one snapshot into the store.  Returns False if the fetch failed."""
        try:
            snapshot = await self._client.status()
        except TransportError as e:
            self.failures += 1
            logger.warning("Status fetch failed (%d in a row): %s", self.failures, e)
            return False

        if self.failures:
            logger.info("Status fetch recovered after %d failures", self.failures)
            self.failures = 0
        generation = self._store.replace(snapshot)
        if self.state is PollerState.IDLE:
            logger.info("First status received (running=%s, playing=%s)",
                        snapshot.running, snapshot.playing)
            self.state = PollerState.LIVE
        logger.debug("Snapshot %d stored", generation)
        return True

    async def run(self):
        """Poll until stopped.  Each tick starts *interval* after the previous one."""
        loop = asyncio.get_running_loop()
        logger.info("Polling webhelper status every %.1fs", self.interval)
        next_tick = loop.time()
        while self.state is not PollerState.STOPPED:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unexpected error in status poll")

            next_tick += self.interval
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                # Overran (slow long-poll): resync instead of bursting.
                next_tick = loop.time()
                await asyncio.sleep(0)

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        self.state = PollerState.STOPPED
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Poller stopped")
