#!/usr/bin/env python3
"""
Now-playing relay service (nowplaying)

Startup order:
  1. authenticate against the local webhelper (fatal on failure)
  2. probe /service/version.json (informational)
  3. start the status poller (1 s long-poll cadence)
  4. serve GET / and GET /ws on --port (default 8080)

Runs until SIGTERM/SIGINT.
"""

import argparse
import asyncio
import logging
import signal
import sys

import aiohttp

from .lib.config import cfg
from .lib.snapshot_store import SnapshotStore
from .lib.watchdog import sd_notify, watchdog_loop
from .poller import POLL_INTERVAL, Poller
from .server import DEFAULT_PORT, PUSH_INTERVAL, StatusServer
from .webhelper.auth import LOCAL_PORT, Authenticator, insecure_local_connector
from .webhelper.client import WebhelperClient
from .webhelper.errors import AuthError, TransportError
from .webhelper.request import DEFAULT_TIMEOUT

logger = logging.getLogger("nowplaying")


class NowPlayingService:
    """Owns the HTTP sessions, poller and server for one process lifetime."""

    def __init__(self, *, port: int | None = None, push: bool | None = None):
        self.port = port if port is not None else int(cfg("server", "port", default=DEFAULT_PORT))
        self.push = push if push is not None else bool(cfg("server", "push", default=True))
        self.push_interval = float(cfg("server", "push_interval", default=PUSH_INTERVAL))
        self.poll_interval = float(cfg("poll", "interval", default=POLL_INTERVAL))
        self.webhelper_port = int(cfg("webhelper", "port", default=LOCAL_PORT))
        self.timeout = float(cfg("webhelper", "timeout", default=DEFAULT_TIMEOUT))
        self.insecure_tls = bool(cfg("webhelper", "insecure_tls", default=True))

        self.store = SnapshotStore()
        self.poller: Poller | None = None
        self.server: StatusServer | None = None
        self._public_session: aiohttp.ClientSession | None = None
        self._local_session: aiohttp.ClientSession | None = None
        self._watchdog_task: asyncio.Task | None = None

    def _status_line(self) -> str:
        state = self.poller.state.value if self.poller else "starting"
        return f"poller {state}, {self.server.client_count if self.server else 0} push clients"

    def _open_sessions(self):
        """Public session always validates certificates; the local one only
        when webhelper.insecure_tls is off."""
        self._public_session = aiohttp.ClientSession()
        connector = insecure_local_connector() if self.insecure_tls else None
        self._local_session = aiohttp.ClientSession(connector=connector)

    async def start(self):
        self._open_sessions()

        logger.info("Authenticating...")
        authenticator = Authenticator(
            self._public_session, self._local_session,
            port=self.webhelper_port, timeout=self.timeout)
        descriptor = await authenticator.authenticate()

        client = WebhelperClient(self._local_session, descriptor, timeout=self.timeout)
        try:
            version = await client.version()
            logger.info("Webhelper version %d (client %s)",
                        version.version, version.client_version or "unknown")
        except TransportError as e:
            logger.warning("Version probe failed: %s", e)

        logger.info("Starting poller...")
        self.poller = Poller(client, self.store, interval=self.poll_interval)
        self.poller.start()

        self.server = StatusServer(self.store, port=self.port, push=self.push,
                                   push_interval=self.push_interval)
        await self.server.start()

        self._watchdog_task = asyncio.create_task(watchdog_loop(self._status_line))

    async def run(self):
        """Start, wait for a signal, shut down."""
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)
        try:
            await self.start()
            await stop_event.wait()
        finally:
            await self.shutdown()

    async def shutdown(self):
        sd_notify("STOPPING=1")
        if self._watchdog_task:
            self._watchdog_task.cancel()
            try:
                await self._watchdog_task
            except asyncio.CancelledError:
                pass
            self._watchdog_task = None
        if self.poller:
            await self.poller.stop()
        if self.server:
            await self.server.shutdown()
        for session in (self._public_session, self._local_session):
            if session:
                await session.close()
        self._public_session = self._local_session = None


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nowplaying",
        description="Serve Spotify's now-playing state over HTTP and WebSocket")
    parser.add_argument("--port", type=int, default=None,
                        help=f"listening port (default: server.port or {DEFAULT_PORT})")
    parser.add_argument("--no-push", action="store_true",
                        help="disable the /ws push endpoint")
    parser.add_argument("--log-level", default=None,
                        help="logging level (default: logging.level or INFO)")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    level = args.log_level or cfg("logging", "level", default="INFO")
    logging.basicConfig(
        level=str(level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    service = NowPlayingService(port=args.port, push=False if args.no_push else None)
    try:
        await service.run()
    except AuthError as e:
        logger.error("Authentication failed: %s", e)
        return 1
    return 0


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
