"""Holder for the single most recent status snapshot.

One writer (the poller) replaces the whole snapshot; any number of readers
take the current reference.  Snapshots are frozen, so a reader can never
see a mix of two writes.  The lock only covers the reference swap, which
keeps thread readers (tests, executors) as safe as coroutine readers.
"""

import threading

from ..webhelper.models import StatusSnapshot


class SnapshotStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: StatusSnapshot | None = None
        self._generation = 0

    def get(self) -> StatusSnapshot | None:
        with self._lock:
            return self._snapshot

    def get_with_generation(self) -> tuple[StatusSnapshot | None, int]:
        with self._lock:
            return self._snapshot, self._generation

    def replace(self, snapshot: StatusSnapshot) -> int:
        """Swap in *snapshot*; returns its generation (1 for the first write)."""
        with self._lock:
            self._snapshot = snapshot
            self._generation += 1
            return self._generation

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation
