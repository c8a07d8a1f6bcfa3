"""
WebhelperClient — authenticated calls against the local API.

Endpoints (all GET, JSON responses, oauth + csrf on every call):
  /remote/status.json?returnafter=1&returnon=...  — long-poll for state changes
  /remote/play.json?uri=X&context=X               — start playing a spotify: URI
  /remote/pause.json?pause=true|false             — pause / resume
  /service/version.json?service=remote            — webhelper version probe
"""

import logging

import aiohttp

from .auth import SessionDescriptor
from .models import StatusSnapshot, VersionInfo
from .request import DEFAULT_TIMEOUT, get_json

logger = logging.getLogger(__name__)

LONG_POLL_SECONDS = 1   # webhelper holds /remote/status.json open this long
RETURN_ON_EVENTS = ("login", "logout", "play", "pause", "error", "ap")


class WebhelperClient:
    """Thin wrapper binding a SessionDescriptor to an aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, descriptor: SessionDescriptor,
                 *, timeout: float = DEFAULT_TIMEOUT):
        self._session = session
        self.descriptor = descriptor
        self.timeout = timeout

    def _query(self, params: list[tuple[str, str]]) -> list[tuple[str, str]]:
        # Session params first, call params after; neither replaces the other.
        return list(self.descriptor.params) + list(params)

    async def _call(self, path: str, params: list[tuple[str, str]]) -> dict:
        return await get_json(
            self._session, self.descriptor.url(path),
            params=self._query(params),
            headers=self.descriptor.header_map,
            timeout=self.timeout,
        )

    async def status(self) -> StatusSnapshot:
        data = await self._call("/remote/status.json", [
            ("returnafter", str(LONG_POLL_SECONDS)),
            ("returnon", ",".join(RETURN_ON_EVENTS)),
        ])
        return StatusSnapshot.from_json(data)

    async def play(self, uri: str) -> StatusSnapshot:
        """Play a spotify: URI, using the same URI as playback context."""
        data = await self._call("/remote/play.json", [("uri", uri), ("context", uri)])
        logger.info("Play requested: %s", uri)
        return StatusSnapshot.from_json(data)

    async def pause(self) -> StatusSnapshot:
        data = await self._call("/remote/pause.json", [("pause", "true")])
        logger.info("Paused")
        return StatusSnapshot.from_json(data)

    async def resume(self) -> StatusSnapshot:
        data = await self._call("/remote/pause.json", [("pause", "false")])
        logger.info("Resumed")
        return StatusSnapshot.from_json(data)

    async def version(self) -> VersionInfo:
        data = await self._call("/service/version.json", [("service", "remote")])
        return VersionInfo.from_json(data)
