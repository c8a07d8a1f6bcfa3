from __future__ import annotations

import copy
import json
import socket

import aiohttp
import pytest
from aiohttp import web
from aiohttp.abc import AbstractResolver

from nowplaying.lib import config
from nowplaying.webhelper.auth import ORIGIN, SessionDescriptor

STATUS_PAYLOAD = {
    "version": 9,
    "client_version": "1.0.42.151.g19de0aa6",
    "playing": True,
    "shuffle": False,
    "repeat": False,
    "play_enabled": True,
    "prev_enabled": True,
    "next_enabled": True,
    "context": {"uri": "spotify:album:xyz", "metadata": {}},
    "playing_position": 3.0,
    "server_time": 1453910120,
    "volume": 0.75,
    "online": True,
    "open_graph_state": {"private_session": False, "posting_disabled": True},
    "running": True,
    "track": {
        "length": 245,
        "track_type": "normal",
        "track_resource": {"name": "Song", "uri": "spotify:track:1",
                           "location": {"og": "http://x/y"}},
        "artist_resource": {"name": "Band", "uri": "spotify:artist:2",
                            "location": {"og": "http://x/artist"}},
        "album_resource": {"name": "Record", "uri": "spotify:album:3",
                           "location": {"og": "http://x/album"}},
    },
}


class LoopbackResolver(AbstractResolver):
    """Resolves every hostname (e.g. *.spotilocal.com) to 127.0.0.1."""

    async def resolve(self, host, port=0, family=socket.AF_INET):
        return [{
            "hostname": host,
            "host": "127.0.0.1",
            "port": port,
            "family": socket.AF_INET,
            "proto": 0,
            "flags": socket.AI_NUMERICHOST,
        }]

    async def close(self):
        pass


def loopback_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(connector=aiohttp.TCPConnector(resolver=LoopbackResolver()))


class FakeWebhelper:
    """In-process stand-in for the webhelper and the public token endpoint."""

    def __init__(self):
        self.status_payload = copy.deepcopy(STATUS_PAYLOAD)
        self.oauth_token = "oauth-token"
        self.csrf_token = "csrf-token"
        self.fail_status = 0          # next N status calls answer HTTP 500
        self.garbled_paths: set[str] = set()  # answer invalid UTF-8
        self.requests: list[tuple[str, list[tuple[str, str]], dict]] = []

    def _record(self, request: web.Request):
        self.requests.append((request.path, list(request.query.items()),
                              dict(request.headers)))

    def _json(self, data) -> web.Response:
        # The real webhelper labels its JSON text/javascript.
        return web.Response(text=json.dumps(data), content_type="text/javascript")

    def calls(self, path: str) -> list[tuple[list[tuple[str, str]], dict]]:
        return [(q, h) for p, q, h in self.requests if p == path]

    async def _token(self, request):
        self._record(request)
        return self._json({"t": self.oauth_token})

    async def _csrf(self, request):
        self._record(request)
        if request.headers.get("Origin") != ORIGIN:
            return web.json_response({"error": {"type": "4107"}}, status=403)
        return self._json({"token": self.csrf_token})

    async def _status(self, request):
        self._record(request)
        if self.fail_status:
            self.fail_status -= 1
            return web.Response(status=500, text="boom")
        return self._json(self.status_payload)

    async def _play(self, request):
        self._record(request)
        payload = dict(self.status_payload, playing=True)
        return self._json(payload)

    async def _pause(self, request):
        self._record(request)
        payload = dict(self.status_payload, playing=request.query.get("pause") != "true")
        return self._json(payload)

    async def _version(self, request):
        self._record(request)
        return self._json({"version": 9, "client_version": "1.0.42"})

    @web.middleware
    async def _garble(self, request, handler):
        if request.path in self.garbled_paths:
            self._record(request)
            return web.Response(body=b'{"running": \xff\xfe}', content_type="text/javascript")
        return await handler(request)

    def app(self) -> web.Application:
        app = web.Application(middlewares=[self._garble])
        app.router.add_get("/token", self._token)
        app.router.add_get("/simplecsrf/token.json", self._csrf)
        app.router.add_get("/remote/status.json", self._status)
        app.router.add_get("/remote/play.json", self._play)
        app.router.add_get("/remote/pause.json", self._pause)
        app.router.add_get("/service/version.json", self._version)
        return app


def descriptor_for(port: int, host: str = "abcxyzqrst.spotilocal.com") -> SessionDescriptor:
    return SessionDescriptor(
        host=host,
        port=port,
        params=(("oauth", "A"), ("csrf", "B")),
        headers=(("Origin", ORIGIN),),
        scheme="http",
    )


@pytest.fixture
def fake_webhelper() -> FakeWebhelper:
    return FakeWebhelper()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    monkeypatch.delenv("NOWPLAYING_CONFIG", raising=False)
    monkeypatch.delenv("NOTIFY_SOCKET", raising=False)
    config._config = None
    yield
    config._config = None
