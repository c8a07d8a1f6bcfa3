"""
StatusServer — HTTP pull and WebSocket push of the current snapshot.

Routes:
  GET /    — text/plain, or text/html when the first Accept entry is text/html
  GET /ws  — one HTML fragment per tick while the player is running

Handlers only read the SnapshotStore; they never call the webhelper.
"""

import asyncio
import logging

from aiohttp import web

from . import formatter
from .lib.snapshot_store import SnapshotStore

log = logging.getLogger(__name__)

DEFAULT_PORT = 8080
PUSH_INTERVAL = 1.0


def accept_type(request: web.Request) -> str:
    """First entry of the Accept header, without parameters."""
    first = request.headers.get("Accept", "").split(",")[0]
    return first.split(";")[0].strip().lower()


class StatusServer:
    def __init__(self, store: SnapshotStore, *, host: str = "0.0.0.0",
                 port: int = DEFAULT_PORT, push: bool = True,
                 push_interval: float = PUSH_INTERVAL):
        self._store = store
        self.host = host
        self.port = port
        self.push = push
        self.push_interval = push_interval
        self._ws_clients: set[web.WebSocketResponse] = set()
        self._runner: web.AppRunner | None = None

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._handle_status)
        if self.push:
            app.router.add_get("/ws", self._handle_ws)
        return app

    async def start(self):
        self._runner = web.AppRunner(self.make_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        log.info("Status server on %s:%d (push %s)", self.host, self.port,
                 "enabled" if self.push else "disabled")

    async def shutdown(self):
        for ws in list(self._ws_clients):
            await ws.close()
        self._ws_clients.clear()
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    @property
    def client_count(self) -> int:
        return len(self._ws_clients)

    # ── Pull ──

    async def _handle_status(self, request: web.Request) -> web.Response:
        snapshot = self._store.get()
        if accept_type(request) == "text/html":
            body = formatter.render_html(snapshot, push=self.push)
            return web.Response(text=body, content_type="text/html")
        return web.Response(text=formatter.render_text(snapshot),
                            content_type="text/plain")

    # ── Push ──

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._ws_clients.add(ws)
        log.info("WebSocket client connected (%d total)", len(self._ws_clients))
        pusher = asyncio.create_task(self._push_fragments(ws))
        try:
            # Push-only; reading keeps close frames from the client flowing.
            async for msg in ws:
                pass
            await pusher
        finally:
            pusher.cancel()
            self._ws_clients.discard(ws)
            log.info("WebSocket client disconnected (%d remaining)",
                     len(self._ws_clients))
        return ws

    async def _push_fragments(self, ws: web.WebSocketResponse):
        """Send a fragment per tick; close once the player is not running."""
        try:
            while not ws.closed:
                fragment = formatter.render_fragment(self._store.get())
                if not fragment:
                    log.debug("Player not running — closing push channel")
                    break
                await ws.send_str(fragment)
                await asyncio.sleep(self.push_interval)
        except ConnectionResetError as e:
            # Consumer went away mid-send; only this channel is affected.
            log.debug("Push to client failed: %s", e)
        await ws.close()
