"""
Webhelper session bootstrap — the ONE place tokens are fetched.

The local API only answers requests that carry both an OAuth token (from
the public open.spotify.com/token endpoint) and a CSRF token (from the
local /simplecsrf/token.json endpoint), and whose Origin header claims to
be the Spotify web player.  The tokens are never refreshed; when they
expire every call fails and the process has to be restarted.

Insecure local transport: the webhelper presents a certificate issued for
*.spotilocal.com that no public CA vouches for, so every call to the local
API is made with certificate validation disabled.  The connector for that
is built by insecure_local_connector() and nowhere else.
"""

import asyncio
import logging
import random
import string
from collections.abc import Callable
from dataclasses import dataclass

import aiohttp

from .errors import AuthError, TransportError
from .request import DEFAULT_TIMEOUT, get_json

log = logging.getLogger(__name__)

TOKEN_URL = "http://open.spotify.com/token"
LOCAL_DOMAIN = "spotilocal.com"
LOCAL_PORT = 4370
ORIGIN = "https://open.spotify.com"
HOST_PREFIX_LENGTH = 10


def insecure_local_connector() -> aiohttp.TCPConnector:
    """Connector for the local webhelper: certificate validation disabled."""
    return aiohttp.TCPConnector(ssl=False)


def choose_host(length: int = HOST_PREFIX_LENGTH, domain: str = LOCAL_DOMAIN) -> str:
    """Pick a fresh random subdomain of *domain*, e.g. 'qwhzkeoptl.spotilocal.com'.

    A new name per run avoids stale connection/certificate reuse.  It is
    not a security measure.
    """
    prefix = "".join(random.choice(string.ascii_lowercase) for _ in range(length))
    return f"{prefix}.{domain}"


@dataclass(frozen=True)
class SessionDescriptor:
    """Everything needed to call the local API until the tokens expire."""

    host: str
    port: int
    params: tuple[tuple[str, str], ...]
    headers: tuple[tuple[str, str], ...]
    scheme: str = "https"

    def url(self, path: str) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{path}"

    @property
    def header_map(self) -> dict[str, str]:
        return dict(self.headers)


class Authenticator:
    """Runs the two-token handshake and returns a SessionDescriptor.

    *public_session* is used for the open.spotify.com token call and must
    validate certificates; *local_session* talks to the webhelper and is
    normally built on insecure_local_connector().
    """

    def __init__(self, public_session: aiohttp.ClientSession,
                 local_session: aiohttp.ClientSession, *,
                 token_url: str = TOKEN_URL,
                 port: int = LOCAL_PORT,
                 scheme: str = "https",
                 origin: str = ORIGIN,
                 host_factory: Callable[[], str] = choose_host,
                 timeout: float = DEFAULT_TIMEOUT):
        self._public_session = public_session
        self._local_session = local_session
        self.token_url = token_url
        self.port = port
        self.scheme = scheme
        self.origin = origin
        self._host_factory = host_factory
        self.timeout = timeout

    async def fetch_oauth_token(self) -> str:
        try:
            data = await get_json(self._public_session, self.token_url,
                                  timeout=self.timeout)
        except TransportError as e:
            raise AuthError(f"OAuth token fetch failed: {e}") from e
        token = data.get("t")
        if not isinstance(token, str) or not token:
            raise AuthError(f"OAuth token missing from {self.token_url} response")
        return token

    async def fetch_csrf_token(self, host: str, port: int,
                               headers: tuple[tuple[str, str], ...]) -> str:
        url = f"{self.scheme}://{host}:{port}/simplecsrf/token.json"
        try:
            data = await get_json(self._local_session, url,
                                  headers=dict(headers), timeout=self.timeout)
        except TransportError as e:
            raise AuthError(f"CSRF token fetch failed: {e}") from e
        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise AuthError(f"CSRF token missing from {url} response")
        return token

    async def authenticate(self) -> SessionDescriptor:
        """Fetch both tokens (concurrently) and bundle them into a session."""
        host = self._host_factory()
        headers = (("Origin", self.origin),)
        log.info("Authenticating against %s:%d", host, self.port)

        oauth_task = asyncio.ensure_future(self.fetch_oauth_token())
        csrf_task = asyncio.ensure_future(
            self.fetch_csrf_token(host, self.port, headers))
        try:
            oauth_token, csrf_token = await asyncio.gather(oauth_task, csrf_task)
        finally:
            for task in (oauth_task, csrf_task):
                if not task.done():
                    task.cancel()

        log.info("Webhelper session established (%s)", host)
        return SessionDescriptor(
            host=host,
            port=self.port,
            params=(("oauth", oauth_token), ("csrf", csrf_token)),
            headers=headers,
            scheme=self.scheme,
        )
