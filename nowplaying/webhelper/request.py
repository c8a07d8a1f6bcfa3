"""Low-level JSON GET shared by the authenticator and the client."""

import asyncio
import json
import logging
from collections.abc import Iterable, Mapping

import aiohttp

from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


async def get_json(session: aiohttp.ClientSession, url: str, *,
                   params: Iterable[tuple[str, str]] = (),
                   headers: Mapping[str, str] | None = None,
                   timeout: float = DEFAULT_TIMEOUT) -> dict:
    """GET *url* and decode a JSON object from the body.

    *params* is a sequence of pairs so that repeated names are all sent.
    The webhelper labels its JSON ``text/javascript``, so the declared
    content type is ignored.  Raises TransportError on any failure.
    """
    try:
        async with session.get(
            url, params=list(params), headers=dict(headers or {}),
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            resp.raise_for_status()
            body = await resp.read()
    except asyncio.TimeoutError as e:
        raise TransportError(f"timed out after {timeout}s: {url}", url) from e
    except aiohttp.ClientResponseError as e:
        raise TransportError(f"HTTP {e.status} from {url}", url) from e
    except aiohttp.ClientError as e:
        raise TransportError(f"request to {url} failed: {e}", url) from e

    try:
        data = json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TransportError(f"undecodable response from {url}: {e}", url) from e
    if not isinstance(data, dict):
        raise TransportError(
            f"expected a JSON object from {url}, got {type(data).__name__}", url)
    logger.debug("GET %s -> %d keys", url, len(data))
    return data
