"""Systemd readiness, watchdog heartbeat and status line.

Talks to the systemd notify socket.  Every call is a no-op when
NOTIFY_SOCKET is unset (dev mode, tests).

Usage:
    from nowplaying.lib.watchdog import watchdog_loop
    asyncio.create_task(watchdog_loop(lambda: f"poller {poller.state.value}"))
"""

import asyncio
import logging
import os
import socket
from collections.abc import Callable

logger = logging.getLogger(__name__)


def _socket_address() -> str | None:
    addr = os.environ.get("NOTIFY_SOCKET")
    if not addr:
        return None
    if addr[0] == "@":
        addr = "\0" + addr[1:]
    return addr


def sd_notify(msg: str) -> bool:
    """Send *msg* to the notify socket.  Returns False when there is none."""
    addr = _socket_address()
    if addr is None:
        return False
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
    try:
        sock.sendto(msg.encode(), addr)
    except OSError as e:
        logger.debug("sd_notify(%r) failed: %s", msg, e)
        return False
    finally:
        sock.close()
    return True


async def watchdog_loop(status: Callable[[], str] | None = None, interval: int = 20):
    """READY=1 once, then WATCHDOG=1 (plus STATUS=...) every *interval* seconds."""
    sd_notify("READY=1")
    logger.debug("Watchdog started (interval=%ds)", interval)
    while True:
        msg = "WATCHDOG=1"
        if status is not None:
            msg += f"\nSTATUS={status()}"
        sd_notify(msg)
        await asyncio.sleep(interval)
