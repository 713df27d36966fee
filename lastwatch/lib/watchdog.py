"""Systemd notify + watchdog heartbeat for the poll loop.

Sends READY=1 / STOPPING=1 / WATCHDOG=1 to the systemd notify socket.
Silently no-ops when NOTIFY_SOCKET is unset (macOS / dev mode).

Usage:
    from lastwatch.lib.watchdog import sd_notify, watchdog_loop
    sd_notify("READY=1")
    task = asyncio.create_task(watchdog_loop())
"""

import asyncio
import logging
import os
import socket

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 20


def sd_notify(msg: str) -> bool:
    """Send a notification message to the systemd notify socket."""
    addr = os.environ.get("NOTIFY_SOCKET")
    if not addr:
        return False
    if addr[0] == "@":
        addr = "\0" + addr[1:]
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
    try:
        sock.sendto(msg.encode(), addr)
        return True
    except OSError as e:
        logger.warning("sd_notify(%s) failed: %s", msg.split("\n")[0], e)
        return False
    finally:
        sock.close()


def watchdog_interval() -> float:
    """Half of $WATCHDOG_USEC, as systemd recommends, else DEFAULT_INTERVAL."""
    usec = os.environ.get("WATCHDOG_USEC", "")
    try:
        return max(int(usec) / 2_000_000, 1.0)
    except ValueError:
        return DEFAULT_INTERVAL


async def watchdog_loop(interval: float | None = None):
    """Send WATCHDOG=1 every *interval* seconds until cancelled."""
    interval = interval or watchdog_interval()
    if not os.environ.get("NOTIFY_SOCKET"):
        return
    logger.info("Watchdog started (interval=%.1fs)", interval)
    while True:
        sd_notify("WATCHDOG=1")
        await asyncio.sleep(interval)
