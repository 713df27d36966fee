# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Poll loop: the one recurring cycle of a LastWatch process.

    run():  setup hooks → poll now → poll every interval → (signal) → teardown

Each cycle is select → detect change → notify, and runs to completion
before the next one starts.  A cycle that overruns the interval delays the
next tick instead of overlapping it, so SelectionState has a single writer
and hook notifications never interleave.

SIGINT/SIGTERM cancel the next scheduled cycle only; a cycle already in
flight finishes, then every hook is torn down and run() returns 0.
"""

import asyncio
import logging
import signal

from .dispatcher import HookDispatcher
from .lastfm import LastFmClient
from .lib.watchdog import sd_notify, watchdog_loop
from .selection import select_track
from .state import SelectionState, has_changed
from .track import Track, format_track

log = logging.getLogger(__name__)


class Poller:
    def __init__(self, client: LastFmClient, dispatcher: HookDispatcher, users,
                 interval_ms: int, show_inactive: bool = False,
                 cycle_timeout: float | None = None):
        self.client = client
        self.dispatcher = dispatcher
        self.users = list(users)
        self.interval_s = interval_ms / 1000
        self.show_inactive = show_inactive
        self.cycle_timeout = cycle_timeout
        self.state = SelectionState()
        self.running = False
        self._stop_event = asyncio.Event()
        self._loop_task: asyncio.Task | None = None
        self._watchdog_task: asyncio.Task | None = None

    # ── One cycle ──

    async def _select(self) -> Track | None:
        selecting = select_track(self.client, self.users, self.state, retry_in=self.interval_s)
        if not self.cycle_timeout:
            return await selecting
        try:
            return await asyncio.wait_for(selecting, self.cycle_timeout)
        except asyncio.TimeoutError:
            log.warning("Last.fm did not answer within %gs, trying again in %g seconds",
                        self.cycle_timeout, self.interval_s)
            return None

    async def poll_once(self) -> bool:
        """Run one cycle.  Returns True when hooks were notified."""
        track = await self._select()
        if track is None:
            # Keep the last-known baseline across failed cycles
            return False

        changed = has_changed(self.state, track, self.show_inactive)
        formatted = format_track(track, self.show_inactive)
        self.state.accept(formatted)
        if not changed:
            return False

        log.info("Received new track: %s", formatted or "(nothing playing)")
        await self.dispatcher.notify_all(track)
        return True

    # ── Scheduling ──

    async def _loop(self):
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except Exception:
                log.exception("Poll cycle failed")

            next_tick += self.interval_s
            delay = next_tick - loop.time()
            if delay <= 0:
                # Overran the interval: the queued tick runs right away
                next_tick = loop.time()
                continue
            try:
                await asyncio.wait_for(self._stop_event.wait(), delay)
            except asyncio.TimeoutError:
                pass

    def request_stop(self):
        if not self._stop_event.is_set():
            log.info("Signal received: shutting down")
        self._stop_event.set()

    # ── Lifecycle ──

    async def start(self):
        """Set up hooks and start polling.  The first cycle runs immediately."""
        self.running = True
        await self.dispatcher.setup_all()
        sd_notify("READY=1")
        self._watchdog_task = asyncio.create_task(watchdog_loop())
        self._loop_task = asyncio.create_task(self._loop())
        log.info("Polling %d user(s) every %g seconds", len(self.users), self.interval_s)

    async def run(self, install_signal_handlers: bool = True) -> int:
        """Convenience entry-point: start + wait for signal + shutdown."""
        loop = asyncio.get_running_loop()
        signals = (signal.SIGTERM, signal.SIGINT) if install_signal_handlers else ()
        for sig in signals:
            loop.add_signal_handler(sig, self.request_stop)
        try:
            await self.start()
            await self._stop_event.wait()
        finally:
            await self.shutdown()
            for sig in signals:
                loop.remove_signal_handler(sig)
        log.info("Exiting...")
        return 0

    async def shutdown(self):
        """Let an in-flight cycle finish, then tear everything down."""
        self.running = False
        self._stop_event.set()
        sd_notify("STOPPING=1")

        if self._loop_task:
            await self._loop_task
            self._loop_task = None

        if self._watchdog_task:
            self._watchdog_task.cancel()
            try:
                await self._watchdog_task
            except asyncio.CancelledError:
                pass
            self._watchdog_task = None

        await self.dispatcher.teardown_all()
        await self.client.close()
        log.info("Server stopped")
