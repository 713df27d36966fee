# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Hook dispatcher: runs hook lifecycles with per-hook failure isolation.

    setup_all()    : concurrent; a failed setup is logged, the hook stays active
    notify_all(t)  : sequential, in configured order; failures logged, never raised
    teardown_all() : concurrent, best effort; each hook is torn down at most once

On-change dispatch is sequential so hooks that touch the same external
system see a deterministic order (e.g. cover upload before status update).
"""

import asyncio
import logging

from .hooks.base import Hook
from .track import Track

log = logging.getLogger(__name__)


class HookDispatcher:
    def __init__(self, hooks):
        self.hooks: list[Hook] = list(hooks)
        self._torn_down: set[int] = set()
        self._notify_lock = asyncio.Lock()

    def __len__(self):
        return len(self.hooks)

    async def setup_all(self):
        log.info("Setting up %d hooks...", len(self.hooks))
        results = await asyncio.gather(
            *(hook.setup() for hook in self.hooks), return_exceptions=True)
        for hook, result in zip(self.hooks, results):
            if isinstance(result, BaseException):
                log.error("Setup failed for %s hook: %r", hook.type, result, exc_info=result)
        log.info("Hooks set up")

    async def notify_all(self, track: Track):
        async with self._notify_lock:
            for hook in self.hooks:
                try:
                    await hook.on_track_change(track)
                except Exception:
                    log.exception("%s hook failed on track change", hook.type)

    async def teardown_all(self):
        pending = [h for h in self.hooks if id(h) not in self._torn_down]
        self._torn_down.update(id(h) for h in pending)
        if not pending:
            return
        results = await asyncio.gather(
            *(hook.teardown() for hook in pending), return_exceptions=True)
        for hook, result in zip(pending, results):
            if isinstance(result, BaseException):
                log.error("Teardown failed for %s hook: %r", hook.type, result, exc_info=result)
