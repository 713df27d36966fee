# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Decide whose track is "current" this cycle.

Candidates are queried one at a time, in configured order:

  1. The first user whose latest track is now playing wins.  They become the
     sticky user and nobody after them is queried.
  2. Nobody playing: keep showing the sticky user's latest track, if their
     query succeeded this cycle.
  3. Otherwise: the latest track of the last user whose query succeeded.
  4. Every query failed: no track this cycle (the caller keeps its state).
"""

import logging

from .lastfm import LastFmClient, PollResult
from .state import SelectionState
from .track import Track

log = logging.getLogger(__name__)


async def select_track(client: LastFmClient, users, state: SelectionState,
                       retry_in: float | None = None) -> Track | None:
    """Return the current track, or None when none could be determined.

    Updates ``state.sticky_user`` when a now-playing track is found.
    *retry_in* (seconds) only feeds the warning message.
    """
    results: dict[str, PollResult] = {}
    last_ok: PollResult | None = None
    last: PollResult | None = None

    for user in users:
        result = await client.get_recent_tracks(user, limit=1)
        if result.ok and result.tracks and result.tracks[0].is_now_playing:
            if user != state.sticky_user:
                log.info("Found currently playing track for user: %s", user)
            state.sticky_user = user
            return result.tracks[0]
        if not result.ok:
            log.debug("Recent tracks for %s failed: %s", user, result.error)
        results[user] = result
        last = result
        if result.ok:
            last_ok = result

    if last is None:
        log.warning("No Last.fm users configured: nothing to poll")
        return None

    sticky = results.get(state.sticky_user)
    if sticky is not None and sticky.ok:
        fallback = sticky
    else:
        fallback = last_ok or last

    if not fallback.ok:
        if retry_in is not None:
            log.warning("Failed to fetch recent tracks from Last.fm, trying again in %g seconds",
                        retry_in)
        else:
            log.warning("Failed to fetch recent tracks from Last.fm: %s", fallback.error)
        return None

    if not fallback.tracks:
        log.debug("No recent tracks for any candidate")
        return None
    return fallback.tracks[0]
