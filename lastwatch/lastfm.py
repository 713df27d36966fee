# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Last.fm API client.

One request per call, no retries (the poll loop owns retry timing).  Every
outcome is returned as a PollResult; nothing raises past this module:

    result = await client.get_recent_tracks("rj", limit=1)
    if result.ok:
        tracks = result.tracks
    else:
        log.warning("Last.fm failed: %s", result.error)
"""

import asyncio
import logging
from dataclasses import dataclass

import aiohttp
from pydantic import ValidationError

from .track import RecentTracksResponse, Track

log = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


class LastFmError(Exception):
    """A failed Last.fm request.  *status* is set for HTTP errors."""

    def __init__(self, message: str, status: int | None = None, reason: str | None = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


@dataclass(frozen=True)
class Success:
    tracks: tuple[Track, ...]
    ok = True


@dataclass(frozen=True)
class Failure:
    error: Exception
    ok = False


PollResult = Success | Failure


class LastFmClient:
    """Thin async wrapper around ``user.getrecenttracks``."""

    def __init__(self, base_url: str, api_key: str,
                 session: aiohttp.ClientSession | None = None,
                 timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url
        self._api_key = api_key
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _params(self, **params) -> dict:
        params.update(method="user.getrecenttracks", format="json", api_key=self._api_key)
        # Empty values are left off the query string entirely
        return {k: str(v) for k, v in params.items() if v not in (None, "", False)}

    async def get_recent_tracks(self, user: str, limit: int = 1, page: int | None = None,
                                extended: bool = False) -> PollResult:
        """Fetch *user*'s most recent tracks, newest first, at most *limit*."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        params = self._params(user=user, limit=limit, page=page, extended=int(extended))
        log.debug("Fetching recent tracks for %s (limit=%d)", user, limit)

        try:
            async with self._session.get(self.base_url, params=params,
                                         timeout=self._timeout) as resp:
                if not 200 <= resp.status < 300:
                    return Failure(LastFmError(f"[{resp.status}]: {resp.reason}",
                                               status=resp.status, reason=resp.reason))
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return Failure(LastFmError(f"Request failed: {e!r}"))
        except ValueError as e:
            return Failure(LastFmError(f"Response is not JSON: {e}"))

        if isinstance(body, dict) and "error" in body:
            return Failure(LastFmError(f"Last.fm error {body['error']}: {body.get('message', '')}"))

        try:
            parsed = RecentTracksResponse.model_validate(body)
        except ValidationError as e:
            return Failure(LastFmError(f"Unexpected response shape: {e}"))

        return Success(parsed.recenttracks.track[:limit])

    async def close(self):
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None
