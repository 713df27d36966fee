# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
HTTP server hook: serves the last reported track as JSON.

    GET /current  →  {"artist": {"mbid": "", "text": "..."}, "name": "...", ...}
                     or null before the first track change

Options:
    host  – bind address (default "0.0.0.0")
    port  – listen port (default 1457)
"""

import logging

from aiohttp import web

from ..lib.config import parse_number
from ..track import Track
from .base import Hook

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 1457


class HttpServerHook(Hook):
    type = "http_server"

    def __init__(self, options, settings):
        super().__init__(options, settings)
        self.host = options.get("host") or DEFAULT_HOST
        self.port = parse_number(options.get("port", DEFAULT_PORT), "http_server.port", minimum=0)
        self.current: Track | None = None
        self._runner: web.AppRunner | None = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/current", self._handle_current)
        return app

    async def setup(self) -> None:
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Server listening on %s:%d", self.host, self.port)

    async def on_track_change(self, track: Track) -> None:
        self.current = track

    async def teardown(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Server on port %d stopped", self.port)

    # ── HTTP route handlers ──

    def _cors_headers(self):
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    async def _handle_current(self, request: web.Request) -> web.Response:
        body = self.current.model_dump(mode="json") if self.current else None
        return web.json_response(body, headers=self._cors_headers())
