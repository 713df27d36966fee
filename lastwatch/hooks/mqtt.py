# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
MQTT hook: publishes "Artist - Title" to a broker topic on every change.

The broker connection lives in a background task with auto-reconnect and
exponential backoff, so a broker that is down at startup (or goes away
later) never blocks the poll loop.  Changes arriving while disconnected are
dropped with a warning.

Options:
    topic     – required
    hostname  – broker host (default "localhost")
    port      – broker port (default 1883)
    username / password
    qos       – 0, 1 or 2 (default 0)
    retain    – retain the last message on the broker (default false)
"""

import asyncio
import logging

import aiomqtt

from ..lib.config import ConfigError, parse_bool, parse_number
from ..track import Track, format_track
from .base import Hook

logger = logging.getLogger(__name__)

DEFAULT_HOSTNAME = "localhost"
DEFAULT_PORT = 1883
MAX_BACKOFF = 30  # seconds


class MqttHook(Hook):
    type = "mqtt"

    def __init__(self, options, settings):
        super().__init__(options, settings)
        self.topic = self.require("topic")
        self.hostname = options.get("hostname") or DEFAULT_HOSTNAME
        self.port = parse_number(options.get("port", DEFAULT_PORT), "mqtt.port", minimum=1)
        self.username = options.get("username") or None
        self.password = options.get("password") or None
        self.qos = parse_number(options.get("qos", 0), "mqtt.qos", minimum=0)
        if self.qos > 2:
            raise ConfigError(f"mqtt.qos must be 0, 1 or 2, got {self.qos}")
        self.retain = parse_bool(options.get("retain", False), "mqtt.retain")

        self._client: aiomqtt.Client | None = None
        self._task: asyncio.Task | None = None
        self._running = False

    async def setup(self) -> None:
        self._running = True
        self._task = asyncio.create_task(self._mqtt_loop())
        logger.info("MQTT starting -> %s:%d", self.hostname, self.port)

    async def teardown(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._client = None
        logger.info("Disconnected from broker")

    async def on_track_change(self, track: Track) -> None:
        if not self._client:
            logger.warning("MQTT not connected, dropping track update")
            return
        payload = format_track(track, self.settings.show_inactive)
        await self._client.publish(self.topic, payload, qos=self.qos, retain=self.retain)
        logger.info("Published track to %s", self.topic)

    async def _mqtt_loop(self):
        """Hold a broker connection open, reconnecting with backoff."""
        backoff = 1

        while self._running:
            try:
                async with aiomqtt.Client(
                    hostname=self.hostname,
                    port=self.port,
                    username=self.username,
                    password=self.password,
                ) as client:
                    self._client = client
                    backoff = 1
                    logger.info("Connected to broker %s:%d", self.hostname, self.port)
                    # Nothing is subscribed; the iterator raises when the connection drops
                    async for _ in client.messages:
                        pass
            except asyncio.CancelledError:
                raise
            except aiomqtt.MqttError as e:
                self._client = None
                logger.warning("MQTT connection lost (%s), reconnecting in %ds", e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, MAX_BACKOFF)

        self._client = None
