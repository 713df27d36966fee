# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
GeekMagic hook: pushes the album cover to a GeekMagic desk display.

GeekMagic HTTP API (the device's own web UI uses the same calls):
  GET  /space.json                 : {"total": N, "free": N} in bytes
  POST /doUpload?dir=/image/       : multipart upload, field "image"

The display only shows JPEG (and GIF), so covers are resized and
transcoded before upload.  The same cover is never uploaded twice in a row.

Options:
    url              – required, e.g. "http://192.168.0.42"
    cover_file_name  – file name on the device (default "cover.jpg")
    size             – square edge in pixels (default 240)
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO

import aiohttp
from PIL import Image

from ..lib.config import parse_number
from ..track import Track
from .base import Hook

logger = logging.getLogger(__name__)

DEFAULT_COVER_FILE_NAME = "cover.jpg"
DEFAULT_SIZE = 240
REQUEST_TIMEOUT = 10  # seconds

# Shared thread pool for CPU-bound image processing
_image_executor = ThreadPoolExecutor(max_workers=1)


def resize_to_jpeg(image_bytes: bytes, size: int) -> bytes:
    """Resize raw image bytes to a *size* x *size* JPEG.  Runs in a thread."""
    image = Image.open(BytesIO(image_bytes))
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGB")
    image = image.resize((size, size))

    buf = BytesIO()
    image.save(buf, "JPEG", quality=85)
    return buf.getvalue()


class GeekMagicHook(Hook):
    type = "geekmagic"

    def __init__(self, options, settings):
        super().__init__(options, settings)
        self.url = str(self.require("url")).rstrip("/")
        self.cover_file_name = options.get("cover_file_name") or DEFAULT_COVER_FILE_NAME
        self.size = parse_number(options.get("size", DEFAULT_SIZE), "geekmagic.size", minimum=1)
        self.last_cover_url: str | None = None
        self._http_session: aiohttp.ClientSession | None = None

    async def setup(self) -> None:
        self._http_session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT))

    async def teardown(self) -> None:
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    async def on_track_change(self, track: Track) -> None:
        cover_url = track.cover_url
        if not cover_url:
            logger.warning("No image found in track data")
            return

        if cover_url == self.last_cover_url:
            logger.info("Image already sent to GeekMagic. Skipping...")
            return

        if self._http_session is None:
            await self.setup()

        logger.info("Sending image to GeekMagic")
        try:
            jpeg = await self.fetch_cover(cover_url)
            if jpeg is None:
                return
            if not await self.upload(jpeg):
                return
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Failed to send image to GeekMagic: %s", e)
            logger.debug("Cover URL was %s", cover_url)
            return

        self.last_cover_url = cover_url
        logger.info("Image sent to GeekMagic")

    async def fetch_cover(self, url: str) -> bytes | None:
        async with self._http_session.get(url) as resp:
            if resp.status != 200:
                logger.error("Failed to fetch image from Last.fm: HTTP %d %s",
                             resp.status, resp.reason)
                return None
            image_bytes = await resp.read()

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                _image_executor, resize_to_jpeg, image_bytes, self.size)
        except OSError as e:
            # Pillow raises UnidentifiedImageError (an OSError) on junk bytes
            logger.error("Could not decode cover image: %s", e)
            return None

    async def free_space(self) -> int:
        async with self._http_session.get(f"{self.url}/space.json") as resp:
            resp.raise_for_status()
            data = await resp.json(content_type=None)
        return int(data.get("free", 0))

    async def upload(self, jpeg: bytes) -> bool:
        free = await self.free_space()
        if free < len(jpeg):
            logger.error("Not enough space available on GeekMagic (%d < %d bytes)",
                         free, len(jpeg))
            return False

        form = aiohttp.FormData()
        form.add_field("image", jpeg, filename=self.cover_file_name,
                       content_type="image/jpeg")
        async with self._http_session.post(f"{self.url}/doUpload",
                                           params={"dir": "/image/"}, data=form) as resp:
            if not 200 <= resp.status < 300:
                logger.error("Failed to send image to GeekMagic: HTTP %d %s",
                             resp.status, resp.reason)
                return False
        return True
