"""
File dump hook: writes the current track string to a text file.

Handy as an OBS text source.  Options:
    out_file    – target path (default "output.txt")
    max_length  – longer strings are cut and end in "..."
"""

import asyncio
import logging

from ..lib.config import parse_number
from ..track import Track, format_track
from .base import Hook

logger = logging.getLogger(__name__)

DEFAULT_OUT_FILE = "output.txt"
ELLIPSIS = "..."


def truncate(text: str, max_length: int | None) -> str:
    if not max_length or len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[:max_length - len(ELLIPSIS)] + ELLIPSIS


class FileDumpHook(Hook):
    type = "file_dump"

    def __init__(self, options, settings):
        super().__init__(options, settings)
        self.out_file = options.get("out_file") or DEFAULT_OUT_FILE
        max_length = options.get("max_length")
        self.max_length = None
        if max_length is not None:
            self.max_length = parse_number(max_length, "file_dump.max_length", minimum=1)

    async def on_track_change(self, track: Track) -> None:
        text = truncate(format_track(track, self.settings.show_inactive), self.max_length)
        logger.info("Writing to file %s", self.out_file)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, text)

    def _write(self, text: str):
        with open(self.out_file, "w", encoding="utf-8") as f:
            f.write(text)
