# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Abstract base class for LastWatch hooks.

Every hook must implement on_track_change.  setup and teardown default to
no-ops for hooks that hold no resources.  Constructors only validate
options; anything that touches the network belongs in setup.
"""

from abc import ABC, abstractmethod

from ..lib.config import ConfigError, Settings
from ..track import Track


class Hook(ABC):
    """Interface every output sink must implement."""

    type: str = ""

    def __init__(self, options: dict, settings: Settings):
        self.options = options
        self.settings = settings

    def __repr__(self):
        return f"<{type(self).__name__} {self.type}>"

    def require(self, key: str):
        """Return a mandatory option or raise ConfigError."""
        value = self.options.get(key)
        if value in (None, ""):
            raise ConfigError(f"'{key}' is required for the {self.type} hook")
        return value

    @abstractmethod
    async def on_track_change(self, track: Track) -> None: ...

    # -- Optional: override in hooks that hold resources --

    async def setup(self) -> None:
        pass  # no-op by default

    async def teardown(self) -> None:
        pass  # no-op by default
