"""
Selection state and change detection.

The poll loop owns exactly one SelectionState for the process lifetime and
is the only writer.  Nothing here is persisted across restarts.
"""

from dataclasses import dataclass

from .track import Track, format_track


@dataclass
class SelectionState:
    last_reported: str = ""         # formatted string of the last reported track
    sticky_user: str | None = None  # last user confirmed to be playing

    def accept(self, formatted: str):
        self.last_reported = formatted


def has_changed(state: SelectionState, track: Track | None, show_inactive: bool) -> bool:
    """True iff *track* formats differently from the last reported string.

    No track on top of an empty baseline is not a change.
    """
    if track is None and not state.last_reported:
        return False
    return format_track(track, show_inactive) != state.last_reported
