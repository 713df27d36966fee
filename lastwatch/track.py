# LastWatch
# Copyright (C) 2024-2026 Markus Kirsten
# SPDX-License-Identifier: GPL-3.0-or-later
#
# Attribution required — see LICENSE, Section 7(b).

"""
Track model for Last.fm ``user.getrecenttracks`` responses.

Last.fm names text nodes ``#text`` and attribute blocks ``@attr``.  Both are
renamed here, once, through field aliases, so the rest of the code only ever
sees ``text`` and ``attr``:

    {"artist": {"mbid": "", "#text": "Boards of Canada"}, "@attr": {"nowplaying": "true"}, ...}
        → track.artist.text == "Boards of Canada", track.attr.nowplaying is True

Models are frozen: a Track never changes after it is parsed.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SEPARATOR = " - "


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TextNode(_Model):
    mbid: str = ""
    text: str = Field(alias="#text")


class Artist(TextNode):
    @model_validator(mode="before")
    @classmethod
    def _extended_name(cls, value):
        # extended=1 responses carry {"name", "url", "image", "mbid"} instead of "#text"
        if isinstance(value, dict) and "#text" not in value and "text" not in value and "name" in value:
            value = {**value, "#text": value["name"]}
        return value


class Album(TextNode):
    pass


class Image(_Model):
    size: str
    text: str = Field(alias="#text")


class LastFmDate(_Model):
    uts: str
    text: str = Field(alias="#text")


class Attributes(_Model):
    user: str | None = None
    nowplaying: bool | None = None
    page: str | None = None
    per_page: str | None = Field(default=None, alias="perPage")
    total_pages: str | None = Field(default=None, alias="totalPages")
    total: str | None = None

    @field_validator("nowplaying", mode="before")
    @classmethod
    def _boolish(cls, value):
        # Last.fm sends "true"; accept real booleans too
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise ValueError(f"nowplaying must be boolean-ish, got {value!r}")


class Track(_Model):
    artist: Artist
    name: str
    album: Album
    image: tuple[Image, ...] = Field(min_length=4, max_length=4)
    mbid: str
    url: str
    streamable: str
    date: LastFmDate | None = None
    attr: Attributes | None = Field(default=None, alias="@attr")

    @property
    def is_now_playing(self) -> bool:
        return bool(self.attr and self.attr.nowplaying)

    @property
    def cover_url(self) -> str:
        """URL of the largest image variant ("" when Last.fm has none)."""
        return self.image[-1].text if self.image else ""


class RecentTracks(_Model):
    track: tuple[Track, ...]
    attr: Attributes | None = Field(default=None, alias="@attr")

    @field_validator("track", mode="before")
    @classmethod
    def _single_track(cls, value):
        # A lone track sometimes arrives as an object instead of a list
        return [value] if isinstance(value, dict) else value


class RecentTracksResponse(_Model):
    recenttracks: RecentTracks


def format_track(track: Track | None, show_inactive: bool) -> str:
    """Canonical display string: "Artist - Title", or "" when nothing to show.

    An inactive track (not now playing) only renders when *show_inactive*
    is set; the flag decides inclusion, never content.
    """
    if track is None or not (show_inactive or track.is_now_playing):
        return ""
    return f"{track.artist.text}{SEPARATOR}{track.name}"
