"""Builders for Last.fm payloads and in-memory fakes shared by the tests."""

from lastwatch.hooks.base import Hook
from lastwatch.lastfm import Failure, LastFmError, Success
from lastwatch.track import Track

COVER_URL = "https://lastfm.freetls.fastly.net/i/u/300x300/cover.png"


def raw_track(artist="Artist A", name="Song B", nowplaying=None, cover=COVER_URL,
              album="Album C"):
    """A track object exactly as Last.fm sends it (``#text``, ``@attr``)."""
    track = {
        "artist": {"mbid": "", "#text": artist},
        "streamable": "0",
        "image": [
            {"size": "small", "#text": cover.replace("300x300", "34s") if cover else ""},
            {"size": "medium", "#text": cover.replace("300x300", "64s") if cover else ""},
            {"size": "large", "#text": cover.replace("300x300", "174s") if cover else ""},
            {"size": "extralarge", "#text": cover},
        ],
        "mbid": "",
        "album": {"mbid": "", "#text": album},
        "name": name,
        "url": f"https://www.last.fm/music/{artist}/_/{name}",
    }
    if nowplaying is None:
        track["date"] = {"uts": "1700000000", "#text": "14 Nov 2023, 22:13"}
    else:
        track["@attr"] = {"nowplaying": "true" if nowplaying else "false"}
    return track


def raw_response(*tracks, user="rj"):
    return {
        "recenttracks": {
            "track": list(tracks),
            "@attr": {"user": user, "page": "1", "perPage": "1",
                      "totalPages": "100", "total": "100"},
        }
    }


def make_track(**kwargs) -> Track:
    return Track.model_validate(raw_track(**kwargs))


def playing(artist="Artist A", name="Song B", **kwargs) -> Success:
    return Success((make_track(artist=artist, name=name, nowplaying=True, **kwargs),))


def stopped(artist="Artist A", name="Song B", **kwargs) -> Success:
    return Success((make_track(artist=artist, name=name, **kwargs),))


def failed(message="network down") -> Failure:
    return Failure(LastFmError(message))


class FakeClient:
    """Stands in for LastFmClient; answers from a ``{user: PollResult}`` map."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.closed = False

    async def get_recent_tracks(self, user, limit=1):
        self.calls.append(user)
        return self.responses[user]

    async def close(self):
        self.closed = True


class RecordingHook(Hook):
    """Hook that records every lifecycle call into a shared list."""

    type = "recording"

    def __init__(self, label="hook", log=None, fail_on=(), settings=None):
        super().__init__({}, settings)
        self.label = label
        self.log = log if log is not None else []
        self.fail_on = set(fail_on)
        self.tracks = []
        self.setups = 0
        self.teardowns = 0

    async def setup(self):
        self.setups += 1
        self.log.append((self.label, "setup"))
        if "setup" in self.fail_on:
            raise RuntimeError(f"{self.label} setup failed")

    async def on_track_change(self, track):
        self.tracks.append(track)
        self.log.append((self.label, "change"))
        if "change" in self.fail_on:
            raise RuntimeError(f"{self.label} change failed")

    async def teardown(self):
        self.teardowns += 1
        self.log.append((self.label, "teardown"))
        if "teardown" in self.fail_on:
            raise RuntimeError(f"{self.label} teardown failed")


def raw_extended_track(artist="Artist A", name="Song B", nowplaying=True):
    """A track as sent with ``extended=1``: artist is a full object with ``name``."""
    track = raw_track(artist=artist, name=name, nowplaying=nowplaying)
    track["artist"] = {
        "url": f"https://www.last.fm/music/{artist}",
        "name": artist,
        "image": [dict(image) for image in track["image"]],
        "mbid": "",
    }
    track["loved"] = "0"
    return track
