import logging

import pytest

from lastwatch.selection import select_track
from lastwatch.state import SelectionState
from lastwatch.lastfm import Success
from tests.helpers import FakeClient, failed, playing, stopped


@pytest.mark.asyncio
@pytest.mark.parametrize("winner", [0, 1, 2])
async def test_first_playing_user_wins_and_short_circuits(winner) -> None:
    users = ["ann", "ben", "cat"]
    responses = {user: stopped(name=f"{user} old") for user in users}
    responses[users[winner]] = playing(name=f"{users[winner]} live")
    # Later users would also win if they were asked
    for later in users[winner + 1:]:
        responses[later] = playing(name=f"{later} live")
    client = FakeClient(responses)
    state = SelectionState()

    track = await select_track(client, users, state)

    assert track.name == f"{users[winner]} live"
    assert client.calls == users[:winner + 1]
    assert state.sticky_user == users[winner]


@pytest.mark.asyncio
async def test_queries_use_limit_one() -> None:
    seen = []

    class Client(FakeClient):
        async def get_recent_tracks(self, user, limit=1):
            seen.append(limit)
            return await super().get_recent_tracks(user, limit)

    await select_track(Client({"ann": stopped()}), ["ann"], SelectionState())

    assert seen == [1]


@pytest.mark.asyncio
async def test_sticky_user_keeps_their_inactive_track() -> None:
    client = FakeClient({
        "ann": stopped(name="ann old"),
        "ben": stopped(name="ben old"),
        "cat": stopped(name="cat old"),
    })
    state = SelectionState(sticky_user="ben")

    track = await select_track(client, ["ann", "ben", "cat"], state)

    assert track.name == "ben old"
    assert client.calls == ["ann", "ben", "cat"]
    assert state.sticky_user == "ben"


@pytest.mark.asyncio
async def test_failed_sticky_user_falls_back_to_last_successful_user() -> None:
    client = FakeClient({"alice": stopped(name="alice old"), "bob": failed()})
    state = SelectionState(sticky_user="bob")

    track = await select_track(client, ["alice", "bob"], state)

    assert track.name == "alice old"
    assert state.sticky_user == "bob"


@pytest.mark.asyncio
async def test_without_sticky_user_last_candidate_wins() -> None:
    client = FakeClient({"ann": stopped(name="ann old"), "ben": stopped(name="ben old")})

    track = await select_track(client, ["ann", "ben"], SelectionState())

    assert track.name == "ben old"


@pytest.mark.asyncio
async def test_sticky_user_not_configured_anymore() -> None:
    client = FakeClient({"ann": stopped(name="ann old")})

    track = await select_track(client, ["ann"], SelectionState(sticky_user="gone"))

    assert track.name == "ann old"


@pytest.mark.asyncio
async def test_all_failures_mean_no_track(caplog) -> None:
    client = FakeClient({"ann": failed(), "ben": failed()})
    state = SelectionState(sticky_user="ann")

    with caplog.at_level(logging.WARNING):
        track = await select_track(client, ["ann", "ben"], state, retry_in=10)

    assert track is None
    assert state.sticky_user == "ann"
    assert "trying again in 10 seconds" in caplog.text


@pytest.mark.asyncio
async def test_empty_candidate_list() -> None:
    client = FakeClient()

    assert await select_track(client, [], SelectionState()) is None
    assert client.calls == []


@pytest.mark.asyncio
async def test_user_with_no_tracks_is_absent() -> None:
    client = FakeClient({"ann": Success(())})

    assert await select_track(client, ["ann"], SelectionState()) is None


@pytest.mark.asyncio
async def test_user_with_no_tracks_does_not_win_over_playing_user() -> None:
    client = FakeClient({"ann": Success(()), "ben": playing(name="ben live")})
    state = SelectionState()

    track = await select_track(client, ["ann", "ben"], state)

    assert track.name == "ben live"
    assert state.sticky_user == "ben"
