from __future__ import annotations

import pytest
import requests
import responses
from responses import matchers

from lastfm_notifier.api import (
    MalformedResponse,
    RateLimited,
    ServerError,
    Track,
    UserNotFound,
    parse_recent_tracks,
)

from conftest import API_URL, recent_tracks, track_json


@responses.activate
def test_fetch_sends_expected_query(client) -> None:
    responses.get(
        API_URL,
        json=recent_tracks(track_json("Daft Punk", "Discovery", "One More Time")),
        match=[
            matchers.query_param_matcher(
                {
                    "api_key": "secret-key",
                    "format": "json",
                    "method": "user.getrecenttracks",
                    "user": "alice",
                }
            )
        ],
    )

    track = client.fetch_latest_track("alice")

    assert track == Track("Daft Punk", "Discovery", "One More Time")
    assert track.song_id == "Daft Punk+Discovery+One More Time"
    assert len(responses.calls) == 1


@responses.activate
def test_fetch_returns_first_track_only(client) -> None:
    responses.get(
        API_URL,
        json=recent_tracks(
            track_json("Daft Punk", "Discovery", "Harder Better Faster Stronger"),
            track_json("Daft Punk", "Discovery", "One More Time"),
        ),
    )

    assert client.fetch_latest_track("alice").name == "Harder Better Faster Stronger"


@responses.activate
def test_fetch_without_recent_tracks_returns_none(client) -> None:
    responses.get(API_URL, json=recent_tracks())

    assert client.fetch_latest_track("alice") is None


@responses.activate
@pytest.mark.parametrize(
    "status, error",
    [(404, UserNotFound), (429, RateLimited), (500, ServerError), (403, ServerError)],
)
def test_fetch_maps_status_codes(client, status, error) -> None:
    responses.get(API_URL, json={"error": 0, "message": "nope"}, status=status)

    with pytest.raises(error) as excinfo:
        client.fetch_latest_track("alice")

    assert excinfo.value.username == "alice"


@responses.activate
def test_server_error_keeps_status_code(client) -> None:
    responses.get(API_URL, body="Bad Gateway", status=502)

    with pytest.raises(ServerError) as excinfo:
        client.fetch_latest_track("alice")

    assert excinfo.value.status_code == 502
    assert not isinstance(excinfo.value, MalformedResponse)


@responses.activate
def test_invalid_json_is_malformed(client) -> None:
    responses.get(API_URL, body="<html>not json</html>", status=200)

    with pytest.raises(MalformedResponse):
        client.fetch_latest_track("alice")


@responses.activate
def test_transport_failure_is_server_error(client) -> None:
    responses.get(API_URL, body=requests.exceptions.ConnectTimeout("timed out"))

    with pytest.raises(ServerError) as excinfo:
        client.fetch_latest_track("alice")

    assert excinfo.value.status_code is None


def test_missing_fields_use_placeholders() -> None:
    track = parse_recent_tracks("alice", recent_tracks({"mbid": ""}))

    assert track == Track("<Unknown Artist>", "<Unknown Album>", "<Untitled Track>")
    assert track.song_id == "<Unknown Artist>+<Unknown Album>+<Untitled Track>"


def test_null_fields_use_placeholders() -> None:
    data = recent_tracks({"name": None, "artist": {"#text": None}, "album": {"#text": "Discovery"}})

    track = parse_recent_tracks("alice", data)

    assert track == Track("<Unknown Artist>", "Discovery", "<Untitled Track>")
    assert track.song_id == "<Unknown Artist>+Discovery+<Untitled Track>"


def test_empty_album_is_kept() -> None:
    track = parse_recent_tracks("alice", recent_tracks(track_json("Burial", "", "Archangel")))

    assert track.album == ""
    assert track.song_id == "Burial++Archangel"


def test_single_track_object_is_accepted() -> None:
    data = {"recenttracks": {"track": track_json("Low", "Double Negative", "Fly")}}

    assert parse_recent_tracks("alice", data) == Track("Low", "Double Negative", "Fly")


@pytest.mark.parametrize(
    "data",
    [
        [],
        {},
        {"recenttracks": {}},
        {"recenttracks": "nothing"},
        {"recenttracks": {"track": "nothing"}},
        {"recenttracks": {"track": ["nothing"]}},
        {"recenttracks": {"track": [{"name": 42, "artist": {"#text": "Low"}}]}},
        {"recenttracks": {"track": [{"name": "Fly", "artist": {"#text": 5}}]}},
        {"recenttracks": {"track": [{"name": "Fly", "album": {"#text": ["Double Negative"]}}]}},
    ],
)
def test_unexpected_shapes_are_malformed(data) -> None:
    with pytest.raises(MalformedResponse):
        parse_recent_tracks("alice", data)


@pytest.mark.parametrize(
    "code, error",
    [(6, UserNotFound), (29, RateLimited), (8, ServerError)],
)
def test_error_envelope_in_body(code, error) -> None:
    with pytest.raises(error):
        parse_recent_tracks("alice", {"error": code, "message": "Something went wrong"})


@responses.activate
def test_fetch_with_non_text_field_is_malformed(client) -> None:
    responses.get(API_URL, json=recent_tracks({"name": "Fly", "artist": {"#text": 5}}))

    with pytest.raises(MalformedResponse) as excinfo:
        client.fetch_latest_track("alice")

    assert excinfo.value.username == "alice"
