"""Fetch the most recent track of a Last.fm user."""

import logging
from dataclasses import dataclass

import requests

from .config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "<Unknown Artist>"
UNKNOWN_ALBUM = "<Unknown Album>"
UNTITLED_TRACK = "<Untitled Track>"
SONG_ID_SEPARATOR = "+"

# Last.fm error codes that can arrive inside a successful response body
LASTFM_USER_NOT_FOUND = 6
LASTFM_RATE_LIMIT_EXCEEDED = 29


class TrackApiError(Exception):
    """Base class for failures talking to the Last.fm API."""

    def __init__(self, username: str, message: str = ""):
        super().__init__(message or f"Last.fm request for <{username}> failed")
        self.username = username


class UserNotFound(TrackApiError):
    """The user does not exist on Last.fm."""


class RateLimited(TrackApiError):
    """The API key has overstepped the Last.fm rate limit."""


class ServerError(TrackApiError):
    """Any other failing response, or no response at all."""

    def __init__(self, username: str, status_code: int | None, message: str = ""):
        super().__init__(
            username,
            message or f"Last.fm request for <{username}> failed with status {status_code}",
        )
        self.status_code = status_code


class MalformedResponse(ServerError):
    """The response body did not have the expected recenttracks shape."""


@dataclass(frozen=True)
class Track:
    """A single scrobble as reported by Last.fm."""

    artist: str
    album: str
    name: str

    @property
    def song_id(self) -> str:
        """Composite identifier used to tell songs apart."""
        return SONG_ID_SEPARATOR.join((self.artist, self.album, self.name))

    @classmethod
    def from_json(cls, username: str, track: dict) -> "Track":
        return cls(
            artist=_text(username, _field(track, "artist"), UNKNOWN_ARTIST),
            album=_text(username, _field(track, "album"), UNKNOWN_ALBUM),
            name=_text(username, track.get("name"), UNTITLED_TRACK),
        )


def _field(track: dict, key: str):
    value = track.get(key)
    if isinstance(value, dict):
        return value.get("#text")
    return None


def _text(username: str, value, default: str) -> str:
    """Return ``value`` as track text, ``default`` when it is missing."""
    if value is None:
        return default
    if not isinstance(value, str):
        raise MalformedResponse(username, 200, f"Unexpected track field {value!r}")
    return value


def parse_recent_tracks(username: str, data) -> Track | None:
    """Pick the most recent track out of a decoded ``user.getrecenttracks`` body.

    Returns ``None`` when the user has no recent tracks.
    """
    if not isinstance(data, dict):
        raise MalformedResponse(username, 200, "Response is not a JSON object")

    if "error" in data:
        code = data.get("error")
        message = data.get("message", "")
        if code == LASTFM_USER_NOT_FOUND:
            raise UserNotFound(username, message)
        if code == LASTFM_RATE_LIMIT_EXCEEDED:
            raise RateLimited(username, message)
        raise ServerError(username, 200, f"Last.fm error {code}: {message}")

    try:
        tracks = data["recenttracks"]["track"]
    except (KeyError, TypeError) as e:
        raise MalformedResponse(username, 200, f"Missing field in response: {e}") from e

    # A single scrobble is sometimes returned as an object instead of a list
    if isinstance(tracks, dict):
        tracks = [tracks]
    if not isinstance(tracks, list):
        raise MalformedResponse(username, 200, "recenttracks.track is not a list")
    if not tracks:
        return None
    if not isinstance(tracks[0], dict):
        raise MalformedResponse(username, 200, "Track entry is not an object")
    return Track.from_json(username, tracks[0])


class LastFmClient:
    """Thin wrapper around the Last.fm ``user.getrecenttracks`` method."""

    method = "user.getrecenttracks"

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_latest_track(self, username: str) -> Track | None:
        """Get the most recent track for ``username``.

        Performs exactly one GET request and never retries.

        Returns
        -------
        Track | None
            The latest track, or None if the user has not scrobbled anything.

        Raises
        ------
        UserNotFound, RateLimited, ServerError, MalformedResponse
        """
        params = {
            "api_key": self.api_key,
            "format": "json",
            "method": self.method,
            "user": username,
        }
        try:
            response = self.session.get(
                self.api_url,
                params=params,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ServerError(username, None, f"Error fetching from Last.fm API: {e}") from e

        status = response.status_code
        if status == 404:
            raise UserNotFound(username, f"{username} could not be found on Last.fm")
        if status == 429:
            raise RateLimited(username, f"Rate limit exceeded while checking <{username}>")
        if status >= 400:
            raise ServerError(username, status)

        logger.info(f"<{username}>: Successfully retrieved data from Last.fm API.")
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(username, status, f"Could not parse JSON: {e}") from e
        return parse_recent_tracks(username, data)
