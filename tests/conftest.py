from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from lastfm_notifier.api import LastFmClient, Track
from lastfm_notifier.brain import MemoryBrain
from lastfm_notifier.registry import UserRegistry

API_URL = "https://ws.audioscrobbler.com/2.0/"
WEBHOOK_URL = "https://chat.example.com/hooks/lastfm"
NOTIFY_CHANNEL = "C-music"
ERROR_CHANNEL = "C-bot-spam"


def recent_tracks(*tracks: dict) -> dict:
    return {"recenttracks": {"track": list(tracks), "@attr": {"user": "alice"}}}


def track_json(artist: str, album: str, name: str) -> dict:
    return {"name": name, "artist": {"#text": artist}, "album": {"#text": album}}


@dataclass
class FakeClient:
    """Return canned tracks or raise canned errors per username."""

    responses: dict[str, object] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def fetch_latest_track(self, username: str) -> Track | None:
        self.calls.append(username)
        result = self.responses.get(username)
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class FakeNotifier:
    notify_channel: str = NOTIFY_CHANNEL
    error_channel: str | None = ERROR_CHANNEL
    sent: list[tuple[str, str]] = field(default_factory=list)

    def send(self, channel: str, text: str) -> bool:
        self.sent.append((channel, text))
        return True

    def announce(self, text: str) -> bool:
        return self.send(self.notify_channel, text)

    def report_error(self, text: str) -> bool:
        if not self.error_channel:
            return False
        return self.send(self.error_channel, text)

    def to(self, channel: str) -> list[str]:
        return [text for ch, text in self.sent if ch == channel]


@pytest.fixture()
def store() -> MemoryBrain:
    return MemoryBrain()


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def registry(store: MemoryBrain, fake_client: FakeClient) -> UserRegistry:
    return UserRegistry(store, fake_client)


@pytest.fixture()
def client() -> LastFmClient:
    return LastFmClient("secret-key", api_url=API_URL, timeout=10)


@pytest.fixture()
def env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> dict[str, str]:
    values = {
        "LASTFM_API_KEY": "secret-key",
        "LASTFM_NOTIFY_CHANNEL": NOTIFY_CHANNEL,
        "LASTFM_ERROR_CHANNEL": ERROR_CHANNEL,
        "LASTFM_CHAT_WEBHOOK_URL": WEBHOOK_URL,
        "LASTFM_API_URL": API_URL,
        "LASTFM_DB_PATH": str(tmp_path / "notifier.db"),
        "LASTFM_TIMEZONE": "America/Chicago",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values
