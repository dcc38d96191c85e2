"""Keep track of followed Last.fm users and the last song seen for each."""

import logging
import threading
from enum import Enum

from .api import LastFmClient, TrackApiError, UserNotFound
from .brain import BrainStore

logger = logging.getLogger(__name__)


class FollowResult(Enum):
    ADDED = "added"
    NOT_FOUND = "not_found"


class UserRegistry:
    """Followed users mapped to their last seen song id.

    The store is re-read before every access and every mutation is written
    straight back, so several processes can share one store.
    """

    def __init__(self, store: BrainStore, client: LastFmClient):
        self.store = store
        self.client = client
        self._lock = threading.Lock()

    def follow(self, username: str) -> FollowResult:
        """Verify ``username`` exists on Last.fm and start following it.

        Following a user that is already followed keeps its stored song.
        """
        try:
            self.client.fetch_latest_track(username)
        except UserNotFound:
            logger.info(f"<{username}>: Not found on Last.fm, not following.")
            return FollowResult.NOT_FOUND
        except TrackApiError as e:
            logger.warning(f"<{username}>: Could not verify user, following anyway. {e}")

        with self._lock:
            users = self._load()
            if username in users:
                logger.info(f"<{username}>: Already followed, keeping last song.")
                return FollowResult.ADDED
            users[username] = None
            self.store.save(users)
        logger.info(f"<{username}>: Now following.")
        return FollowResult.ADDED

    def forget(self, username: str) -> None:
        with self._lock:
            users = self._load()
            followed = username in users
            users.pop(username, None)
            self.store.save(users)
        if not followed:
            logger.debug(f"<{username}>: Was not followed, nothing to forget.")

    def list_users(self) -> list[str]:
        with self._lock:
            return list(self._load())

    def items(self) -> list[tuple[str, str | None]]:
        with self._lock:
            return list(self._load().items())

    def get(self, username: str) -> str | None:
        with self._lock:
            return self._load().get(username)

    def set(self, username: str, song_id: str) -> None:
        with self._lock:
            users = self._load()
            users[username] = song_id
            self.store.save(users)

    def replace(self, username: str, song_id: str) -> bool:
        """Store ``song_id`` only if ``username`` is still followed."""
        with self._lock:
            users = self._load()
            if username not in users:
                return False
            users[username] = song_id
            self.store.save(users)
            return True

    def _load(self) -> dict[str, str | None]:
        return dict(self.store.load())
