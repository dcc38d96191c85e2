"""Chat commands to follow, forget and list Last.fm users."""

import logging
import re
from dataclasses import dataclass, field

from .notifier import ChatNotifier
from .registry import FollowResult, UserRegistry

logger = logging.getLogger(__name__)

USERNAME = r"(\w+(?:\.\w+)?)"
FOLLOW_PATTERN = re.compile(rf"\bfollow lastfm {USERNAME}$", re.IGNORECASE)
FORGET_PATTERN = re.compile(rf"\bforget lastfm {USERNAME}$", re.IGNORECASE)
LIST_PATTERN = re.compile(r"show lastfm users", re.IGNORECASE)


@dataclass
class Message:
    """An inbound chat message and the replies it produced."""

    text: str
    room: str
    user: str
    replies: list[str] = field(default_factory=list)

    def reply(self, text: str):
        self.replies.append(text)


class CommandSurface:
    """Dispatch chat messages to the registry and announce changes."""

    def __init__(self, registry: UserRegistry, notifier: ChatNotifier):
        self.registry = registry
        self.notifier = notifier

    def handle(self, message: Message) -> bool:
        """Run the command in ``message``. Returns False if none matched."""
        text = message.text.strip()
        if match := FOLLOW_PATTERN.search(text):
            self.follow(message, match.group(1))
        elif match := FORGET_PATTERN.search(text):
            self.forget(message, match.group(1))
        elif LIST_PATTERN.search(text):
            self.list_users(message)
        else:
            return False
        return True

    def follow(self, message: Message, username: str):
        result = self.registry.follow(username)
        if result is FollowResult.NOT_FOUND:
            message.reply(
                f"{username} could not be found on Last.fm! Verify the username exists "
                "and has successfully scrobbled at least once. Then try again."
            )
            return

        message.reply(f"{username} is now being followed. I'll report back any new Scrobbles ASAP!")
        self.list_users(message)
        self._announce(message, f"{message.user} has added {username} to the Last.fm Notifier.")

    def forget(self, message: Message, username: str):
        self.registry.forget(username)
        message.reply("Who? Never heard of them.")
        self.list_users(message)
        self._announce(message, f"{message.user} has removed {username} from the Last.fm Notifier.")

    def list_users(self, message: Message):
        users = "".join(f"{user}\n" for user in self.registry.list_users())
        message.reply(f"I'm currently watching the following users:\n{users}")

    def _announce(self, message: Message, text: str):
        if message.room == self.notifier.notify_channel:
            logger.debug("No need to announce changes. They occurred publicly within the notification channel.")
            return
        self.notifier.announce(text)
