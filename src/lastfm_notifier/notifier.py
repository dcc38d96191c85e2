"""Post messages to chat channels through an incoming webhook."""

import logging

import requests

from .config import DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)


class ChatNotifier:
    """Send text to the notification channel, the error channel or any room."""

    def __init__(
        self,
        webhook_url: str,
        notify_channel: str,
        error_channel: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.webhook_url = webhook_url
        self.notify_channel = notify_channel
        self.error_channel = error_channel
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, channel: str, text: str) -> bool:
        """Post ``text`` to ``channel``. Returns whether delivery succeeded."""
        try:
            response = self.session.post(
                self.webhook_url,
                json={"channel": channel, "text": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Could not post message to channel {channel}: {e}")
            return False
        return True

    def announce(self, text: str) -> bool:
        return self.send(self.notify_channel, text)

    def report_error(self, text: str) -> bool:
        """Post to the error channel, or only log when none is configured."""
        if not self.error_channel:
            logger.error(f"No error channel configured, dropping alert: {text}")
            return False
        return self.send(self.error_channel, text)
