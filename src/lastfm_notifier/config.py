"""Set configuration values from the environment."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import pendulum
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CRON_SCHEDULE = "30 * * * * *"
DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_API_URL = "https://ws.audioscrobbler.com/2.0/"
DEFAULT_DB_PATH = "notifier.db"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_LOG_FILE = "lastfm_notifier.log"


class ConfigError(Exception):
    """The environment does not hold a usable configuration."""

    def __init__(self, name: str, problem: str):
        super().__init__(
            f"{name} environment variable {problem}! "
            "Last.fm Notifier will not function until this is corrected!"
        )
        self.name = name


class ConfigMissing(ConfigError):
    """A required environment variable is not set."""

    def __init__(self, name: str):
        super().__init__(name, "missing")


class ConfigInvalid(ConfigError):
    """An environment variable holds a value that cannot be used."""

    def __init__(self, name: str, value: str):
        super().__init__(name, f"has invalid value {value!r}")


@dataclass(frozen=True)
class Config:
    """Settings for the notifier, read once at startup."""

    api_key: str
    notify_channel: str
    chat_webhook_url: str
    error_channel: str | None = None
    cron_schedule: str = DEFAULT_CRON_SCHEDULE
    timezone: str = DEFAULT_TIMEZONE
    api_url: str = DEFAULT_API_URL
    db_path: str = DEFAULT_DB_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        """Build the configuration from environment variables.

        Raises
        ------
        ConfigMissing
            If one of the required variables is unset or empty.
        ConfigInvalid
            If a variable holds a value that cannot be used.
        """
        env = os.environ if environ is None else environ

        api_key = _required(env, "LASTFM_API_KEY")
        notify_channel = _required(env, "LASTFM_NOTIFY_CHANNEL")
        chat_webhook_url = _required(env, "LASTFM_CHAT_WEBHOOK_URL")

        error_channel = env.get("LASTFM_ERROR_CHANNEL") or None
        if error_channel is None:
            logger.warning(
                "LASTFM_ERROR_CHANNEL environment variable missing! "
                "Errors will not be posted to the chat, only logged."
            )

        return cls(
            api_key=api_key,
            notify_channel=notify_channel,
            chat_webhook_url=chat_webhook_url,
            error_channel=error_channel,
            cron_schedule=env.get("LASTFM_CRON_SCHEDULE") or DEFAULT_CRON_SCHEDULE,
            timezone=env.get("LASTFM_TIMEZONE") or env.get("TZ") or DEFAULT_TIMEZONE,
            api_url=env.get("LASTFM_API_URL") or DEFAULT_API_URL,
            db_path=env.get("LASTFM_DB_PATH") or DEFAULT_DB_PATH,
            http_timeout=_timeout(env, "LASTFM_HTTP_TIMEOUT"),
        )

    @property
    def tzinfo(self):
        return pendulum.timezone(self.timezone)


def _required(env, name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigMissing(name)
    return value


def _timeout(env, name: str) -> float:
    value = env.get(name)
    if not value:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigInvalid(name, value) from None
    if timeout <= 0:
        raise ConfigInvalid(name, value)
    return timeout


def setup_logging(log_file: str | Path | None = DEFAULT_LOG_FILE, stream: bool = True):
    """Configure the root logger for an entry point."""
    handlers: list[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    handlers.append(logging.StreamHandler() if stream else logging.NullHandler())
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


if __name__ == "__main__":
    try:
        print(Config.from_env())
    except ConfigError as e:
        print(e, file=sys.stderr)
