"""Wire the notifier components together from a configuration."""

from dataclasses import dataclass

from .api import LastFmClient
from .brain import BrainStore, SQLiteBrain
from .commands import CommandSurface
from .config import Config
from .notifier import ChatNotifier
from .poller import ScrobbleChecker
from .registry import UserRegistry


@dataclass
class NotifierService:
    config: Config
    client: LastFmClient
    notifier: ChatNotifier
    registry: UserRegistry
    checker: ScrobbleChecker
    commands: CommandSurface


def build_service(config: Config, store: BrainStore | None = None) -> NotifierService:
    """Create every component, sharing one registry and one API client."""
    client = LastFmClient(config.api_key, api_url=config.api_url, timeout=config.http_timeout)
    notifier = ChatNotifier(
        config.chat_webhook_url,
        config.notify_channel,
        config.error_channel,
        timeout=config.http_timeout,
    )
    registry = UserRegistry(store or SQLiteBrain(config.db_path), client)
    return NotifierService(
        config=config,
        client=client,
        notifier=notifier,
        registry=registry,
        checker=ScrobbleChecker(registry, client, notifier),
        commands=CommandSurface(registry, notifier),
    )
