"""FastAPI host receiving chat commands and running the scheduled checks."""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from .brain import BrainStore
from .commands import Message
from .config import Config, ConfigError, setup_logging
from .poller import start_background_checks
from .service import build_service

logger = logging.getLogger(__name__)


class CommandIn(BaseModel):
    text: str
    room: str
    user: str


def create_app(start_scheduler: bool = True, store: BrainStore | None = None) -> FastAPI:
    """Create the application.

    Configuration is read when the application starts. If it is incomplete
    the host keeps running but the notifier stays disabled.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.service = None
        scheduler = None
        try:
            config = Config.from_env()
        except ConfigError as e:
            logger.error(f"LastFm-Notifier: {e}")
        else:
            app.state.service = build_service(config, store)
            if start_scheduler:
                scheduler = start_background_checks(
                    app.state.service.checker, config.cron_schedule, config.tzinfo
                )
        yield
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    app = FastAPI(
        title="Last.fm Notifier",
        description="Share Last.fm scrobbles of followed users in chat",
        lifespan=lifespan,
    )

    def get_service(request: Request):
        service = request.app.state.service
        if service is None:
            raise HTTPException(status_code=503, detail="Last.fm Notifier is not configured")
        return service

    @app.get("/health")
    def health(request: Request):
        status = "ok" if request.app.state.service is not None else "disabled"
        return {"status": status}

    @app.post("/commands")
    def commands(command: CommandIn, request: Request):
        """Run a chat command and deliver its replies to the originating room."""
        service = get_service(request)
        message = Message(text=command.text, room=command.room, user=command.user)
        handled = service.commands.handle(message)
        for reply in message.replies:
            service.notifier.send(message.room, reply)
        return {"handled": handled, "replies": message.replies}

    @app.get("/users")
    def users(request: Request):
        service = get_service(request)
        return {
            "users": [
                {"username": username, "last_song_id": song_id}
                for username, song_id in service.registry.items()
            ]
        }

    return app


app = create_app()


def main():
    """Run the application with uvicorn."""
    parser = argparse.ArgumentParser(description="Run the Last.fm Notifier chat host")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    setup_logging()
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
