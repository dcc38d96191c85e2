#!/usr/bin/env python3
"""Cron-friendly single check of all followed Last.fm users."""

import logging
import sys

from .config import Config, ConfigError, setup_logging
from .detector import Action
from .service import build_service

logger = logging.getLogger(__name__)


def main():
    """Run one check cycle, suitable for a system crontab entry."""
    setup_logging(stream="--verbose" in sys.argv)

    try:
        config = Config.from_env()
    except ConfigError as e:
        logger.error(f"❌ {e}")
        print(e, file=sys.stderr)
        sys.exit(1)

    logger.info("Starting Last.fm scrobble check")
    service = build_service(config)
    results = service.checker.run_checks_for_all_users()

    notified = sum(1 for action in results.values() if action is Action.NOTIFY)
    logger.info(f"✅ Check completed: {len(results)} users checked, {notified} new songs shared")
    if "--verbose" in sys.argv:
        print(f"Checked {len(results)} users, shared {notified} new songs")


if __name__ == "__main__":
    main()
