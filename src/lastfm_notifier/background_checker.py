#!/usr/bin/env python3
"""Background service checking Last.fm on a schedule without the chat host."""

import logging
import sys

from apscheduler.schedulers.blocking import BlockingScheduler

from .config import Config, ConfigError, setup_logging
from .poller import schedule_checks
from .service import build_service

logger = logging.getLogger(__name__)


def main():
    """Run the scheduler for background checks."""
    setup_logging()

    try:
        config = Config.from_env()
    except ConfigError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    service = build_service(config)
    logger.info("🚀 Starting Last.fm background checker")
    logger.info(f"Schedule: '{config.cron_schedule}' ({config.timezone})")

    scheduler = BlockingScheduler(timezone=config.tzinfo)
    schedule_checks(scheduler, service.checker, config.cron_schedule, config.tzinfo)

    logger.info("Running initial check...")
    service.checker.run_checks_for_all_users()

    try:
        logger.info("Scheduler started. Press Ctrl+C to stop.")
        scheduler.start()
    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user")


if __name__ == "__main__":
    main()
