"""Check followed users for new scrobbles on a cron schedule."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .api import LastFmClient, RateLimited, ServerError, UserNotFound
from .detector import Action, decide
from .notifier import ChatNotifier
from .registry import UserRegistry

logger = logging.getLogger(__name__)

JOB_ID = "lastfm_scrobble_check"

# cron counts Sunday as 0 (and 7), APScheduler starts the week on Monday
CRON_WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class ScrobbleChecker:
    """Fetch, compare and announce the latest track of every followed user."""

    def __init__(self, registry: UserRegistry, client: LastFmClient, notifier: ChatNotifier):
        self.registry = registry
        self.client = client
        self.notifier = notifier

    def run_checks_for_all_users(self) -> dict[str, Action | None]:
        """Check every followed user once.

        A failure for one user never stops the others from being checked.
        Returns the action taken per user, None where the check failed or
        found nothing.
        """
        usernames = self.registry.list_users()
        logger.info(f"Checking {len(usernames)} users for new Last.fm scrobbles.")
        results = {}
        for username in usernames:
            try:
                results[username] = self.check_user(username)
            except Exception:
                logger.exception(f"<{username}>: Unexpected error while checking for scrobbles.")
                results[username] = None
        return results

    def check_user(self, username: str) -> Action | None:
        try:
            track = self.client.fetch_latest_track(username)
        except RateLimited:
            message = (
                f"Last.fm notifier <{username}> has overstepped the API rate limit. "
                "Consider reducing the timing on stream checks."
            )
            logger.warning(message)
            self.notifier.report_error(message)
            return None
        except UserNotFound:
            message = f"Last.fm notifier <{username}> could not be found on Last.fm anymore."
            logger.warning(message)
            self.notifier.report_error(message)
            return None
        except ServerError as e:
            logger.error(f"<{username}>: {e}")
            self.notifier.report_error(
                f"Last.fm notifier <{username}> failing with statusCode [{e.status_code}]. Haalp!"
            )
            return None

        if track is None:
            logger.info(f"<{username}>: Nobody is scrobbling right now. Maybe later.")
            return None

        song_id = track.song_id
        action = decide(self.registry.get(username), song_id)

        if action is Action.NO_CHANGE:
            logger.info(f"<{username}>: No change. <{song_id}> This is the same song we saw last time.")
            return action

        if not self.registry.replace(username, song_id):
            logger.info(f"<{username}>: Forgotten while being checked, dropping <{song_id}>.")
            return None

        if action is Action.SEED:
            logger.info(
                f"<{username}>: No last song found for user. Saving this one <{song_id}> "
                "and skipping. We don't want to send duplicates."
            )
        else:
            logger.info(f"<{username}>: New song found! <{song_id}> Sharing it right now!")
            self.notifier.announce(f"🎧 {username}: {track.artist} - {track.name}")
        return action


def build_trigger(expression: str, timezone=None) -> CronTrigger:
    """Create a trigger from a cron expression.

    Six fields are read as ``second minute hour day month day_of_week``, five
    fields as a standard crontab line.
    """
    fields = expression.split()
    if len(fields) == 5:
        fields = ["0", *fields]
    if len(fields) != 6:
        raise ValueError(f"Wrong number of fields in cron expression {expression!r}")

    second, minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_cron_weekdays(day_of_week),
        timezone=timezone,
    )


def _cron_weekdays(field: str) -> str:
    def to_name(value: str) -> str:
        if not value.isdigit():
            return value
        number = int(value)
        if number >= len(CRON_WEEKDAYS):
            raise ValueError(f"Invalid day of week {number}")
        return CRON_WEEKDAYS[number]

    parts = []
    for part in field.split(","):
        base, slash, step = part.partition("/")
        start, dash, end = base.partition("-")
        if dash and slash and start.isdigit() and end.isdigit():
            # Stepped ranges are spelled out so they never wrap past Sunday
            days = range(int(start), int(end) + 1, int(step))
            parts.extend(to_name(str(day)) for day in days)
            continue
        if dash and start == "0":
            # Ranges may not wrap past Sunday in APScheduler
            parts.append("sun")
            if end == "0":
                continue
            base = "mon-sat" if end == "7" else f"mon-{to_name(end)}"
        elif dash:
            base = f"{to_name(start)}-{to_name(end)}"
        else:
            base = to_name(base)
        parts.append(base + slash + step)
    return ",".join(parts)


def schedule_checks(scheduler, checker: ScrobbleChecker, expression: str, timezone=None):
    """Add the periodic scrobble check to ``scheduler``."""
    return scheduler.add_job(
        checker.run_checks_for_all_users,
        build_trigger(expression, timezone),
        id=JOB_ID,
        name="Last.fm scrobble check",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=30,
        replace_existing=True,
    )


def start_background_checks(checker: ScrobbleChecker, expression: str, timezone=None) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=timezone)
    schedule_checks(scheduler, checker, expression, timezone)
    scheduler.start()
    logger.info(f"Scrobble checks scheduled with '{expression}'")
    return scheduler
