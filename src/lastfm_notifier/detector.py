"""Decide what to do when a user's latest song is fetched."""

from enum import Enum


class Action(Enum):
    SEED = "seed"
    NO_CHANGE = "no_change"
    NOTIFY = "notify"


def decide(previous: str | None, current: str) -> Action:
    """Compare the stored song id with the freshly fetched one.

    A user without a stored song is only seeded, so that following someone
    (or restarting with an empty registry) does not post a backlog.
    """
    if not previous:
        return Action.SEED
    if previous == current:
        return Action.NO_CHANGE
    return Action.NOTIFY
