from typing import Iterable

from dailyquiz.services.dates import add_days


def compute_streak(answered_days: Iterable[str], anchor: str) -> int:
    """Length of the unbroken run of answered days ending at ``anchor``."""
    seen = set(answered_days)
    streak = 0
    cursor = anchor
    while cursor in seen:
        streak += 1
        cursor = add_days(cursor, -1)
    return streak


def streak_anchor(answered_days: Iterable[str], today: str) -> str:
    # today's window is still open, so an unanswered today does not break the run
    return today if today in set(answered_days) else add_days(today, -1)
