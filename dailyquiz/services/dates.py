"""
Calendar helpers anchored to the quiz timezone.

Days travel through the system as ``YYYY-MM-DD`` strings. Only ``today`` looks
at the clock; everything else is plain calendar arithmetic.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DATE_FORMAT = "%Y-%m-%d"


def today(tz_name: str, now: Optional[datetime] = None) -> str:
    """Current calendar day in ``tz_name``, independent of the host timezone."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).strftime(DATE_FORMAT)


def add_days(day: str, delta: int) -> str:
    return (parse_day(day) + timedelta(days=delta)).strftime(DATE_FORMAT)


def parse_day(day: str) -> date:
    return datetime.strptime(day, DATE_FORMAT).date()
