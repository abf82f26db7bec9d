"""Gym wall clock.

Timestamps are stored as naive datetimes in the configured gym timezone so
that calendar-day logic (today, yesterday, month boundaries) and expiry
comparisons all agree with what the front desk sees.
"""

from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from gymaccess.core.config import settings


@lru_cache
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_now() -> datetime:
    """Current wall-clock time in the gym timezone, without tzinfo."""
    return datetime.now(_zone(settings.timezone)).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


def to_local(value: datetime) -> datetime:
    """Convert an aware datetime to naive gym wall-clock time."""
    if value.tzinfo is None:
        return value
    return value.astimezone(_zone(settings.timezone)).replace(tzinfo=None)
