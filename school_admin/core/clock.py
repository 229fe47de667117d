"""Wall-clock access in the school's configured time zone."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from school_admin.core.config import settings

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def school_zone() -> ZoneInfo:
    return ZoneInfo(settings.school_timezone)


def now() -> datetime:
    """Current local time in the school's zone, without tzinfo."""
    return datetime.now(school_zone()).replace(tzinfo=None)


def today() -> date:
    return now().date()


def weekday_name(day: date) -> str:
    return _DAY_NAMES[day.weekday()]
