"""Fixed daily period calendar: 11 numbered periods with wall-clock windows."""

import re
from datetime import time
from typing import Dict, NamedTuple, Optional, Tuple

from school_admin.core.enums import PeriodType

_WINDOW_RE = re.compile(r"^(\d{2}):(\d{2})-(\d{2}):(\d{2})$")


class Period(NamedTuple):
    number: int
    time_window: str  # "HH:MM-HH:MM"
    category: PeriodType


_PERIODS: Tuple[Period, ...] = (
    Period(1, "08:30-09:20", PeriodType.LESSON),
    Period(2, "09:20-10:10", PeriodType.LESSON),
    Period(3, "10:10-10:30", PeriodType.BREAK),
    Period(4, "10:30-11:20", PeriodType.LESSON),
    Period(5, "11:20-12:10", PeriodType.LESSON),
    Period(6, "12:10-13:30", PeriodType.LUNCH),
    Period(7, "13:30-14:20", PeriodType.LESSON),
    Period(8, "14:20-15:10", PeriodType.LESSON),
    Period(9, "15:10-15:20", PeriodType.BREAK),
    Period(10, "15:20-16:10", PeriodType.LESSON),
    Period(11, "16:10-17:00", PeriodType.LESSON),
)

_BY_NUMBER: Dict[int, Period] = {p.number: p for p in _PERIODS}

PERIODS_PER_DAY = len(_PERIODS)


def get_all_periods() -> Tuple[Period, ...]:
    return _PERIODS


def get_period_info(period_number: int) -> Optional[Period]:
    """Return the period for this number, or None when it is not in the calendar."""
    return _BY_NUMBER.get(period_number)


def is_lesson_period(period_number: int) -> bool:
    info = get_period_info(period_number)
    return info is not None and info.category == PeriodType.LESSON


def time_to_period_number(start: str) -> Optional[int]:
    """Period whose window starts with the given "HH:MM" string."""
    for p in _PERIODS:
        if p.time_window.startswith(start):
            return p.number
    return None


def parse_time_window(window: str) -> Optional[Tuple[time, time]]:
    """Split "HH:MM-HH:MM" into (start, end). None when the string is malformed."""
    m = _WINDOW_RE.fullmatch(window or "")
    if not m:
        return None
    sh, sm, eh, em = (int(g) for g in m.groups())
    try:
        return time(sh, sm), time(eh, em)
    except ValueError:
        return None
