"""Status of one timetable period on one date, derived from the clock and attendance records."""

from datetime import date, datetime
from typing import Optional

from school_admin.core.enums import PeriodStatus
from school_admin.core.periods import get_period_info, parse_time_window


def resolve_period_status(
    period_number: Optional[int],
    query_date: date,
    now: datetime,
    has_record: bool,
) -> PeriodStatus:
    """Walk the status ladder in order; the first matching rung wins.

    `now` is naive school-local time. The period end instant itself still
    counts as PENDING; only strictly later times are MISSED.
    """
    info = get_period_info(period_number) if period_number is not None else None
    if info is None:
        return PeriodStatus.UNKNOWN
    window = parse_time_window(info.time_window)
    if window is None:
        return PeriodStatus.UNKNOWN

    if has_record:
        return PeriodStatus.COMPLETED

    today = now.date()
    if query_date > today:
        return PeriodStatus.FUTURE
    if query_date < today:
        return PeriodStatus.MISSED

    start, end = window
    period_start = datetime.combine(today, start)
    period_end = datetime.combine(today, end)
    if now < period_start:
        return PeriodStatus.YET_TO_START
    if now > period_end:
        return PeriodStatus.MISSED
    return PeriodStatus.PENDING
