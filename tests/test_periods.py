"""Unit tests for the fixed period calendar."""

from datetime import time

from school_admin.core.enums import PeriodType
from school_admin.core.periods import (
    PERIODS_PER_DAY,
    get_all_periods,
    get_period_info,
    is_lesson_period,
    parse_time_window,
    time_to_period_number,
)


def test_calendar_has_eleven_ordered_periods() -> None:
    periods = get_all_periods()
    assert PERIODS_PER_DAY == 11
    assert [p.number for p in periods] == list(range(1, 12))


def test_break_and_lunch_periods() -> None:
    """Periods 3 and 9 are breaks, 6 is lunch, everything else is a lesson."""
    categories = {p.number: p.category for p in get_all_periods()}
    assert categories[3] == PeriodType.BREAK
    assert categories[9] == PeriodType.BREAK
    assert categories[6] == PeriodType.LUNCH
    lessons = [n for n, c in categories.items() if c == PeriodType.LESSON]
    assert lessons == [1, 2, 4, 5, 7, 8, 10, 11]


def test_period_windows() -> None:
    assert get_period_info(1).time_window == "08:30-09:20"
    assert get_period_info(6).time_window == "12:10-13:30"
    assert get_period_info(11).time_window == "16:10-17:00"


def test_unknown_period_returns_none() -> None:
    assert get_period_info(0) is None
    assert get_period_info(12) is None
    assert is_lesson_period(12) is False


def test_is_lesson_period() -> None:
    assert is_lesson_period(1) is True
    assert is_lesson_period(3) is False
    assert is_lesson_period(6) is False


def test_time_to_period_number() -> None:
    assert time_to_period_number("10:30") == 4
    assert time_to_period_number("07:00") is None


def test_parse_time_window() -> None:
    assert parse_time_window("08:30-09:20") == (time(8, 30), time(9, 20))
    assert parse_time_window("8:30-9:20") is None
    assert parse_time_window("25:00-26:00") is None
    assert parse_time_window("") is None
