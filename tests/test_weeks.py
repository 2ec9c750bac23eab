from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.analytics.weeks import (
    current_week,
    locate_week,
    month_week_intervals,
    week_interval,
    weeks_in_month,
)


def test_first_week_of_month_starting_on_wednesday(tz) -> None:
    interval = week_interval(2025, 1, 1, tz)
    assert interval.start == datetime(2025, 1, 1, tzinfo=tz)
    assert interval.end == datetime(2025, 1, 7, 23, 59, 59, 999000, tzinfo=tz)
    assert interval.start.weekday() == 2
    assert interval.end.weekday() == 1


def test_week_started_in_previous_month_belongs_to_tuesday_month(tz) -> None:
    interval = week_interval(2025, 4, 1, tz)
    assert interval.start.date() == date(2025, 3, 26)
    assert interval.end.date() == date(2025, 4, 1)


@pytest.mark.parametrize(
    ("year", "month", "expected"),
    [(2025, 1, 4), (2025, 4, 5), (2024, 12, 5), (2026, 2, 4)],
)
def test_weeks_in_month_counts_tuesdays(year: int, month: int, expected: int) -> None:
    assert weeks_in_month(year, month) == list(range(1, expected + 1))


def test_week_beyond_month_is_degenerate(tz) -> None:
    interval = week_interval(2025, 1, 5, tz)
    assert interval.is_degenerate
    assert interval.start == interval.end == datetime(2025, 1, 1, tzinfo=tz)
    assert not interval.contains(datetime(2025, 1, 1, tzinfo=tz))


def test_month_intervals_are_contiguous_and_seven_days_long(tz) -> None:
    for month in range(1, 13):
        intervals = month_week_intervals(2025, month, tz)
        for interval in intervals:
            assert interval.end - interval.start == timedelta(days=7) - timedelta(milliseconds=1)
            assert interval.end.weekday() == 1
            assert interval.end.month == month
        for previous, following in zip(intervals, intervals[1:]):
            assert following.start - previous.end == timedelta(milliseconds=1)


def test_consecutive_months_chain_without_gaps(tz) -> None:
    january = month_week_intervals(2025, 1, tz)
    february = month_week_intervals(2025, 2, tz)
    assert february[0].start - january[-1].end == timedelta(milliseconds=1)
    assert february[0].start.date() == date(2025, 1, 29)


def test_locate_week_uses_business_timezone(tz) -> None:
    # 02:30 UTC on Wednesday is still Tuesday evening in Sao Paulo.
    instant = datetime(2025, 1, 8, 2, 30, tzinfo=timezone.utc)
    assert locate_week(instant, tz) == (2025, 1, 1)
    assert locate_week(datetime(2025, 1, 8, 3, 0, tzinfo=timezone.utc), tz) == (2025, 1, 2)


def test_locate_week_rolls_into_next_month(tz) -> None:
    assert locate_week(datetime(2025, 1, 30, 12, 0, tzinfo=tz), tz) == (2025, 2, 1)


def test_locate_week_round_trips_every_day_of_year(tz) -> None:
    day = datetime(2025, 1, 1, 9, 0, tzinfo=tz)
    while day.year == 2025:
        year, month, week = locate_week(day, tz)
        assert week_interval(year, month, week, tz).contains(day)
        day += timedelta(days=1)


def test_current_week_contains_now(tz) -> None:
    now = datetime(2025, 3, 12, 15, 0, tzinfo=tz)
    interval = current_week(tz, now=now)
    assert interval.contains(now)
    assert (interval.year, interval.month, interval.week) == (2025, 3, 3)
