"""Business-week calendar.

A business week runs Wednesday 00:00:00.000 through Tuesday 23:59:59.999 in
the business time zone. Week N of a month is the week closed by the Nth
Tuesday whose date falls inside that month, so a week that starts in the
previous month still belongs to the month of its Tuesday.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional, Tuple

TUESDAY = calendar.TUESDAY
WEEK_END_TIME = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class WeekInterval:
    year: int
    month: int
    week: int
    start: datetime
    end: datetime

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end

    def contains(self, instant: Optional[datetime]) -> bool:
        if instant is None or self.is_degenerate:
            return False
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return self.start <= instant <= self.end


def _tuesdays(year: int, month: int) -> List[date]:
    first = date(year, month, 1)
    offset = (TUESDAY - first.weekday()) % 7
    first_tuesday = first + timedelta(days=offset)
    days_in_month = calendar.monthrange(year, month)[1]
    return [
        first_tuesday + timedelta(days=7 * index)
        for index in range((days_in_month - first_tuesday.day) // 7 + 1)
    ]


def weeks_in_month(year: int, month: int) -> List[int]:
    return list(range(1, len(_tuesdays(year, month)) + 1))


def week_interval(year: int, month: int, week: int, tz: tzinfo) -> WeekInterval:
    tuesdays = _tuesdays(year, month)
    if week < 1 or week > len(tuesdays):
        anchor = datetime(year, month, 1, tzinfo=tz)
        return WeekInterval(year=year, month=month, week=week, start=anchor, end=anchor)

    closing = tuesdays[week - 1]
    opening = closing - timedelta(days=6)
    return WeekInterval(
        year=year,
        month=month,
        week=week,
        start=datetime.combine(opening, time.min, tzinfo=tz),
        end=datetime.combine(closing, WEEK_END_TIME, tzinfo=tz),
    )


def month_week_intervals(year: int, month: int, tz: tzinfo) -> List[WeekInterval]:
    return [week_interval(year, month, week, tz) for week in weeks_in_month(year, month)]


def locate_week(instant: datetime, tz: tzinfo) -> Tuple[int, int, int]:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local_day = instant.astimezone(tz).date()
    closing = local_day + timedelta(days=(TUESDAY - local_day.weekday()) % 7)
    return closing.year, closing.month, (closing.day - 1) // 7 + 1


def current_week(tz: tzinfo, now: Optional[datetime] = None) -> WeekInterval:
    year, month, week = locate_week(now or datetime.now(timezone.utc), tz)
    return week_interval(year, month, week, tz)
