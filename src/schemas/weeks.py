from __future__ import annotations

from datetime import datetime

from src.analytics.weeks import WeekInterval
from src.shared.base import BaseSchema


class WeekReference(BaseSchema):
    year: int
    month: int
    week: int
    start: datetime
    end: datetime
    is_degenerate: bool = False

    @classmethod
    def from_interval(cls, interval: WeekInterval) -> "WeekReference":
        return cls(
            year=interval.year,
            month=interval.month,
            week=interval.week,
            start=interval.start,
            end=interval.end,
            is_degenerate=interval.is_degenerate,
        )
