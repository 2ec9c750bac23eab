from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Query

from src.analytics.weeks import current_week, month_week_intervals
from src.core.config import get_business_timezone
from src.schemas.weeks import WeekReference
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/weeks", tags=["weeks"])


def _meta(time_window: str) -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="business_calendar",
        time_window=time_window,
        calculation_version="v1",
    )


@router.get("")
def month_weeks(
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
) -> ResponseEnvelope[List[WeekReference]]:
    intervals = month_week_intervals(year, month, get_business_timezone())
    return ResponseEnvelope(
        data=[WeekReference.from_interval(interval) for interval in intervals],
        meta=_meta(f"{year}-{month:02d}"),
    )


@router.get("/current")
def this_week() -> ResponseEnvelope[WeekReference]:
    interval = current_week(get_business_timezone())
    return ResponseEnvelope(
        data=WeekReference.from_interval(interval),
        meta=_meta(f"{interval.year}-{interval.month:02d}-w{interval.week}"),
    )
