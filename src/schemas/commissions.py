from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from src.schemas.weeks import WeekReference
from src.shared.base import BaseSchema


class MemberAttainment(BaseSchema):
    member_id: str
    name: Optional[str] = None
    role: Optional[str] = None
    level: Optional[str] = None
    realized: float
    quota: float
    percent: float
    degraded: bool = False


class SupervisorWeekCommission(BaseSchema):
    supervisor_id: str
    group_id: str
    group_name: Optional[str] = None
    week: WeekReference
    members: List[MemberAttainment] = Field(default_factory=list)
    average_percent: float
    weekly_variable: float
    multiplier: float
    amount: float


class SupervisorMonthCommission(BaseSchema):
    supervisor_id: str
    year: int
    month: int
    weeks: List[SupervisorWeekCommission] = Field(default_factory=list)
    total_amount: float


class MemberWeekCommission(BaseSchema):
    member_id: str
    role: Optional[str] = None
    level: Optional[str] = None
    week: WeekReference
    realized: float
    quota: float
    percent: float
    weekly_variable: float
    multiplier: float
    amount: float
    rule_id: Optional[str] = None
    degraded: bool = False


RecalculationScope = Literal["member-week", "member-month", "current-week-all"]


class RecalculationRequest(BaseSchema):
    scope: RecalculationScope = "current-week-all"
    member_id: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    week: Optional[int] = Field(default=None, ge=1, le=5)


class RecalculationResult(BaseSchema):
    scope: RecalculationScope
    processed: int
    upserted: int
    failed_member_ids: List[str] = Field(default_factory=list)
