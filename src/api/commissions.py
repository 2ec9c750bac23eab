from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query

from src.api.dependencies import (
    get_attainment_service,
    get_member_commission_service,
    get_supervisor_commission_service,
)
from src.core.config import get_settings
from src.core.errors import BadRequestError, ForbiddenError, UnauthorizedError
from src.schemas.commissions import (
    MemberAttainment,
    MemberWeekCommission,
    RecalculationRequest,
    RecalculationResult,
    SupervisorMonthCommission,
    SupervisorWeekCommission,
)
from src.services.attainment_service import AttainmentService
from src.services.member_commission_service import MemberCommissionService
from src.services.supervisor_commission_service import SupervisorCommissionService
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(prefix="/commissions", tags=["commissions"])

COMMISSION_CALCULATION_VERSION = "v1"


def _meta(time_window: str, degraded: bool = False) -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="comissionamento",
        time_window=time_window,
        calculation_version=COMMISSION_CALCULATION_VERSION,
        currency="BRL",
        data_status="degraded" if degraded else "live",
        degraded=degraded,
    )


def _parse_weeks(weeks: Optional[str]) -> Optional[List[int]]:
    if not weeks:
        return None
    try:
        return [int(part) for part in weeks.split(",") if part.strip()]
    except ValueError as exc:
        raise BadRequestError("weeks must be a comma separated list of integers") from exc


def _validate_run_token(x_commission_run_token: Optional[str]) -> None:
    configured = (get_settings().commission_recalc_token or "").strip()
    if not configured:
        raise ForbiddenError("Commission recalculation endpoint is disabled")
    if not x_commission_run_token:
        raise UnauthorizedError("Missing commission run token")
    if x_commission_run_token != configured:
        raise ForbiddenError("Invalid commission run token")


@router.get("/supervisors/{supervisor_id}/week")
def supervisor_week(
    supervisor_id: str,
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    week: int = Query(ge=1, le=5),
    service: SupervisorCommissionService = Depends(get_supervisor_commission_service),
) -> ResponseEnvelope[SupervisorWeekCommission]:
    data = service.calculate_week(supervisor_id, year, month, week)
    degraded = any(member.degraded for member in data.members)
    return ResponseEnvelope(data=data, meta=_meta(f"{year}-{month:02d}-w{week}", degraded))


@router.get("/supervisors/{supervisor_id}/month")
def supervisor_month(
    supervisor_id: str,
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    weeks: Optional[str] = Query(default=None),
    service: SupervisorCommissionService = Depends(get_supervisor_commission_service),
) -> ResponseEnvelope[SupervisorMonthCommission]:
    data = service.calculate_month(supervisor_id, year, month, _parse_weeks(weeks))
    degraded = any(member.degraded for item in data.weeks for member in item.members)
    return ResponseEnvelope(data=data, meta=_meta(f"{year}-{month:02d}", degraded))


@router.get("/members/{member_id}/week")
def member_week(
    member_id: str,
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    week: int = Query(ge=1, le=5),
    service: MemberCommissionService = Depends(get_member_commission_service),
) -> ResponseEnvelope[MemberWeekCommission]:
    data = service.calculate_member_week(member_id, year, month, week)
    return ResponseEnvelope(data=data, meta=_meta(f"{year}-{month:02d}-w{week}", data.degraded))


@router.get("/members/{member_id}/attainment")
def member_attainment(
    member_id: str,
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    week: int = Query(ge=1, le=5),
    capped: bool = Query(default=False),
    service: AttainmentService = Depends(get_attainment_service),
) -> ResponseEnvelope[MemberAttainment]:
    data = service.get_member_attainment(member_id, year, month, week, capped=capped)
    return ResponseEnvelope(data=data, meta=_meta(f"{year}-{month:02d}-w{week}", data.degraded))


@router.post("/recalculate")
def recalculate(
    payload: RecalculationRequest,
    x_commission_run_token: Optional[str] = Header(default=None),
    service: MemberCommissionService = Depends(get_member_commission_service),
) -> ResponseEnvelope[RecalculationResult]:
    _validate_run_token(x_commission_run_token)
    data = service.recalculate(payload)
    return ResponseEnvelope(data=data, meta=_meta(payload.scope, bool(data.failed_member_ids)))
