from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query

from src.api.dependencies import get_scheduling_service
from src.core.config import get_settings
from src.core.errors import ForbiddenError, UnauthorizedError
from src.schemas.scheduling import (
    Appointment,
    AppointmentCreateRequest,
    AvailabilityRequest,
    AvailabilityResult,
)
from src.services.scheduling_service import SchedulingService
from src.shared.response import Meta, ResponseEnvelope, build_pagination


router = APIRouter(prefix="/appointments", tags=["appointments"])


def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    if not x_api_key:
        raise UnauthorizedError("Missing X-API-Key header")
    configured = (get_settings().agendamentos_api_key or "").strip()
    if not configured or x_api_key != configured:
        raise ForbiddenError("Invalid API key")


def _meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="agendamentos",
        time_window="",
        calculation_version="v1",
    )


@router.post("/availability")
def check_availability(
    payload: AvailabilityRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ResponseEnvelope[AvailabilityResult]:
    return ResponseEnvelope(data=service.check_availability(payload), meta=_meta())


@router.get("", dependencies=[Depends(require_api_key)])
def list_appointments(
    status: Optional[str] = Query(default=None),
    start: Optional[datetime] = Query(default=None, alias="from"),
    end: Optional[datetime] = Query(default=None, alias="to"),
    vendedor_id: Optional[str] = Query(default=None),
    sdr_id: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    service: SchedulingService = Depends(get_scheduling_service),
) -> ResponseEnvelope[List[Appointment]]:
    data, total = service.list_appointments(
        status=status,
        start=start,
        end=end,
        vendor_id=vendedor_id,
        sdr_id=sdr_id,
        limit=limit,
        offset=offset,
    )
    pagination = build_pagination(offset // limit + 1, limit, total)
    return ResponseEnvelope(data=data, pagination=pagination, meta=_meta())


@router.get("/{appointment_id}", dependencies=[Depends(require_api_key)])
def get_appointment(
    appointment_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ResponseEnvelope[Appointment]:
    return ResponseEnvelope(data=service.get_appointment(appointment_id), meta=_meta())


@router.post("", status_code=201, dependencies=[Depends(require_api_key)])
def create_appointment(
    payload: AppointmentCreateRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ResponseEnvelope[Appointment]:
    return ResponseEnvelope(data=service.create_appointment(payload), meta=_meta())
