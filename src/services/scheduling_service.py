from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional, Tuple

from src.analytics.scheduling import ScheduleCheck, check_schedule, localize
from src.core.config import get_business_timezone, get_settings
from src.core.errors import BadRequestError, ConflictError, NotFoundError
from src.models.scheduling import AppointmentRecord
from src.repositories.appointments_repository import AppointmentsRepository
from src.repositories.leads_repository import LeadsRepository
from src.repositories.team_repository import TeamRepository
from src.schemas.scheduling import (
    Appointment,
    AppointmentCreateRequest,
    AvailabilityRequest,
    AvailabilityResult,
)


logger = logging.getLogger(__name__)

SCHEDULED_STATUS = "agendado"
API_LEAD_SOURCE = "API"
# Widest meeting we look back for when loading possibly overlapping appointments.
CONFLICT_LOOKBACK = timedelta(hours=24)


def to_appointment(record: AppointmentRecord) -> Appointment:
    return Appointment(
        id=record.id,
        sdr_id=record.sdr_id,
        vendor_id=record.vendor_id,
        lead_id=record.lead_id,
        scheduled_at=record.scheduled_at,
        ends_at=record.ends_at,
        status=record.status,
        result=record.result,
        meeting_link=record.meeting_link,
        course_interest=record.course_interest,
        notes=record.notes,
    )


class SchedulingService:
    def __init__(
        self,
        appointments_repository: AppointmentsRepository,
        team_repository: TeamRepository,
        leads_repository: LeadsRepository,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.appointments_repository = appointments_repository
        self.team_repository = team_repository
        self.leads_repository = leads_repository
        self.tz = tz or get_business_timezone()
        self.settings = get_settings()

    def _window(self, start: datetime, end: Optional[datetime]) -> Tuple[datetime, datetime]:
        start = localize(start, self.tz)
        if end is None:
            end = start + timedelta(minutes=self.settings.default_meeting_minutes)
        end = localize(end, self.tz)
        if end <= start:
            raise BadRequestError("Meeting end must be after its start")
        return start, end

    def _check(
        self,
        vendor_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
    ) -> ScheduleCheck:
        vendor = self.team_repository.get_member(vendor_id)
        if vendor is None:
            raise NotFoundError("Salesperson not found")
        events = self.appointments_repository.list_special_events(start, end)
        appointments = self.appointments_repository.list_for_vendor(
            vendor_id, start - CONFLICT_LOOKBACK, end
        )
        return check_schedule(
            start,
            end,
            vendor.working_hours,
            events,
            appointments,
            self.tz,
            default_minutes=self.settings.default_meeting_minutes,
            exclude_id=exclude_id,
        )

    def check_availability(self, request: AvailabilityRequest) -> AvailabilityResult:
        start, end = self._window(request.data_agendamento, request.data_fim_agendamento)
        check = self._check(request.vendedor_id, start, end, request.exclude_appointment_id)
        return AvailabilityResult(
            valid=check.valid, rule=check.rule, reason=check.reason, conflict_id=check.conflict_id
        )

    def list_appointments(
        self,
        status: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
        vendor_id: Optional[str],
        sdr_id: Optional[str],
        limit: int,
        offset: int,
    ) -> Tuple[List[Appointment], int]:
        records, total = self.appointments_repository.list_appointments(
            status=status,
            start=localize(start, self.tz) if start else None,
            end=localize(end, self.tz) if end else None,
            vendor_id=vendor_id,
            sdr_id=sdr_id,
            limit=limit,
            offset=offset,
        )
        return [to_appointment(record) for record in records], total

    def get_appointment(self, appointment_id: str) -> Appointment:
        record = self.appointments_repository.get_appointment(appointment_id)
        if record is None:
            raise NotFoundError("Appointment not found")
        return to_appointment(record)

    def _resolve_lead(self, request: AppointmentCreateRequest) -> str:
        if request.lead_id:
            return request.lead_id
        lead_input = request.lead_dados
        if lead_input is None or not (lead_input.nome or "").strip():
            raise BadRequestError("Either lead_id or lead_dados with a name is required")
        existing = self.leads_repository.find_by_contact(lead_input.email, lead_input.whatsapp)
        if existing is not None:
            return existing.id
        lead = self.leads_repository.create_lead(
            {
                "nome": lead_input.nome.strip(),
                "email": lead_input.email,
                "whatsapp": lead_input.whatsapp,
                "status": "novo",
                "fonte_referencia": API_LEAD_SOURCE,
            }
        )
        logger.info("Created lead %s for API appointment", lead.id)
        return lead.id

    def create_appointment(self, request: AppointmentCreateRequest) -> Appointment:
        if not request.link_reuniao.startswith(("http://", "https://")):
            raise BadRequestError("link_reuniao must be an http(s) URL")
        start, end = self._window(request.data_agendamento, request.data_fim_agendamento)

        check = self._check(request.vendedor_id, start, end)
        if not check.valid:
            raise ConflictError(
                check.reason or "Schedule conflict",
                details={"rule": check.rule, "conflictId": check.conflict_id},
            )

        lead_id = self._resolve_lead(request)
        record = self.appointments_repository.create_appointment(
            {
                "lead_id": lead_id,
                "vendedor_id": request.vendedor_id,
                "sdr_id": request.sdr_id,
                "pos_graduacao_interesse": request.pos_graduacao_interesse,
                "data_agendamento": start.isoformat(),
                "data_fim_agendamento": end.isoformat(),
                "link_reuniao": request.link_reuniao,
                "observacoes": request.observacoes,
                "status": SCHEDULED_STATUS,
            }
        )
        logger.info("Created appointment %s for salesperson %s", record.id, request.vendedor_id)
        return to_appointment(record)
