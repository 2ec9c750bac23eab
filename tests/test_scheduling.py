from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

from src.analytics.scheduling import (
    RULE_APPOINTMENT_CONFLICT,
    RULE_BLOCKED_EVENT,
    RULE_WORKING_HOURS,
    check_schedule,
    working_periods,
)
from src.core.errors import BadRequestError, ConflictError
from src.models.leads import LeadRecord
from src.models.scheduling import AppointmentRecord, SpecialEventRecord
from src.models.team import MemberRecord
from src.schemas.scheduling import AppointmentCreateRequest, AvailabilityRequest
from src.services.scheduling_service import SchedulingService


WORKING_HOURS = {
    "dias_trabalho": "segunda_sexta",
    "segunda_sexta": {
        "periodo1_inicio": "09:00",
        "periodo1_fim": "12:00",
        "periodo2_inicio": "13:00",
        "periodo2_fim": "18:00",
    },
    "sabado": {"periodo1_inicio": "09:00", "periodo1_fim": "12:00"},
}
LEGACY_HOURS = {"manha_inicio": "08:00", "manha_fim": "12:00", "tarde_inicio": "14:00", "tarde_fim": "19:00"}


def _at(tz, day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=tz)


def _appointment(appointment_id: str, start: datetime, status: str = "agendado", end: Optional[datetime] = None) -> AppointmentRecord:
    return AppointmentRecord(
        id=appointment_id, vendor_id="vendor-1", scheduled_at=start, ends_at=end, status=status
    )


def test_meeting_inside_period_is_valid(tz) -> None:
    check = check_schedule(_at(tz, 13, 10), _at(tz, 13, 11), WORKING_HOURS, [], [], tz)
    assert check.valid


def test_meeting_crossing_lunch_break_is_rejected(tz) -> None:
    check = check_schedule(_at(tz, 13, 11, 30), _at(tz, 13, 12, 30), WORKING_HOURS, [], [], tz)
    assert not check.valid
    assert check.rule == RULE_WORKING_HOURS
    assert "09:00-12:00" in check.reason


def test_saturday_requires_six_day_schedule(tz) -> None:
    saturday = (_at(tz, 18, 9), _at(tz, 18, 10))
    assert not check_schedule(*saturday, WORKING_HOURS, [], [], tz).valid
    six_days = {**WORKING_HOURS, "dias_trabalho": "segunda_sabado"}
    assert check_schedule(*saturday, six_days, [], [], tz).valid


def test_custom_working_days(tz) -> None:
    custom = {**WORKING_HOURS, "dias_trabalho": "personalizado", "dias_personalizados": ["terca", "quinta"]}
    assert working_periods(custom, _at(tz, 13, 0).date()) == []
    assert len(working_periods(custom, _at(tz, 14, 0).date())) == 2


def test_legacy_hours_apply_every_day(tz) -> None:
    assert check_schedule(_at(tz, 19, 15), _at(tz, 19, 16), LEGACY_HOURS, [], [], tz).valid


def test_missing_configuration_is_a_violation(tz) -> None:
    check = check_schedule(_at(tz, 13, 10), _at(tz, 13, 11), None, [], [], tz)
    assert check.rule == RULE_WORKING_HOURS


def test_one_off_event_blocks_overlapping_meeting(tz) -> None:
    event = SpecialEventRecord(id="evt-1", title="Treinamento", starts_at=_at(tz, 13, 9, 30), ends_at=_at(tz, 13, 10, 30))
    check = check_schedule(_at(tz, 13, 10), _at(tz, 13, 11), WORKING_HOURS, [event], [], tz)
    assert check.rule == RULE_BLOCKED_EVENT
    assert check.conflict_id == "evt-1"
    assert check_schedule(_at(tz, 13, 10, 30), _at(tz, 13, 11, 30), WORKING_HOURS, [event], [], tz).valid


def test_weekly_recurring_event_blocks_its_weekdays(tz) -> None:
    # Stored weekdays count from Sunday, so 1 is Monday.
    event = SpecialEventRecord(
        id="evt-2",
        title="Reunião geral",
        recurring=True,
        recurrence="semanal",
        weekdays=[1],
        start_time="14:00",
        end_time="15:00",
    )
    monday = check_schedule(_at(tz, 13, 14, 30), _at(tz, 13, 15, 30), WORKING_HOURS, [event], [], tz)
    tuesday = check_schedule(_at(tz, 14, 14, 30), _at(tz, 14, 15, 30), WORKING_HOURS, [event], [], tz)
    assert monday.rule == RULE_BLOCKED_EVENT
    assert tuesday.valid


def test_monthly_recurring_event_respects_window(tz) -> None:
    event = SpecialEventRecord(
        id="evt-3",
        recurring=True,
        recurrence="mensal",
        start_time="09:00",
        end_time="12:00",
        recurrence_start=date(2024, 11, 16),
        recurrence_end=date(2024, 12, 31),
    )
    december = datetime(2024, 12, 16, 10, tzinfo=tz)
    january = _at(tz, 16, 10)
    blocked = check_schedule(december, december + timedelta(minutes=30), WORKING_HOURS, [event], [], tz)
    assert blocked.rule == RULE_BLOCKED_EVENT
    assert check_schedule(january, january + timedelta(minutes=30), WORKING_HOURS, [event], [], tz).valid


def test_existing_meeting_conflicts_with_default_duration(tz) -> None:
    existing = _appointment("apt-1", _at(tz, 13, 10))
    check = check_schedule(_at(tz, 13, 10, 30), _at(tz, 13, 11, 30), WORKING_HOURS, [], [existing], tz)
    assert check.rule == RULE_APPOINTMENT_CONFLICT
    assert check.conflict_id == "apt-1"
    assert check_schedule(_at(tz, 13, 11), _at(tz, 13, 12), WORKING_HOURS, [], [existing], tz).valid


def test_cancelled_meetings_do_not_block(tz) -> None:
    existing = _appointment("apt-1", _at(tz, 13, 10), status="cancelado")
    assert check_schedule(_at(tz, 13, 10), _at(tz, 13, 11), WORKING_HOURS, [], [existing], tz).valid


def test_rules_are_checked_in_order(tz) -> None:
    event = SpecialEventRecord(id="evt-1", starts_at=_at(tz, 13, 17), ends_at=_at(tz, 13, 20))
    existing = _appointment("apt-1", _at(tz, 13, 17))
    outside_hours = check_schedule(_at(tz, 13, 17, 30), _at(tz, 13, 18, 30), WORKING_HOURS, [event], [existing], tz)
    blocked = check_schedule(_at(tz, 13, 17), _at(tz, 13, 18), WORKING_HOURS, [event], [existing], tz)
    assert outside_hours.rule == RULE_WORKING_HOURS
    assert blocked.rule == RULE_BLOCKED_EVENT


class StubAppointmentsRepository:
    def __init__(self, appointments: List[AppointmentRecord]) -> None:
        self.appointments = appointments
        self.created: List[Dict[str, Any]] = []

    def list_special_events(self, start, end) -> List[SpecialEventRecord]:
        return []

    def list_for_vendor(self, vendor_id, start, end) -> List[AppointmentRecord]:
        return [a for a in self.appointments if a.vendor_id == vendor_id]

    def create_appointment(self, payload: Dict[str, Any]) -> AppointmentRecord:
        self.created.append(payload)
        return AppointmentRecord.model_validate({"id": "apt-new", **payload})


class StubTeamRepository:
    def get_member(self, member_id: str) -> Optional[MemberRecord]:
        if member_id != "vendor-1":
            return None
        return MemberRecord(id="vendor-1", role="vendedor", working_hours=WORKING_HOURS)


class StubLeadsRepository:
    def __init__(self) -> None:
        self.created: List[Dict[str, Any]] = []

    def find_by_contact(self, email, whatsapp) -> Optional[LeadRecord]:
        if email == "known@example.com":
            return LeadRecord(id="lead-known")
        return None

    def create_lead(self, payload: Dict[str, Any]) -> LeadRecord:
        self.created.append(payload)
        return LeadRecord(id="lead-new", name=payload["nome"])


def _service(tz, appointments=()) -> SchedulingService:
    return SchedulingService(
        appointments_repository=StubAppointmentsRepository(list(appointments)),
        team_repository=StubTeamRepository(),
        leads_repository=StubLeadsRepository(),
        tz=tz,
    )


def _create_request(tz, **overrides) -> AppointmentCreateRequest:
    payload = {
        "vendedor_id": "vendor-1",
        "sdr_id": "sdr-1",
        "pos_graduacao_interesse": "Dermatologia",
        "data_agendamento": _at(tz, 13, 14),
        "link_reuniao": "https://meet.example.com/abc",
        "lead_dados": {"nome": "Gabi", "email": "gabi@example.com"},
    }
    payload.update(overrides)
    return AppointmentCreateRequest.model_validate(payload)


def test_create_appointment_creates_lead_and_defaults_end(tz) -> None:
    service = _service(tz)
    appointment = service.create_appointment(_create_request(tz))
    assert appointment.id == "apt-new"
    assert appointment.lead_id == "lead-new"
    assert appointment.status == "agendado"
    assert appointment.ends_at == _at(tz, 13, 15)


def test_create_appointment_reuses_known_lead(tz) -> None:
    service = _service(tz)
    request = _create_request(tz, lead_dados={"nome": "Known", "email": "known@example.com"})
    assert service.create_appointment(request).lead_id == "lead-known"


def test_create_appointment_conflict_raises(tz) -> None:
    service = _service(tz, [_appointment("apt-1", _at(tz, 13, 14, 30))])
    with pytest.raises(ConflictError) as exc_info:
        service.create_appointment(_create_request(tz))
    assert exc_info.value.details["rule"] == RULE_APPOINTMENT_CONFLICT


def test_create_appointment_validates_link_and_lead(tz) -> None:
    service = _service(tz)
    with pytest.raises(BadRequestError):
        service.create_appointment(_create_request(tz, link_reuniao="meet.example.com/abc"))
    with pytest.raises(BadRequestError):
        service.create_appointment(_create_request(tz, lead_dados=None))


def test_availability_rejects_inverted_interval(tz) -> None:
    service = _service(tz)
    request = AvailabilityRequest(
        vendedor_id="vendor-1",
        data_agendamento=_at(tz, 13, 14),
        data_fim_agendamento=_at(tz, 13, 13),
    )
    with pytest.raises(BadRequestError):
        service.check_availability(request)


def test_naive_times_are_read_as_business_time(tz) -> None:
    service = _service(tz)
    request = AvailabilityRequest.model_validate(
        {"vendedorId": "vendor-1", "dataAgendamento": "2025-01-13T14:00:00", "dataFimAgendamento": "2025-01-13T18:00:00Z"}
    )
    result = service.check_availability(request)
    assert result.valid

    outside = AvailabilityRequest.model_validate(
        {"vendedorId": "vendor-1", "dataAgendamento": "2025-01-13T18:30:00"}
    )
    assert service.check_availability(outside).rule == RULE_WORKING_HOURS


def test_created_appointment_stores_naive_start_in_business_time(tz) -> None:
    service = _service(tz)
    appointment = service.create_appointment(
        _create_request(tz, data_agendamento="2025-01-13T10:00:00")
    )
    created = service.appointments_repository.created[0]
    assert created["data_agendamento"] == "2025-01-13T10:00:00-03:00"
    assert appointment.ends_at == _at(tz, 13, 11)
