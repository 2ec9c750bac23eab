from __future__ import annotations

from datetime import datetime
from typing import Optional

from src.shared.base import BaseSchema


class AvailabilityRequest(BaseSchema):
    vendedor_id: str
    data_agendamento: datetime
    data_fim_agendamento: Optional[datetime] = None
    exclude_appointment_id: Optional[str] = None


class AvailabilityResult(BaseSchema):
    valid: bool
    rule: Optional[str] = None
    reason: Optional[str] = None
    conflict_id: Optional[str] = None


class LeadInput(BaseSchema):
    nome: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None


class AppointmentCreateRequest(BaseSchema):
    vendedor_id: str
    sdr_id: str
    pos_graduacao_interesse: str
    data_agendamento: datetime
    link_reuniao: str
    data_fim_agendamento: Optional[datetime] = None
    lead_id: Optional[str] = None
    lead_dados: Optional[LeadInput] = None
    observacoes: Optional[str] = None


class Appointment(BaseSchema):
    id: str
    sdr_id: Optional[str] = None
    vendor_id: Optional[str] = None
    lead_id: Optional[str] = None
    scheduled_at: datetime
    ends_at: Optional[datetime] = None
    status: Optional[str] = None
    result: Optional[str] = None
    meeting_link: Optional[str] = None
    course_interest: Optional[str] = None
    notes: Optional[str] = None
