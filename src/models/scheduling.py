from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from src.shared.base import StoreRecord


class AppointmentRecord(StoreRecord):
    id: str
    sdr_id: Optional[str] = None
    vendor_id: Optional[str] = Field(default=None, alias="vendedor_id")
    lead_id: Optional[str] = None
    scheduled_at: datetime = Field(alias="data_agendamento")
    ends_at: Optional[datetime] = Field(default=None, alias="data_fim_agendamento")
    result: Optional[str] = Field(default=None, alias="resultado_reuniao")
    result_at: Optional[datetime] = Field(default=None, alias="data_resultado")
    status: Optional[str] = None
    meeting_link: Optional[str] = Field(default=None, alias="link_reuniao")
    course_interest: Optional[str] = Field(default=None, alias="pos_graduacao_interesse")
    notes: Optional[str] = Field(default=None, alias="observacoes")
    created_at: Optional[datetime] = None


class SpecialEventRecord(StoreRecord):
    id: str
    title: Optional[str] = Field(default=None, alias="titulo")
    starts_at: Optional[datetime] = Field(default=None, alias="data_inicio")
    ends_at: Optional[datetime] = Field(default=None, alias="data_fim")
    recurring: Optional[bool] = Field(default=False, alias="is_recorrente")
    recurrence: Optional[str] = Field(default=None, alias="tipo_recorrencia")
    weekdays: Optional[List[int]] = Field(default=None, alias="dias_semana")
    start_time: Optional[str] = Field(default=None, alias="hora_inicio")
    end_time: Optional[str] = Field(default=None, alias="hora_fim")
    recurrence_start: Optional[date] = Field(default=None, alias="data_inicio_recorrencia")
    recurrence_end: Optional[date] = Field(default=None, alias="data_fim_recorrencia")
