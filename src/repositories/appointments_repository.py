from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.core.supabase import SupabaseClient, in_filter
from src.models.scheduling import AppointmentRecord, SpecialEventRecord


APPOINTMENT_COLUMNS = (
    "id,sdr_id,vendedor_id,lead_id,data_agendamento,data_fim_agendamento,"
    "resultado_reuniao,data_resultado,status,link_reuniao,pos_graduacao_interesse,"
    "observacoes,created_at"
)
EVENT_COLUMNS = (
    "id,titulo,data_inicio,data_fim,is_recorrente,tipo_recorrencia,dias_semana,"
    "hora_inicio,hora_fim,data_inicio_recorrencia,data_fim_recorrencia"
)


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


class AppointmentsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_for_sdrs(
        self, sdr_ids: Iterable[str], start: datetime, end: datetime
    ) -> List[AppointmentRecord]:
        ids = [sdr_id for sdr_id in sdr_ids if sdr_id]
        if not ids:
            return []
        rows = self.client.select_all(
            table="agendamentos",
            select=APPOINTMENT_COLUMNS,
            filters=[
                ("sdr_id", in_filter(ids)),
                ("data_agendamento", f"gte.{_iso(start)}"),
                ("data_agendamento", f"lte.{_iso(end)}"),
            ],
        )
        return [AppointmentRecord.model_validate(row) for row in rows]

    def list_for_vendor(
        self, vendor_id: str, start: datetime, end: datetime
    ) -> List[AppointmentRecord]:
        rows, _ = self.client.select(
            table="agendamentos",
            select=APPOINTMENT_COLUMNS,
            filters=[
                ("vendedor_id", f"eq.{vendor_id}"),
                ("data_agendamento", f"gte.{_iso(start)}"),
                ("data_agendamento", f"lte.{_iso(end)}"),
            ],
            order="data_agendamento.asc",
        )
        return [AppointmentRecord.model_validate(row) for row in rows]

    def list_appointments(
        self,
        status: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
        vendor_id: Optional[str],
        sdr_id: Optional[str],
        limit: int,
        offset: int,
    ) -> Tuple[List[AppointmentRecord], int]:
        filters: List[Tuple[str, str]] = []
        if status:
            filters.append(("status", f"eq.{status}"))
        if start:
            filters.append(("data_agendamento", f"gte.{_iso(start)}"))
        if end:
            filters.append(("data_agendamento", f"lte.{_iso(end)}"))
        if vendor_id:
            filters.append(("vendedor_id", f"eq.{vendor_id}"))
        if sdr_id:
            filters.append(("sdr_id", f"eq.{sdr_id}"))
        rows, total = self.client.select(
            table="agendamentos",
            select=APPOINTMENT_COLUMNS,
            filters=filters,
            limit=limit,
            offset=offset,
            order="data_agendamento.desc",
            count="exact",
        )
        records = [AppointmentRecord.model_validate(row) for row in rows]
        return records, total if total is not None else len(records)

    def get_appointment(self, appointment_id: str) -> Optional[AppointmentRecord]:
        rows, _ = self.client.select(
            table="agendamentos",
            select=APPOINTMENT_COLUMNS,
            filters=[("id", f"eq.{appointment_id}")],
            limit=1,
        )
        return AppointmentRecord.model_validate(rows[0]) if rows else None

    def create_appointment(self, payload: Dict[str, Any]) -> AppointmentRecord:
        inserted = self.client.insert(table="agendamentos", payload=payload)
        return AppointmentRecord.model_validate(inserted[0])

    def list_special_events(self, start: datetime, end: datetime) -> List[SpecialEventRecord]:
        recurring, _ = self.client.select(
            table="eventos_especiais",
            select=EVENT_COLUMNS,
            filters=[("is_recorrente", "eq.true")],
        )
        one_off, _ = self.client.select(
            table="eventos_especiais",
            select=EVENT_COLUMNS,
            filters=[
                ("is_recorrente", "eq.false"),
                ("data_inicio", f"lt.{_iso(end)}"),
                ("data_fim", f"gt.{_iso(start)}"),
            ],
        )
        return [SpecialEventRecord.model_validate(row) for row in recurring + one_off]
