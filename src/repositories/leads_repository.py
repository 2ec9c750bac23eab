from __future__ import annotations

from typing import Any, Dict, Optional

from src.core.supabase import SupabaseClient
from src.models.leads import LeadRecord


LEAD_COLUMNS = "id,nome,email,whatsapp,status,fonte_referencia,created_at"


class LeadsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def insert_lead(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        inserted = self.client.insert(table="leads", payload=[payload])
        return inserted[0] if inserted else {}

    def get_lead(self, lead_id: str) -> Optional[LeadRecord]:
        rows, _ = self.client.select(
            table="leads", select=LEAD_COLUMNS, filters=[("id", f"eq.{lead_id}")], limit=1
        )
        return LeadRecord.model_validate(rows[0]) if rows else None

    def find_by_contact(
        self, email: Optional[str], whatsapp: Optional[str]
    ) -> Optional[LeadRecord]:
        for column, value in (("email", email), ("whatsapp", whatsapp)):
            if not value:
                continue
            rows, _ = self.client.select(
                table="leads",
                select=LEAD_COLUMNS,
                filters=[(column, f"eq.{value}")],
                order="created_at.desc",
                limit=1,
            )
            if rows:
                return LeadRecord.model_validate(rows[0])
        return None

    def create_lead(self, payload: Dict[str, Any]) -> LeadRecord:
        return LeadRecord.model_validate(self.insert_lead(payload))
