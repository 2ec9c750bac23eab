from __future__ import annotations

from typing import Any, Dict, List

from src.core.supabase import SupabaseClient
from src.models.team import CommissionRuleRecord, LevelRecord


WEEKLY_COMMISSION_CONFLICT_KEYS = "user_id,user_type,ano,mes,semana"


class CommissionRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_levels(self) -> List[LevelRecord]:
        rows, _ = self.client.select(
            table="niveis_vendedores",
            select=(
                "nivel,tipo_usuario,meta_semanal_vendedor,meta_semanal_inbound,"
                "meta_semanal_outbound,variavel_semanal,fixo_mensal"
            ),
        )
        return [LevelRecord.model_validate(row) for row in rows]

    def list_rules(self) -> List[CommissionRuleRecord]:
        rows, _ = self.client.select(
            table="regras_comissionamento",
            select="id,tipo_usuario,percentual_minimo,percentual_maximo,multiplicador",
            order="percentual_minimo.asc",
        )
        return [CommissionRuleRecord.model_validate(row) for row in rows]

    def upsert_weekly_commissions(self, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        inserted = self.client.insert(
            table="comissionamentos_semanais",
            payload=rows,
            upsert=True,
            on_conflict=WEEKLY_COMMISSION_CONFLICT_KEYS,
        )
        return len(inserted)
