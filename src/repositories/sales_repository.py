from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.core.supabase import SupabaseClient, in_filter, like_literal
from src.models.sales import (
    CourseRecord,
    FormResponseRecord,
    SaleRecord,
    ScoringRuleRecord,
    StudentRecord,
)


SALE_COLUMNS = (
    "id,vendedor_id,curso_id,aluno_id,status,pontuacao_esperada,pontuacao_validada,"
    "enviado_em,atualizado_em,data_assinatura_contrato,data_aprovacao,observacoes,"
    "motivo_pendencia,documento_comprobatorio"
)
STUDENT_COLUMNS = "id,nome,email,telefone,crmv,form_entry_id,vendedor_id"
EFFECTIVE_DATE_COLUMNS = ("data_aprovacao", "data_assinatura_contrato", "atualizado_em", "enviado_em")
STUDENT_MATCH_LIMIT = 10


class SalesRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_enrolled_for_vendors(
        self, vendor_ids: Iterable[str], start: datetime, tz: tzinfo
    ) -> List[SaleRecord]:
        """Enrolled sales that may fall on or after ``start``; callers narrow by effective date."""
        ids = [vendor_id for vendor_id in vendor_ids if vendor_id]
        if not ids:
            return []
        floor = start.astimezone(tz).date().isoformat()
        recent = ",".join(f"{column}.gte.{floor}" for column in EFFECTIVE_DATE_COLUMNS)
        rows = self.client.select_all(
            table="form_entries",
            select=SALE_COLUMNS,
            filters=[
                ("vendedor_id", in_filter(ids)),
                ("status", "eq.matriculado"),
                ("or", f"({recent})"),
            ],
        )
        return [SaleRecord.model_validate(row) for row in rows]

    def get_sale(self, sale_id: str) -> Optional[SaleRecord]:
        rows, _ = self.client.select(
            table="form_entries",
            select=SALE_COLUMNS,
            filters=[("id", f"eq.{sale_id}")],
            limit=1,
        )
        return SaleRecord.model_validate(rows[0]) if rows else None

    def list_sales(
        self, vendor_id: Optional[str], status: Optional[str], limit: int, offset: int
    ) -> Tuple[List[SaleRecord], int]:
        filters: List[Tuple[str, str]] = []
        if vendor_id:
            filters.append(("vendedor_id", f"eq.{vendor_id}"))
        if status:
            filters.append(("status", f"eq.{status}"))
        rows, total = self.client.select(
            table="form_entries",
            select=SALE_COLUMNS,
            filters=filters,
            limit=limit,
            offset=offset,
            order="enviado_em.desc",
            count="exact",
        )
        records = [SaleRecord.model_validate(row) for row in rows]
        return records, total if total is not None else len(records)

    def list_responses(self, sale_ids: Iterable[str]) -> List[FormResponseRecord]:
        ids = [sale_id for sale_id in sale_ids if sale_id]
        if not ids:
            return []
        rows, _ = self.client.select(
            table="respostas_formulario",
            select="form_entry_id,campo_nome,valor_informado",
            filters=[("form_entry_id", in_filter(ids))],
        )
        return [FormResponseRecord.model_validate(row) for row in rows]

    def list_scoring_rules(self) -> List[ScoringRuleRecord]:
        rows, _ = self.client.select(
            table="regras_pontuacao", select="id,campo_nome,opcao_valor,pontos"
        )
        return [ScoringRuleRecord.model_validate(row) for row in rows]

    def list_courses(self, course_ids: Iterable[str]) -> List[CourseRecord]:
        ids = [course_id for course_id in course_ids if course_id]
        if not ids:
            return []
        rows, _ = self.client.select(
            table="cursos", select="id,nome,modalidade,ativo", filters=[("id", in_filter(ids))]
        )
        return [CourseRecord.model_validate(row) for row in rows]

    def list_students(self, student_ids: Iterable[str]) -> List[StudentRecord]:
        ids = [student_id for student_id in student_ids if student_id]
        if not ids:
            return []
        rows, _ = self.client.select(
            table="alunos", select=STUDENT_COLUMNS, filters=[("id", in_filter(ids))]
        )
        return [StudentRecord.model_validate(row) for row in rows]

    def find_student_for_sale(self, sale_id: str) -> Optional[StudentRecord]:
        rows, _ = self.client.select(
            table="alunos",
            select=STUDENT_COLUMNS,
            filters=[("form_entry_id", f"eq.{sale_id}")],
            limit=1,
        )
        return StudentRecord.model_validate(rows[0]) if rows else None

    def find_student_matching(self, column: str, value: str) -> Optional[StudentRecord]:
        """First student whose ``column`` equals ``value`` ignoring case."""
        rows, _ = self.client.select(
            table="alunos",
            select=STUDENT_COLUMNS,
            filters=[(column, f"ilike.{like_literal(value)}")],
            limit=STUDENT_MATCH_LIMIT,
        )
        wanted = value.casefold()
        for row in rows:
            if str(row.get(column) or "").casefold() == wanted:
                return StudentRecord.model_validate(row)
        return None

    def create_student(self, payload: Dict[str, Any]) -> StudentRecord:
        inserted = self.client.insert(table="alunos", payload=payload)
        return StudentRecord.model_validate(inserted[0])

    def link_student(self, sale_id: str, student_id: str) -> None:
        self.client.update(
            table="form_entries",
            payload={"aluno_id": student_id},
            filters=[("id", f"eq.{sale_id}")],
        )

    def update_expected_points(self, sale_id: str, points: float) -> None:
        self.client.update(
            table="form_entries",
            payload={"pontuacao_esperada": points},
            filters=[("id", f"eq.{sale_id}")],
        )
