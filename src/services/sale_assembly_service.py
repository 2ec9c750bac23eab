from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from src.analytics.effective_date import sale_effective_date
from src.analytics.scoring import points_from_responses
from src.core.config import get_business_timezone
from src.core.errors import NotFoundError
from src.models.sales import (
    CourseRecord,
    FormResponseRecord,
    SaleRecord,
    ScoringRuleRecord,
    StudentRecord,
)
from src.models.team import MemberRecord
from src.repositories.sales_repository import SalesRepository
from src.repositories.team_repository import TeamRepository
from src.schemas.sales import AssembledSale, CourseSummary, FormAnswer, PersonSummary


logger = logging.getLogger(__name__)

STUDENT_NAME_FIELD = "Nome do Aluno"
STUDENT_EMAIL_FIELD = "Email do Aluno"
MAX_EXPECTED_POINTS = 100


def needs_rescore(points: Optional[float]) -> bool:
    return not points or not math.isfinite(points) or points > MAX_EXPECTED_POINTS


def _answer(responses: Sequence[FormResponseRecord], field_name: str) -> Optional[str]:
    for response in responses:
        if response.field_name == field_name and response.value and response.value.strip():
            return response.value.strip()
    return None


class SaleAssemblyService:
    def __init__(
        self,
        sales_repository: SalesRepository,
        team_repository: TeamRepository,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.sales_repository = sales_repository
        self.team_repository = team_repository
        self.tz = tz or get_business_timezone()

    def get_sale(self, sale_id: str) -> AssembledSale:
        sale = self.sales_repository.get_sale(sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")
        return self._assemble_many([sale])[0]

    def list_sales(
        self, vendor_id: Optional[str], status: Optional[str], limit: int, offset: int
    ) -> Tuple[List[AssembledSale], int]:
        sales, total = self.sales_repository.list_sales(vendor_id, status, limit, offset)
        return self._assemble_many(sales), total

    def _assemble_many(self, sales: Sequence[SaleRecord]) -> List[AssembledSale]:
        if not sales:
            return []
        responses: Dict[str, List[FormResponseRecord]] = defaultdict(list)
        for response in self.sales_repository.list_responses(sale.id for sale in sales):
            responses[response.sale_id].append(response)
        rules = self.sales_repository.list_scoring_rules()
        students = {
            student.id: student
            for student in self.sales_repository.list_students(sale.student_id for sale in sales)
        }
        courses = {
            course.id: course
            for course in self.sales_repository.list_courses(sale.course_id for sale in sales)
        }
        vendors = {
            member.id: member
            for member in self.team_repository.list_members(sale.vendor_id for sale in sales)
        }
        return [
            self._assemble(
                sale,
                responses.get(sale.id, []),
                rules,
                students.get(sale.student_id) if sale.student_id else None,
                courses.get(sale.course_id) if sale.course_id else None,
                vendors.get(sale.vendor_id) if sale.vendor_id else None,
            )
            for sale in sales
        ]

    def _assemble(
        self,
        sale: SaleRecord,
        responses: List[FormResponseRecord],
        rules: Sequence[ScoringRuleRecord],
        student: Optional[StudentRecord],
        course: Optional[CourseRecord],
        vendor: Optional[MemberRecord],
    ) -> AssembledSale:
        if student is None:
            student = self.resolve_student(sale, responses)
        return AssembledSale(
            id=sale.id,
            status=sale.status,
            student=PersonSummary(id=student.id, name=student.name, email=student.email)
            if student
            else None,
            course=CourseSummary(id=course.id, name=course.name, modality=course.modality)
            if course
            else None,
            vendor=PersonSummary(id=vendor.id, name=vendor.name, email=vendor.email)
            if vendor
            else None,
            expected_points=self.expected_points(sale, responses, rules),
            validated_points=sale.validated_points,
            effective_date=sale_effective_date(sale, self.tz),
            submitted_at=sale.submitted_at,
            answers=[FormAnswer(field_name=r.field_name, value=r.value) for r in responses],
        )

    def _link(self, sale: SaleRecord, student: StudentRecord) -> None:
        try:
            self.sales_repository.link_student(sale.id, student.id)
        except Exception:
            logger.error("Failed to link student %s to sale %s", student.id, sale.id, exc_info=True)

    def resolve_student(
        self, sale: SaleRecord, responses: Sequence[FormResponseRecord]
    ) -> Optional[StudentRecord]:
        student = self.sales_repository.find_student_for_sale(sale.id)
        if student is not None:
            self._link(sale, student)
            return student

        email = _answer(responses, STUDENT_EMAIL_FIELD)
        name = _answer(responses, STUDENT_NAME_FIELD)
        if email:
            student = self.sales_repository.find_student_matching("email", email)
        elif name:
            student = self.sales_repository.find_student_matching("nome", name)
        if student is not None:
            self._link(sale, student)
            return student

        if not (name and email):
            return None
        try:
            student = self.sales_repository.create_student(
                {
                    "nome": name,
                    "email": email,
                    "form_entry_id": sale.id,
                    "vendedor_id": sale.vendor_id,
                }
            )
        except Exception:
            logger.error("Failed to create student for sale %s", sale.id, exc_info=True)
            return None
        self._link(sale, student)
        return student

    def expected_points(
        self,
        sale: SaleRecord,
        responses: Sequence[FormResponseRecord],
        rules: Sequence[ScoringRuleRecord],
    ) -> float:
        stored = sale.expected_points
        if not needs_rescore(stored):
            return float(stored)
        if not responses or not rules:
            return 0.0
        points = points_from_responses(responses, rules)
        if not math.isfinite(points):
            points = 0.0
        if points != stored:
            try:
                self.sales_repository.update_expected_points(sale.id, points)
            except Exception:
                logger.error("Failed to store rescored points for sale %s", sale.id, exc_info=True)
        return points
