from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from src.shared.base import BaseSchema


class PersonSummary(BaseSchema):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class CourseSummary(BaseSchema):
    id: str
    name: Optional[str] = None
    modality: Optional[str] = None


class FormAnswer(BaseSchema):
    field_name: Optional[str] = None
    value: Optional[str] = None


class AssembledSale(BaseSchema):
    id: str
    status: Optional[str] = None
    student: Optional[PersonSummary] = None
    course: Optional[CourseSummary] = None
    vendor: Optional[PersonSummary] = None
    expected_points: float = 0.0
    validated_points: Optional[float] = None
    effective_date: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    answers: List[FormAnswer] = Field(default_factory=list)
