from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from src.models.sales import FormResponseRecord, ScoringRuleRecord


COURSE_MODALITY = "Curso"
COURSE_BASE_POINTS = 0.2
DEFAULT_BASE_POINTS = 1.0
MODALITY_FIELDS = frozenset({"Modalidade", "Modalidade do Curso"})

# Form labels that differ from the field names used in the scoring rules.
FIELD_ALIASES: Dict[str, str] = {
    "Lote Pós": "Lote da Pós-Graduação",
    "Modalidade": "Modalidade do Curso",
    "Parcelamento": "Condições de Parcelamento",
    "Forma de Captação": "Forma de Captação do Lead",
}


def rule_field_name(field_name: str) -> str:
    return FIELD_ALIASES.get(field_name, field_name)


def response_modality(responses: Iterable[FormResponseRecord]) -> Optional[str]:
    for response in responses:
        if response.field_name in MODALITY_FIELDS:
            return response.value
    return None


def field_points(field_name: str, value: str, rules: Sequence[ScoringRuleRecord]) -> float:
    for rule in rules:
        if rule.field_name == field_name and rule.option_value == value:
            return rule.points
    return 0.0


def points_from_responses(
    responses: Sequence[FormResponseRecord], rules: Sequence[ScoringRuleRecord]
) -> float:
    if response_modality(responses) == COURSE_MODALITY:
        return COURSE_BASE_POINTS
    total = DEFAULT_BASE_POINTS
    for response in responses:
        if response.field_name and response.value:
            total += field_points(rule_field_name(response.field_name), response.value, rules)
    return total
