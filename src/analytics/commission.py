from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from src.analytics.attainment import SDR_ROLES, SUPERVISOR_ROLE, VENDOR_ROLE, round_percent
from src.models.team import CommissionRuleRecord


OPEN_ENDED_MAX_PERCENT = 999

DEFAULT_SDR_RULES = (
    CommissionRuleRecord(kind="sdr", min_percent=0, max_percent=59, multiplier=0),
    CommissionRuleRecord(kind="sdr", min_percent=60, max_percent=84, multiplier=1),
    CommissionRuleRecord(kind="sdr", min_percent=85, max_percent=999, multiplier=1.5),
)


@dataclass(frozen=True)
class CommissionOutcome:
    percent: float
    multiplier: float
    amount: float
    rule_id: Optional[str] = None


def rule_kind_for_role(role: Optional[str]) -> str:
    role = (role or "").strip().lower()
    if role in SDR_ROLES:
        return "sdr"
    if role in {VENDOR_ROLE, SUPERVISOR_ROLE}:
        # Supervisors are paid on the salesperson table.
        return "vendedor"
    return role


def rules_for_kind(kind: str, rules: Iterable[CommissionRuleRecord]) -> List[CommissionRuleRecord]:
    matching = [rule for rule in rules if rule.kind == kind]
    if not matching and kind == "sdr":
        return list(DEFAULT_SDR_RULES)
    return matching


def select_rule(
    percent: float, rules: Sequence[CommissionRuleRecord]
) -> Optional[CommissionRuleRecord]:
    if not math.isfinite(percent):
        return None
    whole = math.floor(percent)
    for rule in sorted(rules, key=lambda item: item.min_percent, reverse=True):
        if rule.max_percent >= OPEN_ENDED_MAX_PERCENT and whole >= rule.min_percent:
            return rule
        if rule.min_percent <= whole <= rule.max_percent:
            return rule
    return None


def calculate_commission(
    percent: float,
    weekly_variable: float,
    rules: Sequence[CommissionRuleRecord],
    quota: float = 100.0,
) -> CommissionOutcome:
    if quota <= 0:
        return CommissionOutcome(percent=0.0, multiplier=0.0, amount=0.0)
    rule = select_rule(percent, rules)
    multiplier = rule.multiplier if rule else 0.0
    return CommissionOutcome(
        percent=round_percent(percent),
        multiplier=multiplier,
        amount=round_percent(weekly_variable * multiplier),
        rule_id=rule.id if rule else None,
    )
