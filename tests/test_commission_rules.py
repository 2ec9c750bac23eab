from __future__ import annotations

import pytest

from src.analytics.commission import (
    DEFAULT_SDR_RULES,
    calculate_commission,
    rule_kind_for_role,
    rules_for_kind,
    select_rule,
)
from src.models.team import CommissionRuleRecord


VENDOR_RULES = [
    CommissionRuleRecord(id="r0", kind="vendedor", min_percent=0, max_percent=69, multiplier=0),
    CommissionRuleRecord(id="r1", kind="vendedor", min_percent=70, max_percent=99, multiplier=0.5),
    CommissionRuleRecord(id="r2", kind="vendedor", min_percent=100, max_percent=119, multiplier=1),
    CommissionRuleRecord(id="r3", kind="vendedor", min_percent=120, max_percent=999, multiplier=1.5),
]


@pytest.mark.parametrize(
    ("percent", "rule_id"),
    [(0, "r0"), (69.99, "r0"), (70, "r1"), (99.5, "r1"), (100, "r2"), (119.99, "r2"), (120, "r3"), (450, "r3")],
)
def test_select_rule_floors_percent(percent: float, rule_id: str) -> None:
    rule = select_rule(percent, VENDOR_RULES)
    assert rule is not None and rule.id == rule_id


def test_no_matching_rule_pays_nothing() -> None:
    rules = [CommissionRuleRecord(kind="vendedor", min_percent=50, max_percent=80, multiplier=1)]
    outcome = calculate_commission(20, 1000, rules)
    assert outcome.multiplier == 0
    assert outcome.amount == 0
    assert outcome.rule_id is None


def test_amount_is_variable_times_multiplier() -> None:
    outcome = calculate_commission(114.29, 800, VENDOR_RULES)
    assert outcome.multiplier == 1
    assert outcome.amount == 800
    assert outcome.rule_id == "r2"


def test_zero_quota_pays_nothing() -> None:
    outcome = calculate_commission(150, 800, VENDOR_RULES, quota=0)
    assert outcome.amount == 0
    assert outcome.percent == 0


def test_supervisors_use_salesperson_rules() -> None:
    assert rule_kind_for_role("supervisor") == "vendedor"
    assert rule_kind_for_role("sdr_outbound") == "sdr"


def test_sdr_defaults_apply_without_configured_rules() -> None:
    rules = rules_for_kind("sdr", VENDOR_RULES)
    assert rules == list(DEFAULT_SDR_RULES)
    assert calculate_commission(59.9, 500, rules).multiplier == 0
    assert calculate_commission(60, 500, rules).multiplier == 1
    assert calculate_commission(85, 500, rules).amount == 750
