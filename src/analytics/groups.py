from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from src.analytics.attainment import ELIGIBLE_ROLES, round_percent
from src.analytics.weeks import WeekInterval
from src.models.team import MembershipRecord


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def is_eligible(membership: MembershipRecord, interval: WeekInterval) -> bool:
    """Member belonged to the group during the week and still counts for the group."""
    member = membership.member
    if member is None or not member.active:
        return False
    if (member.role or "").strip().lower() not in ELIGIBLE_ROLES:
        return False
    joined_at = _aware(membership.joined_at)
    if joined_at is not None and joined_at > interval.end:
        return False
    left_at = _aware(membership.left_at)
    return left_at is None or left_at > interval.start


def eligible_memberships(
    memberships: Iterable[MembershipRecord], interval: WeekInterval
) -> List[MembershipRecord]:
    return [membership for membership in memberships if is_eligible(membership, interval)]


def group_average(percents: Iterable[float]) -> float:
    values = list(percents)
    if not values:
        return 0.0
    return round_percent(sum(values) / len(values))
