from __future__ import annotations

import logging
from collections import defaultdict
from datetime import tzinfo
from typing import Dict, Iterable, List, Optional

from src.analytics.attainment import Attainment, QuotaTable, RoleStrategy, strategy_for
from src.analytics.weeks import WeekInterval, week_interval
from src.core.config import get_business_timezone
from src.core.errors import BadRequestError, NotFoundError
from src.models.team import CommissionRuleRecord, MemberRecord
from src.repositories.appointments_repository import AppointmentsRepository
from src.repositories.commission_repository import CommissionRepository
from src.repositories.sales_repository import SalesRepository
from src.repositories.team_repository import TeamRepository
from src.schemas.commissions import MemberAttainment


logger = logging.getLogger(__name__)


class AttainmentService:
    def __init__(
        self,
        team_repository: TeamRepository,
        commission_repository: CommissionRepository,
        appointments_repository: AppointmentsRepository,
        sales_repository: SalesRepository,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.team_repository = team_repository
        self.commission_repository = commission_repository
        self.appointments_repository = appointments_repository
        self.sales_repository = sales_repository
        self.tz = tz or get_business_timezone()

    def load_quota_table(self) -> QuotaTable:
        try:
            return QuotaTable.from_rows(self.commission_repository.list_levels())
        except Exception:
            logger.warning("Level table unavailable; falling back to default quotas", exc_info=True)
            return QuotaTable.from_rows([])

    def load_rules(self) -> List[CommissionRuleRecord]:
        try:
            return self.commission_repository.list_rules()
        except Exception:
            logger.warning("Commission rules unavailable; multiplier falls back to zero", exc_info=True)
            return []

    def _fetch(self, strategy: RoleStrategy, member_ids: List[str], interval: WeekInterval) -> list:
        if strategy.activity == "appointments":
            return self.appointments_repository.list_for_sdrs(member_ids, interval.start, interval.end)
        return self.sales_repository.list_enrolled_for_vendors(member_ids, interval.start, self.tz)

    @staticmethod
    def _owner(strategy: RoleStrategy, record) -> Optional[str]:
        if strategy.activity == "appointments":
            return record.sdr_id
        return record.vendor_id

    def measure_member(
        self,
        member: MemberRecord,
        interval: WeekInterval,
        quota_table: QuotaTable,
        capped: bool = False,
    ) -> Attainment:
        strategy = strategy_for(member.role)
        if strategy is None:
            return Attainment.zero()
        if interval.is_degenerate:
            return strategy.measure(
                member.role or "", member.level, [], interval, quota_table, self.tz, capped=capped
            )
        try:
            records = self._fetch(strategy, [member.id], interval)
        except Exception:
            logger.warning(
                "Attainment degraded for member %s in %s-%s week %s",
                member.id,
                interval.year,
                interval.month,
                interval.week,
                exc_info=True,
            )
            return Attainment.zero(degraded=True)
        return strategy.measure(
            member.role or "", member.level, records, interval, quota_table, self.tz, capped=capped
        )

    def measure_members(
        self,
        members: Iterable[MemberRecord],
        interval: WeekInterval,
        quota_table: QuotaTable,
    ) -> Dict[str, Attainment]:
        """Measure many members with one query per activity type."""
        by_strategy: Dict[RoleStrategy, List[MemberRecord]] = defaultdict(list)
        results: Dict[str, Attainment] = {}
        for member in members:
            strategy = strategy_for(member.role)
            if strategy is None:
                results[member.id] = Attainment.zero()
            elif interval.is_degenerate:
                results[member.id] = strategy.measure(
                    member.role or "", member.level, [], interval, quota_table, self.tz
                )
            else:
                by_strategy[strategy].append(member)

        for strategy, group in by_strategy.items():
            try:
                records = self._fetch(strategy, [member.id for member in group], interval)
            except Exception:
                logger.warning(
                    "Batched %s fetch failed for %s-%s week %s",
                    strategy.activity,
                    interval.year,
                    interval.month,
                    interval.week,
                    exc_info=True,
                )
                for member in group:
                    results[member.id] = Attainment.zero(degraded=True)
                continue
            owned: Dict[str, list] = defaultdict(list)
            for record in records:
                owned[self._owner(strategy, record)].append(record)
            for member in group:
                results[member.id] = strategy.measure(
                    member.role or "", member.level, owned[member.id], interval, quota_table, self.tz
                )
        return results

    def get_member_attainment(
        self, member_id: str, year: int, month: int, week: int, capped: bool = False
    ) -> MemberAttainment:
        member = self.team_repository.get_member(member_id)
        if member is None:
            raise NotFoundError("Member not found")
        if strategy_for(member.role) is None:
            raise BadRequestError("Attainment is only tracked for salespeople and SDRs")
        interval = week_interval(year, month, week, self.tz)
        attainment = self.measure_member(member, interval, self.load_quota_table(), capped=capped)
        return to_member_attainment(member, attainment)


def to_member_attainment(member: MemberRecord, attainment: Attainment) -> MemberAttainment:
    return MemberAttainment(
        member_id=member.id,
        name=member.name,
        role=member.role,
        level=member.level,
        realized=attainment.realized,
        quota=attainment.quota,
        percent=attainment.percent,
        degraded=attainment.degraded,
    )
