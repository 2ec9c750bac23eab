from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from src.analytics.attainment import ELIGIBLE_ROLES, QuotaTable, strategy_for
from src.analytics.commission import calculate_commission, rules_for_kind
from src.analytics.weeks import WeekInterval, current_week, week_interval, weeks_in_month
from src.core.errors import BadRequestError, NotFoundError
from src.models.team import CommissionRuleRecord, MemberRecord
from src.repositories.commission_repository import CommissionRepository
from src.repositories.team_repository import TeamRepository
from src.schemas.commissions import (
    MemberWeekCommission,
    RecalculationRequest,
    RecalculationResult,
)
from src.schemas.weeks import WeekReference
from src.services.attainment_service import AttainmentService


logger = logging.getLogger(__name__)


class MemberCommissionService:
    def __init__(
        self,
        team_repository: TeamRepository,
        commission_repository: CommissionRepository,
        attainment_service: AttainmentService,
    ) -> None:
        self.team_repository = team_repository
        self.commission_repository = commission_repository
        self.attainment_service = attainment_service

    def _calculate(
        self,
        member: MemberRecord,
        interval: WeekInterval,
        quota_table: QuotaTable,
        rules: Sequence[CommissionRuleRecord],
    ) -> MemberWeekCommission:
        strategy = strategy_for(member.role)
        if strategy is None:
            raise BadRequestError("Commission is only paid to salespeople and SDRs")
        attainment = self.attainment_service.measure_member(member, interval, quota_table)
        weekly_variable = quota_table.weekly_variable(member.level, strategy.rule_kind)
        outcome = calculate_commission(
            attainment.percent,
            weekly_variable,
            rules_for_kind(strategy.rule_kind, rules),
            quota=attainment.quota,
        )
        return MemberWeekCommission(
            member_id=member.id,
            role=member.role,
            level=member.level,
            week=WeekReference.from_interval(interval),
            realized=attainment.realized,
            quota=attainment.quota,
            percent=attainment.percent,
            weekly_variable=weekly_variable,
            multiplier=outcome.multiplier,
            amount=outcome.amount,
            rule_id=outcome.rule_id,
            degraded=attainment.degraded,
        )

    def _get_member(self, member_id: str) -> MemberRecord:
        member = self.team_repository.get_member(member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member

    def calculate_member_week(
        self, member_id: str, year: int, month: int, week: int
    ) -> MemberWeekCommission:
        member = self._get_member(member_id)
        interval = week_interval(year, month, week, self.attainment_service.tz)
        return self._calculate(
            member,
            interval,
            self.attainment_service.load_quota_table(),
            self.attainment_service.load_rules(),
        )

    def _targets(self, request: RecalculationRequest) -> List[tuple]:
        tz = self.attainment_service.tz
        if request.scope == "current-week-all":
            interval = current_week(tz)
            members = self.team_repository.list_active_members(sorted(ELIGIBLE_ROLES))
            return [(member, interval) for member in members]

        if not request.member_id or request.year is None or request.month is None:
            raise BadRequestError("memberId, year and month are required for member scopes")
        member = self._get_member(request.member_id)
        if request.scope == "member-week":
            if request.week is None:
                raise BadRequestError("week is required for the member-week scope")
            if request.week not in weeks_in_month(request.year, request.month):
                raise BadRequestError(
                    f"Month {request.year}-{request.month:02d} has no week {request.week}"
                )
            weeks = [request.week]
        else:
            weeks = weeks_in_month(request.year, request.month)
        return [(member, week_interval(request.year, request.month, week, tz)) for week in weeks]

    def recalculate(self, request: RecalculationRequest) -> RecalculationResult:
        targets = self._targets(request)
        quota_table = self.attainment_service.load_quota_table()
        rules = self.attainment_service.load_rules()

        rows: List[Dict[str, Any]] = []
        failed: List[str] = []
        for member, interval in targets:
            try:
                commission = self._calculate(member, interval, quota_table, rules)
            except BadRequestError:
                logger.info("Skipping member %s with role %s", member.id, member.role)
                continue
            if commission.degraded:
                failed.append(member.id)
                continue
            rows.append(snapshot_row(commission))

        upserted = self.commission_repository.upsert_weekly_commissions(rows)
        logger.info(
            "Recalculated %s weekly commissions (%s upserted, %s degraded) for scope %s",
            len(rows),
            upserted,
            len(failed),
            request.scope,
        )
        return RecalculationResult(
            scope=request.scope,
            processed=len(rows),
            upserted=upserted,
            failed_member_ids=failed,
        )


def snapshot_row(commission: MemberWeekCommission) -> Dict[str, Any]:
    return {
        "user_id": commission.member_id,
        "user_type": commission.role,
        "ano": commission.week.year,
        "mes": commission.week.month,
        "semana": commission.week.week,
        "pontos": commission.realized,
        "meta": commission.quota,
        "percentual": commission.percent,
        "multiplicador": commission.multiplier,
        "variavel": commission.weekly_variable,
        "valor": commission.amount,
        "regra_id": commission.rule_id,
    }
