from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple

from src.analytics.attainment import Attainment, QuotaTable
from src.analytics.commission import calculate_commission, rule_kind_for_role, rules_for_kind
from src.analytics.groups import eligible_memberships, group_average
from src.analytics.weeks import WeekInterval, week_interval, weeks_in_month
from src.core.errors import BadRequestError, NotFoundError
from src.models.team import CommissionRuleRecord, GroupRecord, MemberRecord, MembershipRecord
from src.repositories.team_repository import TeamRepository
from src.schemas.commissions import SupervisorMonthCommission, SupervisorWeekCommission
from src.schemas.weeks import WeekReference
from src.services.attainment_service import AttainmentService, to_member_attainment

DEFAULT_SUPERVISOR_VARIABLE = 1000.0
SUPERVISOR_LEVEL_KIND = "supervisor"


class SupervisorCommissionService:
    def __init__(
        self,
        team_repository: TeamRepository,
        attainment_service: AttainmentService,
        max_workers: int = 4,
    ) -> None:
        self.team_repository = team_repository
        self.attainment_service = attainment_service
        self.max_workers = max(1, max_workers)

    def _resolve(self, supervisor: Optional[MemberRecord], group: Optional[GroupRecord]) -> None:
        if supervisor is None:
            raise NotFoundError("Supervisor not found")
        if group is None:
            raise NotFoundError("Supervisor has no group")

    def _build_week(
        self,
        supervisor: MemberRecord,
        group: GroupRecord,
        interval: WeekInterval,
        members: Sequence[MemberRecord],
        attainments: Dict[str, Attainment],
        quota_table: QuotaTable,
        rules: Sequence[CommissionRuleRecord],
    ) -> SupervisorWeekCommission:
        average = group_average(attainments[member.id].percent for member in members)
        weekly_variable = quota_table.weekly_variable(
            supervisor.level, SUPERVISOR_LEVEL_KIND, default=DEFAULT_SUPERVISOR_VARIABLE
        )
        if members:
            outcome = calculate_commission(
                average, weekly_variable, rules_for_kind(rule_kind_for_role("supervisor"), rules)
            )
            multiplier, amount = outcome.multiplier, outcome.amount
        else:
            multiplier, amount = 0.0, 0.0
        return SupervisorWeekCommission(
            supervisor_id=supervisor.id,
            group_id=group.id,
            group_name=group.name,
            week=WeekReference.from_interval(interval),
            members=[to_member_attainment(member, attainments[member.id]) for member in members],
            average_percent=average,
            weekly_variable=weekly_variable,
            multiplier=multiplier,
            amount=amount,
        )

    @staticmethod
    def _eligible_members(
        memberships: Sequence[MembershipRecord], interval: WeekInterval
    ) -> List[MemberRecord]:
        return [m.member for m in eligible_memberships(memberships, interval) if m.member]

    def calculate_week(
        self, supervisor_id: str, year: int, month: int, week: int
    ) -> SupervisorWeekCommission:
        supervisor = self.team_repository.get_supervisor(supervisor_id)
        group = self.team_repository.get_group_for_supervisor(supervisor_id) if supervisor else None
        self._resolve(supervisor, group)

        interval = week_interval(year, month, week, self.attainment_service.tz)
        members = self._eligible_members(self.team_repository.list_memberships(group.id), interval)
        quota_table = self.attainment_service.load_quota_table()
        attainments = {
            member.id: self.attainment_service.measure_member(member, interval, quota_table)
            for member in members
        }
        rules = self.attainment_service.load_rules()
        return self._build_week(
            supervisor, group, interval, members, attainments, quota_table, rules
        )

    def calculate_month(
        self,
        supervisor_id: str,
        year: int,
        month: int,
        weeks: Optional[Sequence[int]] = None,
    ) -> SupervisorMonthCommission:
        available = weeks_in_month(year, month)
        selected = sorted(set(weeks)) if weeks else available
        unknown = [week for week in selected if week not in available]
        if unknown:
            raise BadRequestError(f"Month {year}-{month:02d} has no week {unknown[0]}")

        with ThreadPoolExecutor(max_workers=2) as executor:
            supervisor_future = executor.submit(self.team_repository.get_supervisor, supervisor_id)
            group_future = executor.submit(
                self.team_repository.get_group_for_supervisor, supervisor_id
            )
            supervisor, group = supervisor_future.result(), group_future.result()
        self._resolve(supervisor, group)

        memberships = self.team_repository.list_memberships(group.id)
        quota_table = self.attainment_service.load_quota_table()
        rules = self.attainment_service.load_rules()
        tz = self.attainment_service.tz

        def run_week(week: int) -> Tuple[int, SupervisorWeekCommission]:
            interval = week_interval(year, month, week, tz)
            members = self._eligible_members(memberships, interval)
            attainments = self.attainment_service.measure_members(members, interval, quota_table)
            return week, self._build_week(
                supervisor, group, interval, members, attainments, quota_table, rules
            )

        results: Dict[int, SupervisorWeekCommission] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(run_week, week) for week in selected]
            for future in as_completed(futures):
                week, commission = future.result()
                results[week] = commission

        ordered = [results[week] for week in selected]
        return SupervisorMonthCommission(
            supervisor_id=supervisor_id,
            year=year,
            month=month,
            weeks=ordered,
            total_amount=round(sum(item.amount for item in ordered), 2),
        )
