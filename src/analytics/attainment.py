from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from src.analytics.effective_date import sale_effective_date
from src.analytics.weeks import WeekInterval
from src.models.sales import SaleRecord
from src.models.scheduling import AppointmentRecord
from src.models.team import LevelRecord


VENDOR_ROLE = "vendedor"
SUPERVISOR_ROLE = "supervisor"
SDR_ROLES = frozenset({"sdr", "sdr_inbound", "sdr_outbound"})
ELIGIBLE_ROLES = SDR_ROLES | {VENDOR_ROLE}

ENROLLED_STATUS = "matriculado"
# Only these meeting results count as a held meeting.
ATTENDED_RESULTS = frozenset({"comprou", "compareceu_nao_comprou", "compareceu"})

DEFAULT_VENDOR_QUOTAS = MappingProxyType({"junior": 7.0, "pleno": 8.0, "senior": 10.0})
DEFAULT_VENDOR_QUOTA = 7.0
DEFAULT_SDR_QUOTAS = MappingProxyType({"junior": 55.0, "pleno": 70.0, "senior": 85.0})
DEFAULT_SDR_QUOTA = 55.0


def round_percent(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def attainment_percent(realized: float, quota: float, capped: bool = False) -> float:
    if quota <= 0:
        return 0.0
    percent = round_percent(realized / quota * 100)
    return min(percent, 100.0) if capped else percent


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


class QuotaTable:
    """Level rows keyed by (level, kind); built once per run and never mutated."""

    def __init__(self, rows: Mapping[Tuple[str, str], LevelRecord]) -> None:
        self._rows = MappingProxyType(dict(rows))

    @classmethod
    def from_rows(cls, levels: Iterable[LevelRecord]) -> "QuotaTable":
        rows: Dict[Tuple[str, str], LevelRecord] = {}
        for level in levels:
            rows[(_normalize(level.level), _normalize(level.kind))] = level
        return cls(rows)

    def row(self, level: Optional[str], kind: str) -> Optional[LevelRecord]:
        return self._rows.get((_normalize(level), kind))

    def quota_for(self, level: Optional[str], role: Optional[str]) -> float:
        role = _normalize(role)
        if role == VENDOR_ROLE:
            row = self.row(level, "vendedor")
            configured = row.vendor_quota if row else None
            fallback = DEFAULT_VENDOR_QUOTAS.get(_normalize(level), DEFAULT_VENDOR_QUOTA)
        elif role in SDR_ROLES:
            row = self.row(level, "sdr")
            if row is None:
                configured = None
            elif role == "sdr_outbound":
                configured = row.outbound_quota
            else:
                configured = row.inbound_quota
            fallback = DEFAULT_SDR_QUOTAS.get(_normalize(level), DEFAULT_SDR_QUOTA)
        else:
            return 0.0
        if configured is None or not math.isfinite(configured) or configured <= 0:
            return fallback
        return float(configured)

    def weekly_variable(self, level: Optional[str], kind: str, default: float = 0.0) -> float:
        row = self.row(level, kind)
        if row is None or row.weekly_variable is None:
            return default
        return float(row.weekly_variable)


@dataclass(frozen=True)
class Attainment:
    realized: float
    quota: float
    percent: float
    degraded: bool = False

    @classmethod
    def zero(cls, degraded: bool = False) -> "Attainment":
        return cls(realized=0.0, quota=0.0, percent=0.0, degraded=degraded)


class RoleStrategy:
    activity = ""
    rule_kind = ""

    def realized_units(self, records: Iterable, interval: WeekInterval, tz: tzinfo) -> float:
        raise NotImplementedError

    def quota(self, level: Optional[str], role: str, table: QuotaTable) -> float:
        return table.quota_for(level, role)

    def measure(
        self,
        role: str,
        level: Optional[str],
        records: Iterable,
        interval: WeekInterval,
        table: QuotaTable,
        tz: tzinfo,
        capped: bool = False,
    ) -> Attainment:
        realized = self.realized_units(records, interval, tz)
        quota = self.quota(level, role, table)
        return Attainment(
            realized=realized,
            quota=quota,
            percent=attainment_percent(realized, quota, capped=capped),
        )


class SdrRole(RoleStrategy):
    """Counts attended meetings by their scheduled instant."""

    activity = "appointments"
    rule_kind = "sdr"

    def realized_units(
        self, records: Iterable[AppointmentRecord], interval: WeekInterval, tz: tzinfo
    ) -> float:
        count = 0
        for appointment in records:
            if not interval.contains(appointment.scheduled_at):
                continue
            result = _normalize(appointment.result)
            if result in ATTENDED_RESULTS:
                count += 1
        return float(count)


class VendorRole(RoleStrategy):
    """Sums the points of enrolled sales by their effective date."""

    activity = "sales"
    rule_kind = "vendedor"

    def realized_units(
        self, records: Iterable[SaleRecord], interval: WeekInterval, tz: tzinfo
    ) -> float:
        total = 0.0
        for sale in records:
            if sale.status != ENROLLED_STATUS:
                continue
            if not interval.contains(sale_effective_date(sale, tz)):
                continue
            total += sale_points(sale)
        return round(total, 4)


def sale_points(sale: SaleRecord) -> float:
    points = sale.validated_points if sale.validated_points is not None else sale.expected_points
    if points is None or not math.isfinite(points):
        return 0.0
    return float(points)


_SDR = SdrRole()
_VENDOR = VendorRole()


def strategy_for(role: Optional[str]) -> Optional[RoleStrategy]:
    role = _normalize(role)
    if role in SDR_ROLES:
        return _SDR
    if role == VENDOR_ROLE:
        return _VENDOR
    return None
