from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from src.models.scheduling import AppointmentRecord, SpecialEventRecord


BLOCKING_STATUSES = frozenset(
    {"agendado", "atrasado", "finalizado", "finalizado_venda", "remarcado"}
)
# Indexed by date.weekday().
WEEKDAY_NAMES = ("segunda", "terca", "quarta", "quinta", "sexta", "sabado", "domingo")
WEEKDAYS = frozenset(range(0, 5))
WEEKDAYS_AND_SATURDAY = frozenset(range(0, 6))
SATURDAY = 5

RULE_WORKING_HOURS = "working_hours"
RULE_BLOCKED_EVENT = "blocked_event"
RULE_APPOINTMENT_CONFLICT = "appointment_conflict"


@dataclass(frozen=True)
class WorkPeriod:
    start: str
    end: str

    def fits(self, start_hhmm: str, end_hhmm: str) -> bool:
        return start_hhmm >= self.start and end_hhmm <= self.end


@dataclass(frozen=True)
class ScheduleCheck:
    valid: bool
    rule: Optional[str] = None
    reason: Optional[str] = None
    conflict_id: Optional[str] = None

    @classmethod
    def ok(cls) -> "ScheduleCheck":
        return cls(valid=True)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Read a naive request timestamp as business wall-clock time."""
    return value if value.tzinfo is not None else value.replace(tzinfo=tz)


def _hhmm(value: Any) -> Optional[str]:
    if not value or not isinstance(value, str):
        return None
    text = value.strip()[:5]
    if len(text) != 5 or text[2] != ":":
        return None
    return text


def _periods(block: Optional[Mapping[str, Any]], *pairs: Tuple[str, str]) -> List[WorkPeriod]:
    if not block:
        return []
    periods: List[WorkPeriod] = []
    for start_key, end_key in pairs:
        start, end = _hhmm(block.get(start_key)), _hhmm(block.get(end_key))
        if start and end:
            periods.append(WorkPeriod(start=start, end=end))
    return periods


def working_days(config: Mapping[str, Any]) -> frozenset:
    mode = config.get("dias_trabalho")
    if mode == "segunda_sabado":
        return WEEKDAYS_AND_SATURDAY
    if mode == "personalizado":
        names = set(config.get("dias_personalizados") or [])
        return frozenset(index for index, name in enumerate(WEEKDAY_NAMES) if name in names)
    return WEEKDAYS


def working_periods(config: Optional[Mapping[str, Any]], day: date) -> List[WorkPeriod]:
    """Periods available on ``day``; empty when the member does not work that day."""
    if not config:
        return []
    if config.get("manha_inicio"):
        return _periods(config, ("manha_inicio", "manha_fim"), ("tarde_inicio", "tarde_fim"))
    if day.weekday() not in working_days(config):
        return []
    period_keys = (("periodo1_inicio", "periodo1_fim"), ("periodo2_inicio", "periodo2_fim"))
    if day.weekday() == SATURDAY:
        return _periods(config.get("sabado"), *period_keys)
    return _periods(config.get("segunda_sexta"), *period_keys)


def check_working_hours(
    start: datetime, end: datetime, config: Optional[Mapping[str, Any]], tz: tzinfo
) -> Optional[ScheduleCheck]:
    if not config:
        return ScheduleCheck(
            valid=False, rule=RULE_WORKING_HOURS, reason="Working hours are not configured"
        )
    local_start, local_end = _aware(start).astimezone(tz), _aware(end).astimezone(tz)
    if local_start.date() != local_end.date():
        return ScheduleCheck(
            valid=False, rule=RULE_WORKING_HOURS, reason="Meeting must start and end on the same day"
        )
    periods = working_periods(config, local_start.date())
    if not periods:
        return ScheduleCheck(
            valid=False, rule=RULE_WORKING_HOURS, reason="Member does not work on this day"
        )
    start_hhmm, end_hhmm = local_start.strftime("%H:%M"), local_end.strftime("%H:%M")
    if any(period.fits(start_hhmm, end_hhmm) for period in periods):
        return None
    available = " and ".join(f"{period.start}-{period.end}" for period in periods)
    return ScheduleCheck(
        valid=False,
        rule=RULE_WORKING_HOURS,
        reason=f"Meeting is outside working hours. Available: {available}",
    )


def _parse_time(value: Optional[str], fallback: time) -> time:
    text = _hhmm(value)
    if not text:
        return fallback
    return time(int(text[:2]), int(text[3:]))


def _recurs_on(event: SpecialEventRecord, day: date, tz: tzinfo) -> bool:
    if event.recurrence_start and day < event.recurrence_start:
        return False
    if event.recurrence_end and day > event.recurrence_end:
        return False
    anchor = event.recurrence_start
    if anchor is None and event.starts_at is not None:
        anchor = _aware(event.starts_at).astimezone(tz).date()
    if event.recurrence == "semanal":
        # Stored weekdays count from Sunday = 0.
        return (day.weekday() + 1) % 7 in set(event.weekdays or [])
    if event.recurrence == "mensal":
        return anchor is not None and day.day == anchor.day
    if event.recurrence == "anual":
        return anchor is not None and (day.month, day.day) == (anchor.month, anchor.day)
    return False


def event_windows(
    event: SpecialEventRecord, first_day: date, last_day: date, tz: tzinfo
) -> List[Tuple[datetime, datetime]]:
    if not event.recurring:
        if event.starts_at is None:
            return []
        starts = _aware(event.starts_at)
        if event.ends_at is not None:
            ends = _aware(event.ends_at)
        else:
            local_day = starts.astimezone(tz).date()
            ends = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
        return [(starts, ends)]

    opens = _parse_time(event.start_time, time.min)
    closes = _parse_time(event.end_time, time.max)
    windows: List[Tuple[datetime, datetime]] = []
    day = first_day
    while day <= last_day:
        if _recurs_on(event, day, tz):
            windows.append(
                (datetime.combine(day, opens, tzinfo=tz), datetime.combine(day, closes, tzinfo=tz))
            )
        day += timedelta(days=1)
    return windows


def check_blocked_events(
    start: datetime, end: datetime, events: Iterable[SpecialEventRecord], tz: tzinfo
) -> Optional[ScheduleCheck]:
    start, end = _aware(start), _aware(end)
    first_day, last_day = start.astimezone(tz).date(), end.astimezone(tz).date()
    for event in events:
        for window_start, window_end in event_windows(event, first_day, last_day, tz):
            if start < window_end and end > window_start:
                return ScheduleCheck(
                    valid=False,
                    rule=RULE_BLOCKED_EVENT,
                    reason=f"Time is blocked by event: {event.title or event.id}",
                    conflict_id=event.id,
                )
    return None


def check_appointment_conflicts(
    start: datetime,
    end: datetime,
    appointments: Iterable[AppointmentRecord],
    default_minutes: int = 60,
    exclude_id: Optional[str] = None,
) -> Optional[ScheduleCheck]:
    start, end = _aware(start), _aware(end)
    for appointment in appointments:
        if appointment.id == exclude_id or appointment.status not in BLOCKING_STATUSES:
            continue
        other_start = _aware(appointment.scheduled_at)
        other_end = (
            _aware(appointment.ends_at)
            if appointment.ends_at is not None
            else other_start + timedelta(minutes=default_minutes)
        )
        if start < other_end and end > other_start:
            return ScheduleCheck(
                valid=False,
                rule=RULE_APPOINTMENT_CONFLICT,
                reason="Member already has a meeting at this time",
                conflict_id=appointment.id,
            )
    return None


def check_schedule(
    start: datetime,
    end: datetime,
    working_hours: Optional[Dict[str, Any]],
    events: Iterable[SpecialEventRecord],
    appointments: Iterable[AppointmentRecord],
    tz: tzinfo,
    default_minutes: int = 60,
    exclude_id: Optional[str] = None,
) -> ScheduleCheck:
    """Report the first violated rule: working hours, then blocked events, then other meetings."""
    violation = (
        check_working_hours(start, end, working_hours, tz)
        or check_blocked_events(start, end, events, tz)
        or check_appointment_conflicts(start, end, appointments, default_minutes, exclude_id)
    )
    return violation or ScheduleCheck.ok()
