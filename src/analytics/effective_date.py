from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional

from src.models.sales import SaleRecord


logger = logging.getLogger(__name__)

CONTRACT_DATE_TIME = time(12, 0)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def parse_contract_date(raw: Optional[str], tz: tzinfo) -> Optional[datetime]:
    if not raw:
        return None
    text = raw.strip()
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), CONTRACT_DATE_TIME, tzinfo=tz)
        return _aware(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        logger.warning("Ignoring unparseable contract date %r", raw)
        return None


def sale_effective_date(sale: SaleRecord, tz: tzinfo) -> Optional[datetime]:
    """Instant a sale counts toward: approval, then contract signature, then last update, then submission."""
    if sale.approved_at is not None:
        return _aware(sale.approved_at)
    signed = parse_contract_date(sale.contract_signed_at, tz)
    if signed is not None:
        return signed
    if sale.updated_at is not None:
        return _aware(sale.updated_at)
    if sale.submitted_at is not None:
        return _aware(sale.submitted_at)
    return None
