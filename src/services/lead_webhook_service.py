from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl

from src.analytics.lead_mapping import map_lead
from src.core.config import get_settings
from src.repositories.leads_repository import LeadsRepository


logger = logging.getLogger(__name__)


def _parse_json(raw: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _parse_form(raw: str) -> Optional[Dict[str, Any]]:
    pairs = parse_qsl(raw, keep_blank_values=True)
    return dict(pairs) if pairs else None


def parse_body(raw: str, content_type: str) -> Dict[str, Any]:
    """Decode a webhook body according to its content type, trying JSON then form encoding otherwise."""
    content_type = (content_type or "").lower()
    if "application/json" in content_type:
        parsers = (_parse_json,)
    elif "application/x-www-form-urlencoded" in content_type:
        parsers = (_parse_form,)
    else:
        parsers = (_parse_json, _parse_form)
    for parser in parsers:
        parsed = parser(raw)
        if parsed is not None:
            return parsed
    logger.warning("Unparseable webhook body with content type %r", content_type)
    return {
        "raw_data": raw,
        "parse_error": "Body is neither JSON nor form encoded",
        "content_type": content_type,
    }


class LeadWebhookService:
    def __init__(self, repository: LeadsRepository) -> None:
        self.repository = repository
        self.settings = get_settings()

    def map_payload(self, body: Mapping[str, Any], headers: Mapping[str, str]) -> Dict[str, Any]:
        return map_lead(body, headers, default_source=self.settings.lead_default_source)

    def store(self, lead: Dict[str, Any]) -> Dict[str, Any]:
        inserted = self.repository.insert_lead(lead)
        logger.info("Captured lead %s from %s", inserted.get("id"), lead.get("fonte_referencia"))
        return inserted
