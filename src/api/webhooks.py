from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.api.dependencies import get_lead_webhook_service
from src.services.lead_webhook_service import LeadWebhookService, parse_body


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _reply(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


@router.api_route("/leads", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
async def capture_lead(
    request: Request,
    service: LeadWebhookService = Depends(get_lead_webhook_service),
) -> JSONResponse:
    if request.method == "OPTIONS":
        return _reply(200, {"ok": True})
    if request.method != "POST":
        return _reply(405, {"error": "Method not allowed", "method": request.method, "timestamp": _now()})

    raw = (await request.body()).decode("utf-8", errors="replace")
    if not raw.strip():
        return _reply(400, {"error": "Empty request body", "timestamp": _now()})

    content_type = request.headers.get("content-type", "")
    body = parse_body(raw, content_type)
    lead = service.map_payload(body, request.headers)
    try:
        inserted = await run_in_threadpool(service.store, lead)
    except httpx.HTTPError as exc:
        logger.error("Failed to store webhook lead: %s", exc)
        return _reply(
            500,
            {
                "error": "Failed to store lead",
                "details": str(exc),
                "lead_data": lead,
                "received_data": body,
                "timestamp": _now(),
            },
        )

    return _reply(
        200,
        {
            "success": True,
            "message": "Lead captured",
            "lead_id": inserted.get("id"),
            "processed_data": lead,
            "received_data": body,
            "stats": {
                "body_size": len(raw),
                "fields_count": len(body),
                "content_type": content_type,
            },
            "timestamp": _now(),
        },
    )
