from __future__ import annotations

from fastapi import APIRouter

from src.api.appointments import router as appointments_router
from src.api.commissions import router as commissions_router
from src.api.health import router as health_router
from src.api.sales import router as sales_router
from src.api.webhooks import router as webhooks_router
from src.api.weeks import router as weeks_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(weeks_router)
api_router.include_router(commissions_router)
api_router.include_router(sales_router)
api_router.include_router(appointments_router)
api_router.include_router(webhooks_router)
