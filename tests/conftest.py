from __future__ import annotations

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("BUSINESS_TIMEZONE", "America/Sao_Paulo")

from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.core.config import get_settings
from src.main import create_app


BUSINESS_TZ = ZoneInfo("America/Sao_Paulo")


@pytest.fixture()
def tz() -> ZoneInfo:
    return BUSINESS_TZ


@pytest.fixture()
def app() -> FastAPI:
    get_settings.cache_clear()
    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
