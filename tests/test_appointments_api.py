from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_sale_assembly_service, get_scheduling_service
from src.core.config import get_settings
from src.core.errors import ConflictError, NotFoundError
from src.schemas.sales import AssembledSale, PersonSummary
from src.schemas.scheduling import Appointment, AvailabilityResult


API_KEY = "agenda-secret"
STARTS = datetime(2025, 1, 13, 13, 0, tzinfo=timezone.utc)


def _appointment(appointment_id: str = "appt-1") -> Appointment:
    return Appointment(
        id=appointment_id,
        sdr_id="sdr-1",
        vendor_id="vendor-1",
        lead_id="lead-1",
        scheduled_at=STARTS,
        status="agendado",
        meeting_link="https://meet.example.com/abc",
    )


class FakeSchedulingService:
    def __init__(self) -> None:
        self.created = []
        self.list_calls = []

    def check_availability(self, request) -> AvailabilityResult:
        if request.vendedor_id == "busy":
            return AvailabilityResult(
                valid=False, rule="appointment_conflict", reason="Taken", conflict_id="appt-9"
            )
        return AvailabilityResult(valid=True)

    def list_appointments(self, **kwargs):
        self.list_calls.append(kwargs)
        return [_appointment("appt-1"), _appointment("appt-2")], 12

    def get_appointment(self, appointment_id: str) -> Appointment:
        if appointment_id != "appt-1":
            raise NotFoundError("Appointment not found")
        return _appointment(appointment_id)

    def create_appointment(self, request) -> Appointment:
        if request.vendedor_id == "busy":
            raise ConflictError("Taken", details={"rule": "appointment_conflict", "conflictId": "appt-9"})
        self.created.append(request)
        return _appointment("appt-new")


class FakeSaleAssemblyService:
    def list_sales(self, vendor_id, status, limit, offset):
        return [AssembledSale(id="sale-1", vendor=PersonSummary(id=vendor_id), status=status)], 1

    def get_sale(self, sale_id: str) -> AssembledSale:
        if sale_id != "sale-1":
            raise NotFoundError("Sale not found")
        return AssembledSale(id=sale_id)


@pytest.fixture()
def scheduling() -> FakeSchedulingService:
    return FakeSchedulingService()


@pytest.fixture()
def api_client(app, scheduling, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AGENDAMENTOS_API_KEY", API_KEY)
    get_settings.cache_clear()
    app.dependency_overrides[get_scheduling_service] = lambda: scheduling
    app.dependency_overrides[get_sale_assembly_service] = FakeSaleAssemblyService
    yield TestClient(app)
    get_settings.cache_clear()


def _create_payload(**overrides):
    payload = {
        "vendedor_id": "vendor-1",
        "sdr_id": "sdr-1",
        "pos_graduacao_interesse": "MBA Gestão",
        "data_agendamento": "2025-01-13T10:00:00-03:00",
        "link_reuniao": "https://meet.example.com/abc",
        "lead_dados": {"nome": "Ana", "email": "ana@example.com"},
    }
    payload.update(overrides)
    return payload


def test_availability_does_not_need_key(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/appointments/availability",
        json={"vendedor_id": "busy", "data_agendamento": "2025-01-13T10:00:00-03:00"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is False
    assert data["conflictId"] == "appt-9"


def test_missing_key_is_unauthorized(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/appointments")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"


def test_wrong_key_is_forbidden(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/appointments", headers={"X-API-Key": "nope"})
    assert response.status_code == 403


def test_list_passes_filters_and_paginates(api_client: TestClient, scheduling) -> None:
    response = api_client.get(
        "/api/v1/appointments",
        params={"status": "agendado", "from": "2025-01-01T00:00:00Z", "limit": 5, "offset": 5},
        headers={"X-API-Key": API_KEY},
    )
    assert response.status_code == 200
    payload = response.json()
    assert [item["id"] for item in payload["data"]] == ["appt-1", "appt-2"]
    assert payload["pagination"] == {"page": 2, "pageSize": 5, "totalItems": 12, "totalPages": 3}
    call = scheduling.list_calls[0]
    assert call["status"] == "agendado"
    assert call["start"] == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert call["end"] is None


def test_get_unknown_appointment(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/appointments/missing", headers={"X-API-Key": API_KEY})
    assert response.status_code == 404


def test_create_returns_201(api_client: TestClient, scheduling) -> None:
    response = api_client.post(
        "/api/v1/appointments", json=_create_payload(), headers={"X-API-Key": API_KEY}
    )
    assert response.status_code == 201
    assert response.json()["data"]["id"] == "appt-new"
    assert scheduling.created[0].lead_dados.email == "ana@example.com"


def test_create_conflict_reports_rule(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/appointments",
        json=_create_payload(vendedor_id="busy"),
        headers={"X-API-Key": API_KEY},
    )
    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "conflict"
    assert error["details"] == {"rule": "appointment_conflict", "conflictId": "appt-9"}


def test_create_requires_mandatory_fields(api_client: TestClient) -> None:
    payload = _create_payload()
    del payload["link_reuniao"]
    response = api_client.post("/api/v1/appointments", json=payload, headers={"X-API-Key": API_KEY})
    assert response.status_code == 422


def test_sales_endpoints(api_client: TestClient) -> None:
    listing = api_client.get("/api/v1/sales", params={"vendedor_id": "vendor-1", "status": "matriculado"})
    assert listing.status_code == 200
    assert listing.json()["data"][0]["vendor"]["id"] == "vendor-1"
    assert listing.json()["pagination"]["totalItems"] == 1

    assert api_client.get("/api/v1/sales/sale-1").status_code == 200
    assert api_client.get("/api/v1/sales/other").status_code == 404
