from __future__ import annotations


def test_month_weeks(client) -> None:
    response = client.get("/api/v1/weeks", params={"year": 2025, "month": 4})
    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["week"] for item in data] == [1, 2, 3, 4, 5]
    assert data[0]["start"].startswith("2025-03-26T00:00:00")
    assert data[0]["end"].startswith("2025-04-01T23:59:59.999")


def test_current_week(client) -> None:
    response = client.get("/api/v1/weeks/current")
    assert response.status_code == 200
    data = response.json()["data"]
    assert 1 <= data["week"] <= 5
    assert data["isDegenerate"] is False


def test_month_is_validated(client) -> None:
    assert client.get("/api/v1/weeks", params={"year": 2025, "month": 0}).status_code == 422
