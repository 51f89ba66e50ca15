from __future__ import annotations

from decimal import Decimal


def test_revenue_forecast_default_horizons(client):
    response = client.get("/api/v1/properties/prop-1/revenue-forecast")
    assert response.status_code == 200
    payload = response.json()
    windows = payload["data"]["windows"]
    assert [window["horizonDays"] for window in windows] == [30, 60, 90]
    assert [window["revenue"] for window in windows] == [2600, 4600, 4600]
    assert [window["bookingsCount"] for window in windows] == [2, 2, 2]
    assert payload["data"]["upcomingReservations"][0]["id"] == "str-1"
    assert payload["meta"]["timeWindow"] == "90d"
    assert payload["meta"]["asOfDate"] == "2024-06-01"


def test_revenue_forecast_custom_horizons(client):
    response = client.get("/api/v1/properties/prop-1/revenue-forecast?horizons=7,45")
    assert response.status_code == 200
    windows = response.json()["data"]["windows"]
    assert [window["horizonDays"] for window in windows] == [7, 45]
    assert [window["revenue"] for window in windows] == [600, 4100]


def test_revenue_forecast_malformed_horizons(client):
    response = client.get("/api/v1/properties/prop-1/revenue-forecast?horizons=soon")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_revenue_forecast_non_positive_horizon(client):
    response = client.get("/api/v1/properties/prop-1/revenue-forecast?horizons=30,0")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_argument"


def test_revenue_forecast_horizon_past_calendar_end(client):
    response = client.get("/api/v1/properties/prop-1/revenue-forecast?horizons=999999999")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_argument"


def test_revenue_forecast_unknown_property(client):
    response = client.get("/api/v1/properties/missing/revenue-forecast")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_performance_summary(client):
    response = client.get("/api/v1/properties/prop-1/performance")
    assert response.status_code == 200
    payload = response.json()
    metrics = payload["data"]["metrics"]
    assert Decimal(str(metrics["totalRevenue"])) == Decimal("9000")
    assert Decimal(str(metrics["totalNet"])) == Decimal("7400")
    assert metrics["growthRatePercent"] == 25.0
    assert payload["data"]["occupancy"]["occupancyRatePercent"] == 65
    assert len(payload["data"]["monthly"]) == 2
    assert payload["meta"]["timeWindow"] == "12m"


def test_performance_months_limits_series(client):
    response = client.get("/api/v1/properties/prop-1/performance?months=1")
    assert response.status_code == 200
    monthly = response.json()["data"]["monthly"]
    assert [point["period"] for point in monthly] == ["2024-06-01"]


def test_performance_months_out_of_range(client):
    response = client.get("/api/v1/properties/prop-1/performance?months=0")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
