from datetime import datetime
import pytest
from fuelstation import financials
from fuelstation.extensions import db
from fuelstation.models import Sale


@pytest.fixture
def recent_sale(station):
    sale = Sale(sale_id="S-RECENT", date=datetime.utcnow(), station_id=station.id,
                fuel_type="Petrol 95", quantity=10, unit_price=360, total_amount=3600)
    db.session.add(sale)
    db.session.commit()
    return sale


def test_financial_summary_endpoint(client, auth_headers, recent_sale):
    response = client.get("/api/dashboard/financial-summary?period=day", headers=auth_headers("admin"))

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["period"]["name"] == "day"
    assert body["data"]["salesSummary"]["totalSales"] == 3600


def test_profit_loss_endpoint_with_explicit_range(client, auth_headers, station):
    response = client.get(
        "/api/dashboard/profit-loss?startDate=2024-01-01&endDate=2024-01-31",
        headers=auth_headers("accountant"),
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["period"]["startDate"] == "2024-01-01T00:00:00"
    assert data["period"]["endDate"] == "2024-01-31T23:59:59.999999"


def test_balance_sheet_endpoint(client, auth_headers, station):
    response = client.get(
        f"/api/dashboard/balance-sheet?stationId={station.id}&asOfDate=2024-06-30",
        headers=auth_headers("manager"),
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["stationId"] == station.id
    assert data["asOfDate"] == "2024-06-30T23:59:59.999999"
    assert data["balanced"] is True


def test_cash_flow_endpoint(client, auth_headers, station):
    response = client.get("/api/dashboard/cash-flow?period=quarter", headers=auth_headers("admin"))

    assert response.status_code == 200
    assert response.get_json()["data"]["summary"]["netCashFlow"] == 0


def test_fuel_price_analysis_endpoint(client, auth_headers, recent_sale):
    response = client.get(
        "/api/dashboard/fuel-price-analysis?period=day&fuelType=Petrol%2095",
        headers=auth_headers("manager"),
    )

    assert response.status_code == 200
    analysis = response.get_json()["data"]["fuelPriceAnalysis"]["Petrol 95"]
    assert analysis["costPrice"] == 350
    assert analysis["totalProfit"] == 100


@pytest.mark.parametrize("query,message", [
    ("startDate=yesterday", "Invalid startDate"),
    ("stationId=abc", "Invalid stationId"),
    ("stationId=0", "Invalid stationId"),
    ("stationId=-2", "Invalid stationId"),
    ("startDate=2024-02-01&endDate=2024-01-01", "must not be after"),
])
def test_bad_query_parameters(client, auth_headers, users, query, message):
    response = client.get(f"/api/dashboard/cash-flow?{query}", headers=auth_headers("admin"))

    assert response.status_code == 400
    body = response.get_json()
    assert body["success"] is False
    assert message in body["error"]


def test_unknown_fuel_type(client, auth_headers):
    response = client.get("/api/dashboard/fuel-price-analysis?fuelType=Jet%20A1", headers=auth_headers("admin"))

    assert response.status_code == 400
    assert response.get_json()["error"] == "Unknown fuelType 'Jet A1'"


def test_statement_failure_returns_server_error(client, auth_headers, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("ledger offline")

    monkeypatch.setattr(financials, "balance_sheet", broken)

    response = client.get("/api/dashboard/balance-sheet", headers=auth_headers("admin"))

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Server Error"}


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/dashboard/unknown")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
