"""
Tests for the portfolio aggregation endpoints.

Covers API key handling, response shapes and the flag-controlled policies.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from routes.aggregation_routes import router
from utils.authentication import verify_api_key
from utils.feature_flags import get_feature_flags


# Create test app with the router
app = FastAPI()
app.include_router(router)
client = TestClient(app)

API_KEY = "test-backend-key"
HEADERS = {"X-API-Key": API_KEY}


@pytest.fixture(autouse=True)
def api_key_env(monkeypatch):
    monkeypatch.setenv("BACKEND_API_KEY", API_KEY)
    monkeypatch.delenv("FF_TRUST_STORED_NET_WORTH", raising=False)
    monkeypatch.delenv("FF_SHORT_TERM_INCOME_IN_NOI", raising=False)
    get_feature_flags().reload_flags()
    yield monkeypatch
    monkeypatch.undo()
    get_feature_flags().reload_flags()


# --- Authentication ---

class TestApiKey:

    def test_missing_key(self):
        response = client.post("/api/aggregation/growth", json={"current": 1})
        assert response.status_code == 401
        assert response.json()["detail"] == "API key is required"

    def test_wrong_key(self):
        response = client.post("/api/aggregation/growth", json={"current": 1}, headers={"X-API-Key": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid API key"

    def test_server_without_key(self, api_key_env):
        api_key_env.delenv("BACKEND_API_KEY")
        response = client.post("/api/aggregation/growth", json={"current": 1}, headers=HEADERS)
        assert response.status_code == 500


# --- Net worth ---

def test_net_worth(sample_snapshots):
    response = client.post("/api/aggregation/net-worth", json={"snapshots": sample_snapshots}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert [point["net_worth"] for point in data["series"]] == [139000.0, 118500.0, 157000.0]
    assert data["series"][0]["date"] == "2024-01-01"
    assert data["summary"]["current_net_worth"] == 157000.0
    assert data["summary"]["period_growth"] == {"absolute": 38500.0, "percent": 32.49}
    assert data["trend"]["cash"] == [10000.0, 11000.0, 12000.0]
    assert data["chart"]["labels"] == ["Jan 1", "Feb 1", "Mar 1"]


def test_net_worth_recomputes_when_stored_value_is_not_trusted(api_key_env):
    api_key_env.setenv("FF_TRUST_STORED_NET_WORTH", "false")
    get_feature_flags().reload_flags()
    entry = {"date": "2024-05-01", "cash": 100, "liabilities": 50, "netWorth": 999}

    response = client.post("/api/aggregation/net-worth", json={"snapshots": [entry]}, headers=HEADERS)

    assert response.json()["series"][0]["net_worth"] == 50.0


def test_net_worth_tolerates_junk_entries():
    response = client.post(
        "/api/aggregation/net-worth",
        json={"snapshots": ["junk", None, {"cash": "abc"}]},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert len(response.json()["series"]) == 3


def test_net_worth_rejects_negative_window():
    response = client.post("/api/aggregation/net-worth", json={"snapshots": [], "trend_window": -1}, headers=HEADERS)
    assert response.status_code == 422


def test_growth():
    response = client.post("/api/aggregation/growth", json={"current": 100, "previous": 0}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"absolute": 100.0, "percent": 0.0}


# --- Accounts ---

def test_accounts(sample_accounts):
    response = client.post("/api/aggregation/accounts", json={"accounts": sample_accounts}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert list(data["categories"]) == ["bank", "digital", "credit card", "insurance", "misc"]
    assert data["categories"]["bank"]["subtotal"] == 10500.5
    assert data["balance_cards"][0]["share_percent"] == 83.93
    assert data["summary"]["account_count"] == 6


# --- Real estate ---

def test_real_estate(sample_property):
    prop = dict(sample_property, shortTermIncome=[{"date": "2024-06-01", "amount": 400}])

    response = client.post(
        "/api/aggregation/real-estate",
        json={"properties": [prop], "as_of": "2024-06-15"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["properties"][0]["noi"] == 1500.0
    assert data["properties"][0]["cap_rate"] == 0.3
    assert data["portfolio"]["total_equity"] == 200000.0
    assert data["rent_unpaid"] == 2000.0
    assert data["as_of"] == "2024-06-15"
    assert [entry["month"] for entry in data["cash_flow"]][-1] == "2024-06"
    assert data["cash_flow"][-1]["amount"] == 400.0


def test_real_estate_counts_short_term_income_when_enabled(api_key_env, sample_property):
    api_key_env.setenv("FF_SHORT_TERM_INCOME_IN_NOI", "true")
    get_feature_flags().reload_flags()
    prop = dict(sample_property, shortTermIncome=[{"date": "2024-06-01", "amount": 400}])

    response = client.post(
        "/api/aggregation/real-estate",
        json={"properties": [prop], "as_of": "2024-06-15"},
        headers=HEADERS,
    )

    assert response.json()["properties"][0]["noi"] == 1900.0


# --- Goals ---

def test_retirement_plan():
    response = client.post(
        "/api/aggregation/retirement",
        json={"goals": {"currentAge": 40, "retirementAge": 60, "monthlySpend": 5000}},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["years_until_retirement"] == 20
    assert data["is_valid"] is True
    assert sum(data["dollars"].values()) == 5000


def test_retirement_plan_rejects_bad_total():
    response = client.post(
        "/api/aggregation/retirement",
        json={"goals": {"monthlySpend": 5000, "mortgage": 50}},
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert "100" in response.json()["detail"]


def test_savings_goals():
    response = client.post(
        "/api/aggregation/savings-goals",
        json={"goals": [{"_id": "g1", "name": "Trip", "targetAmount": 2000, "currentAmount": 500}]},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {"goals": [{
        "goal_id": "g1",
        "name": "Trip",
        "percent_complete": 25.0,
        "remaining": 1500.0,
        "reached": False,
    }]}


def test_non_ascii_key_is_rejected_not_crashed():
    # Starlette decodes header bytes as latin-1
    response = client.post(
        "/api/aggregation/growth",
        json={"current": 1},
        headers={"X-API-Key": "clé".encode("latin-1")},
    )

    assert response.status_code == 401


def test_verify_api_key_with_non_ascii_value():
    with pytest.raises(HTTPException) as exc_info:
        verify_api_key("clé")

    assert exc_info.value.status_code == 401


def test_net_worth_with_overflowing_totals_is_serializable():
    entry = {
        "date": "2024-01-01",
        "cash": 1e308,
        "investments": 1e308,
        "liabilities": 1e308,
        "customFields": [{"name": "Margin", "amount": 1e308, "type": "liability"}],
    }

    response = client.post("/api/aggregation/net-worth", json={"snapshots": [entry]}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["series"][0]["net_worth"] == 0.0


def test_real_estate_reports_appreciation_and_gross_income(sample_property):
    response = client.post(
        "/api/aggregation/real-estate",
        json={"properties": [sample_property], "as_of": "2024-06-15"},
        headers=HEADERS,
    )

    data = response.json()
    assert data["properties"][0]["value_increase"] == 100000.0
    assert data["properties"][0]["value_increase_percent"] == 25.0
    assert data["portfolio"]["total_income"] == 4000.0
    assert data["portfolio"]["real_estate_income"] == 3500.0
