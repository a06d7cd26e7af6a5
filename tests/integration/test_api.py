"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def household_payload() -> dict:
    """Salary on the 15th, rent on the 1st, 30 days from Jan 1 2025"""
    return {
        "accounts": [
            {"id": "chk", "name": "Joint checking", "account_type": "checking", "balance_cents": 500000},
            {"id": "sav", "name": "Savings", "account_type": "savings", "balance_cents": 1200000},
        ],
        "recurring_income": [
            {
                "id": "salary",
                "name": "Salary",
                "amount_cents": 300000,
                "certainty": "guaranteed",
                "frequency": "monthly",
                "schedule": {"type": "day_of_month", "day": 15},
            }
        ],
        "fixed_expenses": [{"id": "rent", "name": "Rent", "amount_cents": 150000, "due_day": 1}],
        "start_date": "2025-01-01",
        "projection_days": 30,
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, household_payload: dict):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/projection", json=household_payload)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cashflow_projection_total" in response.text
    assert "cashflow_danger_days" in response.text


def test_projection_endpoint(client: TestClient, household_payload: dict):
    """Test POST /v1/projection end to end"""
    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    data = response.json()
    assert data["start_date"] == "2025-01-01"
    assert data["end_date"] == "2025-01-30"
    assert data["starting_balance_cents"] == 500000
    assert len(data["days"]) == 30

    jan_1 = data["days"][0]
    assert jan_1["expense_events"] == [
        {"source_id": "rent", "source_name": "Rent", "source_type": "expense", "amount_cents": 150000}
    ]
    assert jan_1["optimistic_balance_cents"] == 350000

    jan_15 = data["days"][14]
    assert jan_15["income_events"][0]["amount_cents"] == 300000
    assert jan_15["pessimistic_balance_cents"] == 650000

    assert data["optimistic"]["danger_day_count"] == 0
    assert data["pessimistic"]["end_balance_cents"] == 650000


def test_projection_with_biweekly_and_credit_card(client: TestClient, household_payload: dict):
    household_payload["recurring_income"].append(
        {
            "id": "shifts",
            "name": "Weekend shifts",
            "amount_cents": 40000,
            "certainty": "uncertain",
            "frequency": "biweekly",
            "schedule": {"type": "day_of_week", "weekday": 6},
        }
    )
    household_payload["credit_cards"] = [
        {"id": "visa", "name": "Visa", "statement_balance_cents": 50000, "due_day": 20}
    ]
    household_payload["future_statements"] = [
        {"card_id": "visa", "target_year": 2025, "target_month": 1, "amount_cents": 90000}
    ]

    data = client.post("/v1/projection", json=household_payload).json()

    # Saturdays Jan 4 and Jan 18 fall inside the window
    assert data["optimistic"]["total_income_cents"] == 300000 + 2 * 40000
    assert data["pessimistic"]["total_income_cents"] == 300000
    assert data["days"][19]["expense_events"][0]["amount_cents"] == 90000


def test_projection_rejects_invalid_day(client: TestClient, household_payload: dict):
    household_payload["fixed_expenses"][0]["due_day"] = 32

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_DAY"
    assert response.json()["field"] == "fixed_expenses[0].due_day"


def test_projection_rejects_non_integer_amount(client: TestClient, household_payload: dict):
    household_payload["accounts"][0]["balance_cents"] = "lots"

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_AMOUNT"
    assert response.json()["field"] == "accounts[0].balance_cents"


def test_projection_rejects_unknown_schedule_type(client: TestClient, household_payload: dict):
    household_payload["recurring_income"][0]["schedule"] = {"type": "yearly", "day": 1}

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_FREQUENCY"
    assert response.json()["field"] == "recurring_income[0].schedule.type"


def test_projection_rejects_bad_certainty(client: TestClient, household_payload: dict):
    household_payload["recurring_income"][0]["certainty"] = "hopeful"

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_CERTAINTY"


def test_projection_rejects_zero_days(client: TestClient, household_payload: dict):
    household_payload["projection_days"] = 0

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_PROJECTION_DAYS"


def test_estimated_projection_without_timestamps(client: TestClient, household_payload: dict):
    """Without balance timestamps the recorded balance is used as today's balance"""
    household_payload["projection_days"] = 10

    response = client.post("/v1/projection/estimated", json=household_payload)

    assert response.status_code == 200
    data = response.json()
    assert data["estimate"]["has_base"] is False
    assert data["estimate"]["failure_reason"] == "missing_timestamps"
    assert data["estimate"]["optimistic_cents"] == 500000
    assert len(data["projection"]["days"]) == 10
    assert data["projection"]["days"][0]["date"] == data["estimate"]["today"]


def test_estimated_projection_rejects_unknown_timezone(client: TestClient, household_payload: dict):
    household_payload["timezone"] = "Nowhere/Special"

    response = client.post("/v1/projection/estimated", json=household_payload)

    assert response.status_code == 422
    assert response.json() == {
        "code": "INVALID_INPUT",
        "field": "timezone",
        "message": "unknown timezone 'Nowhere/Special'",
    }


def test_projection_rejects_boolean_amount(client: TestClient, household_payload: dict):
    household_payload["accounts"][0]["balance_cents"] = True

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_AMOUNT"
    assert response.json()["field"] == "accounts[0].balance_cents"


def test_projection_rejects_numeric_string_amount(client: TestClient, household_payload: dict):
    household_payload["fixed_expenses"][0]["amount_cents"] = "150000"

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_AMOUNT"
    assert response.json()["field"] == "fixed_expenses[0].amount_cents"


def test_projection_rejects_numeric_string_day(client: TestClient, household_payload: dict):
    household_payload["fixed_expenses"][0]["due_day"] = "1"

    response = client.post("/v1/projection", json=household_payload)

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_DAY"


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_latency_metric_uses_route_template(client: TestClient, household_payload: dict):
    client.post("/v1/projection", json=household_payload)
    client.get("/v1/no-such-route/42")

    text = client.get("/metrics").text
    assert 'endpoint="/v1/projection"' in text
    assert 'endpoint="unmatched"' in text
    assert "/v1/no-such-route/42" not in text
