"""Tests for the FastAPI backend."""

import pytest
from fastapi.testclient import TestClient

from backend.api.main import app, get_executor
from cambodia_intel.agents import OPERATIONS


@pytest.fixture
def client(ok_executor):
    app.dependency_overrides[get_executor] = lambda: ok_executor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/").json()["status"] == "healthy"
    assert client.get("/health").json()["operations"] == 39


def test_loan_status_endpoint(client):
    response = client.post("/scoring/loan-status", json={"daysPastDue": 45})
    assert response.status_code == 200

    data = response.json()
    assert data["loan_status"]["status"] == "Past Due 31-60 Days"
    assert data["loan_status"]["risk_level"] == "high"
    assert data["servicing_actions"][0]["action"] == "Send formal collection notice"


def test_covenant_violation_endpoint(client):
    response = client.post("/scoring/loan-status", json={"days_past_due": 0, "covenant_violations": "DSCR breach"})
    assert response.json()["loan_status"]["code"] == "Default"


def test_overflowing_days_past_due_is_default(client):
    response = client.post("/scoring/loan-status", json={"daysPastDue": "1e400"})
    assert response.status_code == 200
    assert response.json()["loan_status"]["code"] == "Default"


def test_due_diligence_endpoint(client, clean_borrower):
    data = client.post("/scoring/due-diligence", json=clean_borrower).json()
    assert data["risk_assessment"]["label"] == "Low Risk"
    assert data["compliance_status"]["overall_status"] == "Fully Compliant"


def test_compliance_risk_endpoint(client):
    data = client.post("/scoring/compliance-risk", json={"sanctionsListResults": "Match found"}).json()
    assert data["compliance_risk"]["overall_risk_level"] == "High"
    assert data["compliance_risk"]["compliance_rating"] == "Non-Compliant"


def test_invalid_screening_outcome_is_422(client):
    response = client.post("/scoring/compliance-risk", json={"sanctionsListResults": "perhaps"})
    assert response.status_code == 422


def test_red_flag_endpoint(client):
    data = client.post(
        "/scoring/red-flag-severity",
        json={"compliance_red_flags": ["Money laundering concerns raised by bank"]},
    ).json()
    assert data["severity_assessment"]["overall_severity"] == "Critical"


def test_payment_feasibility_endpoint(client):
    data = client.post(
        "/scoring/payment-feasibility",
        json={"monthlyIncome": 1000, "monthlyExpenses": 600, "newPaymentAmount": 200},
    ).json()
    assert data["feasibility_analysis"]["payment_to_income"] == 20.0


def test_portfolio_metrics_endpoint(client, portfolio_record):
    data = client.post("/scoring/portfolio-metrics", json=portfolio_record).json()
    assert data["benchmarks"]["performance_grade"] == "A+"


def test_analysis_endpoint(client, ok_executor):
    response = client.post(
        "/analysis/loan-servicing/loan",
        json={"loan_id": "L-45", "record": {"daysPastDue": 45}},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["analysis"] == "Narrative analysis"
    assert data["account_summary"]["current_status"] == "Past Due 31-60 Days"
    assert len(ok_executor.calls) == 1


def test_analysis_without_body(client):
    data = client.post("/analysis/business/trends").json()
    assert data["success"] is True
    assert "trends_summary" in data


def test_unknown_operation_is_404(client):
    assert client.post("/analysis/crypto/moon", json={}).status_code == 404


def test_bad_arguments_are_422(client):
    assert client.post("/analysis/business/trends", json={"colour": "blue"}).status_code == 422


def test_internal_type_errors_are_not_reported_as_bad_arguments(client, monkeypatch):
    async def broken(executor=None):
        raise TypeError("unsupported operand")

    monkeypatch.setitem(OPERATIONS, ("business", "trends"), broken)
    with pytest.raises(TypeError):
        client.post("/analysis/business/trends")


def test_invalid_record_inside_analysis_is_422(client):
    response = client.post(
        "/analysis/due-diligence/aml-kyc",
        json={"borrower_id": "B-1", "record": {"pepScreeningStatus": "who knows"}},
    )
    assert response.status_code == 422


def test_quick_insights(client):
    assert client.get("/analysis/resources/quick-insights").status_code == 200


def test_prompt_routes(client):
    assert "business_opportunity" in client.get("/prompts").json()
    assert client.get("/prompts/nope").status_code == 404

    updated = client.put("/prompts/rental_yield", json={"system_prompt": "Short answers only."}).json()
    assert updated["is_custom"] is True

    restored = client.post("/prompts/rental_yield/reset").json()
    assert restored["is_custom"] is False
    assert client.put("/prompts/nope", json={}).status_code == 404
