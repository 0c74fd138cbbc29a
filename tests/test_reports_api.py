from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from advisory_monitor.api.dependencies import get_advisors_service, get_report_service
from advisory_monitor.main import create_app
from advisory_monitor.services.advisors_service import AdvisorsService
from stubs import FakeAuthClient, StubAdvisorsRepository, StubProgressRepository, build_report_service


def test_goals_vs_actual_envelope(client: TestClient) -> None:
    response = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-01&to_key=2025-03")
    assert response.status_code == 200
    payload = response.json()

    data = payload["data"]
    assert data["goalsSource"] == "goals_monthly"
    assert [row["monthKey"] for row in data["rows"]] == ["2025-01", "2025-02", "2025-03"]
    assert [row["label"] for row in data["rows"]] == ["01/25", "02/25", "03/25"]
    assert data["rows"][1]["actual"]["prodDanni"] == 0
    assert data["totals"]["goal"]["consulenze"] == 15
    assert data["totals"]["actual"]["consulenze"] == 7
    assert {summary["metric"] for summary in data["summaries"]} >= {"consulenze", "prod_vpu"}

    meta = payload["meta"]
    assert meta["timeWindow"] == "2025-01..2025-03"
    assert meta["currency"] == "EUR"
    assert meta["generation"] is None


def test_team_report(client: TestClient) -> None:
    response = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-01&to_key=2025-01&team=true")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["scope"] == "team"
    assert data["advisorIds"] == ["u-lead", "u-j1", "u-j2"]


def test_view_generation_in_meta(client: TestClient) -> None:
    response = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-01&to_key=2025-01&view_id=main")
    assert response.status_code == 200
    assert response.json()["meta"]["generation"] == 1


def test_reversed_range_is_rejected(client: TestClient) -> None:
    response = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-06&to_key=2025-01")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_malformed_month_key_fails_validation(client: TestClient) -> None:
    response = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-13")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_store_errors_surface_as_upstream_error(client: TestClient) -> None:
    request = httpx.Request("GET", "http://localhost:54321/rest/v1/v_progress_monthly")
    response = httpx.Response(400, json={"message": "relation \"v_progress_monthly\" does not exist"}, request=request)
    error = httpx.HTTPStatusError("Bad Request", request=request, response=response)
    client.app.dependency_overrides[get_report_service] = lambda: build_report_service(
        progress_repository=StubProgressRepository(error=error)
    )

    result = client.get("/api/v1/reports/goals-vs-actual?from_key=2025-01&to_key=2025-01")

    assert result.status_code == 502
    body = result.json()["error"]
    assert body["code"] == "upstream_error"
    assert body["message"] == 'relation "v_progress_monthly" does not exist'


def test_requests_without_token_are_unauthorized() -> None:
    app = create_app()
    app.dependency_overrides[get_advisors_service] = lambda: AdvisorsService(
        repository=StubAdvisorsRepository(), auth_client=FakeAuthClient({})
    )
    client = TestClient(app)

    missing = client.get("/api/v1/reports/goals-vs-actual")
    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "unauthorized"

    invalid = client.get("/api/v1/advisors/me", headers={"Authorization": "Bearer expired"})
    assert invalid.status_code == 401


def test_bearer_token_resolves_current_advisor() -> None:
    app = create_app()
    app.dependency_overrides[get_advisors_service] = lambda: AdvisorsService(
        repository=StubAdvisorsRepository(),
        auth_client=FakeAuthClient({"token-lead": {"id": "u-lead", "email": "luca@example.com"}}),
    )
    response = TestClient(app).get("/api/v1/advisors/me", headers={"Authorization": "Bearer token-lead"})
    assert response.status_code == 200
    assert response.json()["data"]["displayName"] == "Luca Verdi"
