"""Tests for the HTTP boundary: status mapping, content type and no detail leakage."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from errors import ProvisionError, ProvisionFailure
from fake_engine import FAKE_PDF, FakeProvisioner, playwright_error, unavailable_local_engine
from main import GENERIC_FAILURE_MESSAGE, INVALID_BODY_MESSAGE, app, get_provisioner


def _payload() -> dict:
    return {
        "divisionName": "U13",
        "currentTeamName": "Eagles",
        "homeTeamName": "Eagles",
        "awayTeamName": "Hawks",
        "teamPlayers": [
            {"number": 7, "first_name": "Sam", "last_name": "Lee", "reserve": False, "suspended": False},
        ],
    }


@pytest.fixture
def provisioner():
    fake = FakeProvisioner()
    app.dependency_overrides[get_provisioner] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


def _use(fake: FakeProvisioner) -> FakeProvisioner:
    app.dependency_overrides[get_provisioner] = lambda: fake
    return fake


def test_generate_pdf_success(provisioner):
    client = TestClient(app)
    response = client.post("/api/pdf", json=_payload())
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/pdf")
    assert response.content == FAKE_PDF
    assert 'filename="match-card-eagles.pdf"' in response.headers["content-disposition"]
    assert "X-Request-Id" in response.headers
    assert provisioner.acquire_calls == 1
    assert all(h.closed for h in provisioner.handles)


def test_end_to_end_card_content(provisioner):
    client = TestClient(app)
    client.post("/api/pdf", json=_payload())
    html = provisioner.pages[0].content
    assert "Lee, Sam" in html
    assert "<s>Lee, Sam</s>" not in html
    assert 'class="checkmark"' not in html
    assert html.count('class="row team-row current-team"') == 1
    assert (
        '<div class="row team-row current-team"><div class="pair" style="width: 70%">'
        '<div class="cell fixed" style="width: 10rem">Receveur</div>'
    ) in html


def test_missing_current_team_rejected_without_touching_engine(provisioner):
    payload = _payload()
    del payload["currentTeamName"]
    client = TestClient(app)
    response = client.post("/api/pdf", json=payload)
    assert response.status_code == 400
    assert response.json() == INVALID_BODY_MESSAGE
    assert provisioner.acquire_calls == 0


def test_malformed_json_rejected(provisioner):
    client = TestClient(app)
    response = client.post("/api/pdf", content=b"{oops", headers={"content-type": "application/json"})
    assert response.status_code == 400
    assert response.json() == INVALID_BODY_MESSAGE
    assert provisioner.acquire_calls == 0


def test_wrong_player_shape_rejected(provisioner):
    payload = _payload()
    payload["teamPlayers"] = [{"number": "seven", "first_name": "Sam", "last_name": "Lee", "reserve": False}]
    client = TestClient(app)
    response = client.post("/api/pdf", json=payload)
    assert response.status_code == 400
    assert response.json() == INVALID_BODY_MESSAGE
    assert "number" not in response.text


def test_provision_failure_is_generic_400():
    _use(unavailable_local_engine())
    try:
        client = TestClient(app)
        response = client.post("/api/pdf", json=_payload())
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 400
    assert response.json() == GENERIC_FAILURE_MESSAGE
    assert "executable" not in response.text


def test_render_failure_is_generic_400():
    fake = _use(FakeProvisioner(pdf_error=playwright_error("Page crashed")))
    try:
        client = TestClient(app)
        response = client.post("/api/pdf", json=_payload())
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 400
    assert response.json() == GENERIC_FAILURE_MESSAGE
    assert "crashed" not in response.text
    assert all(h.closed for h in fake.handles)
    assert all(p.closed for p in fake.pages)


def test_unexpected_failure_is_generic_400():
    _use(FakeProvisioner(acquire_error=RuntimeError("boom")))
    try:
        client = TestClient(app)
        response = client.post("/api/pdf", json=_payload())
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 400
    assert response.json() == GENERIC_FAILURE_MESSAGE
    assert "boom" not in response.text


def test_preview_returns_html_without_engine(provisioner):
    client = TestClient(app)
    response = client.post("/api/pdf/preview", json=_payload())
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Carte de match" in response.text
    assert "Lee, Sam" in response.text
    assert provisioner.acquire_calls == 0


def test_preview_rejects_invalid_body(provisioner):
    client = TestClient(app)
    response = client.post("/api/pdf/preview", json={"divisionName": "U13"})
    assert response.status_code == 400
    assert response.json() == INVALID_BODY_MESSAGE


def test_landing_page():
    client = TestClient(app)
    response = client.get("/")
    assert response.status_code == 200
    assert "/api/pdf" in response.text


def test_health_reports_engine_strategy():
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["render_engine"] in ("local", "sandboxed", "remote")


def test_health_pdf_ready(provisioner):
    client = TestClient(app)
    response = client.get("/health/pdf")
    assert response.status_code == 200
    assert response.json()["pdf_runtime"] == "ready"
    assert provisioner.acquire_calls == 1


def test_health_pdf_unavailable():
    _use(FakeProvisioner(acquire_error=ProvisionError(ProvisionFailure.REMOTE_UNREACHABLE, "connection refused")))
    try:
        client = TestClient(app)
        response = client.get("/health/pdf")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503
    assert "remote_unreachable" in response.json()["detail"]
