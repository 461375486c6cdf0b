"""
Tests for the application review HTTP endpoints
"""
import pytest
from fastapi.testclient import TestClient

from infrastructure.services.session_store import InMemorySessionStore
from main import app
from presentation.api.v1 import container
from presentation.api.v1.container import get_session_controller, get_session_store

from conftest import FakeAIService, make_controller


JOB_PAYLOAD = {
    "platform": "linkedin",
    "external_job_id": "4329656579",
    "title": "Backend Engineer",
    "company": "Acme",
    "job_url": "https://www.linkedin.com/jobs/view/4329656579/",
    "description": "Python and FastAPI",
}


@pytest.fixture
def api(two_page_surface, monkeypatch):
    controller, adapter, audit = make_controller(
        two_page_surface,
        FakeAIService(answers={"Full name": "Jane Doe"}),
    )
    store = InMemorySessionStore()
    app.dependency_overrides[get_session_controller] = lambda: controller
    app.dependency_overrides[get_session_store] = lambda: store
    monkeypatch.setattr(container, "_registry", controller.registry)
    yield TestClient(app), store, audit, two_page_surface
    app.dependency_overrides.clear()


def prepare(client):
    response = client.post(
        "/api/v1/applications/prepare",
        json={"job": JOB_PAYLOAD, "user_profile": "Jane, 6 years of Python"},
    )
    assert response.status_code == 201
    return response.json()


class TestApplicationsApi:

    def test_health(self, api):
        client, *_ = api
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["platforms"] == ["linkedin"]

    def test_prepare_returns_review_view(self, api):
        client, store, _, _ = api
        body = prepare(client)

        assert body["status"] == "ready_for_review"
        assert body["application_message"]
        assert body["pre_filled"] == {"Mobile phone number": "+1 555 0100"}
        assert [q["question_text"] for q in body["questions"]][0] == "Full name"
        assert len(store) == 1

        fetched = client.get(f"/api/v1/applications/{body['session_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["session_id"] == body["session_id"]

    def test_full_approve_and_submit(self, api):
        client, _, audit, surface = api
        body = prepare(client)
        session_id = body["session_id"]
        auth = next(q for q in body["questions"] if q["type"] == "yes_no")

        approved = client.post(
            f"/api/v1/applications/{session_id}/approve",
            json={"application_message": "Edited", "answers": {auth["id"]: "Yes"}},
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["application_message"] == "Edited"

        submitted = client.post(f"/api/v1/applications/{session_id}/submit")
        assert submitted.status_code == 200
        assert submitted.json() == {
            "session_id": session_id,
            "status": "submitted",
            "submitted": True,
            "error_message": None,
        }
        assert surface.typed["message"] == "Edited"
        assert len(audit.records) == 1

    def test_submit_before_approval_conflicts(self, api):
        client, _, audit, surface = api
        session_id = prepare(client)["session_id"]

        response = client.post(f"/api/v1/applications/{session_id}/submit")

        assert response.status_code == 409
        assert surface.typed == {}
        assert audit.records == []

    def test_cancel_then_approve_conflicts(self, api):
        client, _, audit, surface = api
        session_id = prepare(client)["session_id"]

        cancelled = client.post(f"/api/v1/applications/{session_id}/cancel")
        assert cancelled.json()["status"] == "cancelled"
        assert surface.dismiss_count == 1
        assert len(audit.records) == 1

        response = client.post(f"/api/v1/applications/{session_id}/approve", json={})
        assert response.status_code == 409

    def test_unknown_session_is_404(self, api):
        client, *_ = api
        assert client.get("/api/v1/applications/does-not-exist").status_code == 404

    def test_unsupported_platform_is_400(self, api):
        client, *_ = api
        response = client.post(
            "/api/v1/applications/prepare",
            json={"job": {**JOB_PAYLOAD, "platform": "upwork"}, "user_profile": "profile"},
        )
        assert response.status_code == 400

    def test_invalid_job_url_is_rejected(self, api):
        client, *_ = api
        response = client.post(
            "/api/v1/applications/prepare",
            json={"job": {**JOB_PAYLOAD, "job_url": "linkedin.com/jobs"}, "user_profile": "profile"},
        )
        assert response.status_code == 422
