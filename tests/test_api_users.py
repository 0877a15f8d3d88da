"""Tests for user and sweep trigger API endpoints."""

import pytest

from app.core.config import settings
from app.db.models import UserRole


def as_user(user) -> dict:
    return {"X-User-Id": user.id}


@pytest.fixture
def admin_secret(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_SECRET", "s3cret")
    return "s3cret"


def _bootstrap(api_client, secret):
    return api_client.post(
        "/api/users/bootstrap-admin",
        json={"secret": secret, "email": "ada@example.com", "first_name": "Ada", "last_name": "Admin"},
    )


class TestBootstrapAdmin:
    def test_bootstrap_then_register(self, api_client, admin_secret):
        response = _bootstrap(api_client, admin_secret)
        assert response.status_code == 201
        admin = response.json()
        assert admin["role"] == "admin"

        created = api_client.post(
            "/api/users",
            json={"email": "lee@example.com", "first_name": "Lee", "last_name": "Gal", "role": "legal"},
            headers={"X-User-Id": admin["id"]},
        )
        assert created.status_code == 201
        assert created.json()["role"] == "legal"

        me = api_client.get("/api/users/me", headers={"X-User-Id": created.json()["id"]})
        assert me.json()["email"] == "lee@example.com"

    def test_second_bootstrap_is_409(self, api_client, admin_secret):
        _bootstrap(api_client, admin_secret)
        assert _bootstrap(api_client, admin_secret).status_code == 409

    def test_wrong_secret_is_403(self, api_client, admin_secret):
        assert _bootstrap(api_client, "nope").status_code == 403

    def test_register_requires_admin(self, api_client, make_user):
        manager = make_user(UserRole.manager)

        response = api_client.post(
            "/api/users",
            json={"email": "x@example.com", "first_name": "X", "last_name": "Y"},
            headers=as_user(manager),
        )

        assert response.status_code == 403

    def test_duplicate_email_is_409(self, api_client, make_user):
        admin = make_user(UserRole.admin)
        payload = {"email": admin.email.upper(), "first_name": "Dup", "last_name": "User"}

        response = api_client.post("/api/users", json=payload, headers=as_user(admin))

        assert response.status_code == 409


class TestSweepTrigger:
    def test_admin_starts_workflow(self, api_client, make_user, mock_temporal):
        from app.main import app

        admin = make_user(UserRole.admin)
        app.state.temporal = mock_temporal

        response = api_client.post("/api/sweeps/run", headers=as_user(admin))

        assert response.status_code == 202
        data = response.json()
        assert data["status"] == "started"
        assert data["workflow_id"].startswith(f"{settings.SWEEP_WORKFLOW_ID}-manual-")
        kwargs = mock_temporal.start_workflow.call_args.kwargs
        assert kwargs["id"] == data["workflow_id"]
        assert kwargs["task_queue"] == settings.WORKER_TASK_QUEUE

    def test_non_admin_is_403(self, api_client, make_user, mock_temporal):
        from app.main import app

        app.state.temporal = mock_temporal

        response = api_client.post("/api/sweeps/run", headers=as_user(make_user(UserRole.legal)))

        assert response.status_code == 403
        mock_temporal.start_workflow.assert_not_called()

    def test_temporal_unavailable_is_503(self, api_client, make_user):
        from app.main import app

        app.state.temporal = None

        response = api_client.post("/api/sweeps/run", headers=as_user(make_user(UserRole.admin)))

        assert response.status_code == 503
