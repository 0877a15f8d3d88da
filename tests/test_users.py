"""Tests for user registration and admin bootstrap."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from app.core.errors import AuthorizationError, ConflictError, NotFoundError
from app.db.models import AuditEntityType, AuditLog, UserRole
from app.schemas.domain import UserInput


def _input(**overrides) -> UserInput:
    data = {"email": "Jane.Doe@Example.com", "first_name": "Jane", "last_name": "Doe"}
    data.update(overrides)
    return UserInput(**data)


@pytest.fixture
def directory(services):
    services.users.admin_secret = "s3cret"
    return services.users


class TestBootstrapAdmin:
    def test_creates_first_admin(self, directory, db_session):
        admin = directory.bootstrap_admin(_input(role=UserRole.viewer), "s3cret")

        assert admin.role == UserRole.admin
        assert admin.email == "jane.doe@example.com"
        entry = db_session.scalars(select(AuditLog).where(AuditLog.entity_type == AuditEntityType.user)).one()
        assert entry.user_id == admin.id

    def test_wrong_secret(self, directory):
        with pytest.raises(AuthorizationError, match="Invalid bootstrap secret"):
            directory.bootstrap_admin(_input(), "guess")

    def test_unset_secret_disables_bootstrap(self, services):
        services.users.admin_secret = ""

        with pytest.raises(AuthorizationError):
            services.users.bootstrap_admin(_input(), "")

    def test_refused_once_an_admin_exists(self, directory, make_user):
        make_user(UserRole.admin)

        with pytest.raises(ConflictError, match="already exists"):
            directory.bootstrap_admin(_input(), "s3cret")


class TestRegister:
    def test_admin_registers_with_requested_role(self, directory, make_user):
        admin = make_user(UserRole.admin)

        user = directory.register(_input(role=UserRole.legal, department="Legal"), admin)

        assert user.role == UserRole.legal
        assert user.department == "Legal"
        assert user.is_active is True
        assert directory.get(user.id) is user

    def test_non_admin_cannot_register(self, directory, make_user):
        with pytest.raises(AuthorizationError):
            directory.register(_input(), make_user(UserRole.legal))

    def test_duplicate_email_is_case_insensitive(self, directory, make_user):
        admin = make_user(UserRole.admin)
        directory.register(_input(), admin)

        with pytest.raises(ConflictError):
            directory.register(_input(email="JANE.DOE@example.com"), admin)

    def test_get_unknown(self, directory):
        with pytest.raises(NotFoundError):
            directory.get("missing")
