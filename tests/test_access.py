"""Tests for the role model helpers."""

import pytest

from app.core.errors import AuthorizationError
from app.db.models import Contract, TaskCategory, User, UserRole
from app.services.access import (
    can_view_contract,
    derive_task_category,
    require_assignable,
    require_role,
    resolve_task_category,
    visible_owner_scope,
)


def _user(role: UserRole, user_id: str = "u1") -> User:
    return User(id=user_id, email=f"{user_id}@example.com", first_name="A", last_name="B", role=role)


class TestDeriveTaskCategory:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Legal review of termination clause", TaskCategory.legal),
            ("Finance sign-off", TaskCategory.finance),
            ("HR onboarding paperwork", TaskCategory.hr),
            ("Legal and finance review", TaskCategory.legal),
            ("Finance check before HR handover", TaskCategory.finance),
            ("Three-way match", TaskCategory.general),
            ("Paralegal summary", TaskCategory.general),
            ("Refinanced terms", TaskCategory.general),
        ],
    )
    def test_whole_words_only(self, title, expected):
        assert derive_task_category(title) == expected


class TestResolveTaskCategory:
    @pytest.mark.parametrize(
        "title, requested, expected",
        [
            ("Legal review", None, TaskCategory.legal),
            ("Legal review", TaskCategory.legal, TaskCategory.legal),
            ("Onboarding pack", TaskCategory.hr, TaskCategory.hr),
            ("Onboarding pack", None, TaskCategory.general),
        ],
    )
    def test_resolves(self, title, requested, expected):
        assert resolve_task_category(title, requested) == expected

    @pytest.mark.parametrize("requested", [TaskCategory.general, TaskCategory.finance])
    def test_cannot_override_derived_category(self, requested):
        with pytest.raises(AuthorizationError, match="legal task"):
            resolve_task_category("Legal review", requested)


class TestRequireAssignable:
    def test_matching_role_passes(self):
        require_assignable(TaskCategory.legal, _user(UserRole.legal))

    def test_mismatched_role_raises(self):
        with pytest.raises(AuthorizationError, match="Only legal users"):
            require_assignable(TaskCategory.legal, _user(UserRole.admin))

    def test_general_accepts_anyone(self):
        require_assignable(TaskCategory.general, _user(UserRole.viewer))


class TestVisibility:
    def test_owner_sees_own_contract(self):
        viewer = _user(UserRole.viewer, "owner")
        contract = Contract(id="c1", owner_id="owner")
        assert can_view_contract(viewer, contract)

    def test_viewer_does_not_see_others(self):
        viewer = _user(UserRole.viewer, "someone")
        contract = Contract(id="c1", owner_id="owner")
        assert not can_view_contract(viewer, contract)

    @pytest.mark.parametrize("role", [UserRole.admin, UserRole.legal, UserRole.hr, UserRole.finance])
    def test_global_roles_see_everything(self, role):
        user = _user(role, "someone")
        assert can_view_contract(user, Contract(id="c1", owner_id="owner"))
        assert visible_owner_scope(user) is None

    def test_manager_scope_is_own_id(self):
        assert visible_owner_scope(_user(UserRole.manager, "m1")) == "m1"


def test_require_role_message_lists_roles():
    with pytest.raises(AuthorizationError, match="admin, legal"):
        require_role(_user(UserRole.finance), {UserRole.admin, UserRole.legal}, "approve contracts")
