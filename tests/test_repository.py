"""Tests for repository helpers using SQLite (unit-level)."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import select

from app.db.models import (
    AuditAction,
    AuditEntityType,
    AuditLog,
    ContractStatus,
    Notification,
    NotificationStatus,
    NotificationType,
    TaskStatus,
    UserRole,
)
from app.db.repository import build_repositories
from app.schemas.domain import ContractFilters


@pytest.fixture
def repos(db_session):
    return build_repositories(db_session)


def _notify(repos, recipient, **kwargs) -> Notification:
    return repos.notifications.add(
        Notification(
            type=kwargs.pop("type", NotificationType.system_alert),
            title=kwargs.pop("title", "Heads up"),
            message="Something happened.",
            recipient_id=recipient.id,
            **kwargs,
        )
    )


def test_user_lookup_by_email_ignores_case(repos, make_user):
    user = make_user(UserRole.legal, email="Legal@Example.com")

    assert repos.users.get_by_email("legal@example.COM").id == user.id
    assert repos.users.get_by_email("nobody@example.com") is None


def test_active_admins_skip_inactive(repos, make_user):
    admin = make_user(UserRole.admin)
    make_user(UserRole.admin, is_active=False)
    make_user(UserRole.legal)

    assert [u.id for u in repos.users.active_admins()] == [admin.id]
    assert repos.users.any_admin() is True


def test_contract_list_filters_by_status_and_stakeholder(repos, make_user, make_contract):
    owner = make_user(UserRole.manager)
    stakeholder = make_user(UserRole.finance)
    match = make_contract(owner, status=ContractStatus.draft, stakeholder_id=stakeholder.id)
    make_contract(owner, stakeholder_id=stakeholder.id)
    make_contract(owner, status=ContractStatus.draft)

    items, total = repos.contracts.list(
        ContractFilters(status=ContractStatus.draft, stakeholder_id=stakeholder.id)
    )

    assert total == 1
    assert [c.id for c in items] == [match.id]


def test_active_expiring_between(repos, clock, make_user, make_contract):
    owner = make_user(UserRole.manager)
    today = clock.today()
    inside = make_contract(owner, expiry_date=today + timedelta(days=3))
    make_contract(owner, expiry_date=today + timedelta(days=40))
    make_contract(owner, status=ContractStatus.expired, expiry_date=today + timedelta(days=3))

    found = repos.contracts.active_expiring_between(today, today + timedelta(days=30))

    assert [c.id for c in found] == [inside.id]


def test_tasks_by_contract_ordered_by_due_date(repos, make_user, make_contract, make_task):
    owner = make_user(UserRole.manager)
    contract = make_contract(owner)
    late = make_task(contract, owner, due_date=date(2030, 6, 1))
    early = make_task(contract, owner, due_date=date(2030, 1, 1))
    done = make_task(contract, owner, status=TaskStatus.completed, due_date=date(2030, 3, 1))

    assert [t.id for t in repos.tasks.by_contract(contract.id)] == [early.id, done.id, late.id]
    assert {t.id for t in repos.tasks.with_status(TaskStatus.pending)} == {early.id, late.id}
    assert repos.tasks.get_many([]) == []


def test_deleting_contract_cascades_to_tasks(repos, db_session, make_user, make_contract, make_task):
    owner = make_user(UserRole.manager)
    contract = make_contract(owner)
    task = make_task(contract, owner)

    repos.contracts.delete(contract)
    db_session.commit()

    assert repos.tasks.get(task.id) is None


def test_notification_unread_count_and_mark_all(repos, make_user):
    user = make_user(UserRole.viewer)
    _notify(repos, user)
    _notify(repos, user)
    _notify(repos, user, status=NotificationStatus.archived)

    assert repos.notifications.count_unread(user.id) == 2
    assert repos.notifications.mark_all_read(user.id, datetime(2030, 1, 1, 9, 0)) == 2
    assert repos.notifications.count_unread(user.id) == 0


def test_notification_detach(repos, db_session, make_user, make_contract, make_task):
    owner = make_user(UserRole.manager)
    contract = make_contract(owner)
    task = make_task(contract, owner)
    note = _notify(repos, owner, contract_id=contract.id, task_id=task.id)

    repos.notifications.detach_tasks([task.id])
    repos.notifications.detach_contract(contract.id)
    db_session.refresh(note)

    assert note.contract_id is None
    assert note.task_id is None


def test_get_for_recipient_hides_other_users(repos, make_user):
    user = make_user(UserRole.viewer)
    other = make_user(UserRole.viewer)
    note = _notify(repos, user)

    assert repos.notifications.get_for_recipient(note.id, user.id) is note
    assert repos.notifications.get_for_recipient(note.id, other.id) is None


def test_audit_entry_persisted(repos, db_session, make_user):
    user = make_user(UserRole.admin)
    repos.audit_logs.add(
        AuditLog(
            action=AuditAction.create,
            entity_type=AuditEntityType.contract,
            entity_id="c-1",
            user_id=user.id,
            description="Contract created",
            new_values={"status": "draft"},
        )
    )

    entry = db_session.scalars(select(AuditLog).where(AuditLog.entity_id == "c-1")).one()

    assert entry.new_values == {"status": "draft"}
    assert entry.created_at is not None
