"""Tests for database layer and models (SQLite file for unit scope)."""

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy.exc import IntegrityError

from app.db.models import (
    Contract,
    ContractStatus,
    ContractType,
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TaskType,
    User,
    UserRole,
)


@pytest.fixture(scope="function")
def test_db(sqlite_sessionmaker):
    """Session factory backed by SQLite file."""
    return sqlite_sessionmaker


def _user(session, email="owner@example.com", role=UserRole.manager) -> User:
    user = User(email=email, first_name="Olive", last_name="Owner", role=role)
    session.add(user)
    session.flush()
    return user


def _contract(session, owner: User, **kwargs) -> Contract:
    contract = Contract(
        title=kwargs.pop("title", "Office Cleaning Services"),
        type=kwargs.pop("type", ContractType.service),
        counterparty_name="Sparkle Ltd",
        effective_date=date(2024, 1, 1),
        expiry_date=date(2025, 1, 1),
        owner_id=owner.id,
        **kwargs,
    )
    session.add(contract)
    session.flush()
    return contract


def test_create_user_defaults(test_db):
    """Users get a UUID string id, viewer role and active flag by default."""
    session = test_db()
    try:
        user = User(email="new@example.com", first_name="New", last_name="User")
        session.add(user)
        session.commit()

        assert UUID(user.id)
        assert user.role == UserRole.viewer
        assert user.is_active is True
        assert user.full_name == "New User"
        assert user.created_at is not None
        assert user.updated_at is not None
    finally:
        session.close()


def test_duplicate_email_rejected(test_db):
    """Email is unique across users."""
    session = test_db()
    try:
        _user(session)
        session.commit()
        session.add(User(email="owner@example.com", first_name="Dup", last_name="User"))
        with pytest.raises(IntegrityError):
            session.commit()
    finally:
        session.close()


def test_create_contract_defaults_and_json(test_db):
    """Contracts default to draft and keep numeric and JSON fields intact."""
    session = test_db()
    try:
        owner = _user(session)
        contract = _contract(
            session,
            owner,
            contract_value=Decimal("12000.50"),
            tags=["facilities", "renewal"],
            custom_fields={"po_number": "PO-77"},
        )
        session.commit()
        session.expire_all()

        stored = session.get(Contract, contract.id)
        assert stored.status == ContractStatus.draft
        assert stored.auto_renew is False
        assert stored.contract_value == Decimal("12000.50")
        assert stored.tags == ["facilities", "renewal"]
        assert stored.custom_fields == {"po_number": "PO-77"}
        assert stored.owner.email == "owner@example.com"
        assert stored.stakeholder is None
    finally:
        session.close()


def test_task_defaults_and_contract_relationship(test_db):
    """Tasks default to pending, medium, general and sort by due date on the contract."""
    session = test_db()
    try:
        owner = _user(session)
        contract = _contract(session, owner)
        later = Task(
            title="Sign", type=TaskType.signature, due_date=date(2024, 6, 1),
            contract_id=contract.id, created_by_id=owner.id,
        )
        sooner = Task(
            title="Review", type=TaskType.review, due_date=date(2024, 3, 1),
            contract_id=contract.id, created_by_id=owner.id, meta={"source": "import"},
        )
        session.add_all([later, sooner])
        session.commit()
        session.expire_all()

        stored = session.get(Contract, contract.id)
        assert [t.title for t in stored.tasks] == ["Review", "Sign"]
        review = stored.tasks[0]
        assert review.status == TaskStatus.pending
        assert review.priority == TaskPriority.medium
        assert review.category == TaskCategory.general
        assert review.meta == {"source": "import"}
        assert review.created_by.id == owner.id
    finally:
        session.close()


def test_task_dependencies_are_bidirectional(test_db):
    """Adding a dependency shows up on both ends of the edge."""
    session = test_db()
    try:
        owner = _user(session)
        contract = _contract(session, owner)
        review = Task(title="Review", type=TaskType.review, due_date=date(2024, 3, 1),
                      contract_id=contract.id, created_by_id=owner.id)
        sign = Task(title="Sign", type=TaskType.signature, due_date=date(2024, 4, 1),
                    contract_id=contract.id, created_by_id=owner.id)
        sign.dependencies.append(review)
        session.add_all([review, sign])
        session.commit()
        session.expire_all()

        assert [t.title for t in session.get(Task, review.id).dependents] == ["Sign"]
        assert [t.title for t in session.get(Task, sign.id).dependencies] == ["Review"]
    finally:
        session.close()


def test_delete_contract_cascades_tasks_and_edges(test_db):
    """Deleting a contract removes its tasks and their dependency edges."""
    session = test_db()
    try:
        owner = _user(session)
        contract = _contract(session, owner)
        a = Task(title="A", type=TaskType.review, due_date=date(2024, 3, 1),
                 contract_id=contract.id, created_by_id=owner.id)
        b = Task(title="B", type=TaskType.review, due_date=date(2024, 3, 2),
                 contract_id=contract.id, created_by_id=owner.id)
        b.dependencies.append(a)
        session.add_all([a, b])
        session.commit()

        session.delete(contract)
        session.commit()

        assert session.query(Task).count() == 0
        assert session.query(Contract).count() == 0
    finally:
        session.close()


def test_notification_defaults(test_db):
    """Notifications start unread, medium priority and without email."""
    session = test_db()
    try:
        user = _user(session)
        notification = Notification(
            type=NotificationType.system_alert,
            title="Maintenance",
            message="Tonight.",
            recipient_id=user.id,
            meta={"window": "22:00-23:00"},
        )
        session.add(notification)
        session.commit()
        session.expire_all()

        stored = session.get(Notification, notification.id)
        assert stored.status == NotificationStatus.unread
        assert stored.priority == NotificationPriority.medium
        assert stored.email_sent is False
        assert stored.read_at is None
        assert stored.meta == {"window": "22:00-23:00"}
    finally:
        session.close()
