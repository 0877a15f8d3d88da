"""Pytest configuration and fixtures."""

import os

# Set test configuration BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["TEMPORAL_ADDRESS"] = "localhost:1"
os.environ["EMAIL_ENABLED"] = "false"

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import models  # noqa: F401
from app.db.models import (
    Contract,
    ContractStatus,
    ContractType,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TaskType,
    User,
    UserRole,
)
from app.db.session import Base, get_db_dependency
from app.services.factory import build_services


class FixedClock:
    """Clock pinned to 09:00 today, the hour the daily sweep runs."""

    def __init__(self, current: datetime | None = None):
        self.current = current or datetime.combine(date.today(), time(9, 0))

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingEmailDispatcher:
    """Email dispatcher that records deliveries instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send(self, notification, recipient) -> bool:
        self.sent.append((recipient.email, notification.title))
        return True


@pytest.fixture(scope="function")
def sqlite_sessionmaker(tmp_path):
    """Create a SQLite database with schema for testing."""
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def db_session(sqlite_sessionmaker):
    session = sqlite_sessionmaker()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def email():
    return RecordingEmailDispatcher()


@pytest.fixture
def services(db_session, clock, email):
    """Lifecycle services bound to the test session."""
    return build_services(db_session, clock=clock, email=email)


@pytest.fixture
def make_user(db_session):
    """Factory for committed users."""
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.viewer, **kwargs) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=kwargs.pop("email", f"{role.value}{n}@example.com"),
            first_name=kwargs.pop("first_name", role.value.title()),
            last_name=kwargs.pop("last_name", f"User{n}"),
            role=role,
            **kwargs,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_contract(db_session, clock):
    """Factory for committed contracts, written directly (no notifications)."""

    def _make(owner: User, **kwargs) -> Contract:
        today = clock.today()
        contract = Contract(
            title=kwargs.pop("title", "Office Cleaning Services"),
            type=kwargs.pop("type", ContractType.service),
            status=kwargs.pop("status", ContractStatus.active),
            counterparty_name=kwargs.pop("counterparty_name", "Sparkle Ltd"),
            effective_date=kwargs.pop("effective_date", today - timedelta(days=30)),
            expiry_date=kwargs.pop("expiry_date", today + timedelta(days=90)),
            contract_value=kwargs.pop("contract_value", Decimal("1000.00")),
            owner_id=owner.id,
            **kwargs,
        )
        db_session.add(contract)
        db_session.commit()
        return contract

    return _make


@pytest.fixture
def make_task(db_session, clock):
    """Factory for committed tasks, written directly (no notifications)."""

    def _make(contract: Contract, creator: User, **kwargs) -> Task:
        task = Task(
            title=kwargs.pop("title", "Review renewal terms"),
            type=kwargs.pop("type", TaskType.review),
            category=kwargs.pop("category", TaskCategory.general),
            status=kwargs.pop("status", TaskStatus.pending),
            priority=kwargs.pop("priority", TaskPriority.medium),
            due_date=kwargs.pop("due_date", clock.today() + timedelta(days=14)),
            contract_id=contract.id,
            created_by_id=creator.id,
            **kwargs,
        )
        db_session.add(task)
        db_session.commit()
        return task

    return _make


@pytest.fixture
def api_client(sqlite_sessionmaker, clock, email):
    """TestClient bound to the test database, clock and email recorder (no lifespan)."""
    from app.deps import get_clock, get_email_dispatcher
    from app.main import app

    def override_db():
        session = sqlite_sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db_dependency] = override_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_email_dispatcher] = lambda: email
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
        app.state.temporal = None


@pytest.fixture
def mock_temporal():
    """Create a mock Temporal client."""
    return AsyncMock()
