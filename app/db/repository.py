"""Repositories over the lifecycle tables, one per aggregate, bound to a session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from app.db.models import (
    AuditLog,
    Contract,
    ContractStatus,
    Notification,
    NotificationStatus,
    Task,
    TaskStatus,
    User,
    UserRole,
)
from app.schemas.domain import ContractFilters


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.scalar(select(User).where(func.lower(User.email) == email.lower()))

    def active_admins(self) -> list[User]:
        return list(
            self.db.scalars(
                select(User)
                .where(User.role == UserRole.admin, User.is_active.is_(True))
                .order_by(User.created_at)
            )
        )

    def any_admin(self) -> bool:
        return self.db.scalar(select(func.count(User.id)).where(User.role == UserRole.admin)) > 0

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user


class ContractRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, contract_id: str) -> Optional[Contract]:
        return self.db.get(Contract, contract_id)

    def add(self, contract: Contract) -> Contract:
        self.db.add(contract)
        self.db.flush()
        self.db.refresh(contract)
        return contract

    def save(self, contract: Contract) -> Contract:
        self.db.flush()
        return contract

    def delete(self, contract: Contract) -> None:
        self.db.delete(contract)
        self.db.flush()

    def list(self, filters: ContractFilters, page: int = 1, limit: int = 10) -> tuple[list[Contract], int]:
        conditions = []
        if filters.type:
            conditions.append(Contract.type == filters.type)
        if filters.status:
            conditions.append(Contract.status == filters.status)
        if filters.department:
            conditions.append(Contract.department.ilike(f"%{filters.department}%"))
        if filters.project:
            conditions.append(Contract.project.ilike(f"%{filters.project}%"))
        if filters.owner_id:
            conditions.append(Contract.owner_id == filters.owner_id)
        if filters.stakeholder_id:
            conditions.append(Contract.stakeholder_id == filters.stakeholder_id)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(
                    Contract.title.ilike(pattern),
                    Contract.counterparty_name.ilike(pattern),
                    Contract.description.ilike(pattern),
                )
            )

        total = self.db.scalar(select(func.count(Contract.id)).where(*conditions)) or 0
        rows = self.db.scalars(
            select(Contract)
            .where(*conditions)
            .options(selectinload(Contract.owner), selectinload(Contract.stakeholder))
            .order_by(Contract.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(rows), total

    def with_status(self, status: ContractStatus) -> list[Contract]:
        return list(
            self.db.scalars(
                select(Contract)
                .where(Contract.status == status)
                .options(selectinload(Contract.owner), selectinload(Contract.stakeholder))
            )
        )

    def active_expiring_between(self, start: date, end: date) -> list[Contract]:
        return list(
            self.db.scalars(
                select(Contract)
                .where(
                    Contract.status == ContractStatus.active,
                    Contract.expiry_date >= start,
                    Contract.expiry_date <= end,
                )
                .options(selectinload(Contract.owner), selectinload(Contract.stakeholder))
                .order_by(Contract.expiry_date)
            )
        )


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, task_id: str) -> Optional[Task]:
        return self.db.get(Task, task_id)

    def get_many(self, task_ids: list[str]) -> list[Task]:
        if not task_ids:
            return []
        return list(self.db.scalars(select(Task).where(Task.id.in_(task_ids))))

    def add(self, task: Task) -> Task:
        self.db.add(task)
        self.db.flush()
        self.db.refresh(task)
        return task

    def save(self, task: Task) -> Task:
        self.db.flush()
        return task

    def delete(self, task: Task) -> None:
        self.db.delete(task)
        self.db.flush()

    def by_contract(self, contract_id: str) -> list[Task]:
        return list(
            self.db.scalars(
                select(Task)
                .where(Task.contract_id == contract_id)
                .options(selectinload(Task.assigned_to))
                .order_by(Task.due_date)
            )
        )

    def by_assignee(self, user_id: str) -> list[Task]:
        return list(
            self.db.scalars(
                select(Task)
                .where(Task.assigned_to_id == user_id)
                .options(selectinload(Task.contract))
                .order_by(Task.due_date)
            )
        )

    def with_status(self, status: TaskStatus) -> list[Task]:
        return list(
            self.db.scalars(
                select(Task)
                .where(Task.status == status)
                .options(
                    selectinload(Task.assigned_to),
                    selectinload(Task.contract),
                    selectinload(Task.created_by),
                )
            )
        )


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, notification: Notification) -> Notification:
        self.db.add(notification)
        self.db.flush()
        self.db.refresh(notification)
        return notification

    def save(self, notification: Notification) -> Notification:
        self.db.flush()
        return notification

    def get_for_recipient(self, notification_id: str, recipient_id: str) -> Optional[Notification]:
        return self.db.scalar(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.recipient_id == recipient_id,
            )
        )

    def list_for_recipient(
        self,
        recipient_id: str,
        status: Optional[NotificationStatus] = None,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.recipient_id == recipient_id)
        if status is not None:
            stmt = stmt.where(Notification.status == status)
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return list(self.db.scalars(stmt))

    def count_unread(self, recipient_id: str) -> int:
        return (
            self.db.scalar(
                select(func.count(Notification.id)).where(
                    Notification.recipient_id == recipient_id,
                    Notification.status == NotificationStatus.unread,
                )
            )
            or 0
        )

    def mark_all_read(self, recipient_id: str, read_at: datetime) -> int:
        result = self.db.execute(
            update(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.status == NotificationStatus.unread,
            )
            .values(status=NotificationStatus.read, read_at=read_at)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    def detach_contract(self, contract_id: str) -> None:
        self.db.execute(
            update(Notification)
            .where(Notification.contract_id == contract_id)
            .values(contract_id=None)
            .execution_options(synchronize_session="fetch")
        )

    def detach_tasks(self, task_ids: list[str]) -> None:
        if not task_ids:
            return
        self.db.execute(
            update(Notification)
            .where(Notification.task_id.in_(task_ids))
            .values(task_id=None)
            .execution_options(synchronize_session="fetch")
        )


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: AuditLog) -> AuditLog:
        self.db.add(entry)
        self.db.flush()
        return entry


@dataclass
class Repositories:
    """Repositories sharing one session (one unit of work)."""

    db: Session
    users: UserRepository
    contracts: ContractRepository
    tasks: TaskRepository
    notifications: NotificationRepository
    audit_logs: AuditLogRepository


def build_repositories(db: Session) -> Repositories:
    return Repositories(
        db=db,
        users=UserRepository(db),
        contracts=ContractRepository(db),
        tasks=TaskRepository(db),
        notifications=NotificationRepository(db),
        audit_logs=AuditLogRepository(db),
    )


__all__ = [
    "UserRepository",
    "ContractRepository",
    "TaskRepository",
    "NotificationRepository",
    "AuditLogRepository",
    "Repositories",
    "build_repositories",
]
