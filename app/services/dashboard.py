"""Read-only dashboard rollups, scoped by role visibility."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.core.clock import Clock
from app.db.models import (
    Contract,
    ContractStatus,
    ContractType,
    Notification,
    NotificationStatus,
    Task,
    TaskStatus,
    User,
)
from app.services.access import has_global_view

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
UPCOMING_LIMIT = 10
EXPIRING_WINDOW_DAYS = 30


@dataclass(frozen=True)
class DashboardScope:
    """Which contracts and tasks a user's dashboard covers."""

    user_id: str
    global_view: bool

    @classmethod
    def for_user(cls, user: User) -> "DashboardScope":
        return cls(user_id=user.id, global_view=has_global_view(user))

    def contract_conditions(self) -> list:
        if self.global_view:
            return []
        return [Contract.owner_id == self.user_id]

    def task_conditions(self) -> list:
        if self.global_view:
            return []
        owned = select(Contract.id).where(Contract.owner_id == self.user_id)
        return [or_(Task.assigned_to_id == self.user_id, Task.contract_id.in_(owned))]


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return parsed if parsed.is_finite() else Decimal("0")


class DashboardAggregator:
    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock

    def _count(self, column, *conditions) -> int:
        return self.db.scalar(select(func.count(column)).where(*conditions)) or 0

    def _grouped(self, column, enum_cls, *conditions) -> dict[str, int]:
        counts = {member.value: 0 for member in enum_cls}
        rows = self.db.execute(select(column, func.count()).where(*conditions).group_by(column))
        for key, count in rows:
            counts[key.value] = count
        return counts

    def get_stats(self, user: User) -> dict[str, Any]:
        scope = DashboardScope.for_user(user)
        contract_scope = scope.contract_conditions()
        task_scope = scope.task_conditions()

        now = self.clock.now()
        today = now.date()
        month_start = datetime.combine(today.replace(day=1), time.min)
        week_start = now - timedelta(days=7)
        overdue_condition = (Task.status == TaskStatus.pending, Task.due_date < today)

        contracts = {
            "total": self._count(Contract.id, *contract_scope),
            "by_status": self._grouped(Contract.status, ContractStatus, *contract_scope),
            "by_type": self._grouped(Contract.type, ContractType, *contract_scope),
            "this_month": self._count(Contract.id, Contract.created_at >= month_start, *contract_scope),
        }
        tasks = {
            "total": self._count(Task.id, *task_scope),
            "by_status": self._grouped(Task.status, TaskStatus, *task_scope),
            "overdue": self._count(Task.id, *overdue_condition, *task_scope),
            "this_month": self._count(Task.id, Task.created_at >= month_start, *task_scope),
        }
        mine = Notification.recipient_id == user.id
        notifications = {
            "total": self._count(Notification.id, mine),
            "unread": self._count(Notification.id, mine, Notification.status == NotificationStatus.unread),
            "this_week": self._count(Notification.id, mine, Notification.created_at >= week_start),
        }

        recent_contracts = list(
            self.db.scalars(
                select(Contract)
                .where(*contract_scope)
                .order_by(Contract.updated_at.desc())
                .limit(RECENT_LIMIT)
            )
        )
        recent_tasks = list(
            self.db.scalars(
                select(Task)
                .where(*task_scope)
                .order_by(Task.updated_at.desc())
                .limit(RECENT_LIMIT)
            )
        )
        expiring_contracts = list(
            self.db.scalars(
                select(Contract)
                .where(
                    Contract.status == ContractStatus.active,
                    Contract.expiry_date >= today,
                    Contract.expiry_date <= today + timedelta(days=EXPIRING_WINDOW_DAYS),
                    *contract_scope,
                )
                .order_by(Contract.expiry_date)
                .limit(UPCOMING_LIMIT)
            )
        )
        overdue_tasks = list(
            self.db.scalars(
                select(Task)
                .where(*overdue_condition, *task_scope)
                .options(selectinload(Task.assigned_to))
                .order_by(Task.due_date)
                .limit(UPCOMING_LIMIT)
            )
        )

        return {
            "contracts": contracts,
            "tasks": tasks,
            "notifications": notifications,
            "recent_contracts": recent_contracts,
            "recent_tasks": recent_tasks,
            "expiring_contracts": expiring_contracts,
            "overdue_tasks": overdue_tasks,
            "value": self.get_value_analytics(user),
        }

    def get_value_analytics(self, user: User) -> dict[str, Any]:
        """Total and per-type value of active contracts; missing values count as zero."""
        scope = DashboardScope.for_user(user)
        rows = self.db.execute(
            select(Contract.type, Contract.contract_value).where(
                Contract.status == ContractStatus.active, *scope.contract_conditions()
            )
        ).all()

        total = Decimal("0")
        by_type = {member.value: Decimal("0") for member in ContractType}
        for contract_type, value in rows:
            amount = _to_decimal(value)
            total += amount
            by_type[contract_type.value] += amount

        return {
            "total_value": float(total),
            "value_by_type": {key: float(amount) for key, amount in by_type.items()},
            "contract_count": len(rows),
        }


__all__ = ["DashboardAggregator", "DashboardScope"]
