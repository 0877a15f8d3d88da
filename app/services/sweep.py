"""Daily expiry sweep over active contracts and pending tasks.

Each pass walks its items one by one and commits after every item, so a
failing item is rolled back and skipped without losing the notifications
already sent for earlier ones. Emails for an item go out only once its
notifications are committed; the second commit records delivery.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, time

from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.db.models import ContractStatus, TaskStatus
from app.db.repository import ContractRepository, TaskRepository
from app.services.notifications import NotificationFanout

logger = logging.getLogger(__name__)

CONTRACT_EXPIRY_THRESHOLDS = frozenset({30, 7, 1})
TASK_DUE_THRESHOLDS = frozenset({7, 3, 1})

_SECONDS_PER_DAY = 86400


def days_until(target: date, now: datetime) -> int:
    """Whole days from `now` until local midnight of `target`, rounded up."""
    delta = datetime.combine(target, time.min) - now
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


@dataclass
class SweepResult:
    scanned: int = 0
    notified: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class ExpirySweep:
    def __init__(
        self,
        db: Session,
        contracts: ContractRepository,
        tasks: TaskRepository,
        fanout: NotificationFanout,
        clock: Clock,
    ):
        self.db = db
        self.contracts = contracts
        self.tasks = tasks
        self.fanout = fanout
        self.clock = clock

    def run_contract_pass(self) -> SweepResult:
        now = self.clock.now()
        result = SweepResult()

        for contract in self.contracts.with_status(ContractStatus.active):
            result.scanned += 1
            contract_id = contract.id
            try:
                with self.fanout.outbox():
                    days = days_until(contract.expiry_date, now)
                    if days in CONTRACT_EXPIRY_THRESHOLDS:
                        sent = self.fanout.notify_contract_expiring(contract, days)
                    elif days < 0:
                        sent = self.fanout.notify_contract_expired(contract)
                    else:
                        sent = []
                    self.db.commit()
                self.db.commit()
                result.notified += len(sent)
            except Exception:
                self.db.rollback()
                result.failed += 1
                logger.exception("Expiry check failed for contract %s", contract_id)

        logger.info(
            "Contract pass: scanned=%d notified=%d failed=%d",
            result.scanned,
            result.notified,
            result.failed,
        )
        return result

    def run_task_pass(self) -> SweepResult:
        now = self.clock.now()
        result = SweepResult()

        for task in self.tasks.with_status(TaskStatus.pending):
            result.scanned += 1
            task_id = task.id
            try:
                with self.fanout.outbox():
                    days = days_until(task.due_date, now)
                    if days in TASK_DUE_THRESHOLDS:
                        sent = self.fanout.notify_task_due_soon(task, days)
                    elif days < 0:
                        sent = self.fanout.notify_task_overdue(task)
                    else:
                        sent = []
                    self.db.commit()
                self.db.commit()
                result.notified += len(sent)
            except Exception:
                self.db.rollback()
                result.failed += 1
                logger.exception("Due date check failed for task %s", task_id)

        logger.info(
            "Task pass: scanned=%d notified=%d failed=%d",
            result.scanned,
            result.notified,
            result.failed,
        )
        return result


__all__ = [
    "CONTRACT_EXPIRY_THRESHOLDS",
    "TASK_DUE_THRESHOLDS",
    "ExpirySweep",
    "SweepResult",
    "days_until",
]
