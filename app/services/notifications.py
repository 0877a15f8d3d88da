"""Notification fanout: recipients and priority per lifecycle event.

Every event method computes its recipient set, then persists one notification
per recipient in order. Each persisted notification gets an audit entry and is
handed to the email dispatcher; delivery is best effort and never raises.

Rules:

    approval required   all active admins               high
    status changed      owner + stakeholder - actor     medium
    contract expiring   owner + stakeholder             high if <= 7 days
    contract expired    owner + stakeholder             urgent
    task assigned       assignee                        high if task urgent
    task due soon       assignee                        high if <= 3 days
    task overdue        assignee                        urgent
    task completed      creator + owner - completer     low
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from app.core.clock import Clock
from app.core.errors import NotFoundError
from app.db.models import (
    AuditAction,
    AuditEntityType,
    Contract,
    ContractStatus,
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    Task,
    TaskPriority,
    User,
)
from app.db.repository import NotificationRepository, UserRepository
from app.services.audit import AuditTrail
from app.services.email import EmailDispatcher

logger = logging.getLogger(__name__)


def _unique_recipients(*users: Optional[User], exclude_id: Optional[str] = None) -> list[User]:
    """Drop missing users, duplicates and the excluded id, keeping order."""
    seen: set[str] = set()
    recipients: list[User] = []
    for user in users:
        if user is None or user.id in seen or user.id == exclude_id:
            continue
        seen.add(user.id)
        recipients.append(user)
    return recipients


class NotificationFanout:
    def __init__(
        self,
        users: UserRepository,
        notifications: NotificationRepository,
        audit: AuditTrail,
        clock: Clock,
        email: EmailDispatcher | None = None,
    ):
        self.users = users
        self.notifications = notifications
        self.audit = audit
        self.clock = clock
        self.email = email
        self._outbox: Optional[list[tuple[Notification, User]]] = None

    # --------------------
    # Persistence
    # --------------------
    def create_notification(
        self,
        *,
        type: NotificationType,
        title: str,
        message: str,
        recipient: User,
        sender_id: Optional[str] = None,
        contract_id: Optional[str] = None,
        task_id: Optional[str] = None,
        priority: Optional[NotificationPriority] = None,
        metadata: Optional[dict[str, Any]] = None,
        scheduled_for=None,
    ) -> Notification:
        notification = self.notifications.add(
            Notification(
                type=type,
                title=title,
                message=message,
                recipient_id=recipient.id,
                sender_id=sender_id,
                contract_id=contract_id,
                task_id=task_id,
                priority=priority or NotificationPriority.medium,
                status=NotificationStatus.unread,
                meta=metadata,
                scheduled_for=scheduled_for,
            )
        )

        self.audit.record(
            AuditAction.create,
            AuditEntityType.notification,
            notification.id,
            sender_id or recipient.id,
            f"Notification created: {type.value}",
            metadata={"notification_id": notification.id},
        )
        logger.info("Notification created: %s for user %s", type.value, recipient.id)

        if self._outbox is not None:
            self._outbox.append((notification, recipient))
        else:
            self._dispatch_email(notification, recipient)
        return notification

    @contextmanager
    def outbox(self) -> Iterator[None]:
        """Hold emails for notifications created inside the block.

        They are sent when the block exits cleanly and dropped if it raises,
        so callers commit inside the block and mail only goes out for
        notifications that were persisted. Sending marks `email_sent`, which
        the caller commits afterwards.
        """
        if self._outbox is not None:
            yield
            return
        self._outbox = []
        try:
            yield
            pending = self._outbox
        finally:
            self._outbox = None
        for notification, recipient in pending:
            self._dispatch_email(notification, recipient)

    def _dispatch_email(self, notification: Notification, recipient: User) -> None:
        if self.email is None:
            return
        try:
            sent = self.email.send(notification, recipient)
        except Exception:
            logger.exception("Email dispatch raised for notification %s", notification.id)
            return
        if sent:
            notification.email_sent = True
            notification.email_sent_at = self.clock.now()
            self.notifications.save(notification)

    # --------------------
    # Contract events
    # --------------------
    def notify_contract_approval_required(self, contract: Contract) -> list[Notification]:
        return [
            self.create_notification(
                type=NotificationType.contract_approval_required,
                title=f"Contract Approval Required: {contract.title}",
                message=(
                    f'Contract "{contract.title}" requires your approval. '
                    "Please review and approve or reject."
                ),
                recipient=admin,
                sender_id=contract.owner_id,
                contract_id=contract.id,
                priority=NotificationPriority.high,
            )
            for admin in self.users.active_admins()
        ]

    def notify_contract_status_changed(
        self,
        contract: Contract,
        old_status: ContractStatus,
        new_status: ContractStatus,
        changed_by: User,
    ) -> list[Notification]:
        recipients = _unique_recipients(contract.owner, contract.stakeholder, exclude_id=changed_by.id)
        return [
            self.create_notification(
                type=NotificationType.contract_status_changed,
                title=f"Contract Status Updated: {contract.title}",
                message=(
                    f'Contract "{contract.title}" status changed from {old_status.value} '
                    f"to {new_status.value} by {changed_by.full_name}."
                ),
                recipient=recipient,
                sender_id=changed_by.id,
                contract_id=contract.id,
                priority=NotificationPriority.medium,
                metadata={"old_status": old_status.value, "new_status": new_status.value},
            )
            for recipient in recipients
        ]

    def notify_contract_expiring(self, contract: Contract, days_until_expiry: int) -> list[Notification]:
        priority = NotificationPriority.high if days_until_expiry <= 7 else NotificationPriority.medium
        expiry = contract.expiry_date.isoformat()
        return [
            self.create_notification(
                type=NotificationType.contract_expiring,
                title=f"Contract Expiring Soon: {contract.title}",
                message=(
                    f'Contract "{contract.title}" expires in {days_until_expiry} days on {expiry}. '
                    "Please review and take necessary action."
                ),
                recipient=recipient,
                contract_id=contract.id,
                priority=priority,
                metadata={"days_until_expiry": days_until_expiry, "expiry_date": expiry},
            )
            for recipient in _unique_recipients(contract.owner, contract.stakeholder)
        ]

    def notify_contract_expired(self, contract: Contract) -> list[Notification]:
        expiry = contract.expiry_date.isoformat()
        return [
            self.create_notification(
                type=NotificationType.contract_expired,
                title=f"Contract Expired: {contract.title}",
                message=f'Contract "{contract.title}" has expired on {expiry}. Immediate action required.',
                recipient=recipient,
                contract_id=contract.id,
                priority=NotificationPriority.urgent,
                metadata={"expiry_date": expiry},
            )
            for recipient in _unique_recipients(contract.owner, contract.stakeholder)
        ]

    # --------------------
    # Task events
    # --------------------
    def notify_task_assigned(self, task: Task, assigned_by: User) -> list[Notification]:
        if task.assigned_to is None:
            return []
        priority = (
            NotificationPriority.high if task.priority == TaskPriority.urgent else NotificationPriority.medium
        )
        due = task.due_date.isoformat()
        return [
            self.create_notification(
                type=NotificationType.task_assigned,
                title=f"New Task Assigned: {task.title}",
                message=(
                    f'You have been assigned a new task: "{task.title}" for contract '
                    f'"{task.contract.title}". Due date: {due}.'
                ),
                recipient=task.assigned_to,
                sender_id=assigned_by.id,
                task_id=task.id,
                contract_id=task.contract_id,
                priority=priority,
                metadata={"due_date": due, "priority": task.priority.value},
            )
        ]

    def notify_task_due_soon(self, task: Task, days_until_due: int) -> list[Notification]:
        if task.assigned_to is None:
            return []
        priority = NotificationPriority.high if days_until_due <= 3 else NotificationPriority.medium
        due = task.due_date.isoformat()
        return [
            self.create_notification(
                type=NotificationType.task_due_soon,
                title=f"Task Due Soon: {task.title}",
                message=f'Task "{task.title}" is due in {days_until_due} days on {due}. Please complete it on time.',
                recipient=task.assigned_to,
                task_id=task.id,
                contract_id=task.contract_id,
                priority=priority,
                metadata={"days_until_due": days_until_due, "due_date": due},
            )
        ]

    def notify_task_overdue(self, task: Task) -> list[Notification]:
        if task.assigned_to is None:
            return []
        due = task.due_date.isoformat()
        return [
            self.create_notification(
                type=NotificationType.task_overdue,
                title=f"Task Overdue: {task.title}",
                message=f'Task "{task.title}" is overdue. It was due on {due}. Please complete it immediately.',
                recipient=task.assigned_to,
                task_id=task.id,
                contract_id=task.contract_id,
                priority=NotificationPriority.urgent,
                metadata={"due_date": due},
            )
        ]

    def notify_task_completed(self, task: Task, completed_by: User) -> list[Notification]:
        recipients = _unique_recipients(task.created_by, task.contract.owner, exclude_id=completed_by.id)
        return [
            self.create_notification(
                type=NotificationType.task_completed,
                title=f"Task Completed: {task.title}",
                message=(
                    f'Task "{task.title}" for contract "{task.contract.title}" '
                    f"has been completed by {completed_by.full_name}."
                ),
                recipient=recipient,
                sender_id=completed_by.id,
                task_id=task.id,
                contract_id=task.contract_id,
                priority=NotificationPriority.low,
            )
            for recipient in recipients
        ]

    # --------------------
    # Recipient operations
    # --------------------
    def get_user_notifications(
        self,
        user_id: str,
        status: Optional[NotificationStatus] = None,
        limit: int = 50,
    ) -> list[Notification]:
        return self.notifications.list_for_recipient(user_id, status=status, limit=limit)

    def get_unread_count(self, user_id: str) -> int:
        return self.notifications.count_unread(user_id)

    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        notification = self.notifications.get_for_recipient(notification_id, user_id)
        if notification is None:
            raise NotFoundError(f"Notification with ID {notification_id} not found")
        if notification.status == NotificationStatus.unread:
            notification.status = NotificationStatus.read
            notification.read_at = self.clock.now()
            self.notifications.save(notification)
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        return self.notifications.mark_all_read(user_id, self.clock.now())


__all__ = ["NotificationFanout"]
