"""SQLAlchemy models for users, contracts, tasks, notifications and the audit trail."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base


def _uuid() -> str:
    return str(uuid4())


class UserRole(str, enum.Enum):
    admin = "admin"
    legal = "legal"
    hr = "hr"
    finance = "finance"
    manager = "manager"
    viewer = "viewer"


class ContractType(str, enum.Enum):
    supplier = "supplier"
    service = "service"
    employee = "employee"


class ContractStatus(str, enum.Enum):
    draft = "draft"
    active = "active"
    expiring_soon = "expiring_soon"
    expired = "expired"
    renewed = "renewed"
    terminated = "terminated"


class RenewalFrequency(str, enum.Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    biannual = "biannual"
    annual = "annual"
    biennial = "biennial"
    custom = "custom"


class TaskType(str, enum.Enum):
    approval = "approval"
    signature = "signature"
    review = "review"
    negotiation = "negotiation"
    renewal = "renewal"
    termination = "termination"
    custom = "custom"


class TaskCategory(str, enum.Enum):
    general = "general"
    legal = "legal"
    finance = "finance"
    hr = "hr"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    overdue = "overdue"
    cancelled = "cancelled"


class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class NotificationType(str, enum.Enum):
    # Contract events
    contract_expiring = "contract_expiring"
    contract_expired = "contract_expired"
    contract_approval_required = "contract_approval_required"
    contract_approved = "contract_approved"
    contract_rejected = "contract_rejected"
    contract_renewal_due = "contract_renewal_due"
    contract_status_changed = "contract_status_changed"
    # Task events
    task_assigned = "task_assigned"
    task_due_soon = "task_due_soon"
    task_overdue = "task_overdue"
    task_completed = "task_completed"
    task_status_changed = "task_status_changed"
    # General
    system_alert = "system_alert"
    user_mentioned = "user_mentioned"


class NotificationPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class NotificationStatus(str, enum.Enum):
    unread = "unread"
    read = "read"
    archived = "archived"


class AuditAction(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    approve = "approve"
    reject = "reject"
    assign = "assign"
    complete = "complete"
    expire = "expire"


class AuditEntityType(str, enum.Enum):
    contract = "contract"
    task = "task"
    comment = "comment"
    user = "user"
    notification = "notification"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole), nullable=False, default=UserRole.viewer)
    department: Mapped[Optional[str]] = mapped_column(String(120))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[ContractType] = mapped_column(SAEnum(ContractType), nullable=False)
    status: Mapped[ContractStatus] = mapped_column(
        SAEnum(ContractStatus), nullable=False, default=ContractStatus.draft
    )

    counterparty_name: Mapped[str] = mapped_column(String(255), nullable=False)
    counterparty_email: Mapped[Optional[str]] = mapped_column(String(255))
    counterparty_phone: Mapped[Optional[str]] = mapped_column(String(50))

    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    renewal_date: Mapped[Optional[date]] = mapped_column(Date)

    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    renewal_frequency: Mapped[Optional[RenewalFrequency]] = mapped_column(SAEnum(RenewalFrequency))
    renewal_notice_days: Mapped[Optional[int]] = mapped_column(Integer)

    contract_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2))
    currency: Mapped[Optional[str]] = mapped_column(String(3))

    department: Mapped[Optional[str]] = mapped_column(String(120))
    project: Mapped[Optional[str]] = mapped_column(String(120))
    cost_center: Mapped[Optional[str]] = mapped_column(String(60))

    document_url: Mapped[Optional[str]] = mapped_column(String(512))
    document_type: Mapped[Optional[str]] = mapped_column(String(60))

    custom_fields: Mapped[Optional[dict]] = mapped_column(JSON)
    tags: Mapped[Optional[list]] = mapped_column(JSON)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    stakeholder_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    owner: Mapped["User"] = relationship("User", foreign_keys=[owner_id])
    stakeholder: Mapped[Optional["User"]] = relationship("User", foreign_keys=[stakeholder_id])
    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="Task.due_date",
    )

    __table_args__ = (
        Index("idx_contracts_status_expiry", "status", "expiry_date"),
        Index("idx_contracts_owner", "owner_id"),
    )


task_dependencies = Table(
    "task_dependencies",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("contract_tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("depends_on_id", String(36), ForeignKey("contract_tasks.id", ondelete="CASCADE"), primary_key=True),
)


class Task(Base):
    __tablename__ = "contract_tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[TaskType] = mapped_column(SAEnum(TaskType), nullable=False)
    category: Mapped[TaskCategory] = mapped_column(
        SAEnum(TaskCategory), nullable=False, default=TaskCategory.general
    )
    status: Mapped[TaskStatus] = mapped_column(SAEnum(TaskStatus), nullable=False, default=TaskStatus.pending)
    priority: Mapped[TaskPriority] = mapped_column(
        SAEnum(TaskPriority), nullable=False, default=TaskPriority.medium
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    completed_date: Mapped[Optional[date]] = mapped_column(Date)
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON)

    contract_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False
    )
    assigned_to_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id"))
    created_by_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    contract: Mapped["Contract"] = relationship("Contract", back_populates="tasks")
    assigned_to: Mapped[Optional["User"]] = relationship("User", foreign_keys=[assigned_to_id])
    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id])

    # Edges point from a task to the tasks it waits on
    dependencies: Mapped[list["Task"]] = relationship(
        "Task",
        secondary=task_dependencies,
        primaryjoin=lambda: Task.id == task_dependencies.c.task_id,
        secondaryjoin=lambda: Task.id == task_dependencies.c.depends_on_id,
        back_populates="dependents",
    )
    dependents: Mapped[list["Task"]] = relationship(
        "Task",
        secondary=task_dependencies,
        primaryjoin=lambda: Task.id == task_dependencies.c.depends_on_id,
        secondaryjoin=lambda: Task.id == task_dependencies.c.task_id,
        back_populates="dependencies",
    )

    __table_args__ = (
        Index("idx_tasks_status_due", "status", "due_date"),
        Index("idx_tasks_assignee", "assigned_to_id"),
    )


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    type: Mapped[NotificationType] = mapped_column(SAEnum(NotificationType), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[NotificationPriority] = mapped_column(
        SAEnum(NotificationPriority), nullable=False, default=NotificationPriority.medium
    )
    status: Mapped[NotificationStatus] = mapped_column(
        SAEnum(NotificationStatus), nullable=False, default=NotificationStatus.unread
    )
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    scheduled_for: Mapped[Optional[datetime]] = mapped_column(DateTime)
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    recipient_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    sender_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id"))
    contract_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("contracts.id", ondelete="SET NULL")
    )
    task_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("contract_tasks.id", ondelete="SET NULL")
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    __table_args__ = (
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
    )


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    action: Mapped[AuditAction] = mapped_column(SAEnum(AuditAction), nullable=False)
    entity_type: Mapped[AuditEntityType] = mapped_column(SAEnum(AuditEntityType), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    old_values: Mapped[Optional[dict]] = mapped_column(JSON)
    new_values: Mapped[Optional[dict]] = mapped_column(JSON)
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    user_agent: Mapped[Optional[str]] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
    )
