"""API request and response models."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.db.models import (
    ContractStatus,
    ContractType,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    RenewalFrequency,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TaskType,
    UserRole,
)


class UserRead(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    department: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole

    model_config = {"from_attributes": True}


class ContractRead(BaseModel):
    """Single contract response."""

    id: str
    title: str
    description: Optional[str] = None
    type: ContractType
    status: ContractStatus
    counterparty_name: str
    counterparty_email: Optional[str] = None
    counterparty_phone: Optional[str] = None
    effective_date: date
    expiry_date: date
    renewal_date: Optional[date] = None
    auto_renew: bool
    renewal_frequency: Optional[RenewalFrequency] = None
    renewal_notice_days: Optional[int] = None
    contract_value: Optional[float] = None
    currency: Optional[str] = None
    department: Optional[str] = None
    project: Optional[str] = None
    cost_center: Optional[str] = None
    document_url: Optional[str] = None
    document_type: Optional[str] = None
    custom_fields: Optional[dict[str, Any]] = None
    tags: Optional[list[str]] = None
    notes: Optional[str] = None
    owner_id: str
    stakeholder_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ContractListResponse(BaseModel):
    """Paginated contract list response."""

    items: list[ContractRead]
    total: int
    page: int
    limit: int


class ContractStatusUpdate(BaseModel):
    status: ContractStatus


class ContractRejection(BaseModel):
    reason: str = Field(min_length=1)


class TaskRead(BaseModel):
    """Single task response."""

    id: str
    title: str
    description: Optional[str] = None
    type: TaskType
    category: TaskCategory
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    completed_date: Optional[date] = None
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias="meta")
    contract_id: str
    assigned_to_id: Optional[str] = None
    created_by_id: str
    dependency_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}

    @classmethod
    def from_task(cls, task) -> "TaskRead":
        read = cls.model_validate(task)
        read.dependency_ids = [dep.id for dep in task.dependencies]
        return read


class TaskAssignment(BaseModel):
    assigned_to: str


class TaskDependencyCreate(BaseModel):
    depends_on_id: str


class NotificationRead(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    status: NotificationStatus
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias="meta")
    read_at: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None
    email_sent: bool
    email_sent_at: Optional[datetime] = None
    recipient_id: str
    sender_id: Optional[str] = None
    contract_id: Optional[str] = None
    task_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class UnreadCountResponse(BaseModel):
    unreadCount: int


class MarkAllReadResponse(BaseModel):
    updated: int


class ContractCounts(BaseModel):
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]
    this_month: int


class TaskCounts(BaseModel):
    total: int
    by_status: dict[str, int]
    overdue: int
    this_month: int


class NotificationCounts(BaseModel):
    total: int
    unread: int
    this_week: int


class ValueAnalytics(BaseModel):
    total_value: float
    value_by_type: dict[str, float]
    contract_count: int


class DashboardStatsResponse(BaseModel):
    contracts: ContractCounts
    tasks: TaskCounts
    notifications: NotificationCounts
    recent_contracts: list[ContractRead]
    recent_tasks: list[TaskRead]
    expiring_contracts: list[ContractRead]
    overdue_tasks: list[TaskRead]
    value: ValueAnalytics


class BootstrapAdminRequest(BaseModel):
    secret: str
    email: str
    first_name: str
    last_name: str
    department: Optional[str] = None


class SweepStarted(BaseModel):
    workflow_id: str
    status: str
