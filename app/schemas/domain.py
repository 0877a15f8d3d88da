"""Domain input models and typed filters for the lifecycle services."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.db.models import (
    ContractStatus,
    ContractType,
    RenewalFrequency,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    TaskType,
    UserRole,
)


def _required(value: Any, info: ValidationInfo) -> Any:
    # Patches may omit a field but not null out a column that is NOT NULL
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value


class ContractInput(BaseModel):
    """Fields accepted when creating a contract."""

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: ContractType
    counterparty_name: str = Field(min_length=1, max_length=255)
    counterparty_email: Optional[str] = None
    counterparty_phone: Optional[str] = None
    effective_date: date
    expiry_date: date
    renewal_date: Optional[date] = None
    auto_renew: bool = False
    renewal_frequency: Optional[RenewalFrequency] = None
    renewal_notice_days: Optional[int] = Field(default=None, ge=0)
    contract_value: Optional[Decimal] = None
    currency: Optional[str] = Field(default=None, max_length=3)
    department: Optional[str] = None
    project: Optional[str] = None
    cost_center: Optional[str] = None
    document_url: Optional[str] = None
    document_type: Optional[str] = None
    stakeholder_id: Optional[str] = None
    custom_fields: Optional[dict[str, Any]] = None
    tags: Optional[list[str]] = None
    notes: Optional[str] = None


class ContractPatch(BaseModel):
    """Partial contract update; only fields explicitly set are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[ContractType] = None
    counterparty_name: Optional[str] = None
    counterparty_email: Optional[str] = None
    counterparty_phone: Optional[str] = None
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    renewal_date: Optional[date] = None
    auto_renew: Optional[bool] = None
    renewal_frequency: Optional[RenewalFrequency] = None
    renewal_notice_days: Optional[int] = Field(default=None, ge=0)
    contract_value: Optional[Decimal] = None
    currency: Optional[str] = Field(default=None, max_length=3)
    department: Optional[str] = None
    project: Optional[str] = None
    cost_center: Optional[str] = None
    document_url: Optional[str] = None
    document_type: Optional[str] = None
    stakeholder_id: Optional[str] = None
    custom_fields: Optional[dict[str, Any]] = None
    tags: Optional[list[str]] = None
    notes: Optional[str] = None

    @field_validator(
        "title", "type", "counterparty_name", "effective_date", "expiry_date", "auto_renew", mode="before"
    )
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        return _required(value, info)


class ContractFilters(BaseModel):
    """Listing filters. `owner_id` is set by the caller to scope by visibility."""

    type: Optional[ContractType] = None
    status: Optional[ContractStatus] = None
    department: Optional[str] = None  # substring
    project: Optional[str] = None  # substring
    search: Optional[str] = None  # title, counterparty name, description
    owner_id: Optional[str] = None
    stakeholder_id: Optional[str] = None


class TaskInput(BaseModel):
    """Fields accepted when creating a task on a contract."""

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: TaskType
    category: Optional[TaskCategory] = None  # only for titles that name no category
    priority: TaskPriority = TaskPriority.medium
    due_date: date
    assigned_to: Optional[str] = None
    dependency_ids: list[str] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = None


class TaskPatch(BaseModel):
    """Partial task update."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None

    @field_validator("title", "due_date", "status", "priority", mode="before")
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        return _required(value, info)


class UserInput(BaseModel):
    """Fields accepted when registering a user."""

    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole = UserRole.viewer
    department: Optional[str] = None
