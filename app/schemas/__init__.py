"""Input models, filters and API response schemas."""

from app.schemas.domain import (
    ContractFilters,
    ContractInput,
    ContractPatch,
    TaskInput,
    TaskPatch,
    UserInput,
)

__all__ = [
    "ContractFilters",
    "ContractInput",
    "ContractPatch",
    "TaskInput",
    "TaskPatch",
    "UserInput",
]
