"""Role model: who may see, approve and edit what.

Every authorization decision in the lifecycle services goes through the
helpers in this module so the role lattice lives in one place.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from app.core.errors import AuthorizationError
from app.db.models import Contract, Task, TaskCategory, User, UserRole

# Roles that see every contract and the global dashboard
GLOBAL_VIEW_ROLES = frozenset({UserRole.admin, UserRole.legal, UserRole.hr, UserRole.finance})

# Roles that may approve, reject and delete contracts
CONTRACT_APPROVER_ROLES = frozenset({UserRole.admin, UserRole.legal})

# Roles that may edit or delete any task
TASK_MANAGER_ROLES = frozenset({UserRole.admin, UserRole.legal})

# Category -> role the assignee must hold
CATEGORY_ROLES: dict[TaskCategory, UserRole] = {
    TaskCategory.legal: UserRole.legal,
    TaskCategory.finance: UserRole.finance,
    TaskCategory.hr: UserRole.hr,
}

# Checked in this order when deriving a category from a title
_TITLE_KEYWORDS: tuple[tuple[str, TaskCategory], ...] = (
    ("legal", TaskCategory.legal),
    ("finance", TaskCategory.finance),
    ("hr", TaskCategory.hr),
)

_WORD_RE = re.compile(r"[a-z0-9]+")


def has_global_view(user: User) -> bool:
    return user.role in GLOBAL_VIEW_ROLES


def can_view_contract(user: User, contract: Contract) -> bool:
    return contract.owner_id == user.id or has_global_view(user)


def visible_owner_scope(user: User) -> Optional[str]:
    """Owner id to filter listings by, or None for unrestricted visibility."""
    return None if has_global_view(user) else user.id


def require_role(user: User, roles: Iterable[UserRole], action: str) -> None:
    allowed = frozenset(roles)
    if user.role not in allowed:
        names = ", ".join(sorted(r.value for r in allowed))
        raise AuthorizationError(f"Only {names} may {action}")


def require_contract_visible(user: User, contract: Contract) -> None:
    if not can_view_contract(user, contract):
        raise AuthorizationError("You do not have access to this contract")


def can_manage_task(user: User, task: Task) -> bool:
    return task.assigned_to_id == user.id or user.role in TASK_MANAGER_ROLES


def require_task_manager(user: User, task: Task, action: str = "update") -> None:
    if not can_manage_task(user, task):
        raise AuthorizationError(f"You do not have permission to {action} this task")


def derive_task_category(title: str) -> TaskCategory:
    """Category from whole words of a title; "hr" never matches inside "three"."""
    words = set(_WORD_RE.findall(title.lower()))
    for keyword, category in _TITLE_KEYWORDS:
        if keyword in words:
            return category
    return TaskCategory.general


def resolve_task_category(title: str, requested: Optional[TaskCategory] = None) -> TaskCategory:
    """Category for a task title, honouring `requested` only where the title is silent.

    A title naming legal, finance or hr always fixes the category; asking for
    a different one is refused rather than silently loosening the role gate.
    """
    derived = derive_task_category(title)
    if requested is None or requested == derived:
        return derived
    if derived == TaskCategory.general:
        return requested
    raise AuthorizationError(
        f"Task titled {title!r} is a {derived.value} task and cannot be filed as {requested.value}"
    )


def required_assignee_role(category: TaskCategory) -> Optional[UserRole]:
    return CATEGORY_ROLES.get(category)


def require_assignable(category: TaskCategory, assignee: User) -> None:
    role = required_assignee_role(category)
    if role is not None and assignee.role != role:
        raise AuthorizationError(
            f"Only {role.value} users can be assigned {category.value} tasks"
        )


__all__ = [
    "GLOBAL_VIEW_ROLES",
    "CONTRACT_APPROVER_ROLES",
    "TASK_MANAGER_ROLES",
    "CATEGORY_ROLES",
    "has_global_view",
    "can_view_contract",
    "visible_owner_scope",
    "require_role",
    "require_contract_visible",
    "can_manage_task",
    "require_task_manager",
    "derive_task_category",
    "resolve_task_category",
    "required_assignee_role",
    "require_assignable",
]
