"""Task lifecycle: category-gated assignment, dependencies and completion."""

from __future__ import annotations

import logging
from typing import Optional

from app.core.clock import Clock
from app.core.errors import NotFoundError, ValidationError
from app.db.models import AuditAction, AuditEntityType, Task, TaskCategory, TaskStatus, User
from app.db.repository import ContractRepository, NotificationRepository, TaskRepository, UserRepository
from app.schemas.domain import TaskInput, TaskPatch
from app.services.access import (
    derive_task_category,
    require_assignable,
    require_contract_visible,
    require_task_manager,
    resolve_task_category,
)
from app.services.audit import AuditTrail, snapshot
from app.services.notifications import NotificationFanout

logger = logging.getLogger(__name__)

_TRACKED_FIELDS = (
    "title",
    "description",
    "due_date",
    "status",
    "priority",
    "category",
    "assigned_to_id",
    "completed_date",
)


def _depends_on(start: Task, target_id: str) -> bool:
    """True if `start` waits on `target_id`, directly or transitively."""
    stack = [start]
    seen: set[str] = set()
    while stack:
        task = stack.pop()
        if task.id == target_id:
            return True
        if task.id in seen:
            continue
        seen.add(task.id)
        stack.extend(task.dependencies)
    return False


class TaskManager:
    def __init__(
        self,
        tasks: TaskRepository,
        contracts: ContractRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        fanout: NotificationFanout,
        audit: AuditTrail,
        clock: Clock,
    ):
        self.tasks = tasks
        self.contracts = contracts
        self.users = users
        self.notifications = notifications
        self.fanout = fanout
        self.audit = audit
        self.clock = clock

    def _get(self, task_id: str) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return task

    def _resolve_assignee(self, user_id: str) -> User:
        assignee = self.users.get(user_id)
        if assignee is None:
            raise ValidationError(f"Assigned user with ID {user_id} not found")
        return assignee

    def create(self, contract_id: str, data: TaskInput, creator: User) -> Task:
        contract = self.contracts.get(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract with ID {contract_id} not found")
        require_contract_visible(creator, contract)

        assignee = self._resolve_assignee(data.assigned_to) if data.assigned_to else None
        category = resolve_task_category(data.title, data.category)
        if assignee is not None:
            require_assignable(category, assignee)

        dependencies = self.tasks.get_many(data.dependency_ids)
        missing = set(data.dependency_ids) - {t.id for t in dependencies}
        if missing:
            raise ValidationError(f"Dependency tasks not found: {', '.join(sorted(missing))}")

        task = self.tasks.add(
            Task(
                title=data.title,
                description=data.description,
                type=data.type,
                category=category,
                priority=data.priority,
                status=TaskStatus.pending,
                due_date=data.due_date,
                meta=data.metadata,
                contract_id=contract.id,
                assigned_to=assignee,
                created_by_id=creator.id,
                dependencies=dependencies,
            )
        )

        if assignee is not None:
            self.fanout.notify_task_assigned(task, creator)
        self.audit.record(
            AuditAction.create,
            AuditEntityType.task,
            task.id,
            creator.id,
            f"Task created: {task.title}",
            new_values=snapshot(task, _TRACKED_FIELDS),
            metadata={"contract_id": contract.id, "category": category.value},
        )
        logger.info("Task %s created on contract %s", task.id, contract.id)
        return task

    def update(self, task_id: str, patch: TaskPatch, updater: User) -> Task:
        """Apply a partial update; completion and reassignment fan out."""
        task = self._get(task_id)
        require_task_manager(updater, task, "update")
        changes = patch.model_dump(exclude_unset=True)
        old_values = snapshot(task, _TRACKED_FIELDS)

        # A retitle naming legal, finance or hr moves the task into that category
        category = task.category
        if "title" in changes:
            derived = derive_task_category(changes["title"])
            if derived != TaskCategory.general:
                category = derived

        assignee = task.assigned_to
        reassigned = False
        if "assigned_to" in changes:
            new_assignee_id = changes.pop("assigned_to")
            if new_assignee_id != task.assigned_to_id:
                assignee = self._resolve_assignee(new_assignee_id) if new_assignee_id else None
                reassigned = assignee is not None
        if assignee is not None:
            require_assignable(category, assignee)

        task.category = category
        task.assigned_to = assignee

        was_completed = task.status == TaskStatus.completed
        for field, value in changes.items():
            setattr(task, field, value)

        completing = not was_completed and task.status == TaskStatus.completed
        if completing:
            task.completed_date = self.clock.today()
        elif was_completed and task.status != TaskStatus.completed:
            task.completed_date = None

        self.tasks.save(task)

        if completing:
            self.fanout.notify_task_completed(task, updater)
        if reassigned:
            self.fanout.notify_task_assigned(task, updater)

        if completing:
            action, description = AuditAction.complete, f"Task completed: {task.title}"
        elif reassigned:
            action, description = AuditAction.assign, f"Task assigned: {task.title}"
        else:
            action, description = AuditAction.update, f"Task updated: {task.title}"
        self.audit.record(
            action,
            AuditEntityType.task,
            task.id,
            updater.id,
            description,
            old_values=old_values,
            new_values=snapshot(task, _TRACKED_FIELDS),
        )
        return task

    def complete(self, task_id: str, actor: User) -> Task:
        return self.update(task_id, TaskPatch(status=TaskStatus.completed), actor)

    def assign(self, task_id: str, assignee_id: str, actor: User) -> Task:
        return self.update(task_id, TaskPatch(assigned_to=assignee_id), actor)

    def remove(self, task_id: str, remover: User) -> None:
        task = self._get(task_id)
        require_task_manager(remover, task, "delete")

        self.notifications.detach_tasks([task.id])
        self.audit.record(
            AuditAction.delete,
            AuditEntityType.task,
            task.id,
            remover.id,
            f"Task deleted: {task.title}",
            old_values=snapshot(task, _TRACKED_FIELDS),
        )
        self.tasks.delete(task)

    def add_dependency(self, task_id: str, depends_on_id: str, actor: User) -> Task:
        if task_id == depends_on_id:
            raise ValidationError("A task cannot depend on itself")
        task = self._get(task_id)
        require_task_manager(actor, task, "update")
        prerequisite = self._get(depends_on_id)

        if prerequisite in task.dependencies:
            return task
        if _depends_on(prerequisite, task.id):
            raise ValidationError(
                f"Adding dependency on {depends_on_id} would create a cycle"
            )

        task.dependencies.append(prerequisite)
        self.tasks.save(task)
        self.audit.record(
            AuditAction.update,
            AuditEntityType.task,
            task.id,
            actor.id,
            f"Task dependency added: {prerequisite.title}",
            metadata={"depends_on_id": prerequisite.id},
        )
        return task

    def remove_dependency(self, task_id: str, depends_on_id: str, actor: User) -> Task:
        task = self._get(task_id)
        require_task_manager(actor, task, "update")
        prerequisite = next((t for t in task.dependencies if t.id == depends_on_id), None)
        if prerequisite is None:
            raise NotFoundError(f"Task {task_id} does not depend on {depends_on_id}")

        task.dependencies.remove(prerequisite)
        self.tasks.save(task)
        self.audit.record(
            AuditAction.update,
            AuditEntityType.task,
            task.id,
            actor.id,
            f"Task dependency removed: {prerequisite.title}",
            metadata={"depends_on_id": prerequisite.id},
        )
        return task

    def find_all_by_user(self, user_id: str) -> list[Task]:
        return self.tasks.by_assignee(user_id)

    def find_all_by_contract(self, contract_id: str, viewer: Optional[User] = None) -> list[Task]:
        contract = self.contracts.get(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract with ID {contract_id} not found")
        if viewer is not None:
            require_contract_visible(viewer, contract)
        return self.tasks.by_contract(contract_id)


__all__ = ["TaskManager"]
