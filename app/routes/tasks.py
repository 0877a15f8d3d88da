"""Task lifecycle endpoints."""

import logging

from fastapi import APIRouter, Depends, Response

from app.db.models import User
from app.deps import get_current_user, get_services
from app.schemas.api import TaskAssignment, TaskDependencyCreate, TaskRead
from app.schemas.domain import TaskInput, TaskPatch
from app.services.factory import LifecycleServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tasks"])


@router.post("/contracts/{contract_id}/tasks", response_model=TaskRead, status_code=201)
def create_task(
    contract_id: str,
    data: TaskInput,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Create a task on a contract; legal, finance and hr tasks need a matching assignee."""
    return TaskRead.from_task(services.tasks.create(contract_id, data, user))


@router.get("/contracts/{contract_id}/tasks", response_model=list[TaskRead])
def list_contract_tasks(
    contract_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return [TaskRead.from_task(t) for t in services.tasks.find_all_by_contract(contract_id, viewer=user)]


@router.get("/tasks/my", response_model=list[TaskRead])
def my_tasks(
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Tasks assigned to the caller."""
    return [TaskRead.from_task(t) for t in services.tasks.find_all_by_user(user.id)]


@router.patch("/tasks/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    patch: TaskPatch,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return TaskRead.from_task(services.tasks.update(task_id, patch, user))


@router.post("/tasks/{task_id}/complete", response_model=TaskRead)
def complete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return TaskRead.from_task(services.tasks.complete(task_id, user))


@router.post("/tasks/{task_id}/assign", response_model=TaskRead)
def assign_task(
    task_id: str,
    body: TaskAssignment,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return TaskRead.from_task(services.tasks.assign(task_id, body.assigned_to, user))


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    services.tasks.remove(task_id, user)
    return Response(status_code=204)


@router.post("/tasks/{task_id}/dependencies", response_model=TaskRead)
def add_task_dependency(
    task_id: str,
    body: TaskDependencyCreate,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Make the task wait on another task. Cycles are rejected."""
    return TaskRead.from_task(services.tasks.add_dependency(task_id, body.depends_on_id, user))


@router.delete("/tasks/{task_id}/dependencies/{depends_on_id}", response_model=TaskRead)
def remove_task_dependency(
    task_id: str,
    depends_on_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return TaskRead.from_task(services.tasks.remove_dependency(task_id, depends_on_id, user))
