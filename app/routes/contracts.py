"""Contract lifecycle endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.db.models import ContractStatus, ContractType, User
from app.deps import get_current_user, get_services
from app.schemas.api import (
    ContractListResponse,
    ContractRead,
    ContractRejection,
    ContractStatusUpdate,
)
from app.schemas.domain import ContractFilters, ContractInput, ContractPatch
from app.services.factory import LifecycleServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contracts", tags=["contracts"])


@router.post("", response_model=ContractRead, status_code=201)
def create_contract(
    data: ContractInput,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Create a draft contract owned by the caller."""
    contract = services.contracts.create(data, user.id)
    return ContractRead.model_validate(contract)


@router.get("", response_model=ContractListResponse)
def list_contracts(
    type: Optional[ContractType] = None,
    status: Optional[ContractStatus] = None,
    department: Optional[str] = None,
    project: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """List visible contracts with filters, newest first."""
    filters = ContractFilters(
        type=type, status=status, department=department, project=project, search=search
    )
    items, total = services.contracts.find_all(filters, page=page, limit=limit, viewer=user)
    return ContractListResponse(
        items=[ContractRead.model_validate(c) for c in items],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/expiring", response_model=list[ContractRead])
def expiring_contracts(
    days: int = Query(30, ge=0, le=365),
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Active contracts expiring within `days`."""
    contracts = services.contracts.get_expiring_contracts(days, viewer=user)
    return [ContractRead.model_validate(c) for c in contracts]


@router.get("/{contract_id}", response_model=ContractRead)
def get_contract(
    contract_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return ContractRead.model_validate(services.contracts.find_one(contract_id, viewer=user))


@router.patch("/{contract_id}", response_model=ContractRead)
def update_contract(
    contract_id: str,
    patch: ContractPatch,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return ContractRead.model_validate(services.contracts.update(contract_id, patch, user))


@router.patch("/{contract_id}/status", response_model=ContractRead)
def update_contract_status(
    contract_id: str,
    body: ContractStatusUpdate,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    contract = services.contracts.update_status(contract_id, body.status, user)
    return ContractRead.model_validate(contract)


@router.post("/{contract_id}/approve", response_model=ContractRead)
def approve_contract(
    contract_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Approve a contract (admin and legal only)."""
    return ContractRead.model_validate(services.contracts.approve(contract_id, user))


@router.post("/{contract_id}/reject", response_model=ContractRead)
def reject_contract(
    contract_id: str,
    body: ContractRejection,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Reject a contract (admin and legal only); the reason is appended to its notes."""
    return ContractRead.model_validate(services.contracts.reject(contract_id, body.reason, user))


@router.delete("/{contract_id}", status_code=204)
def delete_contract(
    contract_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    services.contracts.remove(contract_id, user)
    return Response(status_code=204)
