"""Contract lifecycle: creation, status transitions, approval and rejection."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from app.core.clock import Clock
from app.core.errors import NotFoundError, ValidationError
from app.db.models import AuditAction, AuditEntityType, Contract, ContractStatus, User
from app.db.repository import ContractRepository, NotificationRepository, UserRepository
from app.schemas.domain import ContractFilters, ContractInput, ContractPatch
from app.services.access import (
    CONTRACT_APPROVER_ROLES,
    require_contract_visible,
    require_role,
    visible_owner_scope,
)
from app.services.audit import AuditTrail, snapshot
from app.services.notifications import NotificationFanout

logger = logging.getLogger(__name__)

_STATUS_FIELDS = ("status", "notes")


def _check_dates(effective: date, expiry: date) -> None:
    if effective >= expiry:
        raise ValidationError("Effective date must be before expiry date")


def append_rejection(notes: Optional[str], reason: str) -> str:
    """Append a rejection line to existing notes without overwriting them."""
    line = f"REJECTED: {reason}"
    return f"{notes}\n\n{line}" if notes else line


class ContractManager:
    def __init__(
        self,
        contracts: ContractRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        fanout: NotificationFanout,
        audit: AuditTrail,
        clock: Clock,
    ):
        self.contracts = contracts
        self.users = users
        self.notifications = notifications
        self.fanout = fanout
        self.audit = audit
        self.clock = clock

    def _require_stakeholder(self, stakeholder_id: Optional[str]) -> None:
        if stakeholder_id and self.users.get(stakeholder_id) is None:
            raise ValidationError(f"Stakeholder with ID {stakeholder_id} not found")

    def create(self, data: ContractInput, owner_id: str) -> Contract:
        """Persist a draft contract and ask every active admin to approve it."""
        _check_dates(data.effective_date, data.expiry_date)
        self._require_stakeholder(data.stakeholder_id)

        contract = self.contracts.add(
            Contract(
                **data.model_dump(),
                owner_id=owner_id,
                status=ContractStatus.draft,
            )
        )

        self.fanout.notify_contract_approval_required(contract)
        self.audit.record(
            AuditAction.create,
            AuditEntityType.contract,
            contract.id,
            owner_id,
            f"Contract created: {contract.title}",
            new_values=snapshot(contract, ("title", "type", "status", "effective_date", "expiry_date")),
        )
        logger.info("Contract %s created by %s", contract.id, owner_id)
        return contract

    def find_one(self, contract_id: str, viewer: Optional[User] = None) -> Contract:
        contract = self.contracts.get(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract with ID {contract_id} not found")
        if viewer is not None:
            require_contract_visible(viewer, contract)
        return contract

    def find_all(
        self,
        filters: ContractFilters,
        page: int = 1,
        limit: int = 10,
        viewer: Optional[User] = None,
    ) -> tuple[list[Contract], int]:
        if viewer is not None:
            scope = visible_owner_scope(viewer)
            if scope is not None:
                filters = filters.model_copy(update={"owner_id": scope})
        return self.contracts.list(filters, page=page, limit=limit)

    def update(self, contract_id: str, patch: ContractPatch, actor: User) -> Contract:
        contract = self.find_one(contract_id, viewer=actor)
        changes = patch.model_dump(exclude_unset=True)

        effective = changes.get("effective_date", contract.effective_date)
        expiry = changes.get("expiry_date", contract.expiry_date)
        if "effective_date" in changes or "expiry_date" in changes:
            _check_dates(effective, expiry)
        if changes.get("stakeholder_id") and changes["stakeholder_id"] != contract.stakeholder_id:
            self._require_stakeholder(changes["stakeholder_id"])

        old_values = snapshot(contract, changes.keys())
        for field, value in changes.items():
            setattr(contract, field, value)
        self.contracts.save(contract)

        self.audit.record(
            AuditAction.update,
            AuditEntityType.contract,
            contract.id,
            actor.id,
            f"Contract updated: {contract.title}",
            old_values=old_values,
            new_values=snapshot(contract, changes.keys()),
        )
        return contract

    def _transition(
        self,
        contract: Contract,
        new_status: ContractStatus,
        actor: User,
        action: AuditAction,
        notes: Optional[str] = None,
    ) -> Contract:
        old_values = snapshot(contract, _STATUS_FIELDS)
        old_status = contract.status

        contract.status = new_status
        if notes is not None:
            contract.notes = notes
        self.contracts.save(contract)

        self.fanout.notify_contract_status_changed(contract, old_status, new_status, actor)
        self.audit.record(
            action,
            AuditEntityType.contract,
            contract.id,
            actor.id,
            f"Contract status changed from {old_status.value} to {new_status.value}",
            old_values=old_values,
            new_values=snapshot(contract, _STATUS_FIELDS),
        )
        logger.info(
            "Contract %s: %s -> %s by %s", contract.id, old_status.value, new_status.value, actor.id
        )
        return contract

    def update_status(self, contract_id: str, new_status: ContractStatus, actor: User) -> Contract:
        contract = self.find_one(contract_id, viewer=actor)
        action = AuditAction.approve if new_status == ContractStatus.active else AuditAction.update
        return self._transition(contract, new_status, actor, action)

    def approve(self, contract_id: str, actor: User) -> Contract:
        require_role(actor, CONTRACT_APPROVER_ROLES, "approve contracts")
        return self.update_status(contract_id, ContractStatus.active, actor)

    def reject(self, contract_id: str, reason: str, actor: User) -> Contract:
        require_role(actor, CONTRACT_APPROVER_ROLES, "reject contracts")
        contract = self.find_one(contract_id)
        return self._transition(
            contract,
            ContractStatus.terminated,
            actor,
            AuditAction.reject,
            notes=append_rejection(contract.notes, reason),
        )

    def remove(self, contract_id: str, actor: User) -> None:
        require_role(actor, CONTRACT_APPROVER_ROLES, "delete contracts")
        contract = self.find_one(contract_id)

        self.notifications.detach_tasks([task.id for task in contract.tasks])
        self.notifications.detach_contract(contract.id)
        self.audit.record(
            AuditAction.delete,
            AuditEntityType.contract,
            contract.id,
            actor.id,
            f"Contract deleted: {contract.title}",
            old_values=snapshot(contract, ("title", "status")),
        )
        self.contracts.delete(contract)
        logger.info("Contract %s deleted by %s", contract_id, actor.id)

    def get_expiring_contracts(
        self, days_threshold: int = 30, viewer: Optional[User] = None
    ) -> list[Contract]:
        """Active contracts expiring between today and today + `days_threshold`."""
        today = self.clock.today()
        contracts = self.contracts.active_expiring_between(today, today + timedelta(days=days_threshold))
        if viewer is not None:
            scope = visible_owner_scope(viewer)
            if scope is not None:
                contracts = [c for c in contracts if c.owner_id == scope]
        return contracts


__all__ = ["ContractManager", "append_rejection"]
