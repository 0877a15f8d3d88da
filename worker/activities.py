"""Temporal Activities for the expiry sweep workflow.

This module contains the activities executed by the worker:
- sweep_contracts: expiring/expired notifications for active contracts
- sweep_tasks: due-soon/overdue notifications for pending tasks
"""

from __future__ import annotations

import logging
from typing import Any

from temporalio import activity

from app.db.session import get_sync_db
from app.deps import get_email_dispatcher
from app.services import build_services

logger = logging.getLogger(__name__)


@activity.defn
def sweep_contracts() -> dict[str, Any]:
    """Run the contract expiry pass in its own session.

    Each contract is committed on its own; a failing contract is rolled back,
    logged and skipped.

    Returns:
        Dict with 'scanned', 'notified' and 'failed' counters.
    """
    with get_sync_db() as db:
        services = build_services(db, email=get_email_dispatcher())
        result = services.sweep.run_contract_pass()

    logger.info("Contract sweep done: %s", result.to_dict())
    return result.to_dict()


@activity.defn
def sweep_tasks() -> dict[str, Any]:
    """Run the task due-date pass in its own session.

    Returns:
        Dict with 'scanned', 'notified' and 'failed' counters.
    """
    with get_sync_db() as db:
        services = build_services(db, email=get_email_dispatcher())
        result = services.sweep.run_task_pass()

    logger.info("Task sweep done: %s", result.to_dict())
    return result.to_dict()


__all__ = ["sweep_contracts", "sweep_tasks"]
