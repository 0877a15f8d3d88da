"""On-demand expiry sweep trigger."""

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.config import settings
from app.db.models import User, UserRole
from app.deps import get_current_user
from app.schemas.api import SweepStarted
from app.services.access import require_role
from worker.workflows import ExpirySweepWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sweeps", tags=["sweeps"])


@router.post("/run", response_model=SweepStarted, status_code=202)
async def run_sweep(
    request: Request,
    user: User = Depends(get_current_user),
):
    """Start a one-off expiry sweep outside the daily schedule (admin only)."""
    require_role(user, {UserRole.admin}, "run the expiry sweep")

    temporal = getattr(request.app.state, "temporal", None)
    if temporal is None:
        raise HTTPException(status_code=503, detail="Sweep service unavailable")

    workflow_id = f"{settings.SWEEP_WORKFLOW_ID}-manual-{uuid4()}"
    await temporal.start_workflow(
        ExpirySweepWorkflow.run,
        id=workflow_id,
        task_queue=settings.WORKER_TASK_QUEUE,
    )

    logger.info("Started manual expiry sweep %s by %s", workflow_id, user.id)
    return SweepStarted(workflow_id=workflow_id, status="started")
