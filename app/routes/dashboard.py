"""Dashboard endpoints."""

from fastapi import APIRouter, Depends

from app.db.models import User
from app.deps import get_current_user, get_services
from app.schemas.api import DashboardStatsResponse, ValueAnalytics
from app.services.factory import LifecycleServices

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Counts, recent activity and upcoming deadlines visible to the caller."""
    stats = services.dashboard.get_stats(user)
    return DashboardStatsResponse.model_validate(stats, from_attributes=True)


@router.get("/contract-value", response_model=ValueAnalytics)
def contract_value(
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return ValueAnalytics.model_validate(services.dashboard.get_value_analytics(user))
