"""Notification inbox endpoints for the calling user."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.db.models import NotificationStatus, User
from app.deps import get_current_user, get_services
from app.schemas.api import MarkAllReadResponse, NotificationRead, UnreadCountResponse
from app.services.factory import LifecycleServices

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    status: Optional[NotificationStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    """Caller's notifications, newest first."""
    items = services.fanout.get_user_notifications(user.id, status=status, limit=limit)
    return [NotificationRead.model_validate(n) for n in items]


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return UnreadCountResponse(unreadCount=services.fanout.get_unread_count(user.id))


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return NotificationRead.model_validate(services.fanout.mark_as_read(notification_id, user.id))


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_read(
    user: User = Depends(get_current_user),
    services: LifecycleServices = Depends(get_services),
):
    return MarkAllReadResponse(updated=services.fanout.mark_all_as_read(user.id))
