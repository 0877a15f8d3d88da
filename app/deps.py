"""Shared dependencies for FastAPI routes."""

from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.db.models import User
from app.db.session import get_db_dependency
from app.services.audit import RequestContext
from app.services.email import EmailDispatcher
from app.services.factory import LifecycleServices, build_email_dispatcher, build_services

_email: Optional[EmailDispatcher] = None
_email_ready = False


def get_email_dispatcher() -> Optional[EmailDispatcher]:
    """Get or lazily initialize the email dispatcher singleton.

    Lazy initialization keeps SMTP settings out of import time.
    """
    global _email, _email_ready
    if not _email_ready:
        _email = build_email_dispatcher()
        _email_ready = True
    return _email


def get_clock() -> Clock:
    return SystemClock()


def get_services(
    request: Request,
    db: Session = Depends(get_db_dependency),
    clock: Clock = Depends(get_clock),
    email: Optional[EmailDispatcher] = Depends(get_email_dispatcher),
) -> Iterator[LifecycleServices]:
    """Services for one request; emails are sent once the request has committed."""
    context = RequestContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    services = build_services(db, clock=clock, email=email, context=context)
    with services.fanout.outbox():
        yield services
        db.commit()


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    db: Session = Depends(get_db_dependency),
) -> User:
    """Load the caller named by the gateway-supplied X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    user = db.get(User, x_user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user


__all__ = ["get_clock", "get_current_user", "get_email_dispatcher", "get_services"]
