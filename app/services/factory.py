"""Factories wiring repositories, clock and email delivery into the lifecycle services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.core.config import settings
from app.db.repository import build_repositories
from app.services.audit import AuditTrail, RequestContext
from app.services.contracts import ContractManager
from app.services.dashboard import DashboardAggregator
from app.services.email import EmailDispatcher, LoggingEmailDispatcher, SmtpEmailDispatcher
from app.services.notifications import NotificationFanout
from app.services.sweep import ExpirySweep
from app.services.tasks import TaskManager
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)


def build_email_dispatcher() -> Optional[EmailDispatcher]:
    """Build the email dispatcher from settings.

    Settings used:
        EMAIL_ENABLED: when false no email is attempted at all
        SMTP_HOST / SMTP_PORT: SMTP server; empty host logs emails instead
        SMTP_USERNAME / SMTP_PASSWORD: optional login
        SMTP_USE_SSL: implicit TLS instead of STARTTLS
        MAIL_FROM: sender address
    """
    if not settings.EMAIL_ENABLED:
        return None
    if not settings.SMTP_HOST:
        logger.info("SMTP_HOST not set, emails will be logged only")
        return LoggingEmailDispatcher()
    return SmtpEmailDispatcher(
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        sender=settings.MAIL_FROM,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_ssl=settings.SMTP_USE_SSL,
    )


@dataclass
class LifecycleServices:
    """Services sharing one session, clock and audit context."""

    fanout: NotificationFanout
    contracts: ContractManager
    tasks: TaskManager
    users: UserDirectory
    sweep: ExpirySweep
    dashboard: DashboardAggregator


def build_services(
    db: Session,
    clock: Clock | None = None,
    email: EmailDispatcher | None = None,
    context: RequestContext | None = None,
) -> LifecycleServices:
    clock = clock or SystemClock()
    repos = build_repositories(db)
    audit = AuditTrail(repos.audit_logs, context)
    fanout = NotificationFanout(repos.users, repos.notifications, audit, clock, email)

    return LifecycleServices(
        fanout=fanout,
        contracts=ContractManager(repos.contracts, repos.users, repos.notifications, fanout, audit, clock),
        tasks=TaskManager(
            repos.tasks, repos.contracts, repos.users, repos.notifications, fanout, audit, clock
        ),
        users=UserDirectory(repos.users, audit, admin_secret=settings.ADMIN_SECRET),
        sweep=ExpirySweep(db, repos.contracts, repos.tasks, fanout, clock),
        dashboard=DashboardAggregator(db, clock),
    )


__all__ = ["LifecycleServices", "build_email_dispatcher", "build_services"]
