"""Append-only audit trail writer."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from app.db.models import AuditAction, AuditEntityType, AuditLog
from app.db.repository import AuditLogRepository


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Client details copied onto every audit entry of a request."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def snapshot(obj: Any, fields: Iterable[str]) -> dict[str, Any]:
    """JSON-safe copy of selected attributes."""
    return {name: _jsonable(getattr(obj, name)) for name in fields}


class AuditTrail:
    def __init__(self, audit_logs: AuditLogRepository, context: RequestContext | None = None):
        self.audit_logs = audit_logs
        self.context = context or RequestContext()

    def record(
        self,
        action: AuditAction,
        entity_type: AuditEntityType,
        entity_id: str,
        user_id: str,
        description: str,
        *,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            description=description,
            old_values=old_values,
            new_values=new_values,
            meta=metadata,
            ip_address=self.context.ip_address,
            user_agent=self.context.user_agent,
        )
        return self.audit_logs.add(entry)


__all__ = ["AuditTrail", "RequestContext", "snapshot"]
