"""User directory: registration and first-admin bootstrap."""

from __future__ import annotations

import hmac
import logging
from typing import Optional

from app.core.errors import AuthorizationError, ConflictError, NotFoundError
from app.db.models import AuditAction, AuditEntityType, User, UserRole
from app.db.repository import UserRepository
from app.schemas.domain import UserInput
from app.services.access import require_role
from app.services.audit import AuditTrail, snapshot

logger = logging.getLogger(__name__)


class UserDirectory:
    def __init__(self, users: UserRepository, audit: AuditTrail, admin_secret: str = ""):
        self.users = users
        self.audit = audit
        self.admin_secret = admin_secret

    def get(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    def _create(self, data: UserInput, role: UserRole, actor_id: Optional[str]) -> User:
        if self.users.get_by_email(data.email) is not None:
            raise ConflictError(f"User with email {data.email} already exists")

        user = self.users.add(
            User(
                email=data.email.lower(),
                first_name=data.first_name,
                last_name=data.last_name,
                role=role,
                department=data.department,
                is_active=True,
            )
        )
        self.audit.record(
            AuditAction.create,
            AuditEntityType.user,
            user.id,
            actor_id or user.id,
            f"User registered: {user.email}",
            new_values=snapshot(user, ("email", "role", "department")),
        )
        logger.info("User %s registered with role %s", user.id, role.value)
        return user

    def register(self, data: UserInput, actor: User) -> User:
        require_role(actor, {UserRole.admin}, "register users")
        return self._create(data, data.role, actor.id)

    def bootstrap_admin(self, data: UserInput, secret: str) -> User:
        """Create the first admin. Needs the configured secret; refused once any admin exists."""
        if not self.admin_secret or not hmac.compare_digest(secret, self.admin_secret):
            raise AuthorizationError("Invalid bootstrap secret")
        if self.users.any_admin():
            raise ConflictError("An admin user already exists")
        return self._create(data, UserRole.admin, None)


__all__ = ["UserDirectory"]
