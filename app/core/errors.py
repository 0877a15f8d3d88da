"""Domain error types raised by the lifecycle services."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for lifecycle errors surfaced to the caller as-is."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """An entity id does not resolve."""

    status_code = 404


class ValidationError(DomainError):
    """Date ordering, missing referenced entity, or malformed input."""

    status_code = 400


class AuthorizationError(DomainError):
    """Role or ownership check failed."""

    status_code = 403


class ConflictError(DomainError):
    """Duplicate unique value, e.g. a second bootstrap admin."""

    status_code = 409


__all__ = [
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "AuthorizationError",
    "ConflictError",
]
