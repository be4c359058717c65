from __future__ import annotations

from typing import Optional

from .enums import ConflictKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed, missing or outside an enum."""


class AuthenticationError(DomainError):
    """Raised when a device cannot be trusted.

    ``str(exc)`` is the message safe to return to the caller; ``reason`` is the
    internal detail that only goes to the audit log.
    """

    public_message = "Invalid device credentials"

    def __init__(self, reason: str, *, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.reason = reason


class MissingCredentialError(AuthenticationError):
    public_message = "API key is required"


class OriginRejectedError(AuthenticationError):
    public_message = "Source address not authorized"


class ReplayError(AuthenticationError):
    """Request timestamp outside the accepted window.

    Surfaced with the same generic message as other authentication failures.
    """


class ConflictError(DomainError):
    """Duplicate write. Retrying reproduces the same conflict."""

    def __init__(self, kind: ConflictKind, message: str):
        super().__init__(message)
        self.kind = kind


class NotFoundError(DomainError):
    """Raised for operations on an unknown id."""


class InternalError(DomainError):
    """Storage unavailable or unexpected failure."""
