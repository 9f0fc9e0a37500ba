"""Typed failures raised by engine operations."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for every failure an engine operation can report."""

    kind: str = "engine"
    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ValidationError(EngineError):
    """Malformed or constraint-violating input; nothing was changed."""

    kind = "validation"
    status_code = 422


class ConflictError(EngineError):
    """Request conflicts with current state (duplicate empty tab, busy table)."""

    kind = "conflict"
    status_code = 409


class NotFoundError(EngineError):
    """Referenced order, line or table no longer exists."""

    kind = "not_found"
    status_code = 404


class ExternalServiceError(EngineError):
    """A downstream collaborator (payment link, print) failed."""

    kind = "external_service"
    status_code = 502


class AuthenticationError(EngineError):
    """The calling terminal session is no longer authorized.

    Never converted into an operation result; it travels to the session root.
    """

    kind = "authentication"
    status_code = 401
