"""
Shared Service Errors

Structured failures raised by every service layer. Routers turn them into
``HTTPException(detail={"error": ..., "message": ...})``.
"""

from uuid import UUID

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input is missing or malformed. Nothing is written."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="VALIDATION_ERROR", status_code=400)


class InvalidActionError(ServiceError):
    """Raised when an action name is missing or not in the known set."""

    def __init__(self, action: str | None, allowed: list[str]):
        if not action:
            message = "Action is required."
        else:
            message = f"Unknown action '{action}'. Allowed actions: {', '.join(allowed)}"
        super().__init__(message=message, error_code="INVALID_ACTION", status_code=400)


class NotFoundError(ServiceError):
    """Raised when an entity does not exist."""

    def __init__(self, entity: str, identifier: UUID | str | None = None):
        label = entity.replace("_", " ").capitalize()
        message = f"{label} {identifier} not found." if identifier else f"{label} not found."
        super().__init__(
            message=message,
            error_code=f"{entity.upper()}_NOT_FOUND",
            status_code=404,
        )


class PersistenceError(ServiceError):
    """Raised when the database is unavailable or rejects a write."""

    def __init__(self, message: str = "The record store rejected the change. Please try again."):
        super().__init__(message=message, error_code="PERSISTENCE_ERROR", status_code=503)


class AuditWriteError(ServiceError):
    """Raised when an audit entry could not be written."""

    def __init__(self, message: str = "The audit entry could not be recorded."):
        super().__init__(message=message, error_code="AUDIT_WRITE_FAILED", status_code=500)


def raise_http_error(e: ServiceError) -> None:
    """Convert a service error to an HTTPException."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def internal_error() -> HTTPException:
    """Generic 500 for unexpected failures (details stay in the logs)."""
    return HTTPException(
        status_code=500,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
