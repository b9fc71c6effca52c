"""
Shared module - Base model, camelCase schemas and service errors.
"""

from registrar.modules.shared.errors import (
    AuditWriteError,
    InvalidActionError,
    NotFoundError,
    PersistenceError,
    ServiceError,
    ValidationError,
    internal_error,
    raise_http_error,
)
from registrar.modules.shared.models import BaseModel
from registrar.modules.shared.schemas import (
    ActionRequest,
    ActionResponseMixin,
    CamelModel,
    ServiceWarning,
)

__all__ = [
    "BaseModel",
    "CamelModel",
    "ServiceWarning",
    "ActionRequest",
    "ActionResponseMixin",
    "ServiceError",
    "ValidationError",
    "InvalidActionError",
    "NotFoundError",
    "PersistenceError",
    "AuditWriteError",
    "raise_http_error",
    "internal_error",
]
