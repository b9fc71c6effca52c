"""
Audit Log Schemas
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from registrar.modules.shared.schemas import CamelModel


class AuditLogResponse(CamelModel):
    """One audit entry."""

    id: UUID
    actor_id: UUID | None = None
    actor_email: str | None = None
    action: str
    entity_type: str
    entity_id: str
    reason: str | None = None
    metadata: dict[str, Any] | None = Field(None, validation_alias="details")
    created_at: datetime


class AuditLogListResponse(CamelModel):
    """Response for GET /admin/audit-logs."""

    logs: list[AuditLogResponse]
