"""
Admin Action Pipeline

Shared write path for admin actions on requests and students:

    apply changes -> flush -> audit (savepoint) -> commit

The entity change and its audit entry commit in the same transaction. If
only the audit insert fails, its savepoint is rolled back and the change
still commits; the caller reports the failure as a warning. Any other
database failure rolls the whole session back and nothing is published.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser
from registrar.modules.audit import service as audit_service
from registrar.modules.audit.models import AuditLogEntry
from registrar.modules.audit.service import Actor
from registrar.modules.shared.errors import AuditWriteError, PersistenceError
from registrar.modules.shared.schemas import ServiceWarning

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ActionOutcome(Generic[T]):
    """Result of an admin action."""

    entity: T
    audit_entry: AuditLogEntry | None = None
    audit_error: AuditWriteError | None = None
    delivered: int = 0

    @property
    def audit_recorded(self) -> bool:
        return self.audit_entry is not None

    @property
    def warning(self) -> ServiceWarning | None:
        """Warning to surface when the audit entry is missing."""
        if self.audit_error is None:
            return None
        return ServiceWarning(
            error=self.audit_error.error_code,
            message=self.audit_error.message,
        )


def actor_from_admin(admin: AdminUser | None) -> Actor | None:
    if admin is None:
        return None
    return Actor(id=admin.id, email=admin.email)


def iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


async def persist_with_audit(
    db: AsyncSession,
    entity: T,
    changes: dict[str, Any],
    *,
    actor: Actor | None,
    action: str,
    entity_type: str,
    reason: str | None,
    metadata: dict[str, Any],
) -> ActionOutcome[T]:
    """
    Write ``changes`` onto ``entity`` and record one audit entry.

    Raises:
        PersistenceError: If the change could not be written
    """
    audit_entry: AuditLogEntry | None = None
    audit_error: AuditWriteError | None = None
    # Read before any rollback expires the instance
    entity_id = entity.id

    try:
        for field, value in changes.items():
            setattr(entity, field, value)
        await db.flush()

        try:
            async with db.begin_nested():
                audit_entry = await audit_service.record(
                    db,
                    actor=actor,
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    reason=reason,
                    metadata=metadata,
                )
        except AuditWriteError as e:
            audit_error = e
            logger.error(
                f"{entity_type} {entity_id} updated ({action}) without an audit entry"
            )

        await db.commit()
        await db.refresh(entity)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to persist {action} on {entity_type} {entity_id}: {e}")
        raise PersistenceError() from e

    return ActionOutcome(entity=entity, audit_entry=audit_entry, audit_error=audit_error)
