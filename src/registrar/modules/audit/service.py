"""
Audit Recorder

Every privileged mutation writes exactly one entry through ``record``, in the
same logical operation as the mutation. Write failures are raised to the
caller as ``AuditWriteError``; they are never swallowed here.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.modules.audit import repository
from registrar.modules.audit.models import AuditLogEntry
from registrar.modules.shared.errors import AuditWriteError, PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


@dataclass(frozen=True)
class Actor:
    """Who performed an action. Both fields may be unknown."""

    id: UUID | None = None
    email: str | None = None


ANONYMOUS = Actor()


async def record(
    db: AsyncSession,
    *,
    actor: Actor | None,
    action: str,
    entity_type: str,
    entity_id: UUID | str,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditLogEntry:
    """
    Append an audit entry.

    Args:
        db: Database session (entry joins the caller's transaction)
        actor: Admin performing the action, or None
        action: Action name as sent by the client (e.g. "verify-payment")
        entity_type: "request" or "student"
        entity_id: Id of the mutated entity
        reason: Free-text reason supplied by the admin
        metadata: Structured context (reference number, hold expiry, ...)

    Returns:
        The flushed AuditLogEntry

    Raises:
        AuditWriteError: If the entry could not be written
    """
    actor = actor or ANONYMOUS
    try:
        entry = await repository.create(
            db,
            actor_id=actor.id,
            actor_email=actor.email,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            reason=reason,
            details=metadata,
        )
    except SQLAlchemyError as e:
        logger.error(f"Audit write failed for {entity_type} {entity_id} ({action}): {e}")
        raise AuditWriteError() from e

    logger.info(
        f"Audit: {actor.email or 'unknown'} {action} {entity_type} {entity_id}"
    )
    return entry


def clamp_limit(limit: int | None) -> int:
    """Default 20, at least 1, capped at 100."""
    if limit is None:
        return DEFAULT_LIST_LIMIT
    return min(max(1, limit), MAX_LIST_LIMIT)


async def list_recent(db: AsyncSession, limit: int | None = None) -> list[AuditLogEntry]:
    """Newest audit entries first."""
    try:
        return await repository.list_recent(db, clamp_limit(limit))
    except SQLAlchemyError as e:
        logger.error(f"Failed to load audit logs: {e}")
        raise PersistenceError("Failed to load audit logs.") from e
