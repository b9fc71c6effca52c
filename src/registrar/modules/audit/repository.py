"""
Audit Log Repository

Insert and read audit entries. There is intentionally no update or delete.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AuditLogEntry


async def create(
    db: AsyncSession,
    *,
    actor_id: UUID | None,
    actor_email: str | None,
    action: str,
    entity_type: str,
    entity_id: str,
    reason: str | None,
    details: dict[str, Any] | None,
) -> AuditLogEntry:
    """Add an audit entry and flush it inside the caller's transaction."""
    entry = AuditLogEntry(
        actor_id=actor_id,
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        details=details,
        created_at=datetime.now(UTC),
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_recent(db: AsyncSession, limit: int) -> list[AuditLogEntry]:
    """Newest entries first."""
    result = await db.execute(
        select(AuditLogEntry).order_by(AuditLogEntry.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
