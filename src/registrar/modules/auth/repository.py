"""
Password Reset Token Repository
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PasswordResetToken


async def create(
    db: AsyncSession,
    *,
    student_id: UUID,
    token_hash: str,
    expires_at: datetime,
    created_at: datetime,
    ip: str | None,
    user_agent: str | None,
) -> PasswordResetToken:
    token = PasswordResetToken(
        student_id=student_id,
        token_hash=token_hash,
        expires_at=expires_at,
        created_at=created_at,
        ip=ip,
        user_agent=user_agent,
    )
    db.add(token)
    await db.commit()
    return token


async def get_by_hash(db: AsyncSession, token_hash: str) -> PasswordResetToken | None:
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def get_latest_for_student(db: AsyncSession, student_id: UUID) -> PasswordResetToken | None:
    result = await db.execute(
        select(PasswordResetToken)
        .where(PasswordResetToken.student_id == student_id)
        .order_by(PasswordResetToken.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_used_or_expired(db: AsyncSession, now: datetime) -> int:
    """Delete tokens that were used or have expired. Returns the row count."""
    result = await db.execute(
        delete(PasswordResetToken).where(
            or_(
                PasswordResetToken.used_at.is_not(None),
                PasswordResetToken.expires_at < now,
            )
        )
    )
    await db.commit()
    return result.rowcount or 0
