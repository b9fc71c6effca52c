"""
Document Request Repository

Database operations for document requests. No business logic.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DocumentRequest, RequestStatus

AWAITING_VERIFICATION = (RequestStatus.PENDING, RequestStatus.PROCESSING)


async def get_by_id(db: AsyncSession, request_id: UUID) -> DocumentRequest | None:
    return await db.get(DocumentRequest, request_id)


async def create_many(db: AsyncSession, rows: list[DocumentRequest]) -> list[DocumentRequest]:
    """Insert all rows in one transaction."""
    db.add_all(rows)
    await db.commit()
    for row in rows:
        await db.refresh(row)
    return rows


async def list_for_admin(
    db: AsyncSession,
    status: RequestStatus | None = None,
    needs_verification: bool = False,
    request_id: UUID | None = None,
) -> list[DocumentRequest]:
    """
    Requests matching the filters, newest first.

    ``needs_verification`` selects unverified requests that carry a payment
    method and are still pending or processing.
    """
    query = select(DocumentRequest)

    if status is not None:
        query = query.where(DocumentRequest.status == status)
    if request_id is not None:
        query = query.where(DocumentRequest.id == request_id)
    if needs_verification:
        query = query.where(
            DocumentRequest.payment_verified_at.is_(None),
            DocumentRequest.payment_method.is_not(None),
            DocumentRequest.status.in_(AWAITING_VERIFICATION),
        )

    result = await db.execute(query.order_by(DocumentRequest.requested_at.desc()))
    return list(result.scalars().all())


async def list_for_student(
    db: AsyncSession,
    student_id: UUID,
    reference_no: str | None = None,
) -> list[DocumentRequest]:
    query = select(DocumentRequest).where(DocumentRequest.student_id == student_id)
    if reference_no:
        query = query.where(DocumentRequest.reference_no == reference_no)

    result = await db.execute(query.order_by(DocumentRequest.requested_at.desc()))
    return list(result.scalars().all())


async def count_by_status_for_student(
    db: AsyncSession, student_id: UUID
) -> dict[RequestStatus, int]:
    """Per-status counts of one student's requests (missing statuses are 0)."""
    result = await db.execute(
        select(DocumentRequest.status, func.count())
        .where(DocumentRequest.student_id == student_id)
        .group_by(DocumentRequest.status)
    )
    counts = {status: 0 for status in RequestStatus}
    for status, count in result.all():
        counts[status] = count
    return counts


async def count_by_status(
    db: AsyncSession,
    status: RequestStatus,
    requested_since: datetime | None = None,
) -> int:
    query = (
        select(func.count()).select_from(DocumentRequest).where(DocumentRequest.status == status)
    )
    if requested_since is not None:
        query = query.where(DocumentRequest.requested_at >= requested_since)

    result = await db.execute(query)
    return result.scalar_one()


async def list_recent(db: AsyncSession, limit: int = 5) -> list[DocumentRequest]:
    result = await db.execute(
        select(DocumentRequest).order_by(DocumentRequest.requested_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
