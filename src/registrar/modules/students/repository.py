"""
Student Repository

Database operations for student accounts. No business logic.
"""

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Student, StudentStatus


async def get_by_id(db: AsyncSession, student_id: UUID) -> Student | None:
    return await db.get(Student, student_id)


async def get_by_student_no(db: AsyncSession, student_no: str) -> Student | None:
    result = await db.execute(select(Student).where(Student.student_no == student_no))
    return result.scalar_one_or_none()


async def get_by_email(db: AsyncSession, email: str) -> Student | None:
    """Emails are stored lower-cased."""
    result = await db.execute(select(Student).where(Student.email == email.lower()))
    return result.scalar_one_or_none()


async def find_conflicting(db: AsyncSession, student_no: str, email: str) -> Student | None:
    """A student that already holds this student number or email."""
    result = await db.execute(
        select(Student)
        .where(or_(Student.student_no == student_no, Student.email == email.lower()))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create(db: AsyncSession, student: Student) -> Student:
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


async def list_for_admin(
    db: AsyncSession,
    status: StudentStatus | None = None,
    on_hold: bool | None = None,
    deactivated: bool | None = None,
) -> list[Student]:
    """Students matching the filters, newest first."""
    query = select(Student)

    if status is not None:
        query = query.where(Student.status == status)
    if on_hold is not None:
        query = query.where(Student.is_on_hold.is_(on_hold))
    if deactivated is not None:
        query = query.where(Student.is_deactivated.is_(deactivated))

    result = await db.execute(query.order_by(Student.created_at.desc()))
    return list(result.scalars().all())


async def count_by_status(db: AsyncSession, status: StudentStatus) -> int:
    result = await db.execute(
        select(func.count()).select_from(Student).where(Student.status == status)
    )
    return result.scalar_one()
