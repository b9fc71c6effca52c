"""
Admin Account Service

Registrar admins create further admin accounts from the console.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser
from registrar.core.security import hash_password
from registrar.modules.admins.models import Admin, AdminRole
from registrar.modules.admins.repository import AdminRepository
from registrar.modules.admins.schemas import CreateAdminRequest
from registrar.modules.shared.errors import PersistenceError, ServiceError, ValidationError

logger = logging.getLogger(__name__)


class DuplicateAdminError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Admin already exists.",
            error_code="DUPLICATE_ADMIN",
            status_code=409,
        )


def _clean(value: str | None) -> str:
    return (value or "").strip()


def parse_role(value: str | None) -> AdminRole:
    """Blank means ``admin``; matching ignores case."""
    normalized = _clean(value).lower()
    if not normalized:
        return AdminRole.ADMIN
    for role in AdminRole:
        if role.value == normalized:
            return role
    allowed = ", ".join(r.value for r in AdminRole)
    raise ValidationError(f"Unknown admin role '{value}'. Allowed: {allowed}")


async def create_admin(
    db: AsyncSession,
    data: CreateAdminRequest,
    created_by: AdminUser | None = None,
) -> Admin:
    """
    Create a registrar admin account.

    Args:
        db: Database session
        data: Email, password, names and optional role
        created_by: Admin performing the action (logged only)

    Returns:
        The created Admin

    Raises:
        ValidationError: A field is missing or the role is unknown
        DuplicateAdminError: The email is already registered
        PersistenceError: The account could not be written
    """
    email = _clean(data.email).lower()
    first_name = _clean(data.first_name)
    last_name = _clean(data.last_name)
    password = _clean(data.password)

    if not all((email, first_name, last_name, password)):
        raise ValidationError("All fields are required.")
    role = parse_role(data.role)

    try:
        if await AdminRepository.get_by_email(db, email) is not None:
            raise DuplicateAdminError()

        admin = await AdminRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent create for the same email
        await db.rollback()
        raise DuplicateAdminError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create admin {email}: {e}")
        raise PersistenceError("Failed to create admin.") from e

    logger.info(
        f"Admin {email} ({role.value}) created by "
        f"{created_by.email if created_by else 'unknown'}"
    )
    return admin
