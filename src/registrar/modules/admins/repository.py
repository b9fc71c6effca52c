"""
Admin Repository

Database operations for registrar admin accounts.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.modules.admins.models import Admin, AdminRole

logger = logging.getLogger(__name__)


class AdminRepository:
    """Repository for admin database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: AdminRole = AdminRole.ADMIN,
    ) -> Admin:
        """
        Create a new admin record.

        Args:
            db: Database session
            email: Admin email address (unique, lower-cased by the caller)
            password_hash: Hashed password
            first_name: Admin's first name
            last_name: Admin's last name
            role: Admin role

        Returns:
            Created Admin instance
        """
        admin = Admin(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )

        db.add(admin)
        await db.flush()
        await db.refresh(admin)

        logger.info(f"Created admin: {admin.id} - {admin.email} ({admin.role.value})")
        return admin

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Admin | None:
        """Get an admin by email address."""
        result = await db.execute(select(Admin).where(Admin.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_logged_in(db: AsyncSession, admin: Admin) -> Admin:
        """Record a successful login."""
        admin.last_login_at = datetime.now(UTC)
        await db.commit()
        await db.refresh(admin)
        return admin
