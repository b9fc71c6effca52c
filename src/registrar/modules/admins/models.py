"""
Admin Models

Registrar staff accounts that review requests and student accounts.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from registrar.modules.shared import BaseModel


class AdminRole(str, Enum):
    """Admin roles in the registrar office."""

    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Admin(BaseModel):
    """Registrar admin account."""

    __tablename__ = "admins"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    role: Mapped[AdminRole] = mapped_column(
        ENUM(AdminRole, name="admin_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AdminRole.ADMIN,
    )

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email={self.email}, role={self.role.value})>"

    @property
    def full_name(self) -> str:
        """Return admin's full name."""
        return f"{self.first_name} {self.last_name}"
