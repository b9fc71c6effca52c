"""
Seed Registrar Admin

Creates the first registrar admin account. Safe to re-run: an existing
account with the same email is left untouched.

Usage:
    ADMIN_EMAIL=registrar@school.edu ADMIN_PASSWORD=... python scripts/seed_admin.py

Optional: ADMIN_FIRST_NAME, ADMIN_LAST_NAME, ADMIN_ROLE (admin | superadmin)
"""

import asyncio
import os
import sys

from registrar.core.database import async_session_maker, close_db
from registrar.core.security import hash_password
from registrar.modules.admins import AdminRepository, AdminRole


async def seed_admin() -> int:
    """Create the admin if it doesn't exist. Returns a process exit code."""
    email = os.environ.get("ADMIN_EMAIL", "").strip().lower()
    password = os.environ.get("ADMIN_PASSWORD", "")
    first_name = os.environ.get("ADMIN_FIRST_NAME", "Registrar")
    last_name = os.environ.get("ADMIN_LAST_NAME", "Admin")

    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set.")
        return 1

    try:
        role = AdminRole(os.environ.get("ADMIN_ROLE", AdminRole.SUPERADMIN.value).lower())
    except ValueError:
        print(f"ADMIN_ROLE must be one of: {', '.join(r.value for r in AdminRole)}")
        return 1

    async with async_session_maker() as db:
        existing = await AdminRepository.get_by_email(db, email)
        if existing:
            print(f"Admin already exists: {email}")
            print(f"  ID: {existing.id}")
            print(f"  Role: {existing.role.value}")
            return 0

        admin = await AdminRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Email: {admin.email}")
        print(f"  Name: {admin.full_name}")
        print(f"  ID: {admin.id}")
        print(f"  Role: {admin.role.value}")

    await close_db()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(seed_admin()))
