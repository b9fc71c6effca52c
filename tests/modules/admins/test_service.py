"""
Tests for admin account creation.

These tests verify:
- Field trimming, email lower-casing and the default role
- Missing fields and unknown roles are rejected before any write
- Duplicate emails, including a lost insert race
- Database failures surface as PersistenceError
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from registrar.modules.admins.models import Admin, AdminRole
from registrar.modules.admins.schemas import CreateAdminRequest
from registrar.modules.admins.service import DuplicateAdminError, create_admin, parse_role
from registrar.modules.shared.errors import PersistenceError, ValidationError

SERVICE = "registrar.modules.admins.service"


@pytest.fixture
def new_admin():
    return CreateAdminRequest(
        email="  Maria.Santos@HAU.edu.ph ",
        password=" s3cret ",
        first_name=" Maria ",
        last_name=" Santos ",
    )


# ============================================
# Test parse_role
# ============================================


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, AdminRole.ADMIN),
        ("  ", AdminRole.ADMIN),
        ("admin", AdminRole.ADMIN),
        (" SuperAdmin ", AdminRole.SUPERADMIN),
    ],
)
def test_parse_role(value, expected):
    assert parse_role(value) == expected


def test_parse_role_unknown():
    with pytest.raises(ValidationError) as exc_info:
        parse_role("dean")

    assert "dean" in exc_info.value.message


# ============================================
# Test create_admin
# ============================================


@pytest.mark.asyncio
async def test_create_admin_trims_and_defaults_role(mock_db, admin, new_admin):
    created = MagicMock(spec=Admin)

    with (
        patch(f"{SERVICE}.AdminRepository") as mock_repo,
        patch(f"{SERVICE}.hash_password", return_value="hashed") as mock_hash,
    ):
        mock_repo.get_by_email = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=created)

        result = await create_admin(mock_db, new_admin, created_by=admin)

    assert result is created
    mock_repo.get_by_email.assert_awaited_once_with(mock_db, "maria.santos@hau.edu.ph")
    mock_hash.assert_called_once_with("s3cret")
    mock_repo.create.assert_awaited_once_with(
        mock_db,
        email="maria.santos@hau.edu.ph",
        password_hash="hashed",
        first_name="Maria",
        last_name="Santos",
        role=AdminRole.ADMIN,
    )
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_admin_with_explicit_role(mock_db, new_admin):
    new_admin.role = "superadmin"

    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=MagicMock(spec=Admin))

        await create_admin(mock_db, new_admin)

    assert mock_repo.create.await_args.kwargs["role"] == AdminRole.SUPERADMIN


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["email", "password", "first_name", "last_name"])
async def test_create_admin_requires_every_field(mock_db, new_admin, missing):
    setattr(new_admin, missing, "   ")

    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        with pytest.raises(ValidationError) as exc_info:
            await create_admin(mock_db, new_admin)

    assert exc_info.value.message == "All fields are required."
    assert exc_info.value.status_code == 400
    mock_repo.create.assert_not_called()


@pytest.mark.asyncio
async def test_create_admin_unknown_role(mock_db, new_admin):
    new_admin.role = "dean"

    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        with pytest.raises(ValidationError):
            await create_admin(mock_db, new_admin)

    mock_repo.get_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_create_admin_duplicate_email(mock_db, new_admin):
    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=MagicMock(spec=Admin))
        mock_repo.create = AsyncMock()

        with pytest.raises(DuplicateAdminError) as exc_info:
            await create_admin(mock_db, new_admin)

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Admin already exists."
    mock_repo.create.assert_not_awaited()
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_admin_race_becomes_duplicate(mock_db, new_admin):
    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT INTO admins", {}, Exception("unique"))
        )

        with pytest.raises(DuplicateAdminError):
            await create_admin(mock_db, new_admin)

    mock_db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_admin_commit_failure(mock_db, new_admin):
    mock_db.commit.side_effect = OperationalError("COMMIT", {}, Exception("down"))

    with patch(f"{SERVICE}.AdminRepository") as mock_repo:
        mock_repo.get_by_email = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(return_value=MagicMock(spec=Admin))

        with pytest.raises(PersistenceError) as exc_info:
            await create_admin(mock_db, new_admin)

    assert exc_info.value.status_code == 503
    mock_db.rollback.assert_awaited_once()
