"""
Admin Accounts Router

Endpoints:
- POST /admin/admins - Create a registrar admin account

Security:
- Requires a registrar admin token
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser, get_current_admin_user
from registrar.core.database import get_db
from registrar.core.rate_limit import check_admin_rate_limit
from registrar.modules.admins import service
from registrar.modules.admins.schemas import (
    AdminResponse,
    CreateAdminRequest,
    CreateAdminResponse,
)
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_ADMIN_CREATE = (10, 3600)  # 10 accounts per hour


@router.post(
    "",
    response_model=CreateAdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Admin",
    description="""
Create a registrar admin account.

Email is stored lower-cased. `role` defaults to `admin`.

**Errors:**
- 400 VALIDATION_ERROR: a field is missing or the role is unknown
- 409 DUPLICATE_ADMIN: the email is already registered
""",
)
async def create_admin(
    data: CreateAdminRequest,
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> CreateAdminResponse:
    await check_admin_rate_limit(admin.id, "admin_create", *RATE_LIMIT_ADMIN_CREATE)

    try:
        created = await service.create_admin(db, data, created_by=admin)
        return CreateAdminResponse(admin=AdminResponse.model_validate(created))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error creating admin: {e}")
        raise internal_error() from e
