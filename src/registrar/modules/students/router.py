"""
Student Profile Router

Endpoints:
- GET /profile?studentNo= - Read a student's profile
- PUT /profile - Edit name, email, contact and enrollment details
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.database import get_db
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error
from registrar.modules.students import service
from registrar.modules.students.schemas import (
    ProfileResponse,
    ProfileUpdateRequest,
    StudentProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ProfileResponse,
    summary="Get Profile",
    description="""
A student's profile: names, email, phone, address, course, year level and
account status.

**Errors:**
- 400 VALIDATION_ERROR: missing student number
- 404 STUDENT_NOT_FOUND
""",
)
async def get_profile(
    student_no: str | None = Query(None, alias="studentNo"),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        student = await service.get_profile(db, student_no)
        return ProfileResponse(student=StudentProfile.model_validate(student))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error loading profile {student_no}: {e}")
        raise internal_error() from e


@router.put(
    "",
    response_model=ProfileResponse,
    summary="Update Profile",
    description="""
Edit a student's own profile. Values are trimmed and the email is stored
lower-cased. Omitted fields are left unchanged; sending an empty phone,
address, course or year level clears it.

**Errors:**
- 400 VALIDATION_ERROR: missing student number, blank name or invalid email
- 404 STUDENT_NOT_FOUND
- 409 DUPLICATE_EMAIL: the email belongs to another account
- 503 PERSISTENCE_ERROR: nothing was saved
""",
)
async def update_profile(
    data: ProfileUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    try:
        student = await service.update_profile(db, data)
        return ProfileResponse(student=StudentProfile.model_validate(student))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error updating profile {data.student_no}: {e}")
        raise internal_error() from e
