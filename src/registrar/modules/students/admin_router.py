"""
Student Admin Router

Registrar endpoints for reviewing student accounts.

Endpoints:
- GET /admin/students - List students with filters
- PATCH /admin/students/{id} - Apply an account action

Security:
- All endpoints require a registrar admin token
- Actions are rate limited per admin and audited
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser, get_current_admin_user
from registrar.core.database import get_db
from registrar.core.events import EventBroker, get_event_broker
from registrar.core.rate_limit import check_admin_rate_limit
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error
from registrar.modules.shared.schemas import ActionRequest
from registrar.modules.students import service
from registrar.modules.students.schemas import (
    StudentActionResponse,
    StudentListResponse,
    StudentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_STUDENT_ACTION = (30, 60)  # 30 actions per minute


@router.get(
    "",
    response_model=StudentListResponse,
    summary="List Students",
    description="""
List student accounts, newest first.

**Filters:**
- `status`: Pending, Active or Rejected
- `onHold`: only students on hold (true) or not on hold (false)
- `deactivated`: only deactivated (true) or active (false) accounts
""",
)
async def list_students(
    status_filter: str | None = Query(None, alias="status"),
    on_hold: bool | None = Query(None, alias="onHold"),
    deactivated: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> StudentListResponse:
    try:
        students = await service.admin_list_students(
            db, status=status_filter, on_hold=on_hold, deactivated=deactivated
        )
        return StudentListResponse(
            students=[StudentResponse.model_validate(s) for s in students]
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error listing students: {e}")
        raise internal_error() from e


@router.patch(
    "/{student_id}",
    response_model=StudentActionResponse,
    summary="Apply Student Action",
    description="""
Apply an account action to a student.

**Actions:**
- `approve`: status Active, clears any hold
- `reject`: status Rejected
- `hold`: status Active and on hold (`reason`, optional `holdUntil`)
- `release-hold`: clears the hold
- `deactivate` / `reactivate`: toggles deactivation

Any action is accepted from any current state.

Every action writes an audit entry and publishes `student-updated` on the
live update stream. If the audit entry cannot be written the change is kept
and the response carries `auditRecorded: false` with a warning.

**Errors:**
- 400 INVALID_ACTION: missing or unknown action
- 404 STUDENT_NOT_FOUND
- 503 PERSISTENCE_ERROR: the change was not saved
""",
)
async def update_student(
    student_id: UUID,
    data: ActionRequest,
    db: AsyncSession = Depends(get_db),
    broker: EventBroker = Depends(get_event_broker),
    admin: AdminUser = Depends(get_current_admin_user),
) -> StudentActionResponse:
    await check_admin_rate_limit(admin.id, "student_action", *RATE_LIMIT_STUDENT_ACTION)

    try:
        outcome = await service.admin_update_student(db, broker, student_id, data, admin)
        return StudentActionResponse(
            student=StudentResponse.model_validate(outcome.entity),
            audit_recorded=outcome.audit_recorded,
            warning=outcome.warning,
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error updating student {student_id}: {e}")
        raise internal_error() from e
