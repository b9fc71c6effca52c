"""
Document Request Admin Router

Registrar endpoints for processing document requests.

Endpoints:
- GET /admin/requests - List requests with filters
- PATCH /admin/requests/{id} - Apply a processing action
- GET /admin/overview - Dashboard counters and recent requests

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
from registrar.modules.document_requests import service
from registrar.modules.document_requests.schemas import (
    AdminRequestListResponse,
    AdminRequestResponse,
    DocumentRequestResponse,
    OverviewResponse,
    OverviewStats,
    RequestActionResponse,
)
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error
from registrar.modules.shared.schemas import ActionRequest

logger = logging.getLogger(__name__)

router = APIRouter()
overview_router = APIRouter()

RATE_LIMIT_REQUEST_ACTION = (60, 60)  # 60 actions per minute


@router.get(
    "",
    response_model=AdminRequestListResponse,
    summary="List Requests",
    description="""
List document requests, newest first, with the owning student.

**Filters:**
- `status`: pending, processing, submitted, ready or rejected
- `needsVerification=true`: payment method set, payment not yet verified,
  status pending or processing
- `requestId`: a single request
""",
)
async def list_requests(
    status_filter: str | None = Query(None, alias="status"),
    needs_verification: bool = Query(False, alias="needsVerification"),
    request_id: UUID | None = Query(None, alias="requestId"),
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> AdminRequestListResponse:
    try:
        requests = await service.admin_list_requests(
            db,
            status=status_filter,
            needs_verification=needs_verification,
            request_id=request_id,
        )
        return AdminRequestListResponse(
            requests=[AdminRequestResponse.model_validate(r) for r in requests]
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error listing requests: {e}")
        raise internal_error() from e


@router.patch(
    "/{request_id}",
    response_model=RequestActionResponse,
    summary="Apply Request Action",
    description="""
Apply a processing action to a document request.

**Actions:**
- `approve`: status processing, approval time set; an official receipt
  number (`OR-<year>-<nnnn>`) is assigned on the first approval only
- `reject`: status rejected
- `hold` / `release`: set or clear the hold (`reason`, optional `holdUntil`)
- `verify-payment`: records verification and `reason` as the note; a pending
  request moves to processing
- `mark-ready`: status ready, completion time set

Any action is accepted from any current state.

Every action writes an audit entry and publishes `request-updated` on the
live update stream. If the audit entry cannot be written the change is kept
and the response carries `auditRecorded: false` with a warning.

**Errors:**
- 400 INVALID_ACTION: missing or unknown action
- 404 REQUEST_NOT_FOUND
- 503 PERSISTENCE_ERROR: the change was not saved
""",
)
async def update_request(
    request_id: UUID,
    data: ActionRequest,
    db: AsyncSession = Depends(get_db),
    broker: EventBroker = Depends(get_event_broker),
    admin: AdminUser = Depends(get_current_admin_user),
) -> RequestActionResponse:
    await check_admin_rate_limit(admin.id, "request_action", *RATE_LIMIT_REQUEST_ACTION)

    try:
        outcome = await service.admin_update_request(db, broker, request_id, data, admin)
        return RequestActionResponse(
            request=DocumentRequestResponse.model_validate(outcome.entity),
            audit_recorded=outcome.audit_recorded,
            warning=outcome.warning,
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error updating request {request_id}: {e}")
        raise internal_error() from e


@overview_router.get(
    "",
    response_model=OverviewResponse,
    summary="Admin Overview",
    description="""
Dashboard counters:
- `pendingRequests`: requests still pending
- `processingToday` / `submittedToday`: requests made today (UTC) that are
  now processing / submitted
- `pendingStudents`: accounts awaiting approval

Plus the five most recent requests.
""",
)
async def get_overview(
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> OverviewResponse:
    try:
        overview = await service.admin_get_overview(db)
        return OverviewResponse(
            stats=OverviewStats(
                pending_requests=overview.pending_requests,
                processing_today=overview.processing_today,
                submitted_today=overview.submitted_today,
                pending_students=overview.pending_students,
            ),
            recent_requests=[
                AdminRequestResponse.model_validate(r) for r in overview.recent_requests
            ],
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error loading overview: {e}")
        raise internal_error() from e
