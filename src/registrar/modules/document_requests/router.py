"""
Document Request Router (student side)

Endpoints:
- POST /requests - Submit one or more document requests
- GET /requests - Student dashboard (requests + counters)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.database import get_db
from registrar.core.events import EventBroker, get_event_broker
from registrar.modules.document_requests import service
from registrar.modules.document_requests.schemas import (
    CreateRequestsBody,
    CreateRequestsResponse,
    DocumentRequestResponse,
    StudentDashboardResponse,
    StudentDashboardStats,
)
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=CreateRequestsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Document Requests",
    description="""
Submit a document request form.

One request is created per document line, each `pending` with its own
reference number (e.g. `COE-2026-4821`). The line total is
`price x copies`. When a payment method is given without a reference, a
`PAY-<timestamp>` reference is generated.

**Document codes:** `tor-official`, `tor-unofficial`, `cog`, `coe`, `gmc`,
`diploma`, `hd`, `cue` (full document type names are accepted too).

**Errors:**
- 400 VALIDATION_ERROR: missing student number, no documents, unknown code
- 404 STUDENT_NOT_FOUND
- 503 PERSISTENCE_ERROR: nothing was saved
""",
)
async def create_requests(
    data: CreateRequestsBody,
    db: AsyncSession = Depends(get_db),
    broker: EventBroker = Depends(get_event_broker),
) -> CreateRequestsResponse:
    try:
        created = await service.create_requests(db, broker, data)
        return CreateRequestsResponse(
            requests=[DocumentRequestResponse.model_validate(r) for r in created]
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error creating document requests: {e}")
        raise internal_error() from e


@router.get(
    "",
    response_model=StudentDashboardResponse,
    summary="Student Dashboard",
    description="""
A student's requests, newest first, with counters:
`pending` (pending + processing), `ready`, `submitted`, `total`.

`referenceNo` narrows the list to one request; the counters still cover all
of the student's requests.
""",
)
async def get_dashboard(
    student_no: str | None = Query(None, alias="studentNo"),
    reference_no: str | None = Query(None, alias="referenceNo"),
    db: AsyncSession = Depends(get_db),
) -> StudentDashboardResponse:
    try:
        dashboard = await service.get_student_dashboard(db, student_no, reference_no)
        return StudentDashboardResponse(
            requests=[DocumentRequestResponse.model_validate(r) for r in dashboard.requests],
            stats=StudentDashboardStats(
                pending=dashboard.pending,
                ready=dashboard.ready,
                submitted=dashboard.submitted,
                total=dashboard.total,
            ),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error loading dashboard for {student_no}: {e}")
        raise internal_error() from e
