"""
Audit Log Admin Router

- GET /admin/audit-logs - Newest audit entries (default 20, capped at 100)
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser, get_current_admin_user
from registrar.core.database import get_db
from registrar.modules.audit import service
from registrar.modules.audit.schemas import AuditLogListResponse, AuditLogResponse
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="List Audit Logs",
)
async def list_audit_logs(
    limit: int = Query(service.DEFAULT_LIST_LIMIT, description="Entries to return (max 100)"),
    db: AsyncSession = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin_user),
) -> AuditLogListResponse:
    """Newest-first audit trail."""
    try:
        entries = await service.list_recent(db, limit)
        logger.info(f"Admin {admin.id} listed {len(entries)} audit entries")
        return AuditLogListResponse(
            logs=[AuditLogResponse.model_validate(entry) for entry in entries]
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error listing audit logs: {e}")
        raise internal_error() from e
