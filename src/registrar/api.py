from fastapi import APIRouter

from registrar.modules.admins.admin_router import router as admin_admins_router
from registrar.modules.audit.admin_router import router as admin_audit_router
from registrar.modules.auth.router import router as auth_router
from registrar.modules.document_requests.admin_router import (
    overview_router as admin_overview_router,
)
from registrar.modules.document_requests.admin_router import router as admin_requests_router
from registrar.modules.document_requests.router import router as requests_router
from registrar.modules.events.router import router as events_router
from registrar.modules.students.admin_router import router as admin_students_router
from registrar.modules.students.router import router as profile_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(requests_router, prefix="/requests", tags=["Document Requests"])

api_router.include_router(events_router, prefix="/events", tags=["Live Updates"])

api_router.include_router(profile_router, prefix="/profile", tags=["Student Profile"])

api_router.include_router(
    admin_requests_router,
    prefix="/admin/requests",
    tags=["Admin - Requests"],
)

api_router.include_router(
    admin_overview_router,
    prefix="/admin/overview",
    tags=["Admin - Requests"],
)

api_router.include_router(
    admin_students_router,
    prefix="/admin/students",
    tags=["Admin - Students"],
)

api_router.include_router(
    admin_audit_router,
    prefix="/admin/audit-logs",
    tags=["Admin - Audit Log"],
)

api_router.include_router(
    admin_admins_router,
    prefix="/admin/admins",
    tags=["Admin - Accounts"],
)
