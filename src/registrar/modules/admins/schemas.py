"""Admin account schemas."""

from uuid import UUID

from registrar.modules.admins.models import AdminRole
from registrar.modules.shared.schemas import CamelModel


class CreateAdminRequest(CamelModel):
    """Body of ``POST /admin/admins``. Blank fields are rejected by the service."""

    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None


class AdminResponse(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: AdminRole


class CreateAdminResponse(CamelModel):
    success: bool = True
    admin: AdminResponse
