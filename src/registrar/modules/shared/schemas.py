"""
Shared Schemas

The portal's frontend speaks camelCase JSON; snake_case is accepted on input.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ServiceWarning(CamelModel):
    """Non-fatal problem reported alongside a successful result."""

    error: str
    message: str


class ActionRequest(CamelModel):
    """
    Body of ``PATCH /admin/requests/{id}`` and ``PATCH /admin/students/{id}``.

    ``action`` is validated by the service so an unknown name is reported as
    INVALID_ACTION rather than a schema error.
    """

    action: str | None = Field(None, description="Action name, e.g. approve or hold")
    reason: str | None = Field(None, max_length=1000)
    hold_until: datetime | None = Field(None, description="Hold expiry (ISO 8601)")

    @field_validator("hold_until")
    @classmethod
    def normalize_hold_until(cls, v: datetime | None) -> datetime | None:
        """Naive timestamps are taken as UTC."""
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)


class ActionResponseMixin(CamelModel):
    """Fields every admin action response carries."""

    success: bool = True
    audit_recorded: bool = True
    warning: ServiceWarning | None = None
