"""
Admin Actions

Closed sets of actions an admin can apply to a document request or a
student account. Wire names are the hyphenated values.
"""

import enum
from typing import TypeVar

from registrar.modules.shared.errors import InvalidActionError

E = TypeVar("E", bound=enum.Enum)


class RequestAction(str, enum.Enum):
    """Actions on a document request."""

    APPROVE = "approve"
    REJECT = "reject"
    HOLD = "hold"
    RELEASE = "release"
    VERIFY_PAYMENT = "verify-payment"
    MARK_READY = "mark-ready"


class StudentAction(str, enum.Enum):
    """Actions on a student account."""

    APPROVE = "approve"
    REJECT = "reject"
    HOLD = "hold"
    RELEASE_HOLD = "release-hold"
    DEACTIVATE = "deactivate"
    REACTIVATE = "reactivate"


def _parse(enum_cls: type[E], value: str | None) -> E:
    allowed = [member.value for member in enum_cls]
    name = value.strip() if value else None
    if not name:
        raise InvalidActionError(None, allowed)
    try:
        return enum_cls(name)
    except ValueError as e:
        raise InvalidActionError(name, allowed) from e


def parse_request_action(value: str | None) -> RequestAction:
    """Resolve a request action name, raising InvalidActionError if unknown."""
    return _parse(RequestAction, value)


def parse_student_action(value: str | None) -> StudentAction:
    """Resolve a student action name, raising InvalidActionError if unknown."""
    return _parse(StudentAction, value)
