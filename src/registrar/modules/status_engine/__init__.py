"""
Status Engine - pure transition rules for document requests and students.
"""

from registrar.modules.status_engine.actions import (
    RequestAction,
    StudentAction,
    parse_request_action,
    parse_student_action,
)
from registrar.modules.status_engine.engine import (
    AccessDecision,
    ActionParams,
    RequestState,
    Transition,
    apply_request_action,
    apply_student_action,
    student_can_authenticate,
)
from registrar.modules.status_engine.numbers import (
    generate_receipt_no,
    generate_reference_no,
    resolve_document_type,
)

__all__ = [
    "RequestAction",
    "StudentAction",
    "parse_request_action",
    "parse_student_action",
    "ActionParams",
    "RequestState",
    "Transition",
    "AccessDecision",
    "apply_request_action",
    "apply_student_action",
    "student_can_authenticate",
    "generate_reference_no",
    "generate_receipt_no",
    "resolve_document_type",
]
