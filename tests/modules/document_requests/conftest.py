"""
Fixtures for document request tests.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from registrar.modules.document_requests.models import (
    DocumentRequest,
    DocumentType,
    RequestStatus,
)
from registrar.modules.students.models import Student, StudentStatus


@pytest.fixture
def sample_student():
    student = MagicMock(spec=Student)
    student.id = uuid4()
    student.student_no = "2021-00123"
    student.first_name = "Maria"
    student.last_name = "Santos"
    student.email = "maria.santos@hau.edu.ph"
    student.status = StudentStatus.ACTIVE
    return student


@pytest.fixture
def pending_request(sample_student):
    request = MagicMock(spec=DocumentRequest)
    request.id = uuid4()
    request.student_id = sample_student.id
    request.student = sample_student
    request.type = DocumentType.CERTIFICATE_OF_ENROLLMENT
    request.status = RequestStatus.PENDING
    request.reference_no = "COE-2026-4821"
    request.copies = 1
    request.payment_method = "gcash"
    request.total_amount = Decimal("50")
    request.receipt_no = None
    request.is_on_hold = False
    request.hold_reason = None
    request.hold_until = None
    request.payment_verified_at = None
    request.requested_at = datetime(2026, 3, 14, 8, 0, tzinfo=UTC)
    return request
