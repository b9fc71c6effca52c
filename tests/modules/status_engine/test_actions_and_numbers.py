"""
Tests for action parsing and reference/receipt number generation.
"""

import re
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from registrar.modules.document_requests.models import DocumentType
from registrar.modules.shared.errors import InvalidActionError
from registrar.modules.status_engine import (
    RequestAction,
    StudentAction,
    generate_receipt_no,
    generate_reference_no,
    parse_request_action,
    parse_student_action,
    resolve_document_type,
)
from registrar.modules.status_engine.numbers import REFERENCE_PREFIXES, reference_prefix

NOW = datetime(2026, 1, 5, tzinfo=UTC)

# ============================================
# Action parsing
# ============================================


def test_parse_request_action_accepts_wire_names():
    assert parse_request_action("verify-payment") == RequestAction.VERIFY_PAYMENT
    assert parse_request_action(" mark-ready ") == RequestAction.MARK_READY


def test_parse_student_action_accepts_wire_names():
    assert parse_student_action("release-hold") == StudentAction.RELEASE_HOLD


def test_request_and_student_release_names_differ():
    with pytest.raises(InvalidActionError):
        parse_request_action("release-hold")
    with pytest.raises(InvalidActionError):
        parse_student_action("release")


@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_action_is_rejected(value):
    with pytest.raises(InvalidActionError) as exc_info:
        parse_request_action(value)

    assert exc_info.value.status_code == 400
    assert exc_info.value.error_code == "INVALID_ACTION"
    assert exc_info.value.message == "Action is required."


def test_unknown_action_lists_allowed_actions():
    with pytest.raises(InvalidActionError) as exc_info:
        parse_student_action("archive")

    assert "archive" in exc_info.value.message
    assert "release-hold" in exc_info.value.message


# ============================================
# Numbers
# ============================================


def test_every_document_type_has_a_prefix():
    assert set(REFERENCE_PREFIXES) == set(DocumentType)


@pytest.mark.parametrize(
    ("document_type", "prefix"),
    [
        (DocumentType.TRANSCRIPT_OF_RECORDS_OFFICIAL, "TOR"),
        (DocumentType.TRANSCRIPT_OF_RECORDS_UNOFFICIAL, "TOR"),
        (DocumentType.CERTIFICATE_OF_GRADES, "COG"),
        (DocumentType.CERTIFICATE_OF_ENROLLMENT, "COE"),
        (DocumentType.CERTIFICATE_OF_GOOD_MORAL_CHARACTER, "GMC"),
        (DocumentType.DIPLOMA, "DIP"),
        (DocumentType.HONORABLE_DISMISSAL, "HD"),
        (DocumentType.CERTIFICATE_OF_UNITS_EARNED, "CUE"),
        (DocumentType.CERTIFICATE_OF_TRANSFER_CREDENTIAL, "CTC"),
        (DocumentType.CERTIFICATE_OF_GRADUATION, "COGRA"),
    ],
)
def test_reference_prefixes(document_type, prefix):
    assert reference_prefix(document_type) == prefix


def test_reference_number_format():
    reference_no = generate_reference_no(DocumentType.CERTIFICATE_OF_ENROLLMENT, NOW)

    assert re.fullmatch(r"COE-2026-\d{4}", reference_no)
    assert 1000 <= int(reference_no.rsplit("-", 1)[1]) <= 9999


def test_receipt_number_format():
    assert re.fullmatch(r"OR-2026-\d{4}", generate_receipt_no(NOW))


def test_suffix_bounds():
    with patch("registrar.modules.status_engine.numbers.secrets.randbelow", return_value=0):
        assert generate_receipt_no(NOW) == "OR-2026-1000"
    with patch("registrar.modules.status_engine.numbers.secrets.randbelow", return_value=8999):
        assert generate_receipt_no(NOW) == "OR-2026-9999"


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("tor-official", DocumentType.TRANSCRIPT_OF_RECORDS_OFFICIAL),
        ("coe", DocumentType.CERTIFICATE_OF_ENROLLMENT),
        ("cue", DocumentType.CERTIFICATE_OF_UNITS_EARNED),
        ("certificate_of_graduation", DocumentType.CERTIFICATE_OF_GRADUATION),
        ("unknown-doc", None),
    ],
)
def test_resolve_document_type(code, expected):
    assert resolve_document_type(code) == expected
