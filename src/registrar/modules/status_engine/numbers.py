"""
Reference and Receipt Numbers

Human-facing identifiers: ``{PREFIX}-{year}-{4 digits}``.

Uniqueness is probabilistic (9000 values per prefix per year) and no
collision check is made here; the unique constraint on
``document_requests.reference_no`` rejects a clash at write time.
"""

import secrets
from datetime import UTC, datetime

from registrar.modules.document_requests.models import DocumentType

DEFAULT_REFERENCE_PREFIX = "DOC"
RECEIPT_PREFIX = "OR"

REFERENCE_PREFIXES: dict[DocumentType, str] = {
    DocumentType.TRANSCRIPT_OF_RECORDS_OFFICIAL: "TOR",
    DocumentType.TRANSCRIPT_OF_RECORDS_UNOFFICIAL: "TOR",
    DocumentType.CERTIFICATE_OF_GRADES: "COG",
    DocumentType.CERTIFICATE_OF_ENROLLMENT: "COE",
    DocumentType.CERTIFICATE_OF_GOOD_MORAL_CHARACTER: "GMC",
    DocumentType.DIPLOMA: "DIP",
    DocumentType.HONORABLE_DISMISSAL: "HD",
    DocumentType.CERTIFICATE_OF_UNITS_EARNED: "CUE",
    DocumentType.CERTIFICATE_OF_TRANSFER_CREDENTIAL: "CTC",
    DocumentType.CERTIFICATE_OF_GRADUATION: "COGRA",
}

# Document codes used by the student request form
CATALOG_CODES: dict[str, DocumentType] = {
    "tor-official": DocumentType.TRANSCRIPT_OF_RECORDS_OFFICIAL,
    "tor-unofficial": DocumentType.TRANSCRIPT_OF_RECORDS_UNOFFICIAL,
    "cog": DocumentType.CERTIFICATE_OF_GRADES,
    "coe": DocumentType.CERTIFICATE_OF_ENROLLMENT,
    "gmc": DocumentType.CERTIFICATE_OF_GOOD_MORAL_CHARACTER,
    "diploma": DocumentType.DIPLOMA,
    "hd": DocumentType.HONORABLE_DISMISSAL,
    "cue": DocumentType.CERTIFICATE_OF_UNITS_EARNED,
}


def resolve_document_type(code: str) -> DocumentType | None:
    """Map a form code or a document type value to a DocumentType."""
    normalized = code.strip()
    if normalized in CATALOG_CODES:
        return CATALOG_CODES[normalized]
    try:
        return DocumentType(normalized)
    except ValueError:
        return None


def _random_suffix() -> int:
    return 1000 + secrets.randbelow(9000)


def reference_prefix(document_type: DocumentType) -> str:
    return REFERENCE_PREFIXES.get(document_type, DEFAULT_REFERENCE_PREFIX)


def generate_reference_no(document_type: DocumentType, now: datetime | None = None) -> str:
    """Build a reference number such as ``COE-2026-4821``."""
    year = (now or datetime.now(UTC)).year
    return f"{reference_prefix(document_type)}-{year}-{_random_suffix()}"


def generate_receipt_no(now: datetime | None = None) -> str:
    """Build an official receipt number such as ``OR-2026-1937``."""
    year = (now or datetime.now(UTC)).year
    return f"{RECEIPT_PREFIX}-{year}-{_random_suffix()}"
