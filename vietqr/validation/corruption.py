"""Heuristics that tell a damaged payload apart from a merely invalid one."""
from __future__ import annotations

import re
from typing import Iterable

from ..crc import CRC_LENGTH, verify_crc
from ..models import PayloadRecord
from .codes import ErrorCode
from .issues import ValidationIssue

MIN_PLAUSIBLE_LENGTH = 50
MANDATORY_FIELDS = ("bank_code", "account_number", "currency", "country")

_SEALED_TAIL = re.compile(r"6304[0-9A-Fa-f]{4}$")


def _missing(record: PayloadRecord) -> list[str]:
    return [name for name in MANDATORY_FIELDS if not getattr(record, name)]


def detect_corruption(record: PayloadRecord, text: str, errors: Iterable[ValidationIssue]) -> bool:
    """Return True when the payload looks truncated, tampered with or damaged."""

    if any(issue.code is ErrorCode.CHECKSUM_MISMATCH for issue in errors):
        return True
    if _missing(record):
        return True
    text = text or ""
    if len(text) < MIN_PLAUSIBLE_LENGTH:
        return True
    if not _SEALED_TAIL.search(text):
        return True
    if not record.crc or len(record.crc) != CRC_LENGTH:
        return True
    return record.crc.upper() != text[-CRC_LENGTH:].upper() or not verify_crc(text)


def is_recoverable(record: PayloadRecord, errors: Iterable[ValidationIssue]) -> bool:
    """True when the identifying attributes survived well enough to act on."""

    if _missing(record):
        return False
    return not any(
        issue.code is ErrorCode.MISSING_REQUIRED_FIELD and issue.field in MANDATORY_FIELDS for issue in errors
    )
