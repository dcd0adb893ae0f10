"""Per-field checks shared by pre-generation and post-parse validation.

Each check is a pure function of one value and returns a tuple of
:class:`ValidationIssue`. Absent values (``None`` or ``""``) pass every
format check; presence is enforced separately by :func:`check_required`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

from ..crc import CRC_LENGTH, crc16_ccitt, is_crc_value
from ..models import COUNTRY_VN, CURRENCY_VND, PAYLOAD_FORMAT_INDICATOR, ServiceCode
from .codes import ErrorCode
from .issues import ValidationIssue

BANK_CODE_LENGTH = 6

_DIGITS = re.compile(r"^[0-9]+$")
_ALNUM = re.compile(r"^[A-Za-z0-9]+$")
_BILL = re.compile(r"^[A-Za-z0-9_-]+$")
_AMOUNT = re.compile(r"^[0-9]+(\.[0-9]+)?$")
_CURRENCY = re.compile(r"^[0-9]{3}$")
_COUNTRY = re.compile(r"^[A-Za-z]{2}$")
_MCC = re.compile(r"^[0-9]{4}$")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class FieldLimits:
    max_account_length: int = 19
    max_amount_length: int = 13
    max_message_bytes: int = 500
    max_purpose_length: int = 25
    max_purpose_code_length: int = 25
    max_bill_number_length: int = 25
    max_reference_label_length: int = 25


DEFAULT_LIMITS = FieldLimits()


def _absent(value: str | None) -> bool:
    return value is None or value == ""


def _issue(field: str, code: ErrorCode, message: str, expected: str | None = None, actual: str | None = None):
    return ValidationIssue(field=field, code=code, message=message, expected_format=expected, actual_value=actual)


def _too_long(field: str, value: str, limit: int, unit: str = "characters") -> ValidationIssue:
    return _issue(
        field,
        ErrorCode.LENGTH_EXCEEDED,
        f"{field} must be at most {limit} {unit}",
        expected=f"<= {limit} {unit}",
        actual=value,
    )


def check_required(field: str, value: str | None) -> tuple[ValidationIssue, ...]:
    if not _absent(value):
        return ()
    return (_issue(field, ErrorCode.MISSING_REQUIRED_FIELD, f"{field} is required"),)


def check_bank_code(value: str | None, field: str = "bank_code") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if len(value) != BANK_CODE_LENGTH:
        issues.append(
            _issue(
                field,
                ErrorCode.INVALID_LENGTH,
                f"{field} must be exactly {BANK_CODE_LENGTH} digits",
                expected=f"{BANK_CODE_LENGTH} digits",
                actual=value,
            )
        )
    if not (value.isascii() and _DIGITS.match(value)):
        issues.append(_issue(field, ErrorCode.INVALID_FORMAT, f"{field} must be numeric", expected="digits", actual=value))
    return tuple(issues)


def check_beneficiary_number(value: str | None, field: str, limits: FieldLimits = DEFAULT_LIMITS) -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if not (value.isascii() and _ALNUM.match(value)):
        issues.append(
            _issue(field, ErrorCode.INVALID_CHARACTER, f"{field} must be alphanumeric", expected="A-Z a-z 0-9", actual=value)
        )
    if len(value) > limits.max_account_length:
        issues.append(_too_long(field, value, limits.max_account_length))
    return tuple(issues)


def check_service_code(value: str | None, field: str = "service_code") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    if any(value == code.value for code in ServiceCode):
        return ()
    return (
        _issue(
            field,
            ErrorCode.INVALID_SERVICE_CODE,
            f"{field} is not a supported service",
            expected=" or ".join(code.value for code in ServiceCode),
            actual=value,
        ),
    )


def check_amount(value: str | None, limits: FieldLimits = DEFAULT_LIMITS, field: str = "amount") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if value.startswith("-"):
        issues.append(_issue(field, ErrorCode.INVALID_AMOUNT, "amount must not be negative", expected="> 0", actual=value))
    elif not (value.isascii() and _AMOUNT.match(value)):
        issues.append(
            _issue(
                field,
                ErrorCode.INVALID_FORMAT,
                "amount must be numeric with an optional decimal part",
                expected="digits[.digits]",
                actual=value,
            )
        )
    elif Decimal(value) <= 0:
        issues.append(_issue(field, ErrorCode.INVALID_AMOUNT, "amount must be greater than zero", expected="> 0", actual=value))
    if len(value) > limits.max_amount_length:
        issues.append(_too_long(field, value, limits.max_amount_length))
    return tuple(issues)


def check_bill_number(value: str | None, limits: FieldLimits = DEFAULT_LIMITS, field: str = "bill_number") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if not (value.isascii() and _BILL.match(value)):
        issues.append(
            _issue(
                field,
                ErrorCode.INVALID_CHARACTER,
                f"{field} may only contain letters, digits, '-' and '_'",
                expected="A-Z a-z 0-9 - _",
                actual=value,
            )
        )
    if len(value) > limits.max_bill_number_length:
        issues.append(_too_long(field, value, limits.max_bill_number_length))
    return tuple(issues)


def check_alphanumeric(value: str | None, field: str, limit: int) -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if not (value.isascii() and _ALNUM.match(value)):
        issues.append(
            _issue(field, ErrorCode.INVALID_CHARACTER, f"{field} must be alphanumeric", expected="A-Z a-z 0-9", actual=value)
        )
    if len(value) > limit:
        issues.append(_too_long(field, value, limit))
    return tuple(issues)


def check_message(value: str | None, limits: FieldLimits = DEFAULT_LIMITS, field: str = "message") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if _CONTROL.search(value):
        issues.append(
            _issue(field, ErrorCode.INVALID_CHARACTER, f"{field} must not contain control characters", actual=value)
        )
    if len(value.encode("utf-8")) > limits.max_message_bytes:
        issues.append(_too_long(field, value, limits.max_message_bytes, unit="bytes"))
    return tuple(issues)


def check_purpose(value: str | None, limits: FieldLimits = DEFAULT_LIMITS, field: str = "purpose") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = list(check_message(value, limits, field=field))
    if len(value) > limits.max_purpose_length:
        issues.append(_too_long(field, value, limits.max_purpose_length))
    return tuple(issues)


def check_currency(value: str | None, field: str = "currency") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if not _CURRENCY.match(value):
        issues.append(_issue(field, ErrorCode.INVALID_FORMAT, "currency must be a 3-digit ISO 4217 code", expected="NNN", actual=value))
    if value != CURRENCY_VND:
        issues.append(_issue(field, ErrorCode.INVALID_CURRENCY, f"currency must be {CURRENCY_VND}", expected=CURRENCY_VND, actual=value))
    return tuple(issues)


def check_country(value: str | None, field: str = "country") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    issues = []
    if not _COUNTRY.match(value):
        issues.append(_issue(field, ErrorCode.INVALID_FORMAT, "country must be a 2-letter ISO 3166 code", expected="AA", actual=value))
    if value != COUNTRY_VN:
        issues.append(_issue(field, ErrorCode.INVALID_COUNTRY, f"country must be {COUNTRY_VN}", expected=COUNTRY_VN, actual=value))
    return tuple(issues)


def check_payload_format(value: str | None, field: str = "payload_format_indicator") -> tuple[ValidationIssue, ...]:
    if _absent(value) or value == PAYLOAD_FORMAT_INDICATOR:
        return ()
    return (
        _issue(
            field,
            ErrorCode.INVALID_PAYLOAD_FORMAT,
            f"payload format indicator must be {PAYLOAD_FORMAT_INDICATOR}",
            expected=PAYLOAD_FORMAT_INDICATOR,
            actual=value,
        ),
    )


def check_merchant_category(value: str | None, field: str = "merchant_category") -> tuple[ValidationIssue, ...]:
    if value is None:
        return ()
    if not _MCC.match(value):
        return (_issue(field, ErrorCode.INVALID_FORMAT, "merchant category must be 4 digits", expected="NNNN", actual=value),)
    return ()


def check_crc_value(value: str | None, field: str = "crc") -> tuple[ValidationIssue, ...]:
    if _absent(value):
        return ()
    if len(value) != CRC_LENGTH:
        return (_issue(field, ErrorCode.INVALID_FORMAT, "checksum must be 4 hex characters", expected="XXXX", actual=value),)
    if not is_crc_value(value):
        return (_issue(field, ErrorCode.INVALID_CHARACTER, "checksum must be hexadecimal", expected="0-9 A-F", actual=value),)
    return ()


def check_checksum(text: str, claimed: str | None, field: str = "crc") -> tuple[ValidationIssue, ...]:
    """Recompute the checksum over ``text`` minus its last 4 characters."""

    if not text or not is_crc_value(claimed) or len(text) < CRC_LENGTH:
        return ()
    computed = crc16_ccitt(text[:-CRC_LENGTH])
    if computed == claimed.upper() and text[-CRC_LENGTH:].upper() == computed:
        return ()
    return (
        _issue(
            field,
            ErrorCode.CHECKSUM_MISMATCH,
            "checksum does not match payload content",
            expected=computed,
            actual=claimed,
        ),
    )
