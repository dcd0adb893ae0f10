"""Post-parse validation of a :class:`PayloadRecord` against its source text."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..models import TAG_INITIATION_METHOD, PayloadRecord
from .codes import ErrorCode, WarningCode
from .corruption import detect_corruption, is_recoverable
from .fields import (
    FieldLimits,
    check_alphanumeric,
    check_amount,
    check_bank_code,
    check_beneficiary_number,
    check_bill_number,
    check_checksum,
    check_country,
    check_crc_value,
    check_currency,
    check_merchant_category,
    check_message,
    check_payload_format,
    check_required,
    check_service_code,
)
from .issues import ValidationIssue, ValidationResult, ValidationWarning, run_checks

logger = logging.getLogger("vietqr.validation")

REQUIRED_ATTRIBUTES = (
    "payload_format_indicator",
    "bank_code",
    "account_number",
    "currency",
    "country",
    "crc",
)


@dataclass(frozen=True)
class ValidationOptions:
    skip_crc_check: bool = False
    skip_corruption_detection: bool = False
    treat_warnings_as_errors: bool = False
    limits: FieldLimits = field(default_factory=FieldLimits)


@dataclass(frozen=True)
class _Subject:
    record: PayloadRecord
    text: str
    options: ValidationOptions


def _required(subject: _Subject):
    issues: tuple[ValidationIssue, ...] = ()
    for name in REQUIRED_ATTRIBUTES:
        issues += check_required(name, getattr(subject.record, name))
    return issues


def _initiation_method(subject: _Subject):
    if subject.record.initiation_method is not None:
        return ()
    raw = subject.record.field(TAG_INITIATION_METHOD)
    if raw is None:
        return check_required("initiation_method", None)
    return (
        ValidationIssue(
            field="initiation_method",
            code=ErrorCode.INVALID_INITIATION_METHOD,
            message="initiation method must be 11 (static) or 12 (dynamic)",
            expected_format="11 or 12",
            actual_value=raw.value,
        ),
    )


def _fixed_values(subject: _Subject):
    record = subject.record
    return (
        check_payload_format(record.payload_format_indicator)
        + check_currency(record.currency)
        + check_country(record.country)
    )


def _beneficiary(subject: _Subject):
    record = subject.record
    return (
        check_bank_code(record.bank_code)
        + check_beneficiary_number(record.account_number, "account_number", subject.options.limits)
        + check_service_code(record.service_code)
    )


def _amount(subject: _Subject):
    return check_amount(subject.record.amount, subject.options.limits)


def _additional_data(subject: _Subject):
    record = subject.record
    limits = subject.options.limits
    return (
        check_bill_number(record.bill_number, limits)
        + check_alphanumeric(record.reference_label, "reference_label", limits.max_reference_label_length)
        + check_alphanumeric(record.purpose_code, "purpose_code", limits.max_purpose_code_length)
        + check_message(record.message, limits)
        + check_merchant_category(record.merchant_category)
    )


def _checksum(subject: _Subject):
    issues = check_crc_value(subject.record.crc)
    if subject.options.skip_crc_check:
        return issues
    return issues + check_checksum(subject.text, subject.record.crc)


def _warnings(subject: _Subject):
    record = subject.record
    warnings: list[ValidationWarning] = []
    if record.is_dynamic and not record.amount:
        warnings.append(
            ValidationWarning(
                field="amount",
                code=WarningCode.MISSING_OPTIONAL_FIELD,
                message="dynamic payload carries no amount",
            )
        )
    for tag in record.unknown_tags():
        warnings.append(
            ValidationWarning(field=f"tag_{tag}", code=WarningCode.UNRECOGNIZED_FIELD, message=f"tag {tag} is not recognized")
        )
    return tuple(warnings)


RECORD_CHECKS = (
    _required,
    _initiation_method,
    _checksum,
    _fixed_values,
    _beneficiary,
    _amount,
    _additional_data,
    _warnings,
)


def validate(record: PayloadRecord, text: str, options: ValidationOptions | None = None) -> ValidationResult:
    """Validate a decoded record.

    ``text`` is the exact string the record was parsed from; the checksum is
    verified against it. An empty ``text`` skips checksum verification but
    still checks the checksum's format.
    """

    options = options or ValidationOptions()
    text = text or ""
    log = run_checks(_Subject(record=record, text=text, options=options), RECORD_CHECKS)

    corrupted = False
    if not options.skip_corruption_detection:
        corrupted = detect_corruption(record, text, log.errors)
    result = ValidationResult.from_log(
        log,
        corrupted=corrupted,
        recoverable=is_recoverable(record, log.errors),
        promote_warnings=options.treat_warnings_as_errors,
    )
    logger.debug(
        "record validated",
        extra={"valid": result.valid, "error_count": len(result.errors), "corrupted": result.corrupted},
    )
    return result
