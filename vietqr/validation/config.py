"""Checks run on a :class:`VietQRConfig` before anything is encoded."""
from __future__ import annotations

from ..models import InitiationMethod, ServiceCode, VietQRConfig
from .codes import ErrorCode
from .fields import (
    DEFAULT_LIMITS,
    check_amount,
    check_bank_code,
    check_beneficiary_number,
    check_bill_number,
    check_alphanumeric,
    check_country,
    check_currency,
    check_purpose,
    check_required,
    check_service_code,
)
from .issues import ValidationIssue, ValidationResult, run_checks


def _bank_code(config: VietQRConfig):
    return check_required("bank_code", config.bank_code) + check_bank_code(config.bank_code)


def _service_code(config: VietQRConfig):
    return check_required("service_code", config.service_code) + check_service_code(config.service_code)


def _account_or_card(config: VietQRConfig):
    if config.account_number and config.card_number:
        return (
            ValidationIssue(
                field="account_number",
                code=ErrorCode.BOTH_ACCOUNT_AND_CARD,
                message="provide either account_number or card_number, not both",
            ),
        )
    if not config.account_number and not config.card_number:
        return (
            ValidationIssue(
                field="account_number",
                code=ErrorCode.MISSING_ACCOUNT_OR_CARD,
                message="account_number or card_number is required",
            ),
        )
    return ()


def _service_consistency(config: VietQRConfig):
    if config.service_code is ServiceCode.ACCOUNT_TRANSFER and not config.account_number:
        return (
            ValidationIssue(
                field="account_number",
                code=ErrorCode.ACCOUNT_REQUIRED_FOR_SERVICE,
                message=f"service {ServiceCode.ACCOUNT_TRANSFER.value} needs an account_number",
            ),
        )
    if config.service_code is ServiceCode.CARD_TRANSFER and not config.card_number:
        return (
            ValidationIssue(
                field="card_number",
                code=ErrorCode.CARD_REQUIRED_FOR_SERVICE,
                message=f"service {ServiceCode.CARD_TRANSFER.value} needs a card_number",
            ),
        )
    return ()


def _numbers(config: VietQRConfig):
    return check_beneficiary_number(config.account_number, "account_number") + check_beneficiary_number(
        config.card_number, "card_number"
    )


def _initiation_method(config: VietQRConfig):
    method = config.initiation_method
    if method is None or isinstance(method, InitiationMethod):
        return ()
    return (
        ValidationIssue(
            field="initiation_method",
            code=ErrorCode.INVALID_INITIATION_METHOD,
            message="initiation_method must be 11 (static) or 12 (dynamic)",
            expected_format="11 or 12",
            actual_value=str(method),
        ),
    )


def _amount(config: VietQRConfig):
    issues: tuple[ValidationIssue, ...] = ()
    if config.initiation_method is InitiationMethod.DYNAMIC and not config.amount:
        issues += (
            ValidationIssue(
                field="amount",
                code=ErrorCode.MISSING_REQUIRED_FIELD,
                message="amount is required for a dynamic payload",
            ),
        )
    if config.initiation_method is InitiationMethod.STATIC and config.amount:
        issues += (
            ValidationIssue(
                field="amount",
                code=ErrorCode.AMOUNT_NOT_ALLOWED_FOR_STATIC,
                message="a static payload must not carry an amount",
                actual_value=config.amount,
            ),
        )
    return issues + check_amount(config.amount)


def _fixed_values(config: VietQRConfig):
    return (
        check_required("currency", config.currency)
        + check_currency(config.currency)
        + check_required("country", config.country)
        + check_country(config.country)
    )


def _additional_data(config: VietQRConfig):
    return (
        check_bill_number(config.bill_number)
        + check_alphanumeric(config.reference_label, "reference_label", DEFAULT_LIMITS.max_reference_label_length)
        + check_purpose(config.purpose)
    )


CONFIG_CHECKS = (
    _bank_code,
    _service_code,
    _account_or_card,
    _service_consistency,
    _numbers,
    _initiation_method,
    _amount,
    _fixed_values,
    _additional_data,
)


def validate_config(config: VietQRConfig) -> ValidationResult:
    """Collect every problem with ``config``; never stops at the first one."""

    return ValidationResult.from_log(run_checks(config.normalized(), CONFIG_CHECKS))
