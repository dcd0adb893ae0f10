"""Validation issue types and the immutable accumulator the checks fold into."""
from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, Iterable, TypeVar, Union

from .codes import ErrorCode, WarningCode

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = frozenset({"bank_code", "account_number", "card_number"})
MAX_VALUE_PREVIEW = 100


def sanitize_value(field: str, value: str | None) -> str | None:
    """Mask identifiers and clip long values before they reach an issue."""

    if value is None:
        return None
    if field in SENSITIVE_FIELDS:
        return REDACTED
    if len(value) > MAX_VALUE_PREVIEW:
        return f"{value[:MAX_VALUE_PREVIEW]}..."
    return value


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    code: ErrorCode
    message: str
    expected_format: str | None = None
    actual_value: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "actual_value", sanitize_value(self.field, self.actual_value))

    @property
    def key(self) -> tuple[str, ErrorCode]:
        return self.field, self.code

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code.value,
            "message": self.message,
            "expected_format": self.expected_format,
            "actual_value": self.actual_value,
        }


@dataclass(frozen=True)
class ValidationWarning:
    field: str
    code: WarningCode
    message: str

    def promote(self) -> ValidationIssue:
        return ValidationIssue(field=self.field, code=self.code.promoted, message=self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "code": self.code.value, "message": self.message}


Issue = Union[ValidationIssue, ValidationWarning]
S = TypeVar("S")
Check = Callable[[S], Iterable[Issue]]


@dataclass(frozen=True)
class IssueLog:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    def extend(self, issues: Iterable[Issue]) -> IssueLog:
        items = tuple(issues)
        if not items:
            return self
        return IssueLog(
            errors=self.errors + tuple(item for item in items if isinstance(item, ValidationIssue)),
            warnings=self.warnings + tuple(item for item in items if isinstance(item, ValidationWarning)),
        )


def run_checks(subject: S, checks: Iterable[Check]) -> IssueLog:
    """Apply every check to ``subject`` and collect what they report."""

    return reduce(lambda log, check: log.extend(check(subject)), checks, IssueLog())


def dedupe(errors: Iterable[ValidationIssue]) -> tuple[ValidationIssue, ...]:
    seen: set[tuple[str, ErrorCode]] = set()
    unique = []
    for issue in errors:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        unique.append(issue)
    return tuple(unique)


def order(errors: Iterable[ValidationIssue]) -> tuple[ValidationIssue, ...]:
    """Deduplicate on (field, code) keeping the first, then sort by tier and field."""

    return tuple(sorted(dedupe(errors), key=lambda issue: (issue.code.tier, issue.field)))


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()
    corrupted: bool = False
    recoverable: bool = True

    @classmethod
    def from_log(
        cls,
        log: IssueLog,
        *,
        corrupted: bool = False,
        recoverable: bool = True,
        promote_warnings: bool = False,
    ) -> ValidationResult:
        errors = log.errors
        warnings = log.warnings
        if promote_warnings:
            errors = errors + tuple(warning.promote() for warning in warnings)
            warnings = ()
        errors = order(errors)
        return cls(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            corrupted=corrupted,
            recoverable=recoverable,
        )

    def codes_for(self, field: str) -> tuple[ErrorCode, ...]:
        return tuple(issue.code for issue in self.errors if issue.field == field)

    def has_code(self, code: ErrorCode) -> bool:
        return any(issue.code is code for issue in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "corrupted": self.corrupted,
            "recoverable": self.recoverable,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
