"""Closed sets of validation error and warning codes."""
from __future__ import annotations

import enum


class Tier(enum.IntEnum):
    """Sort order of error groups in a validation result."""

    REQUIRED = 1
    CHECKSUM = 2
    FIXED_VALUE = 3
    FORMAT = 4
    LENGTH = 5


class ErrorCode(str, enum.Enum):
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    MISSING_ACCOUNT_OR_CARD = "MISSING_ACCOUNT_OR_CARD"
    ACCOUNT_REQUIRED_FOR_SERVICE = "ACCOUNT_REQUIRED_FOR_SERVICE"
    CARD_REQUIRED_FOR_SERVICE = "CARD_REQUIRED_FOR_SERVICE"
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    INVALID_COUNTRY = "INVALID_COUNTRY"
    INVALID_PAYLOAD_FORMAT = "INVALID_PAYLOAD_FORMAT"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_CHARACTER = "INVALID_CHARACTER"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_SERVICE_CODE = "INVALID_SERVICE_CODE"
    INVALID_INITIATION_METHOD = "INVALID_INITIATION_METHOD"
    BOTH_ACCOUNT_AND_CARD = "BOTH_ACCOUNT_AND_CARD"
    AMOUNT_NOT_ALLOWED_FOR_STATIC = "AMOUNT_NOT_ALLOWED_FOR_STATIC"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    LENGTH_EXCEEDED = "LENGTH_EXCEEDED"
    LENGTH_TOO_SHORT = "LENGTH_TOO_SHORT"
    INVALID_LENGTH = "INVALID_LENGTH"

    @property
    def tier(self) -> Tier:
        return _TIERS.get(self, Tier.FORMAT)


_TIERS = {
    ErrorCode.MISSING_REQUIRED_FIELD: Tier.REQUIRED,
    ErrorCode.MISSING_ACCOUNT_OR_CARD: Tier.REQUIRED,
    ErrorCode.ACCOUNT_REQUIRED_FOR_SERVICE: Tier.REQUIRED,
    ErrorCode.CARD_REQUIRED_FOR_SERVICE: Tier.REQUIRED,
    ErrorCode.CHECKSUM_MISMATCH: Tier.CHECKSUM,
    ErrorCode.INVALID_CURRENCY: Tier.FIXED_VALUE,
    ErrorCode.INVALID_COUNTRY: Tier.FIXED_VALUE,
    ErrorCode.INVALID_PAYLOAD_FORMAT: Tier.FIXED_VALUE,
    ErrorCode.LENGTH_EXCEEDED: Tier.LENGTH,
    ErrorCode.LENGTH_TOO_SHORT: Tier.LENGTH,
    ErrorCode.INVALID_LENGTH: Tier.LENGTH,
}


class WarningCode(str, enum.Enum):
    MISSING_OPTIONAL_FIELD = "MISSING_OPTIONAL_FIELD"
    UNRECOGNIZED_FIELD = "UNRECOGNIZED_FIELD"

    @property
    def promoted(self) -> ErrorCode:
        """Error code used when warnings are treated as errors."""

        if self is WarningCode.MISSING_OPTIONAL_FIELD:
            return ErrorCode.MISSING_REQUIRED_FIELD
        return ErrorCode.UNKNOWN_FIELD
