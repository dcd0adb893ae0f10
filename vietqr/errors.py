"""Error definitions shared by the codec, parser and HTTP layer."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation.issues import ValidationIssue


class VietQRError(Exception):
    """Base class for every error raised by this package."""


class TLVError(VietQRError):
    """Raised by the TLV codec for framing problems."""


class TLVFault(str, enum.Enum):
    SHORT_HEADER = "SHORT_HEADER"
    BAD_TAG = "BAD_TAG"
    BAD_LENGTH = "BAD_LENGTH"
    OVERRUN = "OVERRUN"


@dataclass(slots=True)
class FieldTooLong(TLVError):
    tag: str
    length: int
    limit: int = 99

    def __str__(self) -> str:  # noqa: D401 override
        return f"field {self.tag} value is {self.length} characters, limit is {self.limit}"


@dataclass(slots=True)
class InvalidTag(TLVError):
    tag: str

    def __str__(self) -> str:  # noqa: D401 override
        return f"tag must be exactly 2 characters, got {self.tag!r}"


@dataclass(slots=True)
class MalformedTLV(TLVError):
    offset: int
    fault: TLVFault
    detail: str = ""

    def __str__(self) -> str:  # noqa: D401 override
        text = f"malformed TLV at offset {self.offset} ({self.fault.value})"
        return f"{text}: {self.detail}" if self.detail else text


class DecodingErrorKind(str, enum.Enum):
    MALFORMED_TLV = "MALFORMED_TLV"
    UNEXPECTED_END = "UNEXPECTED_END"
    MISSING_CHECKSUM_FIELD = "MISSING_CHECKSUM_FIELD"
    EMPTY_INPUT = "EMPTY_INPUT"
    INPUT_TOO_LONG = "INPUT_TOO_LONG"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
    UNSUPPORTED_IMAGE_FORMAT = "UNSUPPORTED_IMAGE_FORMAT"
    NO_QR_CODE_FOUND = "NO_QR_CODE_FOUND"
    IMAGE_DECODE_ERROR = "IMAGE_DECODE_ERROR"


@dataclass(slots=True)
class DecodingError(VietQRError):
    kind: DecodingErrorKind
    message: str
    position: int | None = None
    field: str | None = None
    status_code: int = 400

    @property
    def code(self) -> str:
        return f"ERR_{self.kind.value}"

    def __str__(self) -> str:  # noqa: D401 override
        if self.position is None:
            return f"{self.code}: {self.message}"
        return f"{self.code}: {self.message} (position {self.position})"


@dataclass(slots=True)
class GenerationError(VietQRError):
    errors: tuple[ValidationIssue, ...]
    status_code: int = 422

    @property
    def code(self) -> str:
        return "ERR_INVALID_CONFIG"

    @property
    def message(self) -> str:
        return f"Validation failed with {len(self.errors)} error(s)"

    def __str__(self) -> str:  # noqa: D401 override
        lines = [f"{self.code}: {self.message}"]
        lines.extend(f"  - {issue.field}: {issue.message}" for issue in self.errors)
        return "\n".join(lines)


def err_malformed_tlv(position: int, message: str | None = None) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.MALFORMED_TLV,
        message=message or "Invalid TLV framing",
        position=position,
    )


def err_unexpected_end(position: int, message: str | None = None) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.UNEXPECTED_END,
        message=message or "Payload ended in the middle of a field",
        position=position,
    )


def err_missing_checksum(position: int | None = None) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.MISSING_CHECKSUM_FIELD,
        message="Payload does not end with a checksum field (tag 63)",
        position=position,
        field="crc",
    )


def err_empty_input() -> DecodingError:
    return DecodingError(kind=DecodingErrorKind.EMPTY_INPUT, message="Payload text is empty", position=0)


def err_input_too_long(length: int, limit: int) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.INPUT_TOO_LONG,
        message=f"Payload is {length} characters, maximum is {limit}",
        status_code=413,
    )


def err_missing_required(names: list[str]) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.MISSING_REQUIRED_FIELDS,
        message=f"Missing required fields: {', '.join(names)}",
    )


def err_image_too_large(size: int, limit: int) -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.IMAGE_TOO_LARGE,
        message=f"Image is {size} bytes, maximum is {limit}",
        status_code=413,
    )


def err_unsupported_image() -> DecodingError:
    return DecodingError(
        kind=DecodingErrorKind.UNSUPPORTED_IMAGE_FORMAT,
        message="Unsupported image format, only PNG and JPEG are accepted",
        status_code=415,
    )


def err_no_qr_code(message: str | None = None) -> DecodingError:
    return DecodingError(kind=DecodingErrorKind.NO_QR_CODE_FOUND, message=message or "No QR code found in image")


def err_image_decode(message: str | None = None) -> DecodingError:
    return DecodingError(kind=DecodingErrorKind.IMAGE_DECODE_ERROR, message=message or "Failed to decode QR image")
