"""Image boundary: pull payload text out of a QR image and hand it to the parser.

Locating and decoding the QR symbol is left to an injected
:class:`QRImageReader`; this module only guards what reaches it.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from PIL import Image, UnidentifiedImageError

from .config import settings
from .errors import (
    DecodingError,
    err_image_decode,
    err_image_too_large,
    err_no_qr_code,
    err_unsupported_image,
)
from .models import PayloadRecord
from .parser import parse
from .validation.issues import ValidationResult
from .validation.record import ValidationOptions, validate

logger = logging.getLogger("vietqr.images")

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


class QRImageReader(Protocol):
    def read(self, image: Image.Image) -> Sequence[str]:
        """Return the text of every QR symbol found in ``image``."""


@dataclass(frozen=True)
class DecodedImage:
    text: str
    record: PayloadRecord
    validation: ValidationResult | None = None


def detect_image_format(data: bytes) -> str | None:
    if data.startswith(PNG_MAGIC):
        return "png"
    if data.startswith(JPEG_MAGIC):
        return "jpeg"
    return None


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise err_image_decode(f"Image could not be read: {exc}") from exc
    return image


def extract_text(data: bytes, reader: QRImageReader, max_bytes: int | None = None) -> str:
    """Return the payload text of the first QR symbol in ``data``.

    Oversized, empty or non PNG/JPEG input is rejected before the image is
    opened or the reader is called.
    """

    limit = max_bytes or settings.max_image_bytes
    if len(data) > limit:
        raise err_image_too_large(len(data), limit)
    if not data or detect_image_format(data) is None:
        raise err_unsupported_image()

    image = _open(data)
    try:
        texts = [text for text in reader.read(image) if text]
    except DecodingError:
        raise
    except Exception as exc:
        logger.warning("qr reader failed", extra={"error": type(exc).__name__})
        raise err_image_decode(f"QR reader failed: {exc}") from exc
    if not texts:
        raise err_no_qr_code()
    if len(texts) > 1:
        logger.info("multiple qr codes found, using the first", extra={"count": len(texts)})
    return texts[0]


def decode_image(data: bytes, reader: QRImageReader) -> DecodedImage:
    text = extract_text(data, reader)
    return DecodedImage(text=text, record=parse(text))


def decode_and_validate(
    data: bytes,
    reader: QRImageReader,
    options: ValidationOptions | None = None,
) -> DecodedImage:
    """Extract, parse and validate; the checksum is verified against the extracted text."""

    decoded = decode_image(data, reader)
    result = validate(decoded.record, decoded.text, options)
    return DecodedImage(text=decoded.text, record=decoded.record, validation=result)
