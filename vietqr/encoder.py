"""VietQR payload encoder: fixed field schedule sealed with CRC16-CCITT."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from .crc import crc16_ccitt
from .errors import GenerationError
from .models import (
    CRC_PLACEHOLDER,
    NAPAS_GUID,
    PAYLOAD_FORMAT_INDICATOR,
    SUB_ACCOUNT_NUMBER,
    SUB_BANK_CODE,
    SUB_BENEFICIARY,
    SUB_BILL_NUMBER,
    SUB_GUID,
    SUB_PURPOSE,
    SUB_REFERENCE_LABEL,
    SUB_SERVICE_CODE,
    TAG_ACCOUNT_INFO,
    TAG_ADDITIONAL_DATA,
    TAG_AMOUNT,
    TAG_COUNTRY,
    TAG_CRC,
    TAG_CURRENCY,
    TAG_INITIATION_METHOD,
    TAG_PAYLOAD_FORMAT,
    InitiationMethod,
    VietQRConfig,
)
from .tlv import Field, build_tlv, encode_field, encode_nested
from .validation.config import validate_config

logger = logging.getLogger("vietqr.encoder")


@dataclass(frozen=True)
class AdditionalData:
    bill_number: str | None = None
    reference_label: str | None = None
    purpose: str | None = None

    def to_subitems(self) -> Iterable[Field]:
        if self.bill_number:
            yield encode_field(SUB_BILL_NUMBER, self.bill_number)
        if self.reference_label:
            yield encode_field(SUB_REFERENCE_LABEL, self.reference_label)
        if self.purpose:
            yield encode_field(SUB_PURPOSE, self.purpose)


@dataclass(frozen=True)
class GeneratedPayload:
    payload: str
    crc: str
    fields: tuple[Field, ...]

    @property
    def variant(self) -> str:
        method = next(item.value for item in self.fields if item.tag == TAG_INITIATION_METHOD)
        return InitiationMethod(method).label


def build_account_info(bank_code: str, number: str, service_code: str) -> Field:
    """Build tag 38: scheme GUID, beneficiary (bank + account/card) and service code."""

    beneficiary = encode_nested(
        SUB_BENEFICIARY,
        [encode_field(SUB_BANK_CODE, bank_code), encode_field(SUB_ACCOUNT_NUMBER, number)],
    )
    return encode_nested(
        TAG_ACCOUNT_INFO,
        [encode_field(SUB_GUID, NAPAS_GUID), beneficiary, encode_field(SUB_SERVICE_CODE, service_code)],
    )


def schedule(config: VietQRConfig) -> Iterator[Field]:
    """Yield the top-level fields of a validated, normalized config in wire order."""

    method = config.resolved_initiation_method
    yield encode_field(TAG_PAYLOAD_FORMAT, PAYLOAD_FORMAT_INDICATOR)
    yield encode_field(TAG_INITIATION_METHOD, method.value)
    yield build_account_info(config.bank_code, config.beneficiary_number, config.service_code.value)
    yield encode_field(TAG_CURRENCY, config.currency)
    if method is InitiationMethod.DYNAMIC:
        yield encode_field(TAG_AMOUNT, config.amount)
    yield encode_field(TAG_COUNTRY, config.country)
    extra = AdditionalData(config.bill_number, config.reference_label, config.purpose)
    subitems = list(extra.to_subitems())
    if subitems:
        yield encode_nested(TAG_ADDITIONAL_DATA, subitems)


def seal(fields: Iterable[Field]) -> tuple[str, str]:
    """Return ``(payload, crc)`` for fields that do not yet include tag 63."""

    payload_no_crc = build_tlv(fields)
    crc_input = f"{payload_no_crc}{CRC_PLACEHOLDER}"
    crc = crc16_ccitt(crc_input)
    return f"{crc_input}{crc}", crc


def generate(config: VietQRConfig) -> GeneratedPayload:
    """Validate ``config`` and build the sealed payload string.

    Raises :class:`GenerationError` with every problem found when the config
    is not acceptable; nothing is encoded in that case.
    """

    normalized = config.normalized()
    result = validate_config(normalized)
    if not result.valid:
        logger.info(
            "configuration rejected",
            extra={"error_count": len(result.errors), "codes": sorted({issue.code.value for issue in result.errors})},
        )
        raise GenerationError(errors=result.errors)

    items = list(schedule(normalized))
    payload, crc = seal(items)
    items.append(encode_field(TAG_CRC, crc))
    generated = GeneratedPayload(payload=payload, crc=crc, fields=tuple(items))
    logger.debug("payload generated", extra={"variant": generated.variant, "length": len(payload)})
    return generated
