"""Decode VietQR payload text into a :class:`PayloadRecord`."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .config import settings
from .errors import (
    DecodingError,
    MalformedTLV,
    TLVFault,
    err_empty_input,
    err_input_too_long,
    err_malformed_tlv,
    err_missing_checksum,
    err_missing_required,
    err_unexpected_end,
)
from .models import (
    PAYLOAD_SCHEMA,
    SUB_ACCOUNT_NUMBER,
    SUB_BANK_CODE,
    SUB_BENEFICIARY,
    SUB_BILL_NUMBER,
    SUB_GUID,
    SUB_PURPOSE,
    SUB_PURPOSE_CODE,
    SUB_REFERENCE_LABEL,
    SUB_SERVICE_CODE,
    TAG_ACCOUNT_INFO,
    TAG_ADDITIONAL_DATA,
    TAG_CRC,
    TAG_INITIATION_METHOD,
    InitiationMethod,
    PayloadRecord,
)
from .tlv import Field, expand, read_field

logger = logging.getLogger("vietqr.parser")

# Plain top-level tags and the record attribute they land in.
_LEAF_TAGS = {
    "00": "payload_format_indicator",
    "52": "merchant_category",
    "53": "currency",
    "54": "amount",
    "58": "country",
    TAG_CRC: "crc",
}

_ADDITIONAL_DATA_TAGS = {
    SUB_BILL_NUMBER: "bill_number",
    SUB_REFERENCE_LABEL: "reference_label",
    SUB_PURPOSE_CODE: "purpose_code",
    SUB_PURPOSE: "message",
}

MANDATORY_ATTRIBUTES = (
    "payload_format_indicator",
    "initiation_method",
    "bank_code",
    "account_number",
    "currency",
    "country",
    "crc",
)


@dataclass(frozen=True)
class ParseOptions:
    strict_mode: bool = False
    extract_partial_on_error: bool = False
    max_length: int | None = None


def _initiation_method(value: str) -> InitiationMethod | None:
    try:
        return InitiationMethod(value)
    except ValueError:
        return None


def _account_info(item: Field) -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    guid = item.child(SUB_GUID)
    service = item.child(SUB_SERVICE_CODE)
    beneficiary = item.child(SUB_BENEFICIARY)
    values["guid"] = guid.value if guid else None
    values["service_code"] = service.value if service else None
    if beneficiary is not None:
        bank = beneficiary.child(SUB_BANK_CODE)
        number = beneficiary.child(SUB_ACCOUNT_NUMBER)
        values["bank_code"] = bank.value if bank else None
        values["account_number"] = number.value if number else None
    return values


def _additional_data(item: Field) -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    for child in item.children:
        name = _ADDITIONAL_DATA_TAGS.get(child.tag)
        if name and name not in values:
            values[name] = child.value
    return values


def build_record(fields: Iterable[Field]) -> PayloadRecord:
    """Map decoded top-level fields onto record attributes.

    The first occurrence of a tag wins. Unknown tags are kept in
    ``record.fields`` and otherwise ignored.
    """

    items = tuple(fields)
    values: dict[str, object] = {}
    for item in items:
        if item.tag in _LEAF_TAGS:
            values.setdefault(_LEAF_TAGS[item.tag], item.value)
        elif item.tag == TAG_INITIATION_METHOD:
            values.setdefault("initiation_method", _initiation_method(item.value))
        elif item.tag == TAG_ACCOUNT_INFO:
            for name, value in _account_info(item).items():
                values.setdefault(name, value)
        elif item.tag == TAG_ADDITIONAL_DATA:
            for name, value in _additional_data(item).items():
                values.setdefault(name, value)
    return PayloadRecord(**values, fields=items)


def _scan(payload: str) -> tuple[list[Field], MalformedTLV | None]:
    fields: list[Field] = []
    offset = 0
    while offset < len(payload):
        try:
            item, offset = read_field(payload, offset)
        except MalformedTLV as exc:
            return fields, exc
        fields.append(expand(item, PAYLOAD_SCHEMA))
    return fields, None


def _framing_error(exc: MalformedTLV) -> DecodingError:
    if exc.fault in (TLVFault.SHORT_HEADER, TLVFault.OVERRUN):
        return err_unexpected_end(exc.offset, str(exc))
    return err_malformed_tlv(exc.offset, str(exc))


def _reject(error: DecodingError) -> DecodingError:
    logger.info(
        "payload rejected",
        extra={"kind": error.kind.value, "position": error.position},
    )
    return error


def parse_with_options(payload: str, options: ParseOptions) -> PayloadRecord:
    """Decode ``payload``; see :class:`ParseOptions` for strictness and partial recovery."""

    if not payload or not payload.strip():
        raise _reject(err_empty_input())
    limit = options.max_length or settings.max_payload_length
    if len(payload) > limit:
        raise _reject(err_input_too_long(len(payload), limit))

    fields, failure = _scan(payload)
    error: DecodingError | None = None
    if failure is not None:
        error = _framing_error(failure)
    elif not fields or fields[-1].tag != TAG_CRC:
        error = err_missing_checksum(position=len(payload))

    if error is not None:
        if options.extract_partial_on_error and fields:
            logger.info(
                "returning partial record",
                extra={"kind": error.kind.value, "position": error.position, "field_count": len(fields)},
            )
            return build_record(fields)
        raise _reject(error)

    record = build_record(fields)
    if options.strict_mode:
        missing = [name for name in MANDATORY_ATTRIBUTES if not getattr(record, name)]
        if missing:
            raise _reject(err_missing_required(missing))
    logger.debug("payload parsed", extra={"field_count": len(fields)})
    return record


def parse(payload: str, max_length: int | None = None) -> PayloadRecord:
    """Decode ``payload`` into a record.

    Raises :class:`DecodingError` on empty or over-long input and on broken
    TLV framing. Semantically invalid values never fail here; they are
    reported by validation.
    """

    return parse_with_options(payload, ParseOptions(max_length=max_length))
