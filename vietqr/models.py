"""Domain models for VietQR payloads."""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .tlv import Field, find_field

NAPAS_GUID = "A000000727"
PAYLOAD_FORMAT_INDICATOR = "01"
CURRENCY_VND = "704"
COUNTRY_VN = "VN"

TAG_PAYLOAD_FORMAT = "00"
TAG_INITIATION_METHOD = "01"
TAG_ACCOUNT_INFO = "38"
TAG_MERCHANT_CATEGORY = "52"
TAG_CURRENCY = "53"
TAG_AMOUNT = "54"
TAG_COUNTRY = "58"
TAG_ADDITIONAL_DATA = "62"
TAG_CRC = "63"

# Sub-tags of 38.
SUB_GUID = "00"
SUB_BENEFICIARY = "01"
SUB_SERVICE_CODE = "02"
# Sub-tags of 38.01.
SUB_BANK_CODE = "00"
SUB_ACCOUNT_NUMBER = "01"
# Sub-tags of 62.
SUB_BILL_NUMBER = "01"
SUB_REFERENCE_LABEL = "05"
SUB_PURPOSE_CODE = "07"
SUB_PURPOSE = "08"

CRC_PLACEHOLDER = f"{TAG_CRC}04"

KNOWN_TAGS = frozenset(
    {
        TAG_PAYLOAD_FORMAT,
        TAG_INITIATION_METHOD,
        TAG_ACCOUNT_INFO,
        TAG_MERCHANT_CATEGORY,
        TAG_CURRENCY,
        TAG_AMOUNT,
        TAG_COUNTRY,
        TAG_ADDITIONAL_DATA,
        TAG_CRC,
    }
)

# Tags whose value is itself TLV; everything else is opaque text.
PAYLOAD_SCHEMA = {
    TAG_ACCOUNT_INFO: {SUB_BENEFICIARY: {}},
    TAG_ADDITIONAL_DATA: {},
}


class InitiationMethod(str, enum.Enum):
    STATIC = "11"
    DYNAMIC = "12"

    @property
    def label(self) -> str:
        return self.name.lower()


class ServiceCode(str, enum.Enum):
    ACCOUNT_TRANSFER = "QRIBFTTA"
    CARD_TRANSFER = "QRIBFTTC"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _coerce_enum(enum_cls: type[enum.Enum], value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class VietQRConfig:
    """Caller input for :func:`vietqr.encoder.generate`.

    Exactly one of ``account_number`` / ``card_number`` must be set. When
    ``initiation_method`` is left out the variant follows the amount: an
    amount makes the payload dynamic, no amount makes it static.
    """

    bank_code: str | None
    service_code: ServiceCode | str | None = None
    account_number: str | None = None
    card_number: str | None = None
    amount: str | None = None
    initiation_method: InitiationMethod | str | None = None
    currency: str = CURRENCY_VND
    country: str = COUNTRY_VN
    bill_number: str | None = None
    reference_label: str | None = None
    purpose: str | None = None

    def normalized(self) -> VietQRConfig:
        """Return a copy with surrounding whitespace stripped and blanks dropped."""

        return replace(
            self,
            bank_code=_clean(self.bank_code),
            service_code=_coerce_enum(ServiceCode, _clean(self.service_code)),
            account_number=_clean(self.account_number),
            card_number=_clean(self.card_number),
            amount=_clean(self.amount),
            initiation_method=_coerce_enum(InitiationMethod, _clean(self.initiation_method)),
            currency=(self.currency or "").strip(),
            country=(self.country or "").strip(),
            bill_number=_clean(self.bill_number),
            reference_label=_clean(self.reference_label),
            purpose=_clean(self.purpose),
        )

    @property
    def resolved_initiation_method(self) -> InitiationMethod:
        if isinstance(self.initiation_method, InitiationMethod):
            return self.initiation_method
        return InitiationMethod.DYNAMIC if self.amount else InitiationMethod.STATIC

    @property
    def beneficiary_number(self) -> str | None:
        return self.account_number or self.card_number


@dataclass(frozen=True)
class PayloadRecord:
    """Structured view of a decoded payload.

    Attributes may hold malformed values; run :func:`vietqr.validation.record.validate`
    to find out whether they are acceptable. ``fields`` keeps every top-level
    field in wire order, including tags this package does not interpret.
    """

    payload_format_indicator: str | None = None
    initiation_method: InitiationMethod | None = None
    guid: str | None = None
    bank_code: str | None = None
    account_number: str | None = None
    service_code: str | None = None
    merchant_category: str | None = None
    currency: str | None = None
    amount: str | None = None
    country: str | None = None
    bill_number: str | None = None
    reference_label: str | None = None
    purpose_code: str | None = None
    message: str | None = None
    crc: str | None = None
    fields: tuple[Field, ...] = ()

    @property
    def is_dynamic(self) -> bool:
        return self.initiation_method is InitiationMethod.DYNAMIC

    @property
    def is_static(self) -> bool:
        return self.initiation_method is InitiationMethod.STATIC

    def field(self, tag: str) -> Field | None:
        return find_field(self.fields, tag)

    def unknown_tags(self) -> tuple[str, ...]:
        return tuple(item.tag for item in self.fields if item.tag not in KNOWN_TAGS)
