"""Pydantic schemas for API contracts and image options."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .config import settings
from .models import InitiationMethod, PayloadRecord, ServiceCode, VietQRConfig

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class QRImageOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: Literal["png", "svg"] = "png"
    size: int = Field(default=300, ge=50, le=1000, description="Edge length of the QR square in pixels")
    error_correction: Literal["L", "M", "Q", "H"] = "M"
    margin: int = Field(default=4, ge=0, le=20, description="Quiet zone in modules")
    fill_color: str = Field(default="#000000", pattern=HEX_COLOR)
    back_color: str = Field(default="#FFFFFF", pattern=HEX_COLOR)
    caption: str | None = Field(default=None, max_length=64)

    @classmethod
    def from_settings(cls, **overrides: Any) -> QRImageOptions:
        values: dict[str, Any] = {
            "size": settings.image_size,
            "error_correction": settings.image_error_correction,
            "margin": settings.image_margin,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class GenerateQRRequest(BaseModel):
    bank_code: str = Field(description="6-digit NAPAS bank BIN")
    service_code: ServiceCode = ServiceCode.ACCOUNT_TRANSFER
    account_number: str | None = None
    card_number: str | None = None
    amount: str | None = Field(default=None, description="Decimal string, dynamic payloads only")
    initiation_method: InitiationMethod | None = None
    bill_number: str | None = None
    reference_label: str | None = None
    purpose: str | None = None
    include_image: bool = False
    image: QRImageOptions | None = None

    def to_config(self) -> VietQRConfig:
        return VietQRConfig(
            bank_code=self.bank_code,
            service_code=self.service_code,
            account_number=self.account_number,
            card_number=self.card_number,
            amount=self.amount,
            initiation_method=self.initiation_method,
            bill_number=self.bill_number,
            reference_label=self.reference_label,
            purpose=self.purpose,
        )


class FieldSchema(BaseModel):
    tag: str
    length: str
    value: str
    children: list[FieldSchema] = Field(default_factory=list)

    @classmethod
    def from_field(cls, item: Any) -> FieldSchema:
        return cls(
            tag=item.tag,
            length=item.length,
            value=item.value,
            children=[cls.from_field(child) for child in item.children],
        )


class GenerateQRResponse(BaseModel):
    payload: str
    crc: str
    variant: str
    fields: list[FieldSchema]
    qr_png_base64: str | None = None


class PayloadRequest(BaseModel):
    payload: str = Field(description="Raw VietQR payload text")
    strict_mode: bool = False
    extract_partial_on_error: bool = False


class PayloadRecordSchema(BaseModel):
    payload_format_indicator: str | None = None
    initiation_method: str | None = None
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
    fields: list[FieldSchema] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: PayloadRecord) -> PayloadRecordSchema:
        return cls(
            payload_format_indicator=record.payload_format_indicator,
            initiation_method=record.initiation_method.label if record.initiation_method else None,
            guid=record.guid,
            bank_code=record.bank_code,
            account_number=record.account_number,
            service_code=record.service_code,
            merchant_category=record.merchant_category,
            currency=record.currency,
            amount=record.amount,
            country=record.country,
            bill_number=record.bill_number,
            reference_label=record.reference_label,
            purpose_code=record.purpose_code,
            message=record.message,
            crc=record.crc,
            fields=[FieldSchema.from_field(item) for item in record.fields],
        )


class ValidationIssueSchema(BaseModel):
    field: str
    code: str
    message: str
    expected_format: str | None = None
    actual_value: str | None = None


class ValidationWarningSchema(BaseModel):
    field: str
    code: str
    message: str


class ValidationResultSchema(BaseModel):
    valid: bool
    corrupted: bool
    recoverable: bool
    errors: list[ValidationIssueSchema]
    warnings: list[ValidationWarningSchema]


class ParseResponse(BaseModel):
    record: PayloadRecordSchema


class ValidateRequest(PayloadRequest):
    skip_crc_check: bool = False
    treat_warnings_as_errors: bool = False


class ValidateResponse(BaseModel):
    record: PayloadRecordSchema
    validation: ValidationResultSchema


class ImageRequest(BaseModel):
    payload: str
    options: QRImageOptions | None = None


class ErrorResponse(BaseModel):
    code: str
    message: str
    position: int | None = None
    errors: list[ValidationIssueSchema] | None = None
