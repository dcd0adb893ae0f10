"""Tests for post-parse validation."""

from dataclasses import replace

import pytest

from vietqr.crc import crc16_ccitt
from vietqr.encoder import generate
from vietqr.models import PayloadRecord
from vietqr.parser import parse
from vietqr.validation.codes import ErrorCode, WarningCode
from vietqr.validation.fields import FieldLimits
from vietqr.validation.record import ValidationOptions, validate


def _seal(body: str) -> str:
    return f"{body}6304{crc16_ccitt(body + '6304')}"


class TestRoundTrip:
    def test_generated_payloads_validate(self, dynamic_config, static_card_config):
        for config in (dynamic_config, static_card_config):
            generated = generate(config)
            result = validate(parse(generated.payload), generated.payload)
            assert result.valid, result.errors
            assert not result.corrupted
            assert result.warnings == ()

    def test_round_trip_preserves_values(self, dynamic_config):
        record = parse(generate(dynamic_config).payload)
        assert record.bank_code == dynamic_config.bank_code
        assert record.account_number == dynamic_config.account_number
        assert record.amount == dynamic_config.amount
        assert record.bill_number == dynamic_config.bill_number
        assert record.message == dynamic_config.purpose


class TestMessageBytes:
    @pytest.mark.parametrize("size, valid", [(500, True), (501, False)])
    def test_message_byte_boundary(self, dynamic_payload, size, valid):
        record = replace(parse(dynamic_payload), message="a" * size)
        result = validate(record, dynamic_payload, ValidationOptions(skip_crc_check=True))
        assert result.valid is valid
        if not valid:
            assert result.codes_for("message") == (ErrorCode.LENGTH_EXCEEDED,)

    def test_multibyte_characters_count_as_bytes(self, dynamic_payload):
        record = replace(parse(dynamic_payload), message="ệ" * 167)
        result = validate(record, dynamic_payload, ValidationOptions(skip_crc_check=True))
        assert ErrorCode.LENGTH_EXCEEDED in result.codes_for("message")

    def test_custom_limits(self, dynamic_payload):
        options = ValidationOptions(limits=FieldLimits(max_message_bytes=10))
        result = validate(parse(dynamic_payload), dynamic_payload, options)
        assert ErrorCode.LENGTH_EXCEEDED in result.codes_for("message")


class TestChecksum:
    def test_mismatch_is_reported(self, dynamic_payload):
        tampered = dynamic_payload.replace("180000", "190000")
        result = validate(parse(tampered), tampered)
        assert result.codes_for("crc") == (ErrorCode.CHECKSUM_MISMATCH,)
        assert result.errors[0].expected_format == crc16_ccitt(tampered[:-4])
        assert result.corrupted

    def test_skip_crc_check(self, dynamic_payload):
        tampered = dynamic_payload.replace("180000", "190000")
        result = validate(parse(tampered), tampered, ValidationOptions(skip_crc_check=True, skip_corruption_detection=True))
        assert result.valid
        assert not result.corrupted

    def test_empty_text_only_checks_format(self, dynamic_payload):
        record = parse(dynamic_payload)
        assert validate(record, "").codes_for("crc") == ()
        assert validate(replace(record, crc="ZZZZ"), "").codes_for("crc") == (ErrorCode.INVALID_CHARACTER,)
        assert validate(replace(record, crc="2E2"), "").codes_for("crc") == (ErrorCode.INVALID_FORMAT,)


class TestRecordRules:
    def test_fixed_values(self):
        payload = _seal(
            "000202010211" "38600010A00000072701300006970403011697040311012345670208QRIBFTTC" "5303840" "5802US"
        )
        result = validate(parse(payload), payload)
        assert result.codes_for("payload_format_indicator") == (ErrorCode.INVALID_PAYLOAD_FORMAT,)
        assert result.codes_for("currency") == (ErrorCode.INVALID_CURRENCY,)
        assert result.codes_for("country") == (ErrorCode.INVALID_COUNTRY,)

    def test_unknown_initiation_method(self, static_payload):
        payload = _seal(static_payload[:-8].replace("010211", "010213", 1))
        result = validate(parse(payload), payload)
        assert result.codes_for("initiation_method") == (ErrorCode.INVALID_INITIATION_METHOD,)

    def test_missing_initiation_method(self):
        result = validate(PayloadRecord(), "")
        assert ErrorCode.MISSING_REQUIRED_FIELD in result.codes_for("initiation_method")

    def test_merchant_category(self, static_payload):
        record = parse(static_payload)
        assert validate(replace(record, merchant_category="5999"), static_payload).codes_for("merchant_category") == ()
        bad = validate(replace(record, merchant_category="59A"), static_payload)
        assert bad.codes_for("merchant_category") == (ErrorCode.INVALID_FORMAT,)

    def test_purpose_code(self, static_payload):
        record = replace(parse(static_payload), purpose_code="P" * 26)
        assert validate(record, static_payload).codes_for("purpose_code") == (ErrorCode.LENGTH_EXCEEDED,)

    def test_empty_record_never_raises(self):
        result = validate(PayloadRecord(), "")
        assert not result.valid
        assert result.corrupted
        assert not result.recoverable


class TestWarnings:
    def test_unknown_tag_warning_does_not_affect_validity(self, static_payload):
        payload = _seal(static_payload[:-8] + "9903abc")
        result = validate(parse(payload), payload)
        assert result.valid
        assert [warning.code for warning in result.warnings] == [WarningCode.UNRECOGNIZED_FIELD]

    def test_dynamic_without_amount(self, static_payload):
        payload = _seal(static_payload[:-8].replace("010211", "010212", 1))
        result = validate(parse(payload), payload)
        assert result.valid
        assert result.warnings[0].code is WarningCode.MISSING_OPTIONAL_FIELD

    def test_treat_warnings_as_errors(self, static_payload):
        payload = _seal(static_payload[:-8] + "9903abc")
        result = validate(parse(payload), payload, ValidationOptions(treat_warnings_as_errors=True))
        assert not result.valid
        assert result.codes_for("tag_99") == (ErrorCode.UNKNOWN_FIELD,)
        assert result.warnings == ()
