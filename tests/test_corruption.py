"""Tests for corruption detection and recoverability."""

from dataclasses import replace

from vietqr.parser import parse
from vietqr.validation.codes import ErrorCode
from vietqr.validation.corruption import detect_corruption, is_recoverable
from vietqr.validation.issues import ValidationIssue
from vietqr.validation.record import validate


class TestDetectCorruption:
    def test_intact_payload(self, dynamic_payload):
        assert not detect_corruption(parse(dynamic_payload), dynamic_payload, ())

    def test_checksum_mismatch_error(self, dynamic_payload):
        mismatch = ValidationIssue(field="crc", code=ErrorCode.CHECKSUM_MISMATCH, message="checksum does not match")
        assert detect_corruption(parse(dynamic_payload), dynamic_payload, (mismatch,))

    def test_missing_mandatory_attribute(self, dynamic_payload):
        record = replace(parse(dynamic_payload), country="")
        assert detect_corruption(record, dynamic_payload, ())

    def test_short_text(self, dynamic_payload):
        assert detect_corruption(parse(dynamic_payload), dynamic_payload[:40], ())

    def test_text_without_sealed_tail(self, dynamic_payload):
        assert detect_corruption(parse(dynamic_payload), dynamic_payload[:-8] + "99042E2E", ())

    def test_record_checksum_disagrees_with_text(self, dynamic_payload):
        record = replace(parse(dynamic_payload), crc="ABCD")
        assert detect_corruption(record, dynamic_payload, ())


class TestRecoverable:
    def test_corrupted_but_recoverable(self, dynamic_payload):
        tampered = dynamic_payload.replace("thanh toan", "thanh tien")
        result = validate(parse(tampered), tampered)
        assert not result.valid
        assert result.corrupted
        assert result.recoverable
        assert result.codes_for("crc") == (ErrorCode.CHECKSUM_MISMATCH,)

    def test_missing_account_is_not_recoverable(self, dynamic_payload):
        record = replace(parse(dynamic_payload), account_number=None)
        assert not is_recoverable(record, ())

    def test_missing_field_error_blocks_recovery(self, dynamic_payload):
        missing = ValidationIssue(field="currency", code=ErrorCode.MISSING_REQUIRED_FIELD, message="currency is required")
        assert not is_recoverable(parse(dynamic_payload), (missing,))
