"""Tests for the TLV field codec."""

import pytest

from vietqr.errors import FieldTooLong, InvalidTag, MalformedTLV, TLVFault
from vietqr.models import PAYLOAD_SCHEMA
from vietqr.tlv import Field, build_tlv, decode_all, decode_tree, encode_field, encode_nested, read_field


class TestEncodeField:
    def test_length_is_zero_padded(self):
        item = encode_field("00", "01")
        assert item.length == "02"
        assert item.encoded == "000201"

    def test_empty_value(self):
        assert encode_field("62", "").encoded == "6200"

    def test_value_of_99_characters_is_allowed(self):
        assert encode_field("08", "x" * 99).length == "99"

    def test_value_over_99_characters_is_rejected(self):
        with pytest.raises(FieldTooLong) as excinfo:
            encode_field("08", "x" * 100)
        assert excinfo.value.length == 100

    @pytest.mark.parametrize("tag", ["", "1", "123"])
    def test_tag_must_be_two_characters(self, tag):
        with pytest.raises(InvalidTag):
            encode_field(tag, "value")

    def test_length_counts_characters(self):
        assert encode_field("08", "Thanh toán").length == "10"


class TestEncodeNested:
    def test_preserves_caller_order(self):
        nested = encode_nested("62", [encode_field("08", "abc"), encode_field("01", "B1")])
        assert nested.value == "0803abc0102B1"
        assert [child.tag for child in nested.children] == ["08", "01"]

    def test_account_info_layout(self):
        beneficiary = encode_nested("01", [encode_field("00", "970403"), encode_field("01", "0011012345678")])
        info = encode_nested("38", [encode_field("00", "A000000727"), beneficiary, encode_field("02", "QRIBFTTA")])
        assert info.encoded == "38570010A00000072701270006970403011300110123456780208QRIBFTTA"
        assert info.is_nested


class TestReadField:
    def test_reads_at_offset(self):
        item, offset = read_field("0002015303704", 6)
        assert item == Field(tag="53", value="704")
        assert offset == 13

    def test_short_header(self):
        with pytest.raises(MalformedTLV) as excinfo:
            read_field("000", 0)
        assert excinfo.value.fault is TLVFault.SHORT_HEADER

    def test_non_digit_tag(self):
        with pytest.raises(MalformedTLV) as excinfo:
            read_field("AB02xx")
        assert excinfo.value.fault is TLVFault.BAD_TAG
        assert excinfo.value.offset == 0

    def test_non_digit_length(self):
        with pytest.raises(MalformedTLV) as excinfo:
            read_field("00A1x")
        assert excinfo.value.fault is TLVFault.BAD_LENGTH
        assert excinfo.value.offset == 2

    def test_declared_length_overruns_input(self):
        with pytest.raises(MalformedTLV) as excinfo:
            read_field("000501")
        assert excinfo.value.fault is TLVFault.OVERRUN
        assert excinfo.value.offset == 4


class TestDecode:
    def test_decode_all_is_lazy_and_restartable(self):
        text = "000201010211"
        first = decode_all(text)
        assert next(first).tag == "00"
        assert [item.tag for item in decode_all(text)] == ["00", "01"]
        assert [item.tag for item in decode_all(text, 6)] == ["01"]

    def test_decode_tree_follows_schema(self, dynamic_payload):
        fields = decode_tree(dynamic_payload, PAYLOAD_SCHEMA)
        assert [item.tag for item in fields] == ["00", "01", "38", "53", "54", "58", "62", "63"]
        account = fields[2]
        assert account.child("00").value == "A000000727"
        assert account.child("01").child("00").value == "970403"
        assert account.child("01").child("01").value == "0011012345678"
        additional = fields[6]
        assert additional.child("08").value == "thanh toan don hang"

    def test_tags_outside_schema_stay_opaque(self):
        fields = decode_tree("52040000", {})
        assert fields[0].children == ()

    def test_broken_nested_value_is_kept_as_leaf(self):
        fields = decode_tree("6205xx010", PAYLOAD_SCHEMA)
        assert fields[0].value == "xx010"
        assert fields[0].children == ()

    def test_build_tlv_inverts_decode(self, static_payload):
        assert build_tlv(decode_tree(static_payload, PAYLOAD_SCHEMA)) == static_payload
