"""Helpers to build and parse EMV-style TLV payloads.

Every record is ``tag(2) + length(2, zero padded decimal) + value``. Lengths
are character counts. Nested records use the same grammar inside the value
of their parent; only the tags listed in a schema table are decoded
recursively, everything else stays opaque text.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

from .errors import FieldTooLong, InvalidTag, MalformedTLV, TLVFault

MAX_VALUE_LENGTH = 99
HEADER_LENGTH = 4

Schema = Mapping[str, "Schema"]


@dataclass(frozen=True)
class Field:
    tag: str
    value: str
    children: tuple[Field, ...] = ()

    @property
    def length(self) -> str:
        return f"{len(self.value):02d}"

    @property
    def encoded(self) -> str:
        return f"{self.tag}{self.length}{self.value}"

    @property
    def is_nested(self) -> bool:
        return bool(self.children)

    def child(self, tag: str) -> Field | None:
        """Return the first direct child carrying ``tag``."""

        return next((item for item in self.children if item.tag == tag), None)


def encode_field(tag: str, value: str) -> Field:
    """Build a leaf field, enforcing the 2-character tag and 99-character value limits."""

    if len(tag) != 2:
        raise InvalidTag(tag=tag)
    if len(value) > MAX_VALUE_LENGTH:
        raise FieldTooLong(tag=tag, length=len(value), limit=MAX_VALUE_LENGTH)
    return Field(tag=tag, value=value)


def encode_nested(tag: str, fields: Iterable[Field]) -> Field:
    """Wrap already-encoded fields under ``tag`` in the order given."""

    children = tuple(fields)
    wrapped = encode_field(tag, build_tlv(children))
    return Field(tag=wrapped.tag, value=wrapped.value, children=children)


def build_tlv(items: Iterable[Field]) -> str:
    """Serialize fields into one EMV string."""

    return "".join(item.encoded for item in items)


def read_field(payload: str, offset: int = 0) -> tuple[Field, int]:
    """Read the record starting at ``offset``.

    Returns the field and the offset just past it. Nothing is sliced out of
    ``payload`` until the declared length has been checked against what is
    left, so a huge declared length costs no more than a short one.
    """

    total = len(payload)
    if offset + HEADER_LENGTH > total:
        raise MalformedTLV(
            offset=offset,
            fault=TLVFault.SHORT_HEADER,
            detail=f"{total - offset} character(s) left, a header needs {HEADER_LENGTH}",
        )
    tag = payload[offset : offset + 2]
    if not (tag.isascii() and tag.isdigit()):
        raise MalformedTLV(offset=offset, fault=TLVFault.BAD_TAG, detail=f"tag {tag!r} is not 2 digits")
    raw_length = payload[offset + 2 : offset + 4]
    if not (raw_length.isascii() and raw_length.isdigit()):
        raise MalformedTLV(
            offset=offset + 2,
            fault=TLVFault.BAD_LENGTH,
            detail=f"length {raw_length!r} is not 2 digits",
        )
    length = int(raw_length)
    value_start = offset + HEADER_LENGTH
    value_end = value_start + length
    if value_end > total:
        raise MalformedTLV(
            offset=value_start,
            fault=TLVFault.OVERRUN,
            detail=f"declared length {length} but only {total - value_start} character(s) left",
        )
    return Field(tag=tag, value=payload[value_start:value_end]), value_end


def decode_all(payload: str, offset: int = 0) -> Iterator[Field]:
    """Lazily decode consecutive top-level records starting at ``offset``.

    Nested values are left undecoded; use :func:`decode_tree` for that.
    """

    idx = offset
    while idx < len(payload):
        item, idx = read_field(payload, idx)
        yield item


def decode_tree(payload: str, schema: Schema | None = None) -> tuple[Field, ...]:
    """Decode ``payload`` and recurse into every tag named in ``schema``.

    ``schema`` maps a tag to the schema of its own value. Tags missing from
    the mapping are leaves. A nested value that fails to decode is kept as a
    leaf so one damaged template does not hide its siblings.
    """

    schema = schema or {}
    return tuple(expand(item, schema) for item in decode_all(payload))


def expand(item: Field, schema: Schema) -> Field:
    """Decode the children of ``item`` when ``schema`` marks its tag as nested."""

    sub_schema = schema.get(item.tag)
    if sub_schema is None:
        return item
    try:
        children = decode_tree(item.value, sub_schema)
    except MalformedTLV:
        return item
    return Field(tag=item.tag, value=item.value, children=children)


def find_field(fields: Iterable[Field], tag: str) -> Field | None:
    return next((item for item in fields if item.tag == tag), None)
