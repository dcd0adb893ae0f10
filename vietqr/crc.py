"""CRC-16/CCITT-FALSE checksum used to seal VietQR payloads."""
from __future__ import annotations

import re

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC_LENGTH = 4

_HEX4 = re.compile(r"^[0-9A-Fa-f]{4}$")


def crc16_ccitt(data: str) -> str:
    """Compute CRC-16/CCITT-FALSE over the UTF-8 bytes of ``data``.

    Polynomial 0x1021, initial register 0xFFFF, no final XOR. The result is
    always 4 uppercase hex characters.
    """

    checksum = CRC16_INIT
    for byte in data.encode("utf-8"):
        checksum ^= byte << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def is_crc_value(value: str | None) -> bool:
    return value is not None and bool(_HEX4.match(value))


def verify_crc(payload: str) -> bool:
    """Check the trailing 4-character checksum of a complete payload."""

    if not payload or len(payload) < CRC_LENGTH:
        return False
    claimed = payload[-CRC_LENGTH:]
    if not is_crc_value(claimed):
        return False
    return crc16_ccitt(payload[:-CRC_LENGTH]) == claimed.upper()
