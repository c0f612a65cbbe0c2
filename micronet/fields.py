"""Builders for the data fields carried in a Micronet send-data message.

Every field is laid out as ``[size, field code, kind, value bytes..., crc]``.
``size`` counts the code, kind and value bytes. ``crc`` is the 8-bit sum of
all the bytes before it.
"""

from __future__ import annotations

import math

from .frames import FieldId, checksum

_KIND_NUMERIC = 0x05
_KIND_NMEA = 0x03
_KIND_WAYPOINT = 0x09
_NAME_WINDOW = 4
_NAME_LEAD_IN = -3


def _field(size: int, field_code: int, kind: int, body: bytes) -> bytes:
    frame = bytes([size, field_code & 0xFF, kind]) + body
    return frame + bytes([checksum(frame)])


def _u16(value: int) -> bytes:
    return (int(value) & 0xFFFF).to_bytes(2, "big")


def field_16bit(field_code: int, value: int) -> bytes:
    """Field holding one 16-bit value (truncated to 16 bits)."""
    return _field(0x04, field_code, _KIND_NUMERIC, _u16(value))


def field_24bit(field_code: int, value: int) -> bytes:
    """Field holding one 24-bit value (truncated to 24 bits)."""
    body = (int(value) & 0xFFFFFF).to_bytes(3, "big")
    return _field(0x05, field_code, _KIND_NUMERIC, body)


def field_32bit(field_code: int, value: int) -> bytes:
    """Field holding one 32-bit value."""
    body = (int(value) & 0xFFFFFFFF).to_bytes(4, "big")
    return _field(0x06, field_code, _KIND_NUMERIC, body)


def field_dual_16bit(field_code: int, value1: int, value2: int) -> bytes:
    """Field holding two 16-bit values."""
    return _field(0x06, field_code, _KIND_NUMERIC, _u16(value1) + _u16(value2))


def field_quad_8bit(field_code: int, value1: int, value2: int, value3: int,
                    value4: int) -> bytes:
    """Field holding four bytes, tagged as NMEA-originated data."""
    body = bytes(v & 0xFF for v in (value1, value2, value3, value4))
    return _field(0x06, field_code, _KIND_NMEA, body)


def _degrees_and_minutes(angle: float) -> bytes:
    degrees = math.floor(angle)
    thousandths = int(60000.0 * (angle - degrees)) & 0xFFFF
    return bytes([int(degrees) & 0xFF]) + thousandths.to_bytes(2, "big")


def field_position(latitude: float, longitude: float) -> bytes:
    """Position field: whole degrees, thousandths of minutes and hemisphere flags.

    Bit 0 of the flags marks northern latitude, bit 1 eastern longitude.
    """
    flags = 0
    if latitude > 0.0:
        flags |= 0x01
    else:
        latitude = -latitude
    if longitude > 0.0:
        flags |= 0x02
    else:
        longitude = -longitude
    body = _degrees_and_minutes(latitude) + _degrees_and_minutes(longitude) + bytes([flags])
    return _field(0x09, FieldId.POSITION, _KIND_NUMERIC, body)


def field_waypoint(field_code: int, bearing: int, name: bytes,
                   name_offset: int) -> tuple[bytes, int]:
    """Bearing-to-waypoint field with a four-character window of the name.

    The name scrolls across successive messages: ``name_offset`` is the
    position of the window in the name and the returned offset is the one to
    use for the next message. Once the window has moved past the end of the
    name it restarts three blanks before its beginning.
    """
    name = bytes(name)
    if name_offset > len(name):
        name_offset = _NAME_LEAD_IN
    window = bytes(
        name[i] if 0 <= i < len(name) else ord(" ")
        for i in range(name_offset, name_offset + _NAME_WINDOW)
    )
    body = _u16(bearing) + b"\x00\x00" + window
    return _field(0x0A, field_code, _KIND_WAYPOINT, body), name_offset + 1