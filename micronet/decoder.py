"""Decoding of received Micronet messages into navigation data."""

from __future__ import annotations

import math
import time
from enum import IntEnum
from typing import Callable, Iterator

from .frames import (
    MI_OFFSET,
    PAYLOAD_OFFSET,
    FieldId,
    FieldType,
    MessageId,
    MessageLike,
    MicronetMessage,
    checksum,
)
from .navigation import FloatValue, NavigationData

MAXIMUM_VALID_DEPTH_FT = 500
FEET_TO_METERS = 0.3048
_PARAMETER_PAGE_FF = 0xFF


class CalibrationId(IntEnum):
    """Calibration parameters of page 0xFF of a set-parameter message."""

    WATER_SPEED_FACTOR = 0x00
    WATER_TEMP_OFFSET = 0x02
    DEPTH_OFFSET = 0x04
    WINDIR_OFFSET = 0x05
    WIND_SPEED_FACTOR = 0x06
    HEADING_OFFSET = 0x07
    MAGVAR = 0x0D
    WIND_SHIFT = 0x0E


def _default_clock() -> int:
    return int(time.monotonic() * 1000) & 0xFFFFFFFF


def _int8(byte: int) -> int:
    return byte - 256 if byte > 127 else byte


def _frame_bytes(message: MessageLike) -> bytes:
    if isinstance(message, MicronetMessage):
        return bytes(message.data)
    return bytes(message)


def _data_fields(data: bytes) -> Iterator[tuple[int, int, bytes]]:
    """Yield (type, field id, value bytes) of every field whose CRC is right."""
    offset = PAYLOAD_OFFSET
    while offset < len(data):
        size = data[offset]
        end = offset + size + 2
        if end > len(data):
            return
        chunk = data[offset:end]
        if size in FieldType.__members__.values() and checksum(chunk[:-1]) == chunk[-1]:
            yield size, chunk[1], chunk[3:-1]
        offset = end


class MicronetCodec:
    """Updates a NavigationData from decoded Micronet messages.

    ``clock`` returns the current time in milliseconds; it stamps every value
    that gets updated.
    """

    def __init__(self, nav_data: NavigationData | None = None,
                 clock: Callable[[], int] | None = None) -> None:
        self.nav_data = nav_data if nav_data is not None else NavigationData()
        self.clock = clock if clock is not None else _default_clock

    def decode_message(self, message: MessageLike) -> bool:
        """Decode one message; return True when it asks for an acknowledge."""
        data = _frame_bytes(message)
        if len(data) <= MI_OFFSET:
            return False
        kind = data[MI_OFFSET]
        if kind == MessageId.SEND_DATA:
            self._decode_send_data(data)
            return False
        if kind == MessageId.SET_PARAMETER:
            self._decode_set_parameter(data)
            return True
        return False

    def calculate_true_wind(self) -> None:
        """Derive true wind from apparent wind and boat speed when they are newer."""
        nav = self.nav_data
        awa, aws, spd = nav.awa_deg, nav.aws_kt, nav.spd_kt
        twa, tws = nav.twa_deg, nav.tws_kt
        if not (awa.valid and aws.valid and spd.valid):
            return
        if (twa.valid and tws.valid and awa.timestamp <= twa.timestamp
                and aws.timestamp <= tws.timestamp and spd.timestamp <= twa.timestamp):
            return
        angle = math.radians(awa.value)
        tw_lon = aws.value * math.cos(angle) - spd.value
        tw_lat = aws.value * math.sin(angle)
        self._set(tws, math.hypot(tw_lon, tw_lat))
        self._set(twa, math.degrees(math.atan2(tw_lat, tw_lon)))

    def _set(self, item: FloatValue, value: float) -> None:
        item.value = value
        item.valid = True
        item.timestamp = self.clock()

    def _decode_send_data(self, data: bytes) -> None:
        for kind, field_id, body in _data_fields(data):
            if kind == FieldType.TYPE_3:
                self._update_8bit(field_id, _int8(body[0]))
            elif kind in (FieldType.TYPE_4, FieldType.TYPE_5):
                self._update_16bit(field_id, int.from_bytes(body[0:2], "big", signed=True))
            elif kind == FieldType.TYPE_A:
                self._update_dual_32bit(
                    field_id,
                    int.from_bytes(body[0:4], "big", signed=True),
                    int.from_bytes(body[4:8], "big", signed=True),
                )
        self.calculate_true_wind()

    def _update_8bit(self, field_id: int, value: int) -> None:
        nav = self.nav_data
        if field_id == FieldId.STP:
            self._set(nav.stp_degc, value / 2.0 + nav.water_temperature_offset_degc)

    def _update_16bit(self, field_id: int, value: int) -> None:
        nav = self.nav_data
        if field_id == FieldId.SPD:
            self._set(nav.spd_kt, value / 100.0 * nav.water_speed_factor_per)
        elif field_id == FieldId.DPT:
            if value < MAXIMUM_VALID_DEPTH_FT * 10:
                self._set(nav.dpt_m, value * FEET_TO_METERS / 10.0 + nav.depth_offset_m)
            else:
                nav.dpt_m.valid = False
        elif field_id == FieldId.AWS:
            self._set(nav.aws_kt, value / 10.0 * nav.wind_speed_factor_per)
        elif field_id == FieldId.AWA:
            angle = value + nav.wind_direction_offset_deg
            if angle > 180.0:
                angle -= 360.0
            if angle < -180.0:
                angle += 360.0
            self._set(nav.awa_deg, angle)
        elif field_id == FieldId.HDG:
            heading = value + nav.heading_offset_deg
            if heading < 0.0:
                heading += 360.0
            if heading >= 360.0:
                heading -= 360.0
            self._set(nav.mag_hdg_deg, heading)
        elif field_id == FieldId.VCC:
            self._set(nav.vcc_v, value / 10.0)

    def _update_dual_32bit(self, field_id: int, value1: int, value2: int) -> None:
        nav = self.nav_data
        if field_id == FieldId.LOG:
            self._set(nav.trip_nm, value1 / 100.0)
            self._set(nav.log_nm, value2 / 10.0)

    def _decode_set_parameter(self, data: bytes) -> None:
        if len(data) <= PAYLOAD_OFFSET:
            return
        if checksum(data[PAYLOAD_OFFSET:-1]) != data[-1]:
            return
        if data[PAYLOAD_OFFSET] == _PARAMETER_PAGE_FF:
            self._decode_page_ff(data[PAYLOAD_OFFSET:])

    def _decode_page_ff(self, payload: bytes) -> None:
        if len(payload) < 3:
            return
        param, size = payload[1], payload[2]
        values = payload[3:3 + size]
        if len(values) < size:
            return
        nav = self.nav_data

        if size == 1:
            byte = values[0]
            if param == CalibrationId.WATER_SPEED_FACTOR:
                nav.water_speed_factor_per = 1.0 + (byte - 0x32) / 100.0
            elif param == CalibrationId.WIND_SPEED_FACTOR:
                nav.wind_speed_factor_per = 1.0 + _int8(byte) / 100.0
            elif param == CalibrationId.WATER_TEMP_OFFSET:
                nav.water_temperature_offset_degc = _int8(byte) / 2.0
            elif param == CalibrationId.DEPTH_OFFSET:
                nav.depth_offset_m = _int8(byte) * FEET_TO_METERS / 10.0
            elif param == CalibrationId.MAGVAR:
                nav.magnetic_variation_deg = float(_int8(byte))
            elif param == CalibrationId.WIND_SHIFT:
                nav.wind_shift_min = float(byte)
            else:
                return
        elif size == 2:
            value = float(int.from_bytes(values[:2], "little", signed=True))
            if param == CalibrationId.WINDIR_OFFSET:
                nav.wind_direction_offset_deg = value
            elif param == CalibrationId.HEADING_OFFSET:
                nav.heading_offset_deg = value
            else:
                return
        else:
            return
        nav.calibration_updated = True