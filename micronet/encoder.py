"""Encoding of navigation data into Micronet send-data messages."""

from __future__ import annotations

from .fields import (
    field_16bit,
    field_24bit,
    field_32bit,
    field_dual_16bit,
    field_position,
    field_quad_8bit,
    field_waypoint,
)
from .frames import (
    DataField,
    FieldId,
    MessageId,
    MicronetMessage,
    finalize_header,
)
from .navigation import NavigationData

FEET_TO_METERS = 0.3048
_SOURCE_MASTER = 0x01
_NODE_INFO_TAG = 0x33


def _int16(value: float) -> int:
    """Truncate towards zero and wrap into a signed 16-bit integer."""
    return ((int(value) + 0x8000) & 0xFFFF) - 0x8000


def _divide(value: float, factor: float, name: str) -> float:
    if factor == 0.0:
        raise ValueError(f"{name} is zero; calibration not set")
    return value / factor


class DataEncoder:
    """Builds send-data messages from the values held in a NavigationData.

    Calibration offsets and factors are removed from the values so that the
    receiving displays apply them again. The waypoint name scrolls across
    successive messages, so the encoder keeps the position of its window.
    """

    def __init__(self, nav_data: NavigationData | None = None) -> None:
        self.nav_data = nav_data if nav_data is not None else NavigationData()
        self.software_version: tuple[int, int] = (0, 0)
        self._name_offset = 0

    def _fields(self, signal_strength: int, data_fields: int):
        nav = self.nav_data

        if data_fields & DataField.TIME and nav.time.valid:
            yield field_16bit(FieldId.TIME, (nav.time.hour << 8) + nav.time.minute)
        if data_fields & DataField.DATE and nav.date.valid:
            yield field_24bit(FieldId.DATE,
                              (nav.date.day << 16) + (nav.date.month << 8) + nav.date.year)
        if data_fields & DataField.SOGCOG and (nav.sog_kt.valid or nav.cog_deg.valid):
            yield field_dual_16bit(FieldId.SOGCOG, _int16(nav.sog_kt.value * 10.0),
                                   _int16(nav.cog_deg.value))
        if data_fields & DataField.POSITION and (nav.latitude_deg.valid
                                                 or nav.longitude_deg.valid):
            yield field_position(nav.latitude_deg.value, nav.longitude_deg.value)
        if data_fields & DataField.XTE and nav.xte_nm.valid:
            yield field_16bit(FieldId.XTE, _int16(nav.xte_nm.value * 100))
        if data_fields & DataField.DTW and nav.dtw_nm.valid:
            yield field_32bit(FieldId.DTW, _int16(nav.dtw_nm.value * 100))
        if data_fields & DataField.BTW and (nav.btw_deg.valid or nav.waypoint.valid):
            chunk, self._name_offset = field_waypoint(
                FieldId.BTW, _int16(nav.btw_deg.value), nav.waypoint.name, self._name_offset)
            yield chunk
        if data_fields & DataField.VMGWP and nav.vmgwp_kt.valid:
            yield field_16bit(FieldId.VMGWP, _int16(nav.vmgwp_kt.value * 100))
        if data_fields & DataField.HDG and nav.mag_hdg_deg.valid:
            heading = _int16(nav.mag_hdg_deg.value - nav.heading_offset_deg) % 360
            yield field_16bit(FieldId.HDG, heading)
        if data_fields & DataField.AWS and nav.aws_kt.valid:
            speed = _divide(nav.aws_kt.value * 10.0, nav.wind_speed_factor_per,
                            "wind speed factor")
            yield field_16bit(FieldId.AWS, int(speed))
        if data_fields & DataField.AWA and nav.awa_deg.valid:
            angle = _int16(nav.awa_deg.value - nav.wind_direction_offset_deg)
            if angle > 180:
                angle -= 360
            if angle < -180:
                angle += 360
            yield field_16bit(FieldId.AWA, angle)
        if data_fields & DataField.NODE_INFO:
            major, minor = self.software_version
            yield field_quad_8bit(FieldId.NODE_INFO, minor, major, _NODE_INFO_TAG,
                                  signal_strength)
        if data_fields & DataField.DPT and nav.dpt_m.valid:
            depth = (nav.dpt_m.value - nav.depth_offset_m) * 10.0 / FEET_TO_METERS
            yield field_16bit(FieldId.DPT, _int16(depth))
        if data_fields & DataField.SPD and nav.spd_kt.valid:
            speed = _divide(nav.spd_kt.value * 100.0, nav.water_speed_factor_per,
                            "water speed factor")
            yield field_16bit(FieldId.SPD, _int16(speed))

    def encode(self, signal_strength: int, network_id: int, device_id: int,
               data_fields: int) -> MicronetMessage:
        """Build a send-data message with every requested field that is valid.

        Raises ValueError when speed must be sent but its factor is zero.
        """
        frame = bytearray()
        frame += (network_id & 0xFFFFFFFF).to_bytes(4, "big")
        frame += (device_id & 0xFFFFFFFF).to_bytes(4, "big")
        frame += bytes([MessageId.SEND_DATA, _SOURCE_MASTER, signal_strength & 0xFF, 0, 0, 0])
        for chunk in self._fields(signal_strength, data_fields):
            frame += chunk
        return MicronetMessage(finalize_header(frame))