"""Micronet frame layout, header accessors and simple frame encoders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Union

NUID_OFFSET = 0
DUID_OFFSET = 4
DT_OFFSET = 4
MI_OFFSET = 8
DF_OFFSET = 9
SS_OFFSET = 10
CRC_OFFSET = 11
LEN_OFFSET_1 = 12
LEN_OFFSET_2 = 13
PAYLOAD_OFFSET = 14
HEADER_LENGTH = PAYLOAD_OFFSET

_SOURCE_MASTER = 0x01
_SOURCE_SLAVE = 0x09
_RESET_PAYLOAD = bytes([0xFA, 0x4F, 0x46, 0x46, 0x26])


class MessageId(IntEnum):
    """Message identifiers carried in the header."""

    MASTER_REQUEST = 0x01
    SEND_DATA = 0x02
    REQUEST_SLOT = 0x03
    UPDATE_SLOT = 0x05
    SET_PARAMETER = 0x06
    ACK_PARAMETER = 0x07
    PING = 0x0A


class FieldType(IntEnum):
    """Data field length codes: the first byte of every data field."""

    TYPE_3 = 0x03
    TYPE_4 = 0x04
    TYPE_5 = 0x05
    TYPE_A = 0x0A


class FieldId(IntEnum):
    """Identifiers of data fields inside a send-data message."""

    SPD = 0x01
    STP = 0x02
    LOG = 0x03
    DPT = 0x04
    AWS = 0x05
    AWA = 0x06
    HDG = 0x07
    SOGCOG = 0x08
    POSITION = 0x09
    BTW = 0x0A
    XTE = 0x0B
    TIME = 0x0C
    DATE = 0x0D
    NODE_INFO = 0x12
    VCC = 0x1B
    VMGWP = 0x1C
    DTW = 0x1F


class DataField(IntFlag):
    """Selection of data fields a device transmits."""

    TIME = 0x00000001
    DATE = 0x00000002
    SOGCOG = 0x00000004
    POSITION = 0x00000008
    XTE = 0x00000010
    DTW = 0x00000020
    BTW = 0x00000040
    VMGWP = 0x00000080
    HDG = 0x00000100
    NODE_INFO = 0x00000200
    AWS = 0x00000400
    AWA = 0x00000800
    DPT = 0x00001000
    SPD = 0x00002000


_FIELD_SIZES = {
    DataField.TIME: 6,
    DataField.DATE: 7,
    DataField.SOGCOG: 8,
    DataField.POSITION: 11,
    DataField.XTE: 6,
    DataField.DTW: 8,
    DataField.BTW: 12,
    DataField.VMGWP: 6,
    DataField.HDG: 6,
    DataField.NODE_INFO: 8,
    DataField.AWS: 6,
    DataField.AWA: 6,
    DataField.DPT: 6,
    DataField.SPD: 6,
}


class RfAction(IntEnum):
    """What the radio does when a scheduled message comes due."""

    NO_ACTION = 0
    LOW_POWER = 1
    ACTIVE_POWER = 2


@dataclass
class MicronetMessage:
    """A frame as received from or sent to the radio."""

    data: bytearray = field(default_factory=bytearray)
    rssi: int = 0
    start_time_us: int = 0
    end_time_us: int = 0
    action: RfAction = RfAction.NO_ACTION

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def payload(self) -> bytes:
        return bytes(self.data[PAYLOAD_OFFSET:])

    @property
    def payload_length(self) -> int:
        return max(0, len(self.data) - PAYLOAD_OFFSET)


MessageLike = Union[MicronetMessage, bytes, bytearray]


def _data(message: MessageLike) -> bytes:
    if isinstance(message, MicronetMessage):
        return bytes(message.data)
    return bytes(message)


def checksum(data) -> int:
    """Eight-bit additive checksum used throughout the protocol."""
    return sum(data) & 0xFF


def network_id(message: MessageLike) -> int:
    return int.from_bytes(_data(message)[NUID_OFFSET:NUID_OFFSET + 4], "big")


def device_type(message: MessageLike) -> int:
    return _data(message)[DT_OFFSET]


def device_id(message: MessageLike) -> int:
    return int.from_bytes(_data(message)[DUID_OFFSET:DUID_OFFSET + 4], "big")


def message_id(message: MessageLike) -> int:
    return _data(message)[MI_OFFSET]


def source(message: MessageLike) -> int:
    return _data(message)[DF_OFFSET]


def signal_strength(message: MessageLike) -> int:
    return _data(message)[SS_OFFSET]


def header_crc(message: MessageLike) -> int:
    return _data(message)[CRC_OFFSET]


def verify_header_crc(message: MessageLike) -> bool:
    """Check the duplicated length bytes and the header checksum."""
    data = _data(message)
    if len(data) < HEADER_LENGTH:
        return False
    if data[LEN_OFFSET_1] != data[LEN_OFFSET_2]:
        return False
    return checksum(data[:CRC_OFFSET]) == data[CRC_OFFSET]


def finalize_header(data) -> bytearray:
    """Return a copy of a frame with its length bytes and header CRC filled in."""
    frame = bytearray(data)
    if len(frame) < HEADER_LENGTH:
        raise ValueError(f"frame shorter than the {HEADER_LENGTH}-byte header")
    frame[LEN_OFFSET_1] = frame[LEN_OFFSET_2] = (len(frame) - 2) & 0xFF
    frame[CRC_OFFSET] = checksum(frame[:CRC_OFFSET])
    return frame


def data_message_length(data_fields: int) -> int:
    """Payload size in bytes of a data message carrying the given fields."""
    return sum(size for flag, size in _FIELD_SIZES.items() if data_fields & flag)


def _header(msg_id: int, src: int, strength: int, net_id: int, dev_id: int) -> bytearray:
    frame = bytearray()
    frame += (net_id & 0xFFFFFFFF).to_bytes(4, "big")
    frame += (dev_id & 0xFFFFFFFF).to_bytes(4, "big")
    frame += bytes([msg_id & 0xFF, src, strength & 0xFF, 0, 0, 0])
    return frame


def _build(msg_id: int, src: int, strength: int, net_id: int, dev_id: int,
           payload: bytes | None) -> MicronetMessage:
    frame = _header(msg_id, src, strength, net_id, dev_id)
    if payload is not None:
        frame += payload
        frame.append(checksum(payload))
    return MicronetMessage(finalize_header(frame))


def encode_slot_update(signal_strength, network_id, device_id, payload_length) -> MicronetMessage:
    """Ask the master to resize this device's synchronous slot."""
    return _build(MessageId.UPDATE_SLOT, _SOURCE_SLAVE, signal_strength, network_id,
                  device_id, bytes([payload_length & 0xFF]))


def encode_slot_request(signal_strength, network_id, device_id, payload_length) -> MicronetMessage:
    """Ask the master for a synchronous slot."""
    return _build(MessageId.REQUEST_SLOT, _SOURCE_SLAVE, signal_strength, network_id,
                  device_id, bytes([0x00, payload_length & 0xFF]))


def encode_reset(signal_strength, network_id, device_id) -> MicronetMessage:
    """Build a reset request sent as a set-parameter message."""
    return _build(MessageId.SET_PARAMETER, _SOURCE_SLAVE, signal_strength, network_id,
                  device_id, _RESET_PAYLOAD)


def encode_ack_param(signal_strength, network_id, device_id) -> MicronetMessage:
    """Acknowledge a set-parameter message; header only."""
    return _build(MessageId.ACK_PARAMETER, _SOURCE_MASTER, signal_strength, network_id,
                  device_id, None)


def encode_ping(signal_strength, network_id, device_id) -> MicronetMessage:
    """Build a ping message with an empty payload and its checksum."""
    return _build(MessageId.PING, _SOURCE_SLAVE, signal_strength, network_id,
                  device_id, b"")


_RSSI_THRESHOLDS = (-95, -90, -85, -80, -75, -70, -65, -60, -55)


def rssi_to_signal_strength(rssi: int) -> int:
    """Map an RSSI in dBm to the 0..9 strength scale of the protocol."""
    for level, threshold in enumerate(_RSSI_THRESHOLDS):
        if rssi < threshold:
            return level
    return len(_RSSI_THRESHOLDS)


def rssi_to_float_strength(rssi: int) -> float:
    """Continuous signal strength, never negative."""
    return max(0.0, (rssi + 95) / 5.0)