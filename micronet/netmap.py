"""Network map announced by a Micronet master and the slots derived from it."""

from __future__ import annotations

from dataclasses import dataclass, field

from .frames import (
    PAYLOAD_OFFSET,
    MessageId,
    MessageLike,
    MicronetMessage,
    checksum,
    network_id,
)

RF_BAUDRATE_BAUD = 76800
RF_PREAMBLE_LENGTH = 15
BYTE_LENGTH_IN_US = 8 * 1_000_000 // RF_BAUDRATE_BAUD
PREAMBLE_LENGTH_IN_US = RF_PREAMBLE_LENGTH * BYTE_LENGTH_IN_US
HEADER_LENGTH_IN_US = PAYLOAD_OFFSET * BYTE_LENGTH_IN_US
GUARD_TIME_IN_US = 244
WINDOW_ROUNDING_TIME_US = 244
ASYNC_WINDOW_OFFSET = 244
ASYNC_WINDOW_LENGTH = 5000
ASYNC_WINDOW_PAYLOAD = 16
ACK_WINDOW_LENGTH = 2000
ACK_WINDOW_PAYLOAD = 0
NETWORK_CYCLE_US = 1_000_000

_UINT32 = 0xFFFFFFFF
_DEVICE_ENTRY = 5


class NetworkMapError(ValueError):
    """The frame is not a valid master request."""


@dataclass(frozen=True)
class TxSlot:
    """A transmission window; an all-zero slot means no window."""

    device_id: int = 0
    start_us: int = 0
    length_us: int = 0
    payload_bytes: int = 0

    @property
    def scheduled(self) -> bool:
        return self.start_us != 0


@dataclass
class NetworkMap:
    """Timing of one network cycle as announced by the master."""

    network_id: int = 0
    master_device: int = 0
    network_start: int = 0
    network_end: int = 0
    first_slot: int = 0
    sync_slots: list[TxSlot] = field(default_factory=list)
    async_slot: TxSlot = field(default_factory=TxSlot)
    ack_slots: list[TxSlot] = field(default_factory=list)

    def sync_slot(self, device_id: int) -> TxSlot:
        """Synchronous slot of ``device_id``, or an empty slot."""
        return next((s for s in self.sync_slots if s.device_id == device_id), TxSlot())

    def ack_slot(self, device_id: int) -> TxSlot:
        """Acknowledge slot of ``device_id``, or an empty slot."""
        return next((s for s in self.ack_slots if s.device_id == device_id), TxSlot())

    def next_start(self) -> int:
        """Expected start of the next network cycle."""
        return (self.network_start + NETWORK_CYCLE_US) & _UINT32


def _slot_length(payload_bytes: int) -> int:
    raw = (PREAMBLE_LENGTH_IN_US + HEADER_LENGTH_IN_US
           + payload_bytes * BYTE_LENGTH_IN_US + GUARD_TIME_IN_US)
    return -(-raw // WINDOW_ROUNDING_TIME_US) * WINDOW_ROUNDING_TIME_US


def parse_network_map(message: MessageLike) -> NetworkMap:
    """Build the network map from a master request frame.

    Raises NetworkMapError if the frame is not a master request, is too
    short, or fails its payload checksum.
    """
    if isinstance(message, MicronetMessage):
        data = bytes(message.data)
        start_us, end_us = message.start_time_us, message.end_time_us
    else:
        data = bytes(message)
        start_us = end_us = 0

    if len(data) < PAYLOAD_OFFSET + _DEVICE_ENTRY:
        raise NetworkMapError("frame too short for a master request")
    if data[8] != MessageId.MASTER_REQUEST:
        raise NetworkMapError("not a master request")
    if checksum(data[PAYLOAD_OFFSET:-1]) != data[-1]:
        raise NetworkMapError("payload checksum mismatch")

    payload = data[PAYLOAD_OFFSET:]
    nb_devices = max(0, (len(payload) - 3) // _DEVICE_ENTRY)
    master = int.from_bytes(payload[0:4], "big")

    delay = 0
    sync_slots = []
    for index in range(1, nb_devices):
        entry = payload[index * _DEVICE_ENTRY:(index + 1) * _DEVICE_ENTRY]
        dev_id = int.from_bytes(entry[:4], "big")
        payload_bytes = entry[4]
        # A zero payload length means no slot is reserved for the device.
        if payload_bytes:
            length = _slot_length(payload_bytes)
            sync_slots.append(TxSlot(dev_id, (end_us + delay) & _UINT32, length, payload_bytes))
            delay += length
        else:
            sync_slots.append(TxSlot(dev_id, 0, 0, 0))

    delay += ASYNC_WINDOW_OFFSET
    async_slot = TxSlot(0, (end_us + delay) & _UINT32, ASYNC_WINDOW_LENGTH, ASYNC_WINDOW_PAYLOAD)
    delay += ASYNC_WINDOW_LENGTH

    ack_slots = []
    for dev_id in [s.device_id for s in reversed(sync_slots)] + [master]:
        ack_slots.append(TxSlot(dev_id, (end_us + delay) & _UINT32,
                                ACK_WINDOW_LENGTH, ACK_WINDOW_PAYLOAD))
        delay += ACK_WINDOW_LENGTH

    return NetworkMap(
        network_id=network_id(data),
        master_device=master,
        network_start=start_us,
        network_end=(end_us + delay) & _UINT32,
        first_slot=end_us,
        sync_slots=sync_slots,
        async_slot=async_slot,
        ack_slots=ack_slots,
    )