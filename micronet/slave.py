"""A slave device on a Micronet network, made of several virtual slaves."""

from __future__ import annotations

from dataclasses import replace

from .decoder import MicronetCodec
from .encoder import DataEncoder
from .fifo import MessageFifo
from .frames import (
    MessageId,
    MessageLike,
    MicronetMessage,
    RfAction,
    data_message_length,
    encode_ack_param,
    encode_slot_request,
    encode_slot_update,
    message_id,
    network_id,
    rssi_to_signal_strength,
    verify_header_crc,
)
from .netmap import NetworkMap, NetworkMapError, TxSlot, parse_network_map

NUMBER_OF_VIRTUAL_SLAVES = 3
RF_WAKE_UP_MARGIN_US = 1000
_FIELD_BITS = 32


class SlaveDevice:
    """Answers master requests by scheduling data, slot and acknowledge frames.

    The device appears on the network as NUMBER_OF_VIRTUAL_SLAVES consecutive
    device identifiers starting at ``device_id``. The requested data fields
    are spread over them so that their data messages stay about the same size.
    """

    def __init__(self, codec: MicronetCodec, device_id: int = 0,
                 network_id: int = 0) -> None:
        self.codec = codec
        self.device_id = device_id
        self.network_id = network_id
        self.encoder = DataEncoder(codec.nav_data)
        self.network_map = NetworkMap()
        self.latest_signal_strength = 0
        self._data_fields = 0
        self._split = [0] * NUMBER_OF_VIRTUAL_SLAVES

    @property
    def data_fields(self) -> int:
        return self._data_fields

    @property
    def split_data_fields(self) -> tuple[int, ...]:
        """Data fields assigned to each virtual slave."""
        return tuple(self._split)

    def set_data_fields(self, data_fields: int) -> None:
        """Replace the set of transmitted data fields."""
        self._data_fields = int(data_fields)
        self._split_data_fields()

    def add_data_fields(self, data_fields: int) -> None:
        """Add data fields to those already transmitted."""
        self._data_fields |= int(data_fields)
        self._split_data_fields()

    def _split_data_fields(self) -> None:
        self._split = [0] * NUMBER_OF_VIRTUAL_SLAVES
        for bit in range(_FIELD_BITS):
            if (self._data_fields >> bit) & 1:
                self._split[self._shortest_slave()] |= 1 << bit

    def _shortest_slave(self) -> int:
        return min(range(NUMBER_OF_VIRTUAL_SLAVES),
                   key=lambda i: data_message_length(self._split[i]))

    def _device_ids(self):
        return (self.device_id + i for i in range(NUMBER_OF_VIRTUAL_SLAVES))

    @staticmethod
    def _schedule(message: MicronetMessage, slot: TxSlot) -> MicronetMessage:
        return replace(message, action=RfAction.NO_ACTION, start_time_us=slot.start_us)

    def process_message(self, message: MessageLike, fifo: MessageFifo) -> None:
        """Handle one received frame, pushing any frames to transmit into ``fifo``."""
        if not isinstance(message, MicronetMessage):
            message = MicronetMessage(message)
        if not verify_header_crc(message) or network_id(message) != self.network_id:
            return

        if message_id(message) == MessageId.MASTER_REQUEST:
            self._answer_master_request(message, fifo)
        elif self.codec.decode_message(message):
            for dev_id in self._device_ids():
                slot = self.network_map.ack_slot(dev_id)
                ack = encode_ack_param(self.latest_signal_strength, self.network_id, dev_id)
                fifo.push(self._schedule(ack, slot))

    def _answer_master_request(self, message: MicronetMessage, fifo: MessageFifo) -> None:
        try:
            self.network_map = parse_network_map(message)
        except NetworkMapError:
            pass
        net_map = self.network_map

        # Put the radio in low power at the end of the cycle and wake it up a
        # little before the next one, leaving time for its calibration.
        fifo.push(MicronetMessage(action=RfAction.LOW_POWER,
                                  start_time_us=net_map.network_end))
        fifo.push(MicronetMessage(action=RfAction.ACTIVE_POWER,
                                  start_time_us=net_map.next_start() - RF_WAKE_UP_MARGIN_US))

        self.latest_signal_strength = rssi_to_signal_strength(message.rssi)
        strength = self.latest_signal_strength

        for fields_mask, dev_id in zip(self._split, self._device_ids()):
            slot = net_map.sync_slot(dev_id)
            if slot.start_us != 0:
                tx = self.encoder.encode(strength, self.network_id, dev_id, fields_mask)
                payload_length = tx.payload_length
                if slot.payload_bytes < payload_length:
                    slot = net_map.async_slot
                    tx = encode_slot_update(strength, self.network_id, dev_id, payload_length)
            else:
                slot = net_map.async_slot
                tx = encode_slot_request(strength, self.network_id, dev_id,
                                         data_message_length(fields_mask))
            fifo.push(self._schedule(tx, slot))