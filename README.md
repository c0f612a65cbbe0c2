# micronet

A pure Python library for the Micronet wireless marine instrument protocol.
It decodes frames sent by Micronet displays and transducers into navigation
data. It builds the frames that a device sends back. It also models a slave
device that takes part in the network's time-slotted cycle. A small
tilt-compensated compass helper is included.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `micronet.navigation`: `NavigationData` holds the boat's measurements and
  calibration values. Each measurement is a `FloatValue`, `TimeValue`,
  `DateValue` or `WaypointName` with a `valid` flag and a `timestamp`.
  `update_validity(now_ms)` clears `valid` on values that were not refreshed
  within 3 s (fast values such as wind, speed and depth) or 10 s (slow values
  such as position, time and waypoint data). Timestamps wrap at 32 bits.
- `micronet.frames`: `MicronetMessage` (frame bytes, RSSI, start and end
  times, radio action). It provides the header accessors `network_id`,
  `device_id`, `device_type`, `message_id`, `source`, `signal_strength` and
  `header_crc`, plus `verify_header_crc`, `finalize_header` and `checksum`.
  It has encoders for slot request, slot update, reset, parameter acknowledge
  and ping frames. `data_message_length` gives the payload size of a
  `DataField` selection. `rssi_to_signal_strength` maps RSSI to the 0..9
  scale and `rssi_to_float_strength` gives a continuous value.
- `micronet.fields`: builders for single data fields: `field_16bit`,
  `field_24bit`, `field_32bit`, `field_dual_16bit`, `field_quad_8bit`,
  `field_position` and `field_waypoint`. `field_waypoint` scrolls a
  four-character window over the waypoint name.
- `micronet.netmap`: `parse_network_map` turns a master request into a
  `NetworkMap` of synchronous, asynchronous and acknowledge `TxSlot`s. It
  raises `NetworkMapError` for a frame that is not a valid master request.
  `NetworkMap.sync_slot`, `ack_slot` and `next_start` query the map.
- `micronet.decoder`: `MicronetCodec(nav_data, clock)` decodes send-data and
  set-parameter messages into a `NavigationData` and computes true wind.
  `decode_message` returns True when the message asks for an acknowledge.
  `clock` returns milliseconds and stamps every updated value.
- `micronet.encoder`: `DataEncoder(nav_data).encode(...)` builds a send-data
  message from the valid values. It removes the calibration offsets and
  factors from them.
- `micronet.fifo`: `MessageFifo`, a bounded, thread-safe queue of message
  copies. `push` returns False when the queue is full. `pop` raises
  `IndexError` when it is empty. `peek(index)` returns None for a missing
  entry.
- `micronet.slave`: `SlaveDevice` spreads its data fields over three virtual
  slaves. For each master request it queues radio power actions and the data,
  slot-update or slot-request frames. For each set-parameter message it queues
  acknowledge frames in the acknowledge slots.
- `micronet.compass`: `Vector`, the abstract `CompassDriver`, and `NavCompass`.
  `NavCompass` computes a heading averaged over the last four readings.

## Example

```python
from micronet.decoder import MicronetCodec
from micronet.fifo import MessageFifo
from micronet.frames import DataField, encode_ping, verify_header_crc
from micronet.navigation import NavigationData
from micronet.slave import SlaveDevice

ping = encode_ping(9, 0x0A0B0C0D, 0x01020304)
assert verify_header_crc(ping)

nav = NavigationData()
codec = MicronetCodec(nav, clock=lambda: 0)
slave = SlaveDevice(codec, device_id=0x01020304, network_id=0x0A0B0C0D)
slave.set_data_fields(DataField.HDG | DataField.NODE_INFO)

fifo = MessageFifo()
# for each received MicronetMessage:
#     slave.process_message(message, fifo)
# then transmit whatever is queued in fifo, at each message's start_time_us
```

The speed and wind speed calibration factors in `NavigationData` start at
0.0. They are set by a set-parameter message or by hand. While a factor is
zero, decoded speeds come out as zero, and `DataEncoder.encode` raises
`ValueError` when it is asked to send that speed.

## What it does not do

- It does not drive a radio transceiver. Frames are bytes in and out, and the
  caller must receive them, transmit them and honour each message's
  `start_time_us` and `action`.
- It does not produce NMEA sentences or any other output format.
- It contains no compass chip drivers. Supply your own `CompassDriver`
  subclass to `NavCompass`.
- It has no command-line program.