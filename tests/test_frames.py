import pytest

from micronet.frames import (
    CRC_OFFSET,
    HEADER_LENGTH,
    LEN_OFFSET_1,
    LEN_OFFSET_2,
    PAYLOAD_OFFSET,
    DataField,
    MessageId,
    MicronetMessage,
    checksum,
    data_message_length,
    device_id,
    device_type,
    encode_ack_param,
    encode_ping,
    encode_reset,
    encode_slot_request,
    encode_slot_update,
    finalize_header,
    header_crc,
    message_id,
    network_id,
    rssi_to_float_strength,
    rssi_to_signal_strength,
    signal_strength,
    verify_header_crc,
)

NET = 0x83123456
DEV = 0x01ABCDEF

ENCODERS = [
    lambda: encode_ping(7, NET, DEV),
    lambda: encode_ack_param(7, NET, DEV),
    lambda: encode_reset(7, NET, DEV),
    lambda: encode_slot_request(7, NET, DEV, 42),
    lambda: encode_slot_update(7, NET, DEV, 42),
]


def test_checksum_wraps_to_eight_bits():
    assert checksum(bytes([0xFF, 0x02])) == checksum(bytes([0x01]))
    assert checksum(b"") == 0


@pytest.mark.parametrize("make", ENCODERS)
def test_encoded_header_round_trip(make):
    msg = make()
    assert network_id(msg) == NET
    assert device_id(msg) == DEV
    assert device_type(msg) == DEV >> 24
    assert signal_strength(msg) == 7
    assert verify_header_crc(msg)
    assert msg.data[LEN_OFFSET_1] == msg.data[LEN_OFFSET_2] == len(msg.data) - 2
    assert header_crc(msg) == checksum(msg.data[:CRC_OFFSET])


@pytest.mark.parametrize("make", ENCODERS[:1] + ENCODERS[2:])
def test_payload_ends_with_its_checksum(make):
    payload = make().payload
    assert payload[-1] == checksum(payload[:-1])


def test_message_ids():
    assert message_id(encode_ping(1, NET, DEV)) == MessageId.PING
    assert message_id(encode_ack_param(1, NET, DEV)) == MessageId.ACK_PARAMETER
    assert message_id(encode_reset(1, NET, DEV)) == MessageId.SET_PARAMETER
    assert message_id(encode_slot_request(1, NET, DEV, 3)) == MessageId.REQUEST_SLOT
    assert message_id(encode_slot_update(1, NET, DEV, 3)) == MessageId.UPDATE_SLOT


def test_ack_is_header_only():
    assert encode_ack_param(3, NET, DEV).payload_length == 0
    assert len(encode_ack_param(3, NET, DEV).data) == HEADER_LENGTH


def test_reset_payload_bytes():
    assert encode_reset(3, NET, DEV).payload[:-1] == bytes([0xFA, 0x4F, 0x46, 0x46, 0x26])


def test_slot_request_and_update_payloads():
    assert encode_slot_request(3, NET, DEV, 42).payload[:-1] == bytes([0, 42])
    assert encode_slot_update(3, NET, DEV, 42).payload[:-1] == bytes([42])


def test_accessors_accept_raw_bytes():
    msg = encode_ping(5, NET, DEV)
    raw = bytes(msg.data)
    assert network_id(raw) == NET
    assert verify_header_crc(raw)


def test_verify_rejects_short_frame():
    assert not verify_header_crc(bytes(HEADER_LENGTH - 1))


def test_verify_rejects_mismatched_lengths():
    msg = encode_ping(5, NET, DEV)
    msg.data[LEN_OFFSET_2] ^= 0x01
    assert not verify_header_crc(msg)


def test_verify_rejects_bad_crc():
    msg = encode_ping(5, NET, DEV)
    msg.data[CRC_OFFSET] ^= 0xFF
    assert not verify_header_crc(msg)


def test_finalize_header_repairs_frame_and_copies():
    msg = encode_reset(5, NET, DEV)
    broken = bytearray(msg.data)
    broken[CRC_OFFSET] = broken[LEN_OFFSET_1] = broken[LEN_OFFSET_2] = 0
    fixed = finalize_header(broken)
    assert fixed == msg.data
    assert broken[CRC_OFFSET] == 0


def test_finalize_header_rejects_short_frame():
    with pytest.raises(ValueError):
        finalize_header(bytes(PAYLOAD_OFFSET - 1))


def test_message_copies_data():
    source_bytes = bytearray(b"\x01\x02")
    msg = MicronetMessage(source_bytes)
    source_bytes[0] = 9
    assert msg.data[0] == 1
    assert msg.length == 2


def test_data_message_length_single_and_empty():
    assert data_message_length(0) == 0
    assert data_message_length(DataField.TIME) == 6


def test_data_message_length_is_additive():
    total = sum(data_message_length(flag) for flag in DataField)
    every = DataField(0)
    for flag in DataField:
        every |= flag
    assert data_message_length(every) == total
    assert data_message_length(DataField.AWS | DataField.DPT) == (
        data_message_length(DataField.AWS) + data_message_length(DataField.DPT)
    )


@pytest.mark.parametrize("rssi, level", [(-96, 0), (-95, 1), (-56, 8), (-55, 9)])
def test_signal_strength_thresholds(rssi, level):
    assert rssi_to_signal_strength(rssi) == level


def test_signal_strength_is_monotonic():
    levels = [rssi_to_signal_strength(r) for r in range(-120, 0)]
    assert levels == sorted(levels)
    assert levels[0] == 0


def test_float_strength_clamped_and_increasing():
    assert rssi_to_float_strength(-95) == 0.0
    assert rssi_to_float_strength(-130) == 0.0
    values = [rssi_to_float_strength(r) for r in range(-95, 0)]
    assert values == sorted(values)
    assert all(v >= 0.0 for v in values)