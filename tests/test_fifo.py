import pytest

from micronet.fifo import MESSAGE_STORE_SIZE, MessageFifo
from micronet.frames import MicronetMessage, RfAction


def _msg(tag: int) -> MicronetMessage:
    return MicronetMessage(bytearray([tag, tag + 1]), rssi=-tag, start_time_us=tag * 10)


def test_push_pop_preserves_order():
    fifo = MessageFifo()
    for tag in range(5):
        assert fifo.push(_msg(tag))
    assert len(fifo) == 5
    popped = [fifo.pop().data[0] for _ in range(5)]
    assert popped == [0, 1, 2, 3, 4]
    assert len(fifo) == 0


def test_pop_empty_raises():
    with pytest.raises(IndexError):
        MessageFifo().pop()


def test_full_store_drops_messages():
    fifo = MessageFifo()
    for tag in range(MESSAGE_STORE_SIZE):
        assert fifo.push(_msg(tag))
    assert fifo.push(_msg(200)) is False
    assert len(fifo) == MESSAGE_STORE_SIZE
    assert [m.data[0] for m in fifo] == list(range(MESSAGE_STORE_SIZE))


def test_wraparound_keeps_order():
    fifo = MessageFifo(capacity=3)
    for tag in range(3):
        fifo.push(_msg(tag))
    assert fifo.pop().data[0] == 0
    assert fifo.pop().data[0] == 1
    fifo.push(_msg(3))
    fifo.push(_msg(4))
    assert [fifo.pop().data[0] for _ in range(3)] == [2, 3, 4]


def test_push_stores_a_copy():
    fifo = MessageFifo()
    message = _msg(7)
    fifo.push(message)
    message.data[0] = 99
    message.start_time_us = 1
    stored = fifo.pop()
    assert stored.data[0] == 7
    assert stored.start_time_us == 70


def test_push_keeps_metadata():
    fifo = MessageFifo()
    message = MicronetMessage(bytearray(), rssi=-60, start_time_us=5,
                              end_time_us=9, action=RfAction.LOW_POWER)
    fifo.push(message)
    assert fifo.pop() == message


def test_peek_by_index():
    fifo = MessageFifo()
    for tag in range(3):
        fifo.push(_msg(tag))
    assert fifo.peek().data[0] == 0
    assert fifo.peek(2).data[0] == 2
    assert fifo.peek(3) is None
    assert fifo.peek(-1) is None
    assert len(fifo) == 3


def test_peek_empty_is_none():
    assert MessageFifo().peek() is None


def test_delete_message():
    fifo = MessageFifo()
    fifo.push(_msg(1))
    fifo.push(_msg(2))
    fifo.delete_message()
    assert len(fifo) == 1
    assert fifo.peek().data[0] == 2
    fifo.delete_message()
    fifo.delete_message()
    assert len(fifo) == 0


def test_reset_empties_and_allows_reuse():
    fifo = MessageFifo()
    for tag in range(4):
        fifo.push(_msg(tag))
    fifo.reset()
    assert len(fifo) == 0
    assert fifo.peek() is None
    fifo.push(_msg(9))
    assert fifo.pop().data[0] == 9


def test_invalid_capacity():
    with pytest.raises(ValueError):
        MessageFifo(capacity=0)