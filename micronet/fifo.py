"""Bounded first-in first-out store of Micronet messages."""

from __future__ import annotations

import threading
from dataclasses import replace

from .frames import MicronetMessage

MESSAGE_STORE_SIZE = 16


def _copy(message: MicronetMessage) -> MicronetMessage:
    return replace(message, data=bytearray(message.data))


class MessageFifo:
    """Thread-safe FIFO holding at most ``capacity`` messages.

    Messages are copied when pushed, so the caller may reuse its own object.
    When the store is full, new messages are dropped.
    """

    def __init__(self, capacity: int = MESSAGE_STORE_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._store: list[MicronetMessage | None] = [None] * capacity
        self._write_index = 0
        self._read_index = 0
        self._count = 0
        self._lock = threading.Lock()

    def push(self, message: MicronetMessage) -> bool:
        """Store a copy of ``message``; return False if it was dropped."""
        with self._lock:
            if self._count >= self.capacity:
                return False
            self._store[self._write_index] = _copy(message)
            self._write_index = (self._write_index + 1) % self.capacity
            self._count += 1
            return True

    def pop(self) -> MicronetMessage:
        """Remove and return the oldest message.

        Raises IndexError when the store is empty.
        """
        with self._lock:
            if self._count == 0:
                raise IndexError("pop from an empty message fifo")
            message = self._store[self._read_index]
            self._store[self._read_index] = None
            self._read_index = (self._read_index + 1) % self.capacity
            self._count -= 1
            assert message is not None
            return message

    def peek(self, index: int = 0) -> MicronetMessage | None:
        """Return the message ``index`` places from the head, or None if absent."""
        with self._lock:
            if index < 0 or index >= self._count:
                return None
            return self._store[(self._read_index + index) % self.capacity]

    def delete_message(self) -> None:
        """Drop the oldest message, if any."""
        with self._lock:
            if self._count > 0:
                self._store[self._read_index] = None
                self._read_index = (self._read_index + 1) % self.capacity
                self._count -= 1

    def reset(self) -> None:
        """Discard every stored message."""
        with self._lock:
            self._store = [None] * self.capacity
            self._read_index = self._write_index
            self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self):
        """Iterate over the stored messages, oldest first, without removing them."""
        with self._lock:
            snapshot = [self._store[(self._read_index + i) % self.capacity]
                        for i in range(self._count)]
        yield from snapshot