"""Dictionary of the LZMA encoder with a look-ahead buffer."""

from __future__ import annotations

from typing import Any, Protocol

from .buffer import NoSpaceError, RingBuffer
from .decoderdict import MAX_DICT_CAP
from .properties import LZMAError

__all__ = ["EncoderDict", "Matcher"]


class Matcher(Protocol):
    """Finds the next operation for the data at the dictionary head."""

    def set_dict(self, d: "EncoderDict") -> None: ...

    def write(self, data) -> int: ...

    def next_op(self, rep): ...


class EncoderDict:
    """Encoder dictionary; the buffer holds the dictionary and pending data."""

    def __init__(self, dict_cap: int, buf_size: int, matcher: Any) -> None:
        if not 1 <= dict_cap <= MAX_DICT_CAP:
            raise LZMAError("lzma: dictionary capacity out of range")
        if buf_size < 1:
            raise LZMAError("lzma: buffer size must be larger than zero")
        self.buf = RingBuffer(dict_cap + buf_size)
        self.capacity = dict_cap
        self.matcher = matcher
        self.head = 0
        matcher.set_dict(self)

    def discard(self, n: int) -> None:
        """Move n pending bytes into the dictionary and pass them to the matcher."""
        p = self.buf.read(n)
        if len(p) < n:
            raise LZMAError(f"lzma: can't discard {n} bytes")
        self.head += n
        self.matcher.write(p)

    def length(self) -> int:
        """Return the number of dictionary bytes still held in the buffer."""
        return min(self.buf.available(), self.head)

    def dict_len(self) -> int:
        """Return the current length of the dictionary."""
        return min(self.head, self.capacity)

    def available(self) -> int:
        """Return the number of bytes a following write can accept."""
        return self.buf.available() - self.dict_len()

    def write(self, data) -> int:
        """Append pending data without moving the head.

        On a partial write NoSpaceError is raised carrying the count written.
        """
        m = self.available()
        short = len(data) > m
        if short:
            data = data[:m]
        n = self.buf.write(data)
        if short:
            raise NoSpaceError(n)
        return n

    def pos(self) -> int:
        """Return the position of the head."""
        return self.head

    def byte_at(self, distance: int) -> int:
        """Return the byte at distance before the head, or 0 if out of range."""
        if not 0 < distance <= self.length():
            return 0
        i = self.buf.rear - distance
        if i < 0:
            i += len(self.buf.data)
        return self.buf.data[i]

    def copy_n(self, writer, n: int) -> int:
        """Write the last n dictionary bytes to writer and return the count.

        If fewer bytes are held, they are written and NoSpaceError is raised.
        """
        if n <= 0:
            return 0
        m = self.length()
        short = n > m
        n = min(n, m)
        buf = self.buf
        i = buf.rear - n
        if i < 0:
            part = bytes(buf.data[i + len(buf.data):]) + bytes(buf.data[:buf.rear])
        else:
            part = bytes(buf.data[i:buf.rear])
        writer.write(part)
        if short:
            raise NoSpaceError(n)
        return n

    def buffered(self) -> int:
        """Return the number of pending bytes in the buffer."""
        return self.buf.buffered()