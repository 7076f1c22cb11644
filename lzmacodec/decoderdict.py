"""Dictionary of the LZMA decoder, doubling as its read buffer."""

from __future__ import annotations

from .buffer import NoSpaceError, RingBuffer
from .lengthcodec import MAX_MATCH_LEN
from .properties import LZMAError

__all__ = ["DecoderDict", "MIN_DICT_CAP", "MAX_DICT_CAP"]

MIN_DICT_CAP = 1 << 12
MAX_DICT_CAP = (1 << 32) - 1


class DecoderDict:
    """Decoder dictionary; the whole dictionary is used as read buffer."""

    def __init__(self, dict_cap: int) -> None:
        # The lower limit of 1 allows small dictionaries in tests.
        if not 1 <= dict_cap <= MAX_DICT_CAP:
            raise LZMAError("lzma: dictCap out of range")
        self.buf = RingBuffer(dict_cap)
        self.head = 0

    def reset(self) -> None:
        """Clear the dictionary; buffered data can still be read."""
        self.head = 0

    def write_byte(self, c: int) -> None:
        """Write a literal byte into the dictionary."""
        self.buf.write_byte(c)
        self.head += 1

    def pos(self) -> int:
        """Return the position of the dictionary head."""
        return self.head

    def dict_len(self) -> int:
        """Return the current length of the dictionary."""
        return min(self.head, self.buf.cap())

    def byte_at(self, dist: int) -> int:
        """Return the byte at distance dist from the head, or 0 if out of range."""
        if not 0 < dist <= self.dict_len():
            return 0
        i = self.buf.front - dist
        if i < 0:
            i += len(self.buf.data)
        return self.buf.data[i]

    def write_match(self, dist: int, length: int) -> None:
        """Copy length bytes from distance dist to the head of the dictionary.

        Raises NoSpaceError if the dictionary has no room; read first.
        """
        if not 0 < dist <= self.dict_len():
            raise LZMAError("writeMatch: distance out of range")
        if not 0 < length <= MAX_MATCH_LEN:
            raise LZMAError("writeMatch: length out of range")
        buf = self.buf
        if length > buf.available():
            raise NoSpaceError(0)
        self.head += length

        i = buf.front - dist
        if i < 0:
            i += len(buf.data)
        while length > 0:
            if i >= buf.front:
                chunk = bytes(buf.data[i:i + length])
                i = 0
            else:
                chunk = bytes(buf.data[i:min(buf.front, i + length)])
                i = buf.front
            buf.write(chunk)
            length -= len(chunk)

    def write(self, data) -> int:
        """Write raw bytes into the dictionary and advance the head.

        On a partial write NoSpaceError is raised after the head has been
        advanced by the bytes that fitted.
        """
        try:
            n = self.buf.write(data)
        except NoSpaceError as exc:
            self.head += exc.written
            raise
        self.head += n
        return n

    def available(self) -> int:
        """Return the number of bytes that can be written."""
        return self.buf.available()

    def read(self, n: int) -> bytes:
        """Consume and return up to n bytes of decoded data."""
        return self.buf.read(n)