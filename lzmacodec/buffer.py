"""Circular byte buffer."""

from __future__ import annotations

from .properties import LZMAError

__all__ = ["NoSpaceError", "RingBuffer", "prefix_len"]


class NoSpaceError(LZMAError):
    """Not enough space in a buffer; written holds the bytes that fitted."""

    def __init__(self, written: int = 0, message: str = "insufficient space") -> None:
        super().__init__(message)
        self.written = written


def prefix_len(a, b) -> int:
    """Return the length of the common prefix of a and b."""
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


class RingBuffer:
    """Circular byte buffer holding at most size bytes.

    front == rear means empty, so the backing array is one byte larger
    than the capacity.
    """

    def __init__(self, size: int) -> None:
        self.data = bytearray(size + 1)
        self.front = 0
        self.rear = 0

    def cap(self) -> int:
        """Return the capacity of the buffer."""
        return len(self.data) - 1

    def reset(self) -> None:
        """Empty the buffer."""
        self.front = 0
        self.rear = 0

    def buffered(self) -> int:
        """Return the number of bytes buffered."""
        delta = self.front - self.rear
        if delta < 0:
            delta += len(self.data)
        return delta

    def available(self) -> int:
        """Return the number of bytes that can be written."""
        delta = self.rear - 1 - self.front
        if delta < 0:
            delta += len(self.data)
        return delta

    def _add_index(self, i: int, n: int) -> int:
        i += n - len(self.data)
        if i < 0:
            i += len(self.data)
        return i

    def peek(self, n: int) -> bytes:
        """Return up to n buffered bytes without consuming them."""
        n = min(n, self.buffered())
        end = self.rear + n
        size = len(self.data)
        if end <= size:
            return bytes(self.data[self.rear:end])
        return bytes(self.data[self.rear:]) + bytes(self.data[: end - size])

    def read(self, n: int) -> bytes:
        """Consume and return up to n buffered bytes."""
        p = self.peek(n)
        self.rear = self._add_index(self.rear, len(p))
        return p

    def discard(self, n: int) -> int:
        """Skip n buffered bytes and return the count.

        Raises ValueError for negative n and EOFError, after discarding
        everything buffered, if fewer than n bytes were available.
        """
        if n < 0:
            raise ValueError("buffer.discard: negative argument")
        m = self.buffered()
        short = m < n
        if short:
            n = m
        self.rear = self._add_index(self.rear, n)
        if short:
            raise EOFError("buffer.discard: discarded less bytes than requested")
        return n

    def write(self, data) -> int:
        """Write data and return the count; raise NoSpaceError on a partial write."""
        m = self.available()
        n = len(data)
        short = m < n
        if short:
            n = m
            data = data[:m]
        size = len(self.data)
        k = min(n, size - self.front)
        self.data[self.front:self.front + k] = data[:k]
        if k < n:
            self.data[: n - k] = data[k:n]
        self.front = self._add_index(self.front, n)
        if short:
            raise NoSpaceError(n)
        return n

    def write_byte(self, c: int) -> None:
        """Write a single byte; raise NoSpaceError if the buffer is full."""
        if self.available() < 1:
            raise NoSpaceError(0)
        self.data[self.front] = c & 0xFF
        self.front = self._add_index(self.front, 1)

    def match_len(self, distance: int, p) -> int:
        """Return the common prefix length of p and the data at distance from rear."""
        view = memoryview(self.data)
        n = 0
        i = self.rear - distance
        if i < 0:
            n = prefix_len(p, view[len(self.data) + i:])
            if n < -i:
                return n
            p = p[n:]
            i = 0
        return n + prefix_len(p, view[i:])