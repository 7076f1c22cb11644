"""Range encoder and decoder for single bits with adaptive probabilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .properties import LZMAError

MOVE_BITS = 5
PROB_BITS = 11
PROB_INIT = 1 << (PROB_BITS - 1)
MAX_INT64 = (1 << 63) - 1

_TOP = 1 << 24
_MASK32 = 0xFFFFFFFF


def new_probs(n: int) -> list[int]:
    """Return a list of n probabilities set to one half."""
    return [PROB_INIT] * n


class LimitError(LZMAError):
    """The byte limit of a limited writer has been reached."""

    def __init__(self, message: str = "limit reached") -> None:
        super().__init__(message)


@dataclass
class LimitedByteWriter:
    """Writes single bytes to a stream until n bytes have been written."""

    writer: Any
    n: int

    def write_byte(self, c: int) -> None:
        """Write one byte; raise LimitError once the limit is reached."""
        if self.n <= 0:
            raise LimitError()
        self.writer.write(bytes((c & 0xFF,)))
        self.n -= 1


class ByteReader:
    """Reads single bytes from a stream without reading ahead."""

    def __init__(self, stream: Any) -> None:
        self.stream = stream

    def read_byte(self) -> int:
        """Return the next byte; raise EOFError if the stream is exhausted."""
        data = self.stream.read(1)
        if not data:
            raise EOFError("no more data")
        return data[0]


class RangeEncoder:
    """Encodes bits into a byte stream."""

    def __init__(self, writer: Any) -> None:
        if isinstance(writer, LimitedByteWriter):
            self._lbw = writer
        else:
            self._lbw = LimitedByteWriter(writer, MAX_INT64)
        self._nrange = _MASK32
        self._low = 0
        self._cache_len = 1
        self._cache = 0

    def available(self) -> int:
        """Bytes that can still be written, reserving what close needs."""
        return self._lbw.n - (self._cache_len + 4)

    def _write_byte(self, c: int) -> None:
        if self.available() < 1:
            raise LimitError()
        self._lbw.write_byte(c)

    def _normalize(self) -> None:
        if self._nrange >= _TOP:
            return
        self._nrange = (self._nrange << 8) & _MASK32
        self._shift_low()

    def direct_encode_bit(self, b: int) -> None:
        """Encode the least-significant bit of b with probability one half."""
        self._nrange >>= 1
        if b & 1:
            self._low += self._nrange
        self._normalize()

    def encode_bit(self, probs: list[int], index: int, b: int) -> None:
        """Encode the least-significant bit of b, updating probs[index]."""
        p = probs[index]
        bound = (self._nrange >> PROB_BITS) * p
        if b & 1 == 0:
            self._nrange = bound
            probs[index] = p + (((1 << PROB_BITS) - p) >> MOVE_BITS)
        else:
            self._low += bound
            self._nrange -= bound
            probs[index] = p - (p >> MOVE_BITS)
        self._normalize()

    def close(self) -> None:
        """Flush the remaining state into the stream."""
        for _ in range(5):
            self._shift_low()

    def _shift_low(self) -> None:
        low32 = self._low & _MASK32
        if low32 < 0xFF000000 or (self._low >> 32) != 0:
            tmp = self._cache
            while True:
                self._write_byte((tmp + (self._low >> 32)) & 0xFF)
                tmp = 0xFF
                self._cache_len -= 1
                if self._cache_len <= 0:
                    if self._cache_len < 0:
                        raise RuntimeError("negative cache length")
                    break
            self._cache = low32 >> 24
        self._cache_len += 1
        self._low = (low32 << 8) & _MASK32


class RangeDecoder:
    """Decodes bits from a byte stream produced by RangeEncoder."""

    def __init__(self, reader: Any) -> None:
        if not hasattr(reader, "read_byte"):
            reader = ByteReader(reader)
        self._reader = reader
        self._nrange = _MASK32
        self._code = 0
        if self._reader.read_byte() != 0:
            raise LZMAError("range decoder: first byte not zero")
        for _ in range(4):
            self._update_code()
        if self._code >= self._nrange:
            raise LZMAError("range decoder: code exceeds range")

    def possibly_at_end(self) -> bool:
        """Return whether the decoder may be at the end of the stream."""
        return self._code == 0

    def _update_code(self) -> None:
        b = self._reader.read_byte()
        self._code = ((self._code << 8) | b) & _MASK32

    def _normalize(self) -> None:
        if self._nrange >= _TOP:
            return
        self._nrange = (self._nrange << 8) & _MASK32
        self._update_code()

    def direct_decode_bit(self) -> int:
        """Decode a bit that was encoded with probability one half."""
        self._nrange >>= 1
        self._code = (self._code - self._nrange) & _MASK32
        t = (-(self._code >> 31)) & _MASK32
        self._code = (self._code + (self._nrange & t)) & _MASK32
        b = (t + 1) & 1
        self._normalize()
        return b

    def decode_bit(self, probs: list[int], index: int) -> int:
        """Decode a bit using and updating probs[index]."""
        p = probs[index]
        bound = (self._nrange >> PROB_BITS) * p
        if self._code < bound:
            self._nrange = bound
            probs[index] = p + (((1 << PROB_BITS) - p) >> MOVE_BITS)
            b = 0
        else:
            self._code -= bound
            self._nrange -= bound
            probs[index] = p - (p >> MOVE_BITS)
            b = 1
        self._normalize()
        return b