"""Codecs for fixed-width values built on the range coder."""

from __future__ import annotations

from .rangecoder import RangeDecoder, RangeEncoder, new_probs

__all__ = ["TreeCodec", "TreeReverseCodec", "DirectCodec"]


def _check_bits(bits: int) -> None:
    if not 1 <= bits <= 32:
        raise ValueError("bits outside of range [1,32]")


class _ProbTree:
    def __init__(self, bits: int) -> None:
        _check_bits(bits)
        self.bits = bits
        self.probs = new_probs(1 << bits)

    def copy(self):
        """Return an independent copy of the codec."""
        clone = object.__new__(type(self))
        clone.bits = self.bits
        clone.probs = list(self.probs)
        return clone


class TreeCodec(_ProbTree):
    """Tree codec whose root is the most-significant bit."""

    def __init__(self, bits: int) -> None:
        super().__init__(bits)

    def encode(self, e: RangeEncoder, v: int) -> None:
        """Encode the low bits of v, most-significant first."""
        m = 1
        for i in reversed(range(self.bits)):
            b = (v >> i) & 1
            e.encode_bit(self.probs, m, b)
            m = (m << 1) | b

    def decode(self, d: RangeDecoder) -> int:
        """Decode a value of the codec's bit width."""
        m = 1
        for _ in range(self.bits):
            m = (m << 1) | d.decode_bit(self.probs, m)
        return m - (1 << self.bits)

    def copy(self) -> "TreeCodec":
        return super().copy()


class TreeReverseCodec(_ProbTree):
    """Tree codec whose root is the least-significant bit."""

    def __init__(self, bits: int) -> None:
        super().__init__(bits)

    def encode(self, e: RangeEncoder, v: int) -> None:
        """Encode the low bits of v, least-significant first."""
        m = 1
        for i in range(self.bits):
            b = (v >> i) & 1
            e.encode_bit(self.probs, m, b)
            m = (m << 1) | b

    def decode(self, d: RangeDecoder) -> int:
        """Decode a value of the codec's bit width."""
        m = 1
        v = 0
        for j in range(self.bits):
            b = d.decode_bit(self.probs, m)
            m = (m << 1) | b
            v |= b << j
        return v

    def copy(self) -> "TreeReverseCodec":
        return super().copy()


class DirectCodec:
    """Encodes fixed-width values with bits of probability one half."""

    def __init__(self, bits: int) -> None:
        _check_bits(bits)
        self.bits = bits

    def encode(self, e: RangeEncoder, v: int) -> None:
        """Encode the low bits of v, most-significant first."""
        for i in reversed(range(self.bits)):
            e.direct_encode_bit(v >> i)

    def decode(self, d: RangeDecoder) -> int:
        """Decode a value of the codec's bit width."""
        v = 0
        for _ in range(self.bits):
            v = (v << 1) | d.direct_decode_bit()
        return v