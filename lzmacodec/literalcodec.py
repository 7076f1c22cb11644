"""Codec for literal bytes."""

from __future__ import annotations

from .properties import MAX_LC, MAX_LP, MIN_LC, MIN_LP
from .rangecoder import RangeDecoder, RangeEncoder, new_probs

__all__ = ["LiteralCodec"]

_LIT_PROBS = 0x300


class LiteralCodec:
    """Encodes literals with 0x300 probabilities per literal state.

    The upper 512 probabilities of each state are used in the context of a
    match bit.
    """

    def __init__(self, lc: int, lp: int) -> None:
        if not MIN_LC <= lc <= MAX_LC:
            raise ValueError("lc out of range")
        if not MIN_LP <= lp <= MAX_LP:
            raise ValueError("lp out of range")
        self.probs = new_probs(_LIT_PROBS << (lc + lp))

    def encode(
        self, e: RangeEncoder, s: int, state: int, match: int, lit_state: int
    ) -> None:
        """Encode byte s given the LZMA state, match byte and literal state."""
        k = lit_state * _LIT_PROBS
        probs = self.probs
        symbol = 1
        r = s
        if state >= 7:
            m = match
            while True:
                match_bit = (m >> 7) & 1
                m <<= 1
                bit = (r >> 7) & 1
                r <<= 1
                e.encode_bit(probs, k + (((1 + match_bit) << 8) | symbol), bit)
                symbol = (symbol << 1) | bit
                if match_bit != bit or symbol >= 0x100:
                    break
        while symbol < 0x100:
            bit = (r >> 7) & 1
            r <<= 1
            e.encode_bit(probs, k + symbol, bit)
            symbol = (symbol << 1) | bit

    def decode(self, d: RangeDecoder, state: int, match: int, lit_state: int) -> int:
        """Decode a literal byte given the LZMA state, match byte and literal state."""
        k = lit_state * _LIT_PROBS
        probs = self.probs
        symbol = 1
        if state >= 7:
            m = match
            while True:
                match_bit = (m >> 7) & 1
                m <<= 1
                bit = d.decode_bit(probs, k + (((1 + match_bit) << 8) | symbol))
                symbol = (symbol << 1) | bit
                if match_bit != bit or symbol >= 0x100:
                    break
        while symbol < 0x100:
            symbol = (symbol << 1) | d.decode_bit(probs, k + symbol)
        return symbol - 0x100

    def copy(self) -> "LiteralCodec":
        """Return an independent copy of the codec."""
        clone = object.__new__(LiteralCodec)
        clone.probs = list(self.probs)
        return clone