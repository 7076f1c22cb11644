"""Codec for match lengths."""

from __future__ import annotations

from .properties import LZMAError
from .rangecoder import RangeDecoder, RangeEncoder, new_probs
from .treecodecs import TreeCodec

__all__ = ["LengthCodec", "MAX_POS_BITS", "MIN_MATCH_LEN", "MAX_MATCH_LEN"]

# Number of position bits that select the low and mid tree codecs.
MAX_POS_BITS = 4

MIN_MATCH_LEN = 2
MAX_MATCH_LEN = MIN_MATCH_LEN + 16 + 256 - 1


class LengthCodec:
    """Encodes and decodes length offsets (length minus MIN_MATCH_LEN)."""

    def __init__(self) -> None:
        self.choice = new_probs(2)
        self.low = [TreeCodec(3) for _ in range(1 << MAX_POS_BITS)]
        self.mid = [TreeCodec(3) for _ in range(1 << MAX_POS_BITS)]
        self.high = TreeCodec(8)

    def encode(self, e: RangeEncoder, l: int, pos_state: int) -> None:
        """Encode the length offset l in the context of pos_state."""
        if not 0 <= l <= MAX_MATCH_LEN - MIN_MATCH_LEN:
            raise LZMAError("length codec: l out of range")
        if l < 8:
            e.encode_bit(self.choice, 0, 0)
            self.low[pos_state].encode(e, l)
            return
        e.encode_bit(self.choice, 0, 1)
        if l < 16:
            e.encode_bit(self.choice, 1, 0)
            self.mid[pos_state].encode(e, l - 8)
            return
        e.encode_bit(self.choice, 1, 1)
        self.high.encode(e, l - 16)

    def decode(self, d: RangeDecoder, pos_state: int) -> int:
        """Decode a length offset in the context of pos_state."""
        if d.decode_bit(self.choice, 0) == 0:
            return self.low[pos_state].decode(d)
        if d.decode_bit(self.choice, 1) == 0:
            return self.mid[pos_state].decode(d) + 8
        return self.high.decode(d) + 16

    def copy(self) -> "LengthCodec":
        """Return an independent copy of the codec."""
        clone = object.__new__(LengthCodec)
        clone.choice = list(self.choice)
        clone.low = [tc.copy() for tc in self.low]
        clone.mid = [tc.copy() for tc in self.mid]
        clone.high = self.high.copy()
        return clone