"""Codec for match distances."""

from __future__ import annotations

from .bitops import nlz32
from .rangecoder import RangeDecoder, RangeEncoder
from .treecodecs import DirectCodec, TreeCodec, TreeReverseCodec

__all__ = [
    "DistCodec",
    "len_state",
    "MIN_DISTANCE",
    "MAX_DISTANCE",
    "LEN_STATES",
]

MIN_DISTANCE = 1
# The largest distance; its offset is used for the end-of-stream marker.
MAX_DISTANCE = 1 << 32
LEN_STATES = 4
START_POS_MODEL = 4
END_POS_MODEL = 14
POS_SLOT_BITS = 6
ALIGN_BITS = 4

_MASK32 = 0xFFFFFFFF


def len_state(l: int) -> int:
    """Clamp a length offset to a supported length state."""
    return min(l, LEN_STATES - 1)


class DistCodec:
    """Encodes and decodes distance offsets (distance minus one)."""

    def __init__(self) -> None:
        self.pos_slot_codecs = [TreeCodec(POS_SLOT_BITS) for _ in range(LEN_STATES)]
        self.pos_model = [
            TreeReverseCodec((pos_slot >> 1) - 1)
            for pos_slot in range(START_POS_MODEL, END_POS_MODEL)
        ]
        self.align_codec = TreeReverseCodec(ALIGN_BITS)

    def encode(self, e: RangeEncoder, dist: int, l: int) -> None:
        """Encode the distance offset dist using length offset l as context.

        An offset of 0xffffffff marks the end of the stream.
        """
        dist &= _MASK32
        if dist < START_POS_MODEL:
            pos_slot = dist
            bits = 0
        else:
            bits = 30 - nlz32(dist)
            pos_slot = START_POS_MODEL - 2 + (bits << 1) + ((dist >> bits) & 1)

        self.pos_slot_codecs[len_state(l)].encode(e, pos_slot)

        if pos_slot < START_POS_MODEL:
            return
        if pos_slot < END_POS_MODEL:
            self.pos_model[pos_slot - START_POS_MODEL].encode(e, dist)
            return
        DirectCodec(bits - ALIGN_BITS).encode(e, dist >> ALIGN_BITS)
        self.align_codec.encode(e, dist)

    def decode(self, d: RangeDecoder, l: int) -> int:
        """Decode a distance offset using length offset l as context."""
        pos_slot = self.pos_slot_codecs[len_state(l)].decode(d)
        if pos_slot < START_POS_MODEL:
            return pos_slot

        bits = (pos_slot >> 1) - 1
        dist = ((2 | (pos_slot & 1)) << bits) & _MASK32
        if pos_slot < END_POS_MODEL:
            u = self.pos_model[pos_slot - START_POS_MODEL].decode(d)
            return (dist + u) & _MASK32

        u = DirectCodec(bits - ALIGN_BITS).decode(d)
        dist = (dist + (u << ALIGN_BITS)) & _MASK32
        return (dist + self.align_codec.decode(d)) & _MASK32

    def copy(self) -> "DistCodec":
        """Return an independent copy of the codec."""
        clone = object.__new__(DistCodec)
        clone.pos_slot_codecs = [tc.copy() for tc in self.pos_slot_codecs]
        clone.pos_model = [tc.copy() for tc in self.pos_model]
        clone.align_codec = self.align_codec.copy()
        return clone