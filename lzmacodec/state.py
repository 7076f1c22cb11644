"""Full coder state for encoding and decoding LZMA operations."""

from __future__ import annotations

from .distcodec import DistCodec
from .lengthcodec import MAX_POS_BITS, LengthCodec
from .literalcodec import LiteralCodec
from .properties import Properties
from .rangecoder import new_probs

__all__ = ["State", "STATES"]

STATES = 12

_MASK32 = 0xFFFFFFFF


class State:
    """Probabilities, repetition distances and state machine of the coder."""

    def __init__(self, properties: Properties) -> None:
        self.properties = properties
        self.reset()

    def reset(self) -> None:
        """Set all state information back to its initial values."""
        p = self.properties
        self.rep = [0, 0, 0, 0]
        self.is_match = new_probs(STATES << MAX_POS_BITS)
        self.is_rep_g0_long = new_probs(STATES << MAX_POS_BITS)
        self.is_rep = new_probs(STATES)
        self.is_rep_g0 = new_probs(STATES)
        self.is_rep_g1 = new_probs(STATES)
        self.is_rep_g2 = new_probs(STATES)
        self.lit_codec = LiteralCodec(p.lc, p.lp)
        self.len_codec = LengthCodec()
        self.rep_len_codec = LengthCodec()
        self.dist_codec = DistCodec()
        self.state = 0
        self.pos_bit_mask = (1 << p.pb) - 1

    def copy(self) -> "State":
        """Return an independent deep copy of the state."""
        clone = object.__new__(State)
        clone.properties = self.properties
        clone.rep = list(self.rep)
        clone.is_match = list(self.is_match)
        clone.is_rep_g0_long = list(self.is_rep_g0_long)
        clone.is_rep = list(self.is_rep)
        clone.is_rep_g0 = list(self.is_rep_g0)
        clone.is_rep_g1 = list(self.is_rep_g1)
        clone.is_rep_g2 = list(self.is_rep_g2)
        clone.lit_codec = self.lit_codec.copy()
        clone.len_codec = self.len_codec.copy()
        clone.rep_len_codec = self.rep_len_codec.copy()
        clone.dist_codec = self.dist_codec.copy()
        clone.state = self.state
        clone.pos_bit_mask = self.pos_bit_mask
        return clone

    def update_literal(self) -> None:
        """Advance the state machine after a literal."""
        if self.state < 4:
            self.state = 0
        elif self.state < 10:
            self.state -= 3
        else:
            self.state -= 6

    def update_match(self) -> None:
        """Advance the state machine after a simple match."""
        self.state = 7 if self.state < 7 else 10

    def update_rep(self) -> None:
        """Advance the state machine after a repetition."""
        self.state = 8 if self.state < 7 else 11

    def update_short_rep(self) -> None:
        """Advance the state machine after a short repetition."""
        self.state = 9 if self.state < 7 else 11

    def states(self, dict_head: int) -> tuple[int, int, int]:
        """Return (state, state combined with position, position state)."""
        pos_state = (dict_head & _MASK32) & self.pos_bit_mask
        return self.state, (self.state << MAX_POS_BITS) | pos_state, pos_state

    def lit_state(self, prev: int, dict_head: int) -> int:
        """Return the literal state for the previous byte and head position."""
        lp, lc = self.properties.lp, self.properties.lc
        return (((dict_head & _MASK32) & ((1 << lp) - 1)) << lc) | (prev >> (8 - lc))