"""Encoder producing raw LZMA streams from an encoder dictionary."""

from __future__ import annotations

from typing import Union

from .buffer import NoSpaceError
from .distcodec import MAX_DISTANCE, MIN_DISTANCE
from .encoderdict import EncoderDict
from .lengthcodec import MAX_MATCH_LEN, MIN_MATCH_LEN
from .operation import Lit, Match
from .rangecoder import LimitError, RangeEncoder
from .state import State

__all__ = ["Encoder", "OP_LEN_MARGIN", "EOS_MATCH"]

# Upper limit of the bytes needed to encode a single operation.
OP_LEN_MARGIN = 16

# Pseudo operation marking the end of the stream.
EOS_MATCH = Match(distance=MAX_DISTANCE, n=MIN_MATCH_LEN)

_MASK32 = 0xFFFFFFFF


class Encoder:
    """Compresses data buffered in the encoder dictionary into a byte writer.

    Limit the output by passing a LimitedByteWriter; LimitError is raised
    when the limit would be exceeded.
    """

    def __init__(
        self, writer, state: State, dictionary: EncoderDict, eos_marker: bool = False
    ) -> None:
        self._re = RangeEncoder(writer)
        self.dictionary = dictionary
        self.state = state
        self.marker = eos_marker
        self.start = dictionary.pos()
        self.limit = False
        self.margin = OP_LEN_MARGIN + (5 if eos_marker else 0)

    def write(self, data) -> int:
        """Put data into the dictionary, compressing to make room as needed.

        Returns the number of bytes taken; raises LimitError if the output
        limit has been reached.
        """
        n = 0
        while True:
            try:
                n += self.dictionary.write(data[n:])
                return n
            except NoSpaceError as exc:
                n += exc.written
                self.compress(False)

    def reopen(self, writer) -> None:
        """Continue with a new byte writer."""
        self._re = RangeEncoder(writer)
        self.start = self.dictionary.pos()
        self.limit = False

    def _write_literal(self, l: Lit) -> None:
        s = self.state
        d = self.dictionary
        state, state2, _ = s.states(d.pos())
        self._re.encode_bit(s.is_match, state2, 0)
        lit_state = s.lit_state(d.byte_at(1), d.pos())
        match = d.byte_at(s.rep[0] + 1)
        s.lit_codec.encode(self._re, l.b, state, match, lit_state)
        s.update_literal()

    def _write_match(self, m: Match) -> None:
        s = self.state
        re = self._re
        if not MIN_DISTANCE <= m.distance <= MAX_DISTANCE:
            raise ValueError(f"match distance {m.distance} out of range")
        dist = (m.distance - MIN_DISTANCE) & _MASK32
        if not MIN_MATCH_LEN <= m.n <= MAX_MATCH_LEN and not (
            dist == s.rep[0] and m.n == 1
        ):
            raise ValueError(
                f"match length {m.n} out of range; dist {dist} rep[0] {s.rep[0]}"
            )
        state, state2, pos_state = s.states(self.dictionary.pos())
        re.encode_bit(s.is_match, state2, 1)
        g = next((i for i, r in enumerate(s.rep) if r == dist), 4)
        re.encode_bit(s.is_rep, state, int(g < 4))
        n = m.n - MIN_MATCH_LEN
        if g == 4:
            s.rep = [dist] + s.rep[:3]
            s.update_match()
            s.len_codec.encode(re, n, pos_state)
            s.dist_codec.encode(re, dist, n)
            return
        re.encode_bit(s.is_rep_g0, state, int(g != 0))
        if g == 0:
            long_rep = int(m.n != 1)
            re.encode_bit(s.is_rep_g0_long, state2, long_rep)
            if not long_rep:
                s.update_short_rep()
                return
        else:
            re.encode_bit(s.is_rep_g1, state, int(g != 1))
            if g != 1:
                re.encode_bit(s.is_rep_g2, state, int(g != 2))
                if g == 3:
                    s.rep[3] = s.rep[2]
                s.rep[2] = s.rep[1]
            s.rep[1] = s.rep[0]
            s.rep[0] = dist
        s.update_rep()
        s.rep_len_codec.encode(re, n, pos_state)

    def _write_op(self, op: Union[Match, Lit]) -> None:
        # Keep enough room to close the stream.
        if self._re.available() < self.margin:
            raise LimitError("lzma: limit reached")
        if isinstance(op, Lit):
            self._write_literal(op)
        else:
            self._write_match(op)

    def compress(self, all_data: bool) -> None:
        """Compress buffered data; all of it if all_data is true.

        Otherwise enough data is kept for finding a maximum-length match.
        Raises LimitError if the writer limit has been reached.
        """
        keep = 0 if all_data else MAX_MATCH_LEN - 1
        d = self.dictionary
        while d.buffered() > keep:
            op = d.matcher.next_op(self.state.rep)
            self._write_op(op)
            d.discard(len(op))

    def close(self) -> None:
        """Terminate the stream, writing an end-of-stream marker if requested.

        If the writer limit is reached, the stream is closed and the
        remaining data stays in the dictionary buffer.
        """
        try:
            self.compress(True)
        except LimitError:
            pass
        if self.marker:
            self._write_match(EOS_MATCH)
        self._re.close()

    def compressed(self) -> int:
        """Return the number of input bytes compressed since the last (re)open."""
        return self.dictionary.pos() - self.start