"""Decoder for raw LZMA streams without a header."""

from __future__ import annotations

import sys
from typing import Optional, Union

from .decoderdict import DecoderDict
from .distcodec import MIN_DISTANCE
from .lengthcodec import MAX_MATCH_LEN, MIN_MATCH_LEN
from .operation import Lit, Match
from .properties import LZMAError
from .rangecoder import RangeDecoder
from .state import State

__all__ = ["Decoder"]

# Distance offset that marks the end of the stream.
_EOS_DIST = (1 << 32) - 1

_MSG_DATA_AFTER_EOS = "lzma: data after end of stream marker"
_MSG_SIZE = "lzma: wrong uncompressed data size"
_MSG_UNEXPECTED_EOF = "lzma: unexpected end of compressed data"

Operation = Union[Match, Lit]


class Decoder:
    """Decodes a raw LZMA stream into a decoder dictionary.

    A negative size means the uncompressed size is unknown and the stream
    must end with an end-of-stream marker.
    """

    def __init__(self, reader, state: State, dictionary: DecoderDict, size: int) -> None:
        self._rd = RangeDecoder(reader)
        self.state = state
        self.dictionary = dictionary
        self.size = size
        self.start = dictionary.pos()
        self.eos = False
        self.eos_marker = False

    def reopen(self, reader, size: int) -> None:
        """Restart with a new byte source and size; resets the decompressed count."""
        self._rd = RangeDecoder(reader)
        self.start = self.dictionary.pos()
        self.size = size
        self.eos = False

    def _decode_literal(self) -> Lit:
        d = self.dictionary
        s = self.state
        lit_state = s.lit_state(d.byte_at(1), d.head)
        match = d.byte_at(s.rep[0] + 1)
        return Lit(s.lit_codec.decode(self._rd, s.state, match, lit_state))

    def _read_op(self) -> Optional[Operation]:
        """Decode the next operation; return None for an end-of-stream marker."""
        s = self.state
        rd = self._rd
        state, state2, pos_state = s.states(self.dictionary.head)

        if rd.decode_bit(s.is_match, state2) == 0:
            op = self._decode_literal()
            s.update_literal()
            return op

        if rd.decode_bit(s.is_rep, state) == 0:
            s.rep[1:4] = s.rep[0:3]
            s.update_match()
            n = s.len_codec.decode(rd, pos_state)
            s.rep[0] = s.dist_codec.decode(rd, n)
            if s.rep[0] == _EOS_DIST:
                self.eos_marker = True
                return None
            return Match(distance=s.rep[0] + MIN_DISTANCE, n=n + MIN_MATCH_LEN)

        if rd.decode_bit(s.is_rep_g0, state) == 0:
            dist = s.rep[0]
            if rd.decode_bit(s.is_rep_g0_long, state2) == 0:
                s.update_short_rep()
                return Match(distance=dist + MIN_DISTANCE, n=1)
        else:
            if rd.decode_bit(s.is_rep_g1, state) == 0:
                dist = s.rep[1]
            else:
                if rd.decode_bit(s.is_rep_g2, state) == 0:
                    dist = s.rep[2]
                else:
                    dist = s.rep[3]
                    s.rep[3] = s.rep[2]
                s.rep[2] = s.rep[1]
            s.rep[1] = s.rep[0]
            s.rep[0] = dist

        n = s.rep_len_codec.decode(rd, pos_state)
        s.update_rep()
        return Match(distance=dist + MIN_DISTANCE, n=n + MIN_MATCH_LEN)

    def _next_op(self) -> Optional[Operation]:
        try:
            return self._read_op()
        except EOFError as exc:
            self.eos = True
            raise LZMAError(_MSG_UNEXPECTED_EOF) from exc

    def _apply(self, op: Operation) -> None:
        if isinstance(op, Match):
            self.dictionary.write_match(op.distance, op.n)
        else:
            self.dictionary.write_byte(op.b)

    def _decompress(self) -> None:
        """Fill the dictionary until it is full or the stream has ended."""
        if self.eos:
            return
        while self.dictionary.available() >= MAX_MATCH_LEN:
            op = self._next_op()
            if op is None:
                self.eos = True
                if not self._rd.possibly_at_end():
                    raise LZMAError(_MSG_DATA_AFTER_EOS)
                if self.size >= 0 and self.size != self.decompressed():
                    raise LZMAError(_MSG_SIZE)
                return
            self._apply(op)
            if self.size >= 0 and self.decompressed() >= self.size:
                self.eos = True
                if self.decompressed() > self.size:
                    raise LZMAError(_MSG_SIZE)
                if not self._rd.possibly_at_end():
                    if self._next_op() is not None:
                        raise LZMAError(_MSG_SIZE)
                return

    def read(self, size: int = -1) -> bytes:
        """Return up to size decoded bytes, all remaining if size is negative.

        An empty result means the end of the stream.
        """
        chunks = []
        n = 0
        while True:
            want = sys.maxsize if size < 0 else size - n
            chunk = self.dictionary.read(want)
            if not chunk and self.eos:
                break
            chunks.append(chunk)
            n += len(chunk)
            if 0 <= size <= n:
                break
            self._decompress()
        return b"".join(chunks)

    def decompressed(self) -> int:
        """Return the number of bytes decompressed since the last (re)open."""
        return self.dictionary.pos() - self.start