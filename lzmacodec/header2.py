"""Chunk headers, chunk states and dictionary capacity codes of LZMA2."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .decoderdict import MAX_DICT_CAP
from .properties import LZMAError, Properties, properties_for_code

__all__ = [
    "ChunkType",
    "ChunkHeader",
    "ChunkState",
    "header_chunk_type",
    "header_len",
    "read_chunk_header",
    "decode_dict_cap",
    "encode_dict_cap",
    "MAX_COMPRESSED",
    "MAX_UNCOMPRESSED",
    "UNCOMPRESSED_HEADER_LEN",
    "MAX_DICT_CAP_CODE",
]

# Maximum size of compressed data in a chunk.
MAX_COMPRESSED = 1 << 16
# Maximum size of uncompressed data in a chunk.
MAX_UNCOMPRESSED = 1 << 21

UNCOMPRESSED_HEADER_LEN = 3

MAX_DICT_CAP_CODE = 40


class ChunkType(enum.IntEnum):
    """Kind of an LZMA2 chunk."""

    EOS = 0  # end of stream
    UD = 1  # uncompressed; reset dictionary
    U = 2  # uncompressed; no reset of dictionary
    L = 3  # LZMA compressed; no reset
    LR = 4  # LZMA compressed; reset state
    LRN = 5  # LZMA compressed; reset state; new properties
    LRND = 6  # LZMA compressed; reset state; new properties; reset dictionary

    def __str__(self) -> str:
        return self.name


# Header byte values; the high uncompressed size bits share the byte.
_H_EOS = 0
_H_UD = 1
_H_U = 2
_H_L = 1 << 7
_H_LR = 1 << 7 | 1 << 5
_H_LRN = 1 << 7 | 1 << 6
_H_LRND = 1 << 7 | 1 << 6 | 1 << 5

_HEADER_BYTES = {
    ChunkType.EOS: _H_EOS,
    ChunkType.UD: _H_UD,
    ChunkType.U: _H_U,
    ChunkType.L: _H_L,
    ChunkType.LR: _H_LR,
    ChunkType.LRN: _H_LRN,
    ChunkType.LRND: _H_LRND,
}

_UNCOMPRESSED_TYPES = {_H_EOS: ChunkType.EOS, _H_UD: ChunkType.UD, _H_U: ChunkType.U}
_COMPRESSED_TYPES = {
    _H_L: ChunkType.L,
    _H_LR: ChunkType.LR,
    _H_LRN: ChunkType.LRN,
    _H_LRND: ChunkType.LRND,
}

_MSG_HEADER_BYTE = "lzma: unsupported chunk header byte"


def header_chunk_type(h: int) -> ChunkType:
    """Return the chunk type of a header byte, ignoring the size bits."""
    if h & _H_L == 0:
        try:
            return _UNCOMPRESSED_TYPES[h]
        except KeyError:
            raise LZMAError(_MSG_HEADER_BYTE) from None
    return _COMPRESSED_TYPES[h & _H_LRND]


def header_len(c: ChunkType) -> int:
    """Return the length of the chunk header for the chunk type."""
    if c == ChunkType.EOS:
        return 1
    if c in (ChunkType.U, ChunkType.UD):
        return UNCOMPRESSED_HEADER_LEN
    if c in (ChunkType.L, ChunkType.LR):
        return 5
    if c in (ChunkType.LRN, ChunkType.LRND):
        return 6
    raise ValueError(f"unsupported chunk type {c}")


@dataclass
class ChunkHeader:
    """Contents of an LZMA2 chunk header.

    uncompressed and compressed hold the sizes minus one, as stored.
    """

    ctype: ChunkType = ChunkType.EOS
    uncompressed: int = 0
    compressed: int = 0
    props: Properties = field(default_factory=Properties)

    def marshal(self) -> bytes:
        """Encode the header, checking that its contents are valid."""
        if not isinstance(self.ctype, ChunkType):
            raise LZMAError("invalid chunk type")
        self.props.verify()

        data = bytearray(header_len(self.ctype))
        if self.ctype == ChunkType.EOS:
            return bytes(data)
        data[0] = _HEADER_BYTES[self.ctype]

        data[1:3] = (self.uncompressed & 0xFFFF).to_bytes(2, "big")
        if self.ctype <= ChunkType.U:
            return bytes(data)
        data[0] |= (self.uncompressed >> 16) & ~_H_LRND & 0xFF

        data[3:5] = (self.compressed & 0xFFFF).to_bytes(2, "big")
        if self.ctype <= ChunkType.LR:
            return bytes(data)

        data[5] = self.props.code()
        return bytes(data)

    @classmethod
    def unmarshal(cls, data) -> "ChunkHeader":
        """Decode a header; data must have exactly the header's length."""
        if len(data) == 0:
            raise LZMAError("no data")
        c = header_chunk_type(data[0])
        n = header_len(c)
        if len(data) < n:
            raise LZMAError("incomplete data")
        if len(data) > n:
            raise LZMAError("invalid data length")

        h = cls(ctype=c)
        if c == ChunkType.EOS:
            return h

        h.uncompressed = int.from_bytes(bytes(data[1:3]), "big")
        if c <= ChunkType.U:
            return h
        h.uncompressed |= (data[0] & ~_H_LRND & 0xFF) << 16

        h.compressed = int.from_bytes(bytes(data[3:5]), "big")
        if c <= ChunkType.LR:
            return h

        h.props = properties_for_code(data[5])
        return h

    def __str__(self) -> str:
        return f"{self.ctype} {self.uncompressed} {self.compressed} {self.props}"


def _read_full(stream, n: int) -> bytes:
    chunks = []
    remaining = n
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_chunk_header(stream) -> ChunkHeader:
    """Read a chunk header from a binary stream.

    Raises EOFError if the stream ends before the header is complete.
    """
    first = _read_full(stream, 1)
    if not first:
        raise EOFError("no chunk header")
    c = header_chunk_type(first[0])
    rest_len = header_len(c) - 1
    rest = _read_full(stream, rest_len)
    if len(rest) < rest_len:
        raise EOFError("incomplete chunk header")
    return ChunkHeader.unmarshal(first + rest)


class ChunkState(enum.Enum):
    """State of the chunk sequence."""

    START = "S"
    LZMA = "L"
    RESET = "R"
    UNCOMPRESSED = "U"
    STOP = "T"

    def next(self, ctype: ChunkType) -> "ChunkState":
        """Return the state after a chunk of the given type.

        Raises LZMAError if the chunk type is not allowed in this state.
        """
        try:
            return _TRANSITIONS[self][ctype]
        except KeyError:
            raise LZMAError("lzma: unexpected chunk type") from None

    def default_chunk_type(self) -> ChunkType:
        """Return the chunk type to use by default in this state."""
        return _DEFAULT_TYPES.get(self, ChunkType.EOS)


_S, _L, _R, _U, _T = (
    ChunkState.START,
    ChunkState.LZMA,
    ChunkState.RESET,
    ChunkState.UNCOMPRESSED,
    ChunkState.STOP,
)

_TRANSITIONS = {
    _S: {ChunkType.EOS: _T, ChunkType.UD: _R, ChunkType.LRND: _L},
    _L: {
        ChunkType.EOS: _T,
        ChunkType.UD: _R,
        ChunkType.U: _U,
        ChunkType.L: _L,
        ChunkType.LR: _L,
        ChunkType.LRN: _L,
        ChunkType.LRND: _L,
    },
    _R: {
        ChunkType.EOS: _T,
        ChunkType.UD: _R,
        ChunkType.U: _R,
        ChunkType.LRN: _L,
        ChunkType.LRND: _L,
    },
    _U: {
        ChunkType.EOS: _T,
        ChunkType.UD: _R,
        ChunkType.U: _U,
        ChunkType.L: _L,
        ChunkType.LR: _L,
        ChunkType.LRN: _L,
        ChunkType.LRND: _L,
    },
    _T: {},
}

_DEFAULT_TYPES = {
    _S: ChunkType.LRND,
    _L: ChunkType.L,
    _U: ChunkType.L,
    _R: ChunkType.LRN,
}


def _decode_dict_cap(c: int) -> int:
    return (2 | (c & 1)) << (11 + ((c >> 1) & 0x1F))


def decode_dict_cap(c: int) -> int:
    """Decode a dictionary capacity code; raise LZMAError if it is invalid."""
    if c >= MAX_DICT_CAP_CODE:
        if c == MAX_DICT_CAP_CODE:
            return MAX_DICT_CAP
        raise LZMAError("lzma: invalid dictionary size code")
    if c < 0:
        raise LZMAError("lzma: invalid dictionary size code")
    return _decode_dict_cap(c)


def encode_dict_cap(n: int) -> int:
    """Return the code of the smallest capacity that is at least n.

    Capacities beyond the largest code yield the maximum code.
    """
    a, b = 0, MAX_DICT_CAP_CODE
    while a < b:
        c = a + ((b - a) >> 1)
        m = _decode_dict_cap(c)
        if n <= m:
            if n == m:
                return c
            b = c
        else:
            a = c + 1
    return a