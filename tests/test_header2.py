import io

import pytest

from lzmacodec.header2 import (
    MAX_DICT_CAP_CODE,
    ChunkHeader,
    ChunkState,
    ChunkType,
    decode_dict_cap,
    encode_dict_cap,
    header_chunk_type,
    header_len,
    read_chunk_header,
)
from lzmacodec.properties import LZMAError, Properties


@pytest.mark.parametrize(
    "c, s",
    [
        (ChunkType.EOS, "EOS"),
        (ChunkType.UD, "UD"),
        (ChunkType.U, "U"),
        (ChunkType.L, "L"),
        (ChunkType.LR, "LR"),
        (ChunkType.LRN, "LRN"),
        (ChunkType.LRND, "LRND"),
    ],
)
def test_chunk_type_string(c, s):
    assert str(c) == s
    assert f"{c}" == s


@pytest.mark.parametrize(
    "h, c",
    [
        (0, ChunkType.EOS),
        (1, ChunkType.UD),
        (2, ChunkType.U),
        (1 << 7 | 0x1F, ChunkType.L),
        (1 << 7 | 1 << 5 | 0x1F, ChunkType.LR),
        (1 << 7 | 1 << 6 | 0x1F, ChunkType.LRN),
        (1 << 7 | 1 << 6 | 1 << 5 | 0x1F, ChunkType.LRND),
        (1 << 7 | 1 << 6 | 1 << 5, ChunkType.LRND),
    ],
)
def test_header_chunk_type(h, c):
    assert header_chunk_type(h) == c


def test_header_chunk_type_invalid():
    with pytest.raises(LZMAError):
        header_chunk_type(3)


@pytest.mark.parametrize(
    "c, n",
    [
        (ChunkType.EOS, 1),
        (ChunkType.U, 3),
        (ChunkType.UD, 3),
        (ChunkType.L, 5),
        (ChunkType.LR, 5),
        (ChunkType.LRN, 6),
        (ChunkType.LRND, 6),
    ],
)
def test_header_len(c, n):
    assert header_len(c) == n


def _samples():
    props = Properties(lc=3, lp=0, pb=2)
    headers = []
    for c in ChunkType:
        h = ChunkHeader(ctype=c)
        if c >= ChunkType.UD:
            h.uncompressed = 0x0304
        if c >= ChunkType.L:
            h.compressed = 0x0201
        if c >= ChunkType.LRN:
            h.props = props
        headers.append(h)
    return headers


@pytest.mark.parametrize("h", _samples(), ids=str)
def test_chunk_header_marshalling(h):
    data = h.marshal()
    assert len(data) == header_len(h.ctype)
    assert ChunkHeader.unmarshal(data) == h


@pytest.mark.parametrize("h", _samples(), ids=str)
def test_read_chunk_header(h):
    stream = io.BytesIO(h.marshal())
    assert read_chunk_header(stream) == h


def test_read_eos():
    h = read_chunk_header(io.BytesIO(b"\x00"))
    assert h.ctype == ChunkType.EOS
    assert h.compressed == 0
    assert h.uncompressed == 0
    assert h.props == Properties()


def test_marshal_wire_bytes():
    h = ChunkHeader(ctype=ChunkType.LR, uncompressed=0x0304, compressed=0x0201)
    assert h.marshal() == bytes([0xA0, 0x03, 0x04, 0x02, 0x01])


def test_unmarshal_high_uncompressed_bits():
    h = ChunkHeader.unmarshal(bytes([0x80 | 0x1F, 0xFF, 0xFF, 0x00, 0x00]))
    assert h.ctype == ChunkType.L
    assert h.uncompressed == 0x1FFFFF


def test_str_of_chunk_header():
    h = ChunkHeader(ctype=ChunkType.U, uncompressed=5)
    assert str(h) == "U 5 0 LC 0 LP 0 PB 0"


@pytest.mark.parametrize("data", [b"", b"\x80\x00", b"\x00\x00", b"\x03"])
def test_unmarshal_errors(data):
    with pytest.raises(LZMAError):
        ChunkHeader.unmarshal(data)


def test_marshal_invalid_props():
    h = ChunkHeader(ctype=ChunkType.LRN, props=Properties(lc=9))
    with pytest.raises(LZMAError):
        h.marshal()


@pytest.mark.parametrize("data", [b"", b"\x80\x00", b"\x01\x00"])
def test_read_chunk_header_truncated(data):
    with pytest.raises(EOFError):
        read_chunk_header(io.BytesIO(data))


def test_chunk_state_transitions():
    assert ChunkState.START.next(ChunkType.EOS) == ChunkState.STOP
    assert ChunkState.START.next(ChunkType.UD) == ChunkState.RESET
    assert ChunkState.START.next(ChunkType.LRND) == ChunkState.LZMA
    assert ChunkState.LZMA.next(ChunkType.U) == ChunkState.UNCOMPRESSED
    assert ChunkState.LZMA.next(ChunkType.LR) == ChunkState.LZMA
    assert ChunkState.RESET.next(ChunkType.U) == ChunkState.RESET
    assert ChunkState.RESET.next(ChunkType.LRN) == ChunkState.LZMA
    assert ChunkState.UNCOMPRESSED.next(ChunkType.L) == ChunkState.LZMA
    assert ChunkState.UNCOMPRESSED.next(ChunkType.UD) == ChunkState.RESET


@pytest.mark.parametrize(
    "state, ctype",
    [
        (ChunkState.START, ChunkType.U),
        (ChunkState.START, ChunkType.L),
        (ChunkState.RESET, ChunkType.L),
        (ChunkState.RESET, ChunkType.LR),
        (ChunkState.STOP, ChunkType.EOS),
    ],
)
def test_chunk_state_invalid(state, ctype):
    with pytest.raises(LZMAError):
        state.next(ctype)


def test_default_chunk_type():
    assert ChunkState.START.default_chunk_type() == ChunkType.LRND
    assert ChunkState.LZMA.default_chunk_type() == ChunkType.L
    assert ChunkState.UNCOMPRESSED.default_chunk_type() == ChunkType.L
    assert ChunkState.RESET.default_chunk_type() == ChunkType.LRN
    assert ChunkState.STOP.default_chunk_type() == ChunkType.EOS


def test_decode_dict_cap_values():
    assert decode_dict_cap(0) == 4096
    assert decode_dict_cap(MAX_DICT_CAP_CODE) == (1 << 32) - 1


def test_decode_dict_cap_invalid():
    with pytest.raises(LZMAError):
        decode_dict_cap(MAX_DICT_CAP_CODE + 1)


@pytest.mark.parametrize("c", range(MAX_DICT_CAP_CODE + 1))
def test_dict_cap_round_trip(c):
    assert encode_dict_cap(decode_dict_cap(c)) == c


@pytest.mark.parametrize("n", [1, 4095, 4097, 100000, (1 << 30) + 1, (1 << 32) - 2])
def test_encode_dict_cap_covers(n):
    c = encode_dict_cap(n)
    assert decode_dict_cap(c) >= n
    if c > 0:
        assert decode_dict_cap(c - 1) < n


def test_encode_dict_cap_beyond_maximum():
    assert encode_dict_cap(1 << 40) == MAX_DICT_CAP_CODE