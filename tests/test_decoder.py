import io
import lzma

import pytest

from lzmacodec.decoder import Decoder
from lzmacodec.decoderdict import DecoderDict
from lzmacodec.properties import LZMAError, properties_for_code
from lzmacodec.state import State

FOX = b"The quick brown fox jumps over the lazy dog.\n"
TEXT = b"".join(
    f"line {i}: the quick brown fox jumps over dog {i % 7}\n".encode()
    for i in range(300)
)
CAPACITY = 0x800000


def _alone(data):
    """Return the properties and the raw stream of an .lzma file for data."""
    blob = lzma.compress(data, format=lzma.FORMAT_ALONE)
    return properties_for_code(blob[0]), blob[13:]


def _decoder(data, size=-1, capacity=CAPACITY):
    props, body = _alone(data)
    return Decoder(io.BytesIO(body), State(props), DecoderDict(capacity), size)


@pytest.mark.parametrize("size", [-1, len(FOX)])
def test_decoder_fox(size):
    d = _decoder(FOX, size)
    assert d.read() == FOX
    assert d.read() == b""
    assert d.decompressed() == len(FOX)


def test_eos_marker_found_without_size():
    d = _decoder(FOX)
    d.read()
    assert d.eos_marker is True
    assert d.eos is True


def test_small_reads_concatenate():
    d = _decoder(TEXT)
    parts = []
    while True:
        part = d.read(37)
        if not part:
            break
        assert len(part) <= 37
        parts.append(part)
    assert b"".join(parts) == TEXT


def test_read_zero():
    d = _decoder(FOX)
    assert d.read(0) == b""
    assert d.read() == FOX


def test_empty_input_data():
    d = _decoder(b"")
    assert d.read() == b""
    assert d.decompressed() == 0


def test_truncated_stream():
    props, body = _alone(TEXT)
    d = Decoder(io.BytesIO(body[: len(body) // 2]), State(props), DecoderDict(CAPACITY), -1)
    with pytest.raises(LZMAError):
        d.read()


def test_size_too_small():
    d = _decoder(FOX, len(FOX) - 5)
    with pytest.raises(LZMAError):
        d.read()


def test_size_too_large():
    d = _decoder(FOX, len(FOX) + 10)
    with pytest.raises(LZMAError):
        d.read()


def test_first_byte_not_zero():
    props, body = _alone(FOX)
    with pytest.raises(LZMAError):
        Decoder(io.BytesIO(b"\x01" + body[1:]), State(props), DecoderDict(CAPACITY), -1)


def test_empty_stream():
    props, _ = _alone(FOX)
    with pytest.raises(EOFError):
        Decoder(io.BytesIO(b""), State(props), DecoderDict(CAPACITY), -1)


def test_reopen_with_second_stream():
    props, body1 = _alone(FOX)
    _, body2 = _alone(TEXT)
    state = State(props)
    dictionary = DecoderDict(CAPACITY)
    d = Decoder(io.BytesIO(body1), state, dictionary, -1)
    assert d.read() == FOX
    dictionary.reset()
    state.reset()
    d.reopen(io.BytesIO(body2), len(TEXT))
    assert d.read() == TEXT
    assert d.decompressed() == len(TEXT)