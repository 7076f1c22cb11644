import io
import lzma

import pytest

from lzmacodec.header import Header
from lzmacodec.properties import LZMAError, Properties
from lzmacodec.reader import DictSizeError, Reader, ReaderConfig

TEXT = (
    b"LZMA decoder test example\n"
    b"=========================\n"
    b"! LZMA ! Decoder ! TEST !\n"
    b"=========================\n"
    b"! TEST ! LZMA ! Decoder !\n"
    b"=========================\n"
    b"---- Test Line 1 --------\n"
    b"=========================\n"
    b"---- Test Line 2 --------\n"
    b"=========================\n"
    b"=== End of test file ====\n"
    b"=========================\n"
)


def _compress(data, lc=3, lp=0, pb=2, dict_size=4096):
    filters = [
        {"id": lzma.FILTER_LZMA1, "dict_size": dict_size, "lc": lc, "lp": lp, "pb": pb}
    ]
    raw = lzma.compress(data, format=lzma.FORMAT_ALONE, filters=filters)
    # The reader takes the five bytes of properties and dictionary size only.
    return raw[:5] + raw[13:]


class OneByteStream:
    def __init__(self, data):
        self._stream = io.BytesIO(data)

    def read(self, n=-1):
        return self._stream.read(1 if n != 0 else 0)


def _read_all_chunks(reader, chunk=128):
    parts = []
    while True:
        part = reader.read(chunk)
        if not part:
            break
        assert len(part) <= chunk
        parts.append(part)
    return b"".join(parts)


def test_read_text():
    r = Reader(io.BytesIO(_compress(TEXT)))
    assert r.read() == TEXT
    assert r.read() == b""


def test_new_reader_from_config():
    r = ReaderConfig().new_reader(io.BytesIO(_compress(TEXT)))
    assert r.read() == TEXT


def test_read_other_properties():
    data = TEXT * 5
    r = Reader(io.BytesIO(_compress(data, lc=2, lp=1, pb=1)))
    assert r.read() == data


def test_one_byte_stream():
    r = Reader(OneByteStream(_compress(TEXT)))
    assert r.read() == TEXT


@pytest.mark.parametrize("n", [0, 128, 1024, 4095, 4096, 4097, 8191, 8192, 8193])
def test_reader_repeated_bytes(n):
    data = b"A" * n
    r = Reader(io.BytesIO(_compress(data)))
    out = _read_all_chunks(r)
    assert len(out) == n
    assert out == data


def test_header_returns_original_values():
    r = Reader(io.BytesIO(_compress(TEXT, lc=2, lp=1, pb=1, dict_size=8192)))
    h, ok = r.header()
    assert ok
    assert h.properties == Properties(lc=2, lp=1, pb=1)
    assert h.dict_size == 8192
    assert h.size == -1


def test_eos_marker_found():
    r = Reader(io.BytesIO(_compress(TEXT)))
    assert r.read() == TEXT
    assert r.eos_marker()


def test_min_dict_size():
    compressed = bytearray(_compress(TEXT * 3))
    compressed[1:5] = bytes(4)
    r = Reader(io.BytesIO(bytes(compressed)))
    h, _ = r.header()
    assert h.dict_size == 0
    assert r.read() == TEXT * 3


def test_zero_prefix_exceeds_configured_cap():
    prefixed = b"\x00" + _compress(TEXT)
    expected = Header.unmarshal(prefixed[:5]).dict_size
    with pytest.raises(DictSizeError) as info:
        ReaderConfig(dict_cap=4096).new_reader(io.BytesIO(prefixed))
    assert info.value.config_dict_cap == 4096
    assert info.value.header_dict_size == expected
    assert str(expected) in str(info.value)


def test_config_not_modified_by_new_reader():
    config = ReaderConfig()
    r = config.new_reader(io.BytesIO(_compress(TEXT)))
    assert config.dict_cap == 0
    assert r.read() == TEXT


def test_config_verify_default():
    config = ReaderConfig()
    config.verify()
    assert config.dict_cap == (1 << 31) - 1


@pytest.mark.parametrize("cap", [1, 4095, 1 << 32])
def test_config_verify_out_of_range(cap):
    with pytest.raises(LZMAError):
        ReaderConfig(dict_cap=cap).verify()


@pytest.mark.parametrize("data", [b"", b"\x5d\x00\x10"])
def test_short_header(data):
    with pytest.raises(LZMAError):
        Reader(io.BytesIO(data))


def test_invalid_properties_code():
    data = bytearray(_compress(TEXT))
    data[0] = 225
    with pytest.raises(LZMAError):
        Reader(io.BytesIO(bytes(data)))


def test_nonzero_first_range_byte():
    data = _compress(TEXT)
    bad = data[:5] + b"\x01" + data[6:]
    with pytest.raises(LZMAError):
        Reader(io.BytesIO(bad))


def test_truncated_stream():
    data = _compress(TEXT)
    r = Reader(io.BytesIO(data[:-10]))
    with pytest.raises(LZMAError):
        r.read()