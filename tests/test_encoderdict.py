import io

import pytest

from lzmacodec.buffer import NoSpaceError
from lzmacodec.encoderdict import EncoderDict
from lzmacodec.properties import LZMAError


class _Recorder:
    def __init__(self):
        self.dict = None
        self.written = bytearray()

    def set_dict(self, d):
        self.dict = d

    def write(self, data):
        self.written += data
        return len(data)

    def next_op(self, rep):
        raise AssertionError("not used")


def test_rejects_bad_arguments():
    with pytest.raises(LZMAError):
        EncoderDict(0, 8, _Recorder())
    with pytest.raises(LZMAError):
        EncoderDict(8, 0, _Recorder())


def test_sets_dict_on_matcher():
    m = _Recorder()
    d = EncoderDict(8, 8, m)
    assert m.dict is d


def test_write_and_discard():
    m = _Recorder()
    d = EncoderDict(8, 8, m)
    assert d.write(b"abcde") == 5
    assert d.buffered() == 5
    assert d.pos() == 0
    d.discard(3)
    assert d.pos() == 3
    assert d.buffered() == 2
    assert bytes(m.written) == b"abc"
    assert d.length() == 3
    assert d.dict_len() == 3


def test_space_invariant():
    d = EncoderDict(8, 8, _Recorder())
    for chunk in (b"abcd", b"efgh", b"ij"):
        d.write(chunk)
        d.discard(len(chunk))
        assert d.available() + d.dict_len() + d.buffered() == 16
    assert d.dict_len() == 8


def test_write_overflow():
    d = EncoderDict(4, 2, _Recorder())
    avail = d.available()
    with pytest.raises(NoSpaceError) as info:
        d.write(b"x" * (avail + 3))
    assert info.value.written == avail
    assert d.buffered() == avail


def test_discard_too_much():
    d = EncoderDict(8, 8, _Recorder())
    d.write(b"ab")
    with pytest.raises(LZMAError):
        d.discard(3)


def test_byte_at():
    d = EncoderDict(8, 8, _Recorder())
    d.write(b"abc")
    d.discard(3)
    assert d.byte_at(1) == ord("c")
    assert d.byte_at(3) == ord("a")
    assert d.byte_at(0) == 0
    assert d.byte_at(4) == 0


def test_copy_n():
    d = EncoderDict(8, 8, _Recorder())
    d.write(b"abc")
    d.discard(3)
    out = io.BytesIO()
    assert d.copy_n(out, 0) == 0
    assert d.copy_n(out, 2) == 2
    assert out.getvalue() == b"bc"
    out = io.BytesIO()
    with pytest.raises(NoSpaceError) as info:
        d.copy_n(out, 10)
    assert info.value.written == 3
    assert out.getvalue() == b"abc"


def test_copy_n_wraps_around():
    d = EncoderDict(4, 2, _Recorder())
    d.write(b"abcdef")
    d.discard(6)
    d.write(b"gh")
    d.discard(2)
    out = io.BytesIO()
    assert d.copy_n(out, 4) == 4
    assert out.getvalue() == b"abcdefgh"[-4:]