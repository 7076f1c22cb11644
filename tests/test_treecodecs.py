import io
import random

import pytest

from lzmacodec.rangecoder import RangeDecoder, RangeEncoder
from lzmacodec.treecodecs import DirectCodec, TreeCodec, TreeReverseCodec


def _round_trip(make_codec, bits, values):
    out = io.BytesIO()
    enc = RangeEncoder(out)
    codec = make_codec(bits)
    for v in values:
        codec.encode(enc, v)
    enc.close()
    dec = RangeDecoder(io.BytesIO(out.getvalue()))
    dcodec = make_codec(bits)
    return [dcodec.decode(dec) for _ in values]


@pytest.mark.parametrize("make_codec", [TreeCodec, TreeReverseCodec, DirectCodec])
@pytest.mark.parametrize("bits", [1, 3, 6, 8])
def test_round_trip(make_codec, bits):
    rng = random.Random(bits)
    values = [rng.randrange(1 << bits) for _ in range(500)]
    assert _round_trip(make_codec, bits, values) == values


def test_direct_codec_wide_values():
    rng = random.Random(11)
    values = [rng.randrange(1 << 26) for _ in range(200)]
    assert _round_trip(DirectCodec, 26, values) == values


@pytest.mark.parametrize("make_codec", [TreeCodec, TreeReverseCodec, DirectCodec])
@pytest.mark.parametrize("bits", [0, 33])
def test_invalid_bits(make_codec, bits):
    with pytest.raises(ValueError):
        make_codec(bits)


@pytest.mark.parametrize("make_codec", [TreeCodec, TreeReverseCodec])
def test_copy_is_independent(make_codec):
    codec = make_codec(4)
    enc = RangeEncoder(io.BytesIO())
    codec.encode(enc, 5)
    clone = codec.copy()
    assert clone.probs == codec.probs
    assert clone.bits == codec.bits
    codec.encode(enc, 10)
    assert clone.probs != codec.probs


def test_probs_size():
    assert len(TreeCodec(6).probs) == 1 << 6
    assert len(TreeReverseCodec(4).probs) == 1 << 4