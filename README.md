# lzmacodec

`lzmacodec` encodes and decodes LZMA data in pure Python, with no native
extensions and no dependencies. It gives you these pieces:

* a reader for LZMA streams that start with a short header;
* a reader for LZMA2 chunk sequences;
* an encoder that produces raw LZMA streams;
* the building blocks underneath them: the range coder, the
  probability-tree codecs, the dictionaries and two match finders.

## Installation

```
pip install .
```

To install the test dependencies as well and run the tests:

```
pip install .[test]
pytest
```

## Compressing

`Encoder` compresses data held in an `EncoderDict`. The dictionary needs a
match finder, either a `HashTable` or a `BinTree`. `MatchAlgorithm` creates
either one for you.

```python
import io

from lzmacodec.encoder import Encoder
from lzmacodec.encoderdict import EncoderDict
from lzmacodec.matchalgorithm import MatchAlgorithm
from lzmacodec.properties import Properties
from lzmacodec.state import State

dict_cap = 4096
props = Properties(lc=3, lp=0, pb=2)
matcher = MatchAlgorithm.HASH_TABLE4.new(dict_cap)
dictionary = EncoderDict(dict_cap, dict_cap + 1024, matcher)

out = io.BytesIO()
encoder = Encoder(out, State(props), dictionary, eos_marker=True)
encoder.write(b"hello hello hello hello")
encoder.close()
raw_stream = out.getvalue()  # range-coded data, no header
```

To cap the size of the compressed output, pass a
`lzmacodec.rangecoder.LimitedByteWriter(out, n)` in place of `out`:

* `write` raises `LimitError` once the limit is reached.
* `close` still ends the stream cleanly and leaves any data it could not
  compress in the dictionary buffer.
* `compressed()` reports how many input bytes went into the stream.

## Reading

`Reader` expects a 5-byte header followed directly by the range-coded data.
The header holds the properties byte and the little-endian dictionary size.
The reader does not know the uncompressed size, so the stream must end with
an end-of-stream marker.

`Header.marshal()` returns 13 bytes: those 5 header bytes followed by an
8-byte size field. Take its first `HEADER_LEN` bytes to build a stream the
reader accepts.

```python
from lzmacodec.header import HEADER_LEN, Header
from lzmacodec.reader import ReaderConfig

header = Header(properties=props, dict_size=dict_cap).marshal()[:HEADER_LEN]
reader = ReaderConfig().new_reader(io.BytesIO(header + raw_stream))

chunks = []
while chunk := reader.read(64 * 1024):
    chunks.append(chunk)
data = b"".join(chunks)

stored_header, ok = reader.header()  # header as stored in the stream
print(reader.eos_marker())           # True: an end-of-stream marker was seen
```

`ReaderConfig.dict_cap` limits the dictionary size the reader accepts. The
default is 2^31 - 1 bytes. If a header asks for more, the reader raises
`DictSizeError`. The reader never allocates a dictionary smaller than 4096
bytes.

`valid_header(data)` checks whether 5 bytes look like a plausible header. It
accepts dictionary sizes of 2^n or 2^n + 2^(n-1) with n >= 10, and 2^32 - 1.

### LZMA2 chunk sequences

```python
from lzmacodec.reader2 import Reader2Config

with open("data.lzma2", "rb") as f:
    reader = Reader2Config(dict_cap=8 * 1024 * 1024).new_reader2(f)
    data = reader.read()  # everything; an empty result means the end
    print(reader.eos())   # True once the end-of-stream chunk has been read
```

`Reader2Config.dict_cap` defaults to 8 MiB.

If an error occurs after some data has been read, `Reader2.read` returns that
data. The next call then raises the error.

## Lower-level pieces

| Module | What it provides |
| --- | --- |
| `lzmacodec.header2` | LZMA2 chunk headers (`ChunkHeader`, `read_chunk_header`), the chunk-sequence state machine (`ChunkState`), and the dictionary-capacity codes (`encode_dict_cap`, `decode_dict_cap`) |
| `lzmacodec.decoder` | `Decoder`, which decodes a raw LZMA stream into a `lzmacodec.decoderdict.DecoderDict` |
| `lzmacodec.rangecoder` | `RangeEncoder`, `RangeDecoder`, `LimitedByteWriter` and `ByteReader` |
| `lzmacodec.treecodecs` | `TreeCodec`, `TreeReverseCodec` and `DirectCodec` |
| `lzmacodec.lengthcodec` | codec for match lengths |
| `lzmacodec.literalcodec` | codec for literals |
| `lzmacodec.distcodec` | codec for match distances |
| `lzmacodec.state` | the coder state |
| `lzmacodec.buffer` | `RingBuffer`, the circular byte buffer behind both dictionaries |
| `lzmacodec.hashtable` | the `HashTable` match finder |
| `lzmacodec.bintree` | the `BinTree` match finder |

## Errors

Problems in compressed data, headers and configuration raise
`lzmacodec.properties.LZMAError` or one of its subclasses:

* `LimitError`
* `NoSpaceError`
* `DictSizeError`

Invalid arguments to the low-level codecs raise `ValueError`.

## What the package does not do

* There is no high-level writer that produces complete headered files or
  LZMA2 chunk sequences. You combine `Header` and `Encoder` yourself, as
  shown above.
* Nothing encodes LZMA2 chunks.
* The `.xz` container format is not supported.
* There is no command-line tool.