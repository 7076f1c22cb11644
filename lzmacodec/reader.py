"""Reader for the classic LZMA format."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from .decoder import Decoder
from .decoderdict import MAX_DICT_CAP, MIN_DICT_CAP, DecoderDict
from .header import HEADER_LEN, Header
from .properties import LZMAError
from .rangecoder import ByteReader
from .state import State

__all__ = ["ReaderConfig", "DictSizeError", "Reader", "MAX_STREAM_SIZE"]

# Streams larger than a pebibyte are not supported.
MAX_STREAM_SIZE = 1 << 50

# Default upper limit of the dictionary capacity: 2 GiB minus one byte.
_DEFAULT_DICT_CAP = (1 << 31) - 1


@dataclass
class ReaderConfig:
    """Parameters for reading classic LZMA streams.

    dict_cap limits the dictionary size accepted from a header; zero
    selects the default of 2^31-1.
    """

    dict_cap: int = 0

    def verify(self) -> None:
        """Replace zero values by defaults and check the configuration."""
        if self.dict_cap == 0:
            self.dict_cap = _DEFAULT_DICT_CAP
        if not MIN_DICT_CAP <= self.dict_cap <= MAX_DICT_CAP:
            raise LZMAError("lzma: dictionary capacity is out of range")

    def new_reader(self, stream) -> "Reader":
        """Create a reader for the stream using this configuration."""
        return Reader(stream, self)


class DictSizeError(LZMAError):
    """The dictionary size in the header exceeds the configured capacity."""

    def __init__(self, config_dict_cap: int, header_dict_size: int, message: str) -> None:
        super().__init__(message)
        self.config_dict_cap = config_dict_cap
        self.header_dict_size = header_dict_size
        self.message = message


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


class Reader:
    """Reads uncompressed data from a classic LZMA stream.

    The header is read and checked on construction. The dictionary never
    exceeds the header's dictionary size (at least the minimum capacity)
    nor a known uncompressed size.
    """

    def __init__(self, stream, config: Optional[ReaderConfig] = None) -> None:
        config = ReaderConfig() if config is None else dataclasses.replace(config)
        config.verify()

        data = _read_full(stream, HEADER_LEN)
        if len(data) < HEADER_LEN:
            raise LZMAError("lzma: unexpected EOF")
        self._header = Header.unmarshal(data)
        self._header_orig = dataclasses.replace(self._header)
        self._decoder: Optional[Decoder] = None

        dict_size = self._header.dict_size
        if config.dict_cap < dict_size:
            raise DictSizeError(
                config.dict_cap,
                dict_size,
                f"lzma: header dictionary size {dict_size} exceeds "
                f"configured dictionary capacity {config.dict_cap}",
            )
        dict_size = max(dict_size, MIN_DICT_CAP)
        size = self._header.size
        if 0 <= size < dict_size:
            dict_size = size
        if size > MAX_STREAM_SIZE:
            raise LZMAError(f"lzma: stream size {size} exceeds a pebibyte (1024^5)")
        dict_size = max(dict_size, MIN_DICT_CAP)
        self._header.dict_size = dict_size

        state = State(self._header.properties)
        dictionary = DecoderDict(dict_size)
        byte_reader = stream if hasattr(stream, "read_byte") else ByteReader(stream)
        try:
            self._decoder = Decoder(byte_reader, state, dictionary, self._header.size)
        except EOFError as exc:
            raise LZMAError("lzma: unexpected EOF") from exc

    def header(self) -> tuple[Header, bool]:
        """Return the header as read from the stream and whether it is valid."""
        return dataclasses.replace(self._header_orig), self._decoder is not None

    def eos_marker(self) -> bool:
        """Return whether an end-of-stream marker has been encountered."""
        return self._decoder.eos_marker

    def read(self, size: int = -1) -> bytes:
        """Return up to size uncompressed bytes; all if size is negative.

        An empty result marks the end of the stream.
        """
        return self._decoder.read(size)