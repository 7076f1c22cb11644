"""Reader for LZMA2 chunk sequences."""

from __future__ import annotations

import dataclasses
import logging
import sys
from dataclasses import dataclass
from typing import Optional, Union

from .decoder import Decoder
from .decoderdict import MAX_DICT_CAP, MIN_DICT_CAP, DecoderDict
from .header2 import ChunkState, ChunkType, read_chunk_header
from .properties import LZMAError
from .rangecoder import ByteReader
from .state import State

__all__ = ["Reader2Config", "Reader2", "UncompressedReader"]

_log = logging.getLogger(__name__)

_DEFAULT_DICT_CAP = 8 * 1024 * 1024

_MSG_UNEXPECTED_EOF = "lzma: unexpected end of LZMA2 data"


class _LimitedReader:
    """Reads at most a fixed number of bytes from a stream."""

    def __init__(self, stream, remaining: int) -> None:
        self.stream = stream
        self.remaining = remaining

    def read(self, n: int = -1) -> bytes:
        if self.remaining <= 0:
            return b""
        if n < 0 or n > self.remaining:
            n = self.remaining
        data = self.stream.read(n)
        self.remaining -= len(data)
        return data


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


@dataclass
class Reader2Config:
    """Parameters for reading LZMA2 chunk sequences.

    A dict_cap of zero selects the default of 8 MiB.
    """

    dict_cap: int = 0

    def verify(self) -> None:
        """Replace zero values by defaults and check the configuration."""
        if self.dict_cap == 0:
            self.dict_cap = _DEFAULT_DICT_CAP
        if not MIN_DICT_CAP <= self.dict_cap <= MAX_DICT_CAP:
            raise LZMAError("lzma: dictionary capacity is out of range")

    def new_reader2(self, stream) -> "Reader2":
        """Create an LZMA2 reader for the stream using this configuration."""
        return Reader2(stream, self)


class UncompressedReader:
    """Reads the data of an uncompressed chunk through the dictionary."""

    def __init__(self, stream, dictionary: DecoderDict, size: int) -> None:
        self.dictionary = dictionary
        self._lr = _LimitedReader(stream, size)
        self._eof = False
        self._err: Optional[Exception] = None

    def reopen(self, stream, size: int) -> None:
        """Start reading a new uncompressed chunk of the given size."""
        self._err = None
        self._eof = False
        self._lr = _LimitedReader(stream, size)

    def _fill(self) -> bool:
        """Copy chunk data into the dictionary; return False at the chunk end."""
        if not self._eof:
            want = self.dictionary.available()
            data = _read_full(self._lr, want)
            if data:
                self.dictionary.write(data)
            if len(data) == want:
                return True
            self._eof = True
            if data:
                return True
        if self._lr.remaining != 0:
            raise LZMAError(_MSG_UNEXPECTED_EOF)
        return False

    def read(self, size: int = -1) -> bytes:
        """Return up to size bytes of the chunk, all remaining if size is negative.

        An empty result marks the end of the chunk.
        """
        if self._err is not None:
            raise self._err
        chunks = []
        n = 0
        while True:
            want = sys.maxsize if size < 0 else size - n
            chunk = self.dictionary.read(want)
            if chunk:
                chunks.append(chunk)
                n += len(chunk)
            if 0 <= size <= n:
                break
            try:
                if not self._fill():
                    break
            except LZMAError as exc:
                self._err = exc
                if chunks:
                    break
                raise
        return b"".join(chunks)


class Reader2:
    """Reads uncompressed data from an LZMA2 chunk sequence.

    The first chunk should reset the dictionary and the first compressed
    chunk should set the properties.
    """

    def __init__(self, stream, config: Optional[Reader2Config] = None) -> None:
        config = Reader2Config() if config is None else dataclasses.replace(config)
        config.verify()
        self._stream = stream
        self._err: Optional[Exception] = None
        self._cstate = ChunkState.START
        self._dict = DecoderDict(config.dict_cap)
        self._ur: Optional[UncompressedReader] = None
        self._decoder: Optional[Decoder] = None
        self._chunk_reader: Optional[Union[Decoder, UncompressedReader]] = None
        try:
            self._start_chunk()
        except (LZMAError, EOFError) as exc:
            self._err = exc

    def _start_chunk(self) -> None:
        """Parse the next chunk header and prepare its reader."""
        self._chunk_reader = None
        try:
            header = read_chunk_header(self._stream)
        except EOFError as exc:
            raise LZMAError(_MSG_UNEXPECTED_EOF) from exc
        _log.debug("chunk header %s", header)
        self._cstate = self._cstate.next(header.ctype)
        if self._cstate is ChunkState.STOP:
            return
        if header.ctype in (ChunkType.UD, ChunkType.LRND):
            self._dict.reset()
        size = header.uncompressed + 1
        if header.ctype in (ChunkType.U, ChunkType.UD):
            if self._ur is not None:
                self._ur.reopen(self._stream, size)
            else:
                self._ur = UncompressedReader(self._stream, self._dict, size)
            self._chunk_reader = self._ur
            return
        br = ByteReader(_LimitedReader(self._stream, header.compressed + 1))
        try:
            if self._decoder is None:
                state = State(header.props)
                self._decoder = Decoder(br, state, self._dict, size)
            else:
                if header.ctype == ChunkType.LR:
                    self._decoder.state.reset()
                elif header.ctype in (ChunkType.LRN, ChunkType.LRND):
                    self._decoder.state = State(header.props)
                self._decoder.reopen(br, size)
        except EOFError as exc:
            raise LZMAError(_MSG_UNEXPECTED_EOF) from exc
        self._chunk_reader = self._decoder

    def read(self, size: int = -1) -> bytes:
        """Return up to size uncompressed bytes; all if size is negative.

        An empty result marks the end of the sequence. If an error occurs
        after data has been read, the data is returned and the error is
        raised by the next call.
        """
        if self._err is not None:
            raise self._err
        chunks = []
        n = 0
        while self._chunk_reader is not None and (size < 0 or n < size):
            try:
                chunk = self._chunk_reader.read(-1 if size < 0 else size - n)
                if not chunk:
                    self._start_chunk()
                    continue
            except (LZMAError, EOFError) as exc:
                self._err = exc
                if chunks:
                    break
                raise
            chunks.append(chunk)
            n += len(chunk)
        return b"".join(chunks)

    def eos(self) -> bool:
        """Return whether an end-of-stream chunk has terminated the sequence."""
        return self._cstate is ChunkState.STOP