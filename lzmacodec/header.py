"""Header of the classic LZMA file format."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .decoderdict import MAX_DICT_CAP
from .properties import LZMAError, Properties, properties_for_code

__all__ = ["Header", "valid_header", "HEADER_LEN", "NO_HEADER_SIZE"]

# Value of the size field meaning that the size is unknown.
NO_HEADER_SIZE = (1 << 64) - 1

HEADER_LEN = 5


@dataclass
class Header:
    """Properties, dictionary size and uncompressed size (negative if unknown)."""

    properties: Properties = field(default_factory=Properties)
    dict_size: int = 0
    size: int = -1

    def marshal(self) -> bytes:
        """Return the 13-byte header including the uncompressed size field."""
        self.properties.verify()
        if not 0 <= self.dict_size <= MAX_DICT_CAP:
            raise LZMAError(f"lzma: DictCap {self.dict_size} out of range")
        s = self.size if self.size > 0 else NO_HEADER_SIZE
        return struct.pack("<BIQ", self.properties.code(), self.dict_size, s)

    @classmethod
    def unmarshal(cls, data) -> "Header":
        """Parse a header of HEADER_LEN bytes; the size is always unknown."""
        if len(data) != HEADER_LEN:
            raise LZMAError("lzma: header data has wrong length")
        properties = properties_for_code(data[0])
        (dict_size,) = struct.unpack("<I", bytes(data[1:5]))
        return cls(properties=properties, dict_size=dict_size, size=-1)


def _valid_dict_size(dict_cap: int) -> bool:
    if dict_cap == MAX_DICT_CAP:
        return True
    return any(
        dict_cap in (1 << n, (1 << n) + (1 << (n - 1))) for n in range(10, 32)
    )


def valid_header(data) -> bool:
    """Check for a plausible LZMA header of HEADER_LEN bytes.

    Only dictionary sizes 2^n or 2^n+2^(n-1) with n >= 10, or 2^32-1, are
    accepted; a given size must not exceed 256 GiB.
    """
    try:
        h = Header.unmarshal(data)
    except LZMAError:
        return False
    if not _valid_dict_size(h.dict_size):
        return False
    return h.size < 0 or h.size <= 1 << 38