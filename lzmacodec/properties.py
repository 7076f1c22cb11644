"""LZMA literal and position parameters."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["LZMAError", "Properties", "properties_for_code"]

MIN_LC = 0
MAX_LC = 8
MIN_LP = 0
MAX_LP = 4
MIN_PB = 0
MAX_PB = 4

MAX_PROPERTY_CODE = (MAX_PB + 1) * (MAX_LP + 1) * (MAX_LC + 1) - 1


class LZMAError(Exception):
    """Base error of the LZMA codec."""


@dataclass(frozen=True)
class Properties:
    """Literal context bits (lc), literal position bits (lp), position bits (pb)."""

    lc: int = 0
    lp: int = 0
    pb: int = 0

    def verify(self) -> None:
        """Raise LZMAError if a parameter is out of range."""
        if not MIN_LC <= self.lc <= MAX_LC:
            raise LZMAError("lzma: lc out of range")
        if not MIN_LP <= self.lp <= MAX_LP:
            raise LZMAError("lzma: lp out of range")
        if not MIN_PB <= self.pb <= MAX_PB:
            raise LZMAError("lzma: pb out of range")

    def code(self) -> int:
        """Return the properties code byte."""
        return ((self.pb * 5 + self.lp) * 9 + self.lc) & 0xFF

    def __str__(self) -> str:
        return f"LC {self.lc} LP {self.lp} PB {self.pb}"


def properties_for_code(code: int) -> Properties:
    """Convert a properties code byte into Properties."""
    if not 0 <= code <= MAX_PROPERTY_CODE:
        raise LZMAError("lzma: invalid properties code")
    code, lc = divmod(code, 9)
    pb, lp = divmod(code, 5)
    return Properties(lc=lc, lp=lp, pb=pb % 5)