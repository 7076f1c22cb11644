"""Bit counting helpers."""

__all__ = ["nlz32"]


def nlz32(x: int) -> int:
    """Return the number of leading zero bits of an unsigned 32-bit integer."""
    return 32 - (x & 0xFFFFFFFF).bit_length()