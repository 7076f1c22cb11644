"""Dictionary operations: matches and literals."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Match", "Lit"]


@dataclass(frozen=True)
class Match:
    """A repetition of n bytes at the given distance."""

    distance: int
    n: int

    def __len__(self) -> int:
        return self.n

    def __str__(self) -> str:
        return f"M{{{self.distance},{self.n}}}"


@dataclass(frozen=True)
class Lit:
    """A single literal byte."""

    b: int

    def __len__(self) -> int:
        return 1

    def __str__(self) -> str:
        c = chr(self.b)
        if not c.isprintable():
            c = "."
        return f"L{{{c}/{self.b:02x}}}"