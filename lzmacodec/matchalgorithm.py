"""Selection of the algorithm that finds matches in the dictionary."""

from __future__ import annotations

import enum
from typing import Union

from .bintree import BinTree
from .hashtable import HashTable
from .properties import LZMAError

__all__ = ["MatchAlgorithm"]

_MSG_UNSUPPORTED = "lzma: unsupported match algorithm value"


class MatchAlgorithm(enum.IntEnum):
    """Algorithm used to find matches."""

    HASH_TABLE4 = 0
    BINARY_TREE = 1

    def __str__(self) -> str:
        return _NAMES.get(self, "unknown")

    def verify(self) -> None:
        """Raise LZMAError if the algorithm is not supported."""
        if self not in _NAMES:
            raise LZMAError(_MSG_UNSUPPORTED)

    def new(self, dict_cap: int) -> Union[HashTable, BinTree]:
        """Create a matcher for a dictionary of the given capacity."""
        if self is MatchAlgorithm.HASH_TABLE4:
            return HashTable(dict_cap, 4)
        if self is MatchAlgorithm.BINARY_TREE:
            return BinTree(dict_cap)
        raise LZMAError(_MSG_UNSUPPORTED)


_NAMES = {
    MatchAlgorithm.HASH_TABLE4: "HashTable4",
    MatchAlgorithm.BINARY_TREE: "BinaryTree",
}