"""Hash table matcher that finds earlier occurrences of short words."""

from __future__ import annotations

from typing import Union

from .bitops import nlz32
from .distcodec import MIN_DISTANCE
from .lengthcodec import MAX_MATCH_LEN
from .operation import Lit, Match
from .properties import LZMAError

__all__ = [
    "HashTable",
    "hash_table_exponent",
    "MAX_MATCHES",
    "SHORT_DISTS",
    "MIN_TABLE_EXPONENT",
    "MAX_TABLE_EXPONENT",
]

# Limits the number of positions taken from a hash chain.
MAX_MATCHES = 16

# Short distances that are always checked.
SHORT_DISTS = 8

MIN_TABLE_EXPONENT = 9
MAX_TABLE_EXPONENT = 20

_MASK32 = 0xFFFFFFFF


def hash_table_exponent(n: int) -> int:
    """Return the exponent of the hash table size for a dictionary capacity."""
    e = 30 - nlz32(n)
    return max(MIN_TABLE_EXPONENT, min(MAX_TABLE_EXPONENT, e))


def _word_hash(word: int) -> int:
    """Fold the bits of a word of up to four bytes into its low bits."""
    return word ^ (word >> 9) ^ (word >> 18) ^ (word >> 27)


class HashTable:
    """Chained hash table over the words at each position of the data.

    The chain is kept in a circular buffer; each entry holds the distance
    to the previous position whose word has the same hash, or zero.
    """

    def __init__(self, capacity: int, word_len: int) -> None:
        if capacity <= 0:
            raise LZMAError("hashTable: capacity must be larger than zero")
        if not 1 <= word_len <= 4:
            raise LZMAError("hashTable: argument word_len out of range")
        exp = hash_table_exponent(capacity & _MASK32)
        self.table = [0] * (1 << exp)
        self.chain = [0] * capacity
        self.front = 0
        self.mask = (1 << exp) - 1
        self.hoff = -word_len
        self.word_len = word_len
        self._word = 0
        self._word_mask = (1 << (8 * word_len)) - 1
        self.dict = None

    def set_dict(self, d) -> None:
        """Attach the encoder dictionary."""
        self.dict = d

    def _buffered(self) -> int:
        n = self.hoff + 1
        if n <= 0:
            return 0
        return min(n, len(self.chain))

    def _add_index(self, i: int, n: int) -> int:
        i += n - len(self.chain)
        if i < 0:
            i += len(self.chain)
        return i

    def _put_delta(self, delta: int) -> None:
        self.chain[self.front] = delta
        self.front = self._add_index(self.front, 1)

    def _put_entry(self, h: int, pos: int) -> None:
        if pos < 0:
            return
        i = h & self.mask
        old = self.table[i] - 1
        self.table[i] = pos + 1
        delta = 0
        if old >= 0:
            delta = pos - old
            if delta > _MASK32 or delta > self._buffered():
                delta = 0
        self._put_delta(delta)

    def write_byte(self, b: int) -> None:
        """Hash the word ending with byte b and record its position."""
        self._word = ((self._word << 8) | (b & 0xFF)) & self._word_mask
        self.hoff += 1
        self._put_entry(_word_hash(self._word), self.hoff)

    def write(self, data) -> int:
        """Record the positions of all words in data and return its length."""
        for b in data:
            self.write_byte(b)
        return len(data)

    def _get_matches(self, h: int, max_matches: int) -> list[int]:
        positions: list[int] = []
        if self.hoff < 0 or max_matches <= 0:
            return positions
        size = len(self.chain)
        buffered = self._buffered()
        tail_pos = self.hoff + 1 - buffered
        rear = self.front - buffered
        if rear >= 0:
            rear -= size
        delta = self.table[h & self.mask] - 1 - tail_pos
        while delta >= 0:
            positions.append(tail_pos + delta)
            if len(positions) >= max_matches:
                break
            i = rear + delta
            if i < 0:
                i += size
            u = self.chain[i]
            if u == 0:
                break
            delta -= u
        return positions

    def matches(self, p, max_matches: int = MAX_MATCHES) -> list[int]:
        """Return up to max_matches positions, newest first, whose word hashes like p.

        p must have the word length of the table.
        """
        if len(p) != self.word_len:
            raise ValueError(f"byte slice must have length {self.word_len}")
        word = int.from_bytes(bytes(p), "big")
        return self._get_matches(_word_hash(word), max_matches)

    def next_op(self, rep) -> Union[Match, Lit]:
        """Return the next operation for the data at the dictionary head."""
        d = self.dict
        buf = d.buf
        data = buf.peek(MAX_MATCH_LEN)
        if len(data) >= self.word_len:
            positions = self.matches(data[: self.word_len])
        else:
            positions = []

        head = d.head
        dists = list(range(1, SHORT_DISTS + 1))
        dists.extend(head - pos for pos in positions if head - pos > SHORT_DISTS)

        best_dist = best_n = 0
        dict_len = d.dict_len()
        size = len(buf.data)
        for dist in dists:
            if dist > dict_len:
                continue
            # Only a longer match is of interest, so first test the byte
            # that would extend the best match found so far.
            i = buf.rear - dist + best_n
            if i < 0:
                i += size
            elif i >= size:
                i -= size
            if buf.data[i] != data[best_n]:
                continue
            n = buf.match_len(dist, data)
            if n == 0:
                continue
            if n == 1 and ((dist - MIN_DISTANCE) & _MASK32) != rep[0]:
                continue
            if n > best_n:
                best_dist, best_n = dist, n
                if n == len(data):
                    break

        if best_n == 0:
            return Lit(data[0])
        return Match(distance=best_dist, n=best_n)