"""Binary search tree over 4-byte words for finding matches."""

from __future__ import annotations

import unicodedata
from typing import Iterable, Iterator, Optional, Union

from .distcodec import MIN_DISTANCE
from .lengthcodec import MAX_MATCH_LEN
from .operation import Lit, Match
from .properties import LZMAError

__all__ = ["BinTree", "xval", "dump_x", "NULL", "WORD_LEN"]

# Index of a nonexistent node.
NULL = (1 << 32) - 1

# Number of bytes represented by a node value.
WORD_LEN = 4

_MASK32 = 0xFFFFFFFF


class _Node:
    __slots__ = ("x", "p", "l", "r")

    def __init__(self) -> None:
        self.x = 0
        self.p = NULL
        self.l = NULL
        self.r = NULL


def xval(a) -> int:
    """Return the first four bytes of a as a big-endian integer, zero padded."""
    return int.from_bytes(bytes(a[:4]).ljust(4, b"\0"), "big")


def _is_graphic(ch: str) -> bool:
    cat = unicodedata.category(ch)
    return cat[0] in "LMNPS" or cat == "Zs"


def dump_x(x: int) -> str:
    """Return a four-character representation of x with '.' for non-graphic bytes."""
    chars = (chr((x >> shift) & 0xFF) for shift in (24, 16, 8, 0))
    return "".join(c if _is_graphic(c) else "." for c in chars)


class BinTree:
    """Matcher keeping the words of the recent data in a binary tree.

    Nodes are identified by their index in a ring of capacity entries;
    the capacity limits the distance of the matches found.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise LZMAError("binTree: capacity must be larger than zero")
        if capacity >= NULL:
            raise LZMAError("binTree: capacity must be less than 2^32-1")
        self.nodes = [_Node() for _ in range(capacity)]
        self.hoff = -WORD_LEN
        self.front = 0
        self.root = NULL
        self.x = 0
        self.dict = None
        self._data = b""

    def set_dict(self, d) -> None:
        """Attach the encoder dictionary."""
        self.dict = d

    def write_byte(self, c: int) -> None:
        """Feed one byte into the tree."""
        self.x = ((self.x << 8) | (c & 0xFF)) & _MASK32
        self.hoff += 1
        if self.hoff < 0:
            return
        v = self.front
        if v < self.hoff:
            self._remove(v)
        self.nodes[v].x = self.x
        self._add(v)
        self.front += 1
        if self.front >= len(self.nodes):
            self.front = 0

    def write(self, data) -> int:
        """Feed bytes into the tree and return their count."""
        for c in data:
            self.write_byte(c)
        return len(data)

    def _add(self, v: int) -> None:
        nodes = self.nodes
        vn = nodes[v]
        vn.l = vn.r = NULL
        if self.root == NULL:
            self.root = v
            vn.p = NULL
            return
        x = vn.x
        p = self.root
        while True:
            pn = nodes[p]
            if x <= pn.x:
                if pn.l == NULL:
                    pn.l = v
                    vn.p = p
                    return
                p = pn.l
            else:
                if pn.r == NULL:
                    pn.r = v
                    vn.p = p
                    return
                p = pn.r

    def _set_child(self, p: int, v: int, new: int) -> None:
        """Replace the link to v in its parent p (or the root) by new."""
        if p == NULL:
            self.root = new
        elif self.nodes[p].l == v:
            self.nodes[p].l = new
        else:
            self.nodes[p].r = new

    def _remove(self, v: int) -> None:
        nodes = self.nodes
        vn = nodes[v]
        p = NULL if self.root == v else vn.p
        l, r = vn.l, vn.r
        if l == NULL:
            self._set_child(p, v, r)
            if r != NULL:
                nodes[r].p = p
            return
        if r == NULL:
            self._set_child(p, v, l)
            nodes[l].p = p
            return

        un = nodes[l]
        if un.r == NULL:
            # The in-order predecessor is l; move it up.
            un.r = r
            nodes[r].p = l
            un.p = p
            self._set_child(p, v, l)
            return
        u = un.r
        while nodes[u].r != NULL:
            u = nodes[u].r
        un = nodes[u]
        ul, up = un.l, un.p
        nodes[up].r = ul
        if ul != NULL:
            nodes[ul].p = up
        un.l, un.r = l, r
        nodes[l].p = u
        nodes[r].p = u
        self._set_child(p, v, u)
        un.p = p

    def search(self, v: int, x: int) -> tuple[int, int]:
        """Search the subtree at v for value x.

        Returns (n, n) for the highest node with value x, otherwise the
        nodes that bracket x, NULL where there is none.
        """
        a = b = NULL
        if v == NULL:
            return a, b
        nodes = self.nodes
        while True:
            vn = nodes[v]
            if x <= vn.x:
                if x == vn.x:
                    return v, v
                b = v
                if vn.l == NULL:
                    return a, b
                v = vn.l
            else:
                a = v
                if vn.r == NULL:
                    return a, b
                v = vn.r

    def maximum(self, v: int) -> int:
        """Return the node with the largest value in the subtree at v."""
        if v == NULL:
            return NULL
        while self.nodes[v].r != NULL:
            v = self.nodes[v].r
        return v

    def minimum(self, v: int) -> int:
        """Return the node with the smallest value in the subtree at v."""
        if v == NULL:
            return NULL
        while self.nodes[v].l != NULL:
            v = self.nodes[v].l
        return v

    def pred(self, v: int) -> int:
        """Return the in-order predecessor of v."""
        if v == NULL:
            return NULL
        u = self.maximum(self.nodes[v].l)
        if u != NULL:
            return u
        while True:
            p = self.nodes[v].p
            if p == NULL:
                return NULL
            if self.nodes[p].r == v:
                return p
            v = p

    def succ(self, v: int) -> int:
        """Return the in-order successor of v."""
        if v == NULL:
            return NULL
        u = self.minimum(self.nodes[v].r)
        if u != NULL:
            return u
        while True:
            p = self.nodes[v].p
            if p == NULL:
                return NULL
            if self.nodes[p].l == v:
                return p
            v = p

    def distance(self, v: int) -> int:
        """Return the distance of node v from the front of the ring."""
        dist = self.front - v
        if dist <= 0:
            dist += len(self.nodes)
        return dist

    def _exact_dists(self, u: int, x: int) -> Iterator[int]:
        while u != NULL:
            dist = self.distance(u)
            a, b = self.search(self.nodes[u].l, x)
            u = a if a == b else NULL
            yield dist

    def _succ_dists(self, v: int) -> Iterator[int]:
        while v != NULL:
            dist = self.distance(v)
            v = self.succ(v)
            yield dist

    def _pred_dists(self, u: int) -> Iterator[int]:
        while u != NULL:
            dist = self.distance(u)
            u = self.pred(u)
            yield dist

    def _match(
        self,
        m: tuple[int, int],
        dists: Iterable[int],
        check: int,
        stop_shorter: bool,
        rep0: int,
    ) -> tuple[tuple[int, int], int, bool]:
        """Try distances; return (best (distance, n), checked, accepted)."""
        buf = self.dict.buf
        data = self._data
        size = len(buf.data)
        checked = 0
        it = iter(dists)
        while True:
            if checked >= check:
                return m, checked, True
            dist = next(it, None)
            if dist is None:
                return m, checked, False
            checked += 1
            m_dist, m_n = m
            if m_n > 0:
                i = buf.rear - dist + m_n - 1
                if i < 0:
                    i += size
                elif i >= size:
                    i -= size
                if buf.data[i] != data[m_n - 1]:
                    if stop_shorter:
                        return m, checked, False
                    continue
            n = buf.match_len(dist, data)
            if n == 0:
                if stop_shorter:
                    return m, checked, False
                continue
            if n == 1 and ((dist - MIN_DISTANCE) & _MASK32) != rep0:
                continue
            if n < m_n or (n == m_n and dist >= m_dist):
                continue
            m = (dist, n)
            if n >= MAX_MATCH_LEN:
                return m, checked, True

    def next_op(self, rep) -> Union[Match, Lit]:
        """Return the next operation for the data at the dictionary head."""
        data = self.dict.buf.peek(MAX_MATCH_LEN)
        if not data:
            raise RuntimeError("no data in buffer")
        self._data = data
        rep0 = rep[0]
        check = 32

        m, checked, accepted = self._match((0, 0), (3, 2, 1), check, False, rep0)
        if not accepted:
            check -= checked
            x = xval(data)
            u, v = self.search(self.root, x)
            if u == v and len(data) == 4:
                m, _, _ = self._match(m, self._exact_dists(u, x), check, False, rep0)
            else:
                m, checked, accepted = self._match(
                    m, self._succ_dists(v), check, True, rep0
                )
                if not accepted:
                    check -= checked
                    m, _, _ = self._match(m, self._pred_dists(u), check, True, rep0)

        dist, n = m
        if n == 0:
            return Lit(data[0])
        return Match(distance=dist, n=n)