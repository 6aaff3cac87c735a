"""
Byte pair merging - reduce a chunk to vocabulary pieces.

A chunk that is not itself a vocabulary member is split at every byte
boundary, then adjacent spans are merged greedily, lowest rank first, until
no adjacent pair forms a known piece.

Boundary buffers are recycled through a BoundaryPool. Each buffer is checked
out by exactly one merge call and returned when that call finishes.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..exceptions import TokenizerError
from .vocabulary import Vocabulary

# Merge score for a pair that is not a vocabulary piece.
UNRANKED = sys.maxsize

# Buffers holding more boundaries than this are dropped instead of pooled.
MAX_POOLED_BOUNDARIES = 1024


class Boundaries:
    """
    Scratch storage for one merge call.

    ``offsets[i]`` is the byte offset where span ``i`` starts and
    ``scores[i]`` is the rank of merging span ``i`` with span ``i + 1``.
    """

    __slots__ = ("offsets", "scores")

    def __init__(self) -> None:
        self.offsets: list[int] = []
        self.scores: list[int] = []

    def reset(self, size: int) -> None:
        self.offsets[:] = range(size)
        self.scores[:] = [UNRANKED] * size

    def __len__(self) -> int:
        return len(self.offsets)


class BoundaryPool:
    """
    Thread-safe pool of reusable Boundaries buffers.

    Args:
        max_idle: Maximum number of idle buffers kept for reuse.
        max_boundaries: Buffers that grew past this size are discarded on
            return rather than pooled.
    """

    def __init__(self, max_idle: int = 64, max_boundaries: int = MAX_POOLED_BOUNDARIES):
        self._lock = threading.Lock()
        self._idle: list[Boundaries] = []
        self._max_idle = max_idle
        self._max_boundaries = max_boundaries

    @contextmanager
    def checkout(self, size: int) -> Iterator[Boundaries]:
        """Lend a buffer holding ``size`` boundaries for the duration of the block."""
        with self._lock:
            buf = self._idle.pop() if self._idle else None
        if buf is None:
            buf = Boundaries()
        buf.reset(size)
        try:
            yield buf
        finally:
            if size <= self._max_boundaries:
                with self._lock:
                    if len(self._idle) < self._max_idle:
                        self._idle.append(buf)

    @property
    def idle(self) -> int:
        """Number of buffers waiting for reuse."""
        with self._lock:
            return len(self._idle)


class BytePairMerger:
    """
    Greedy byte pair merge over a fixed vocabulary.

    The result is a pure function of the chunk bytes and the vocabulary. When
    several adjacent pairs share the lowest rank, the leftmost one merges first.

    Example:
        >>> vocab = Vocabulary({b"a": 0, b"b": 1, b"c": 2, b"ab": 3, b"abc": 4})
        >>> BytePairMerger(vocab).merge(b"abc")
        [(4, b'abc')]
    """

    __slots__ = ("_vocab", "_pool")

    def __init__(self, vocabulary: Vocabulary, *, pool: BoundaryPool | None = None):
        self._vocab = vocabulary
        self._pool = pool if pool is not None else BoundaryPool()

    @property
    def pool(self) -> BoundaryPool:
        return self._pool

    def _score(self, piece: bytes, offsets: list[int], i: int) -> int:
        # Rank of the piece formed by spans i and i + 1 combined.
        if i + 2 < len(offsets):
            rank = self._vocab.lookup(piece[offsets[i] : offsets[i + 2]])
            if rank is not None:
                return rank
        return UNRANKED

    def _split(self, piece: bytes) -> list[bytes]:
        if not piece:
            return []
        with self._pool.checkout(len(piece) + 1) as buf:
            offsets, scores = buf.offsets, buf.scores
            for i in range(len(offsets) - 2):
                scores[i] = self._score(piece, offsets, i)

            while len(offsets) > 2:
                best = min(scores[:-1])
                if best == UNRANKED:
                    break
                i = scores.index(best)

                del offsets[i + 1]
                del scores[i + 1]
                scores[i] = self._score(piece, offsets, i)
                if i > 0:
                    scores[i - 1] = self._score(piece, offsets, i - 1)

            return [piece[offsets[i] : offsets[i + 1]] for i in range(len(offsets) - 1)]

    def merge(self, piece: bytes) -> list[tuple[int, bytes]]:
        """
        Split ``piece`` into ``(rank, sub_piece)`` pairs.

        Concatenating the sub-pieces reproduces ``piece`` exactly. An empty
        piece yields an empty list.

        Raises
        ------
            TokenizerError: If a final span is not in the vocabulary. This only
                happens with a vocabulary that lacks single-byte coverage.
        """
        out = []
        for span in self._split(piece):
            rank = self._vocab.lookup(span)
            if rank is None:
                raise TokenizerError(
                    f"No rank for piece {span!r}",
                    code="UNRANKED_PIECE",
                    details={"piece": span},
                )
            out.append((rank, span))
        return out

    def merge_ranks(self, piece: bytes) -> list[int]:
        """Return only the ranks from :meth:`merge`."""
        return [rank for rank, _ in self.merge(piece)]

    def count(self, piece: bytes) -> int:
        """Number of tokens :meth:`merge` would produce for ``piece``."""
        return len(self.merge(piece))
