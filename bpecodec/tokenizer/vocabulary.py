"""
Vocabulary table - immutable piece/rank mapping.

Maps byte pieces to ranks (forward) and ranks back to pieces (reverse).
Ranks double as token IDs. Both directions are built once in the
constructor, so a Vocabulary can be shared across threads without locking.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from ..exceptions import VocabularyError


class Vocabulary:
    """
    Immutable mapping from byte pieces to unique non-negative ranks.

    Args:
        ranks: Mapping of piece (``bytes``) to rank (``int``). Copied on
            construction; later changes to the source mapping are not seen.
        require_byte_coverage: If True, every single byte value 0-255 must be
            present as a one-byte piece. This guarantees that byte pair merging
            always resolves a chunk to known pieces.

    Raises
    ------
        VocabularyError: If a piece is empty or not bytes, a rank is negative,
            two pieces share a rank, or byte coverage is required but missing.

    Example:
        >>> vocab = Vocabulary({b"a": 0, b"b": 1, b"ab": 2})
        >>> vocab.lookup(b"ab")
        2
        >>> vocab.reverse_lookup(1)
        b'b'
    """

    __slots__ = ("_ranks", "_pieces", "_max_rank")

    def __init__(self, ranks: Mapping[bytes, int], *, require_byte_coverage: bool = False):
        forward: dict[bytes, int] = {}
        reverse: dict[int, bytes] = {}
        for piece, rank in ranks.items():
            if not isinstance(piece, bytes):
                raise VocabularyError(
                    f"Vocabulary pieces must be bytes, got {type(piece).__name__}",
                    code="INVALID_PIECE",
                    details={"piece": repr(piece)},
                )
            if not piece:
                raise VocabularyError("Vocabulary pieces must be non-empty", code="EMPTY_PIECE")
            if not isinstance(rank, int) or isinstance(rank, bool) or rank < 0:
                raise VocabularyError(
                    f"Invalid rank {rank!r} for piece {piece!r}",
                    code="INVALID_RANK",
                    details={"piece": piece, "rank": rank},
                )
            if rank in reverse:
                raise VocabularyError(
                    f"Rank {rank} is assigned to both {reverse[rank]!r} and {piece!r}",
                    code="DUPLICATE_RANK",
                    details={"rank": rank, "pieces": [reverse[rank], piece]},
                )
            forward[piece] = rank
            reverse[rank] = piece

        if require_byte_coverage:
            missing = [b for b in range(256) if bytes((b,)) not in forward]
            if missing:
                raise VocabularyError(
                    f"Vocabulary is missing {len(missing)} single-byte pieces",
                    code="MISSING_BYTES",
                    details={"missing": missing[:16]},
                )

        self._ranks = forward
        self._pieces = reverse
        self._max_rank = max(reverse) if reverse else -1

    def lookup(self, piece: bytes) -> int | None:
        """Return the rank of ``piece``, or None if it is not a member."""
        return self._ranks.get(piece)

    def reverse_lookup(self, rank: int) -> bytes | None:
        """Return the piece with ``rank``, or None if no piece has it."""
        return self._pieces.get(rank)

    @property
    def ranks(self) -> Mapping[bytes, int]:
        """Read-only view of the piece-to-rank table."""
        return MappingProxyType(self._ranks)

    @property
    def max_rank(self) -> int:
        """Largest rank in the table, or -1 for an empty vocabulary."""
        return self._max_rank

    def __contains__(self, piece: object) -> bool:
        return piece in self._ranks

    def __len__(self) -> int:
        return len(self._ranks)

    def __iter__(self) -> Iterator[bytes]:
        """Iterate pieces in rank order."""
        for rank in sorted(self._pieces):
            yield self._pieces[rank]

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self._ranks)}, max_rank={self._max_rank})"
