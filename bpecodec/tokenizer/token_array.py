"""
Encode results: TokenArray and TokenOffset.

``Codec.encode`` returns a TokenArray. It behaves as an immutable sequence
of ids and additionally remembers which bytes each id stands for, so callers
can map tokens back onto the source text without re-encoding.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from itertools import accumulate
from typing import NamedTuple, overload


class TokenOffset(NamedTuple):
    """
    ``[start, end)`` byte range of one token in the UTF-8 source.

    A plain named tuple, so it unpacks and compares like ``(start, end)``.
    The indices count bytes; index a ``str`` through :meth:`slice`.

        >>> TokenOffset(6, 11).slice("hello world")
        'world'
    """

    start: int
    end: int

    def slice(self, text: str | bytes, errors: str = "strict") -> str:
        """
        Return the covered span of ``text`` as a string.

        A byte-level token can end inside a multi-byte character; pass
        ``errors="replace"`` to get U+FFFD instead of ``UnicodeDecodeError``.
        """
        data = text.encode("utf-8") if isinstance(text, str) else text
        return data[self.start : self.end].decode("utf-8", errors=errors)

    def __repr__(self) -> str:
        return f"({self.start}, {self.end})"


def _spans(pieces: Sequence[bytes]) -> tuple[TokenOffset, ...]:
    ends = list(accumulate(len(p) for p in pieces))
    return tuple(TokenOffset(end - len(p), end) for p, end in zip(pieces, ends))


class TokenArray(Sequence[int]):
    """
    Token ids from one encode call, with their byte pieces and offsets.

    Equality and hashing look at the ids only, so a TokenArray compares
    equal to a list or tuple holding the same ids. Slicing keeps ids,
    pieces and offsets aligned.

        >>> tokens = codec.encode("hello world")
        >>> tokens.tolist(), tokens.tokens
        ([15339, 1917], ['hello', ' world'])
        >>> tokens.offsets[1].slice("hello world")
        ' world'
    """

    __slots__ = ("_ids", "_pieces", "_offsets")

    def __init__(
        self,
        ids: Iterable[int] = (),
        pieces: Iterable[bytes] = (),
        offsets: Iterable[TokenOffset] | None = None,
    ) -> None:
        self._ids = tuple(ids)
        self._pieces = tuple(pieces)
        self._offsets = _spans(self._pieces) if offsets is None else tuple(offsets)

    def __len__(self) -> int:
        return len(self._ids)

    @overload
    def __getitem__(self, idx: int) -> int: ...

    @overload
    def __getitem__(self, idx: slice) -> TokenArray: ...

    def __getitem__(self, idx: int | slice) -> int | TokenArray:
        if isinstance(idx, slice):
            return TokenArray(self._ids[idx], self._pieces[idx], self._offsets[idx])
        return self._ids[idx]

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def tolist(self) -> list[int]:
        return list(self._ids)

    @property
    def ids(self) -> tuple[int, ...]:
        return self._ids

    @property
    def pieces(self) -> tuple[bytes, ...]:
        """Bytes behind each id; joined, they give the encoded text."""
        return self._pieces

    @property
    def tokens(self) -> list[str]:
        """Pieces as text. Partial characters come out as U+FFFD."""
        return [p.decode("utf-8", errors="replace") for p in self._pieces]

    @property
    def offsets(self) -> list[TokenOffset]:
        return list(self._offsets)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenArray):
            return self._ids == other._ids
        if isinstance(other, (list, tuple)):
            return self._ids == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:
        ids = self._ids
        if len(ids) > 10:
            shown = ", ".join(map(str, ids[:5])) + ", ..., " + ", ".join(map(str, ids[-3:]))
        else:
            shown = ", ".join(map(str, ids))
        return f"TokenArray([{shown}], len={len(ids)})"
