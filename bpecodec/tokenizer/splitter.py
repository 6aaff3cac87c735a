"""
Pre-tokenization - split text into chunks before byte pair merging.

The split grammar is a regular expression with Unicode property classes,
possessive quantifiers and lookahead, so it is compiled with the ``regex``
module rather than ``re``.
"""

from __future__ import annotations

from collections.abc import Iterator

import regex

from ..exceptions import MatchError, ValidationError

# GPT-2 family grammar (r50k_base, p50k_base, p50k_edit).
R50K_PATTERN = r"""'(?:[sdmt]|ll|ve|re)| ?\p{L}+| ?\p{N}+| ?[^\s\p{L}\p{N}]+|\s+(?!\S)|\s+"""

# cl100k_base grammar: case-insensitive contractions, digit runs capped at 3,
# punctuation absorbs trailing newlines.
CL100K_PATTERN = (
    r"""'(?i:[sdmt]|ll|ve|re)|[^\r\n\p{L}\p{N}]?+\p{L}+|\p{N}{1,3}| ?[^\s\p{L}\p{N}]++[\r\n]*"""
    r"""|\s*[\r\n]|\s+(?!\S)|\s+"""
)


class Splitter:
    """
    Partition text into an ordered, gap-free sequence of chunks.

    Args:
        pattern: Split grammar. Every character of the input must be covered
            by exactly one match.
        timeout: Optional per-scan time limit in seconds, passed to the regex
            engine. Exceeding it raises MatchError.

    Raises
    ------
        ValidationError: If the pattern does not compile.

    Example:
        >>> splitter = Splitter(R50K_PATTERN)
        >>> list(splitter.split("Hello world's"))
        ['Hello', ' world', "'s"]
    """

    __slots__ = ("_pattern", "_timeout")

    def __init__(self, pattern: str, *, timeout: float | None = None):
        try:
            self._pattern = regex.compile(pattern)
        except regex.error as e:
            raise ValidationError(
                f"Invalid split pattern: {e}",
                code="INVALID_PATTERN",
                details={"pattern": pattern},
            ) from e
        self._timeout = timeout

    @property
    def pattern(self) -> str:
        """The grammar source string."""
        return self._pattern.pattern

    def spans(self, text: str) -> Iterator[tuple[int, int]]:
        """
        Yield ``(start, end)`` character offsets of each chunk in order.

        Raises
        ------
            MatchError: If the regex engine fails or times out, or the grammar
                leaves part of the input uncovered.
        """
        pos = 0
        try:
            for match in self._pattern.finditer(text, timeout=self._timeout):
                start, end = match.span()
                if start == end:
                    continue
                if start != pos:
                    raise MatchError(
                        f"Split pattern left {text[pos:start]!r} uncovered at offset {pos}",
                        code="SPLIT_GAP",
                        details={"offset": pos},
                    )
                yield start, end
                pos = end
        except (TimeoutError, regex.error) as e:
            raise MatchError(f"Error matching input: {e}", details={"offset": pos}) from e
        if pos != len(text):
            raise MatchError(
                f"Split pattern left {text[pos:]!r} uncovered at offset {pos}",
                code="SPLIT_GAP",
                details={"offset": pos},
            )

    def split(self, text: str) -> Iterator[str]:
        """Yield chunks of ``text`` in left-to-right order."""
        for start, end in self.spans(text):
            yield text[start:end]

    def __repr__(self) -> str:
        return f"Splitter({self._pattern.pattern!r})"
