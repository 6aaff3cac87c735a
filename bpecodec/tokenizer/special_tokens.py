"""
Special token handling for codecs.

Special tokens (``<|endoftext|>``, FIM markers) have ids outside the ordinary
rank table. They decode like any other token, but are only recognised in
input text when the caller allows them. This is a mixin class used by Codec.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from types import MappingProxyType
from typing import Literal, Union

import regex

from ..exceptions import ValidationError

EOT_TOKEN = "<|endoftext|>"

AllowedSpecial = Union[Literal["all"], Collection[str]]


def special_token_pattern(tokens: Collection[str]) -> regex.Pattern:
    """
    Compile a pattern matching any of ``tokens`` literally.

    Longer tokens are tried first so a token that is a prefix of another
    never shadows it.
    """
    ordered = sorted(tokens, key=len, reverse=True)
    return regex.compile("|".join(regex.escape(t) for t in ordered))


class SpecialTokensMixin:
    """
    Special token properties and methods for Codec.

    Requires the following attributes on the implementing class:
    - _special_tokens: dict[str, int]
    - _special_ids: dict[int, bytes]
    """

    _special_tokens: dict[str, int]
    _special_ids: dict[int, bytes]

    @property
    def special_tokens(self) -> Mapping[str, int]:
        """
        Read-only mapping of special token text to id.

        Example:
            >>> codec.special_tokens["<|endoftext|>"]
            100257
        """
        return MappingProxyType(self._special_tokens)

    @property
    def eot_token_id(self) -> int | None:
        """
        Id of ``<|endoftext|>``, or None if the codec has no such token.
        """
        return self._special_tokens.get(EOT_TOKEN)

    def is_special(self, token_id: int) -> bool:
        """Return True if ``token_id`` is a special token."""
        return token_id in self._special_ids

    def _resolve_allowed_special(self, allowed_special: AllowedSpecial) -> frozenset[str]:
        """Normalise ``allowed_special`` to a set of known special tokens."""
        if allowed_special == "all":
            return frozenset(self._special_tokens)
        if isinstance(allowed_special, str):
            raise ValidationError(
                "allowed_special must be 'all' or a collection of token strings",
                details={"param": "allowed_special", "value": allowed_special},
            )
        allowed = frozenset(allowed_special)
        unknown = allowed - self._special_tokens.keys()
        if unknown:
            raise ValidationError(
                f"Unknown special tokens: {sorted(unknown)}",
                details={"param": "allowed_special", "unknown": sorted(unknown)},
            )
        return allowed
