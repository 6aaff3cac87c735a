"""
Error types raised by bpecodec.

Every error carries a stable ``code`` string and a ``details`` dict, and
also derives from the builtin that describes it best (``ValueError`` for
bad input, ``OSError`` for file and network trouble), so callers that only
know the standard hierarchy still catch the right thing::

    try:
        text = codec.decode(ids)
    except bpecodec.UnknownTokenError as e:
        log.warning("dropping request", extra=e.details)
    except bpecodec.CodecError as e:
        log.error("%s: %s", e.code, e)

Nothing is retried internally; the same input fails the same way.
"""

from typing import Any

__all__ = [
    "CodecError",
    "ConfigError",
    "UnsupportedEncodingError",
    "UnsupportedModelError",
    "VocabularyError",
    "TokenizerError",
    "MatchError",
    "UnknownTokenError",
    "IOError",
    "ValidationError",
]


class CodecError(Exception):
    """
    Root of the bpecodec error hierarchy.

    Attributes
    ----------
    message : str
        What went wrong, for humans.
    code : str
        Machine-readable reason such as ``"UNKNOWN_TOKEN"`` or
        ``"HASH_MISMATCH"``. Subclasses supply a default; raise sites
        narrow it with ``code=``.
    details : dict[str, Any]
        Values involved in the failure, e.g. ``{"token_id": 100300}``.

    Example
    -------
    >>> try:
    ...     bpecodec.get_encoding("nonexistent")
    ... except bpecodec.CodecError as e:
    ...     print(e.code, e.details["encoding"])
    UNSUPPORTED_ENCODING nonexistent
    """

    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details if details is not None else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class ConfigError(CodecError, ValueError):
    """An encoding or model name could not be resolved to a codec."""

    default_code = "CONFIG_ERROR"


class UnsupportedEncodingError(ConfigError):
    """Encoding name is not registered; see ``bpecodec.list_encodings()``."""

    default_code = "UNSUPPORTED_ENCODING"


class UnsupportedModelError(ConfigError):
    default_code = "UNSUPPORTED_MODEL"


class VocabularyError(CodecError, ValueError):
    """
    Rank data cannot form a vocabulary.

    Raised for malformed rank lines, duplicate ranks, empty pieces, missing
    single-byte pieces and special token ids that collide with ranks.
    """

    default_code = "VOCABULARY_ERROR"


class TokenizerError(CodecError, RuntimeError):
    """Encoding or decoding failed; no partial output is produced."""

    default_code = "TOKENIZER_ERROR"


class MatchError(TokenizerError):
    """
    Splitting failed: the pattern engine timed out or raised, or the
    grammar left part of the input unmatched.
    """

    default_code = "MATCH_FAILED"


class UnknownTokenError(TokenizerError, ValueError):
    """Decode met an id with no piece. ``details`` holds the id and position."""

    default_code = "UNKNOWN_TOKEN"


class IOError(CodecError, OSError):
    """A rank file could not be read, downloaded, cached or verified."""

    default_code = "IO_ERROR"


class ValidationError(CodecError, ValueError):
    default_code = "INVALID_ARGUMENT"
