"""
Encoding registry - build codecs by encoding name or model name.

Known encodings:
- ``r50k_base`` (alias ``gpt2``): GPT-3 era models
- ``p50k_base``: Codex and text-davinci-002/003
- ``p50k_edit``: edit models, p50k ranks plus FIM tokens
- ``cl100k_base``: GPT-3.5 / GPT-4 and ada-002 embeddings

Codecs are built once per encoding name and shared; a Codec is immutable
and thread-safe, so sharing needs no further care.

Example
-------
>>> import bpecodec
>>> bpecodec.encoding_for_model("gpt-4-0613")
'cl100k_base'
>>> codec = bpecodec.for_model("gpt-4-0613")
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ._logging import scoped_logger
from .exceptions import UnsupportedEncodingError, UnsupportedModelError
from .tokenizer.codec import Codec
from .tokenizer.special_tokens import EOT_TOKEN
from .tokenizer.splitter import CL100K_PATTERN, R50K_PATTERN, Splitter
from .tokenizer.vocabulary import Vocabulary
from .vocab_loader import load_ranks, resolve_source

__all__ = [
    "EncodingSpec",
    "get_spec",
    "get_encoding",
    "encoding_for_model",
    "for_model",
    "list_encodings",
    "clear_cache",
]

logger = scoped_logger("registry")

FIM_PREFIX = "<|fim_prefix|>"
FIM_MIDDLE = "<|fim_middle|>"
FIM_SUFFIX = "<|fim_suffix|>"
ENDOFPROMPT = "<|endofprompt|>"


@dataclass(frozen=True)
class EncodingSpec:
    """
    Static description of an encoding.

    Attributes
    ----------
        name: Encoding name.
        filename: Rank file name (``<ranks>.tiktoken``).
        pattern: Pre-tokenizer split grammar.
        special_tokens: Special token text to id.
        explicit_n_vocab: Expected number of ids (ranks plus special tokens).
            A mismatch is logged, not raised.
        expected_hash: Optional SHA-256 of the rank file.
    """

    name: str
    filename: str
    pattern: str
    special_tokens: dict[str, int] = field(default_factory=dict)
    explicit_n_vocab: int | None = None
    expected_hash: str | None = None


_R50K = EncodingSpec(
    name="r50k_base",
    filename="r50k_base.tiktoken",
    pattern=R50K_PATTERN,
    special_tokens={EOT_TOKEN: 50256},
    explicit_n_vocab=50257,
)

_ENCODINGS: dict[str, EncodingSpec] = {
    "gpt2": EncodingSpec(
        name="gpt2",
        filename=_R50K.filename,
        pattern=_R50K.pattern,
        special_tokens=dict(_R50K.special_tokens),
        explicit_n_vocab=_R50K.explicit_n_vocab,
    ),
    "r50k_base": _R50K,
    "p50k_base": EncodingSpec(
        name="p50k_base",
        filename="p50k_base.tiktoken",
        pattern=R50K_PATTERN,
        special_tokens={EOT_TOKEN: 50256},
        explicit_n_vocab=50281,
    ),
    "p50k_edit": EncodingSpec(
        name="p50k_edit",
        filename="p50k_base.tiktoken",
        pattern=R50K_PATTERN,
        special_tokens={EOT_TOKEN: 50256, FIM_PREFIX: 50281, FIM_MIDDLE: 50282, FIM_SUFFIX: 50283},
    ),
    "cl100k_base": EncodingSpec(
        name="cl100k_base",
        filename="cl100k_base.tiktoken",
        pattern=CL100K_PATTERN,
        special_tokens={
            EOT_TOKEN: 100257,
            FIM_PREFIX: 100258,
            FIM_MIDDLE: 100259,
            FIM_SUFFIX: 100260,
            ENDOFPROMPT: 100276,
        },
    ),
}

# Checked after exact names; the longest matching prefix wins.
_MODEL_PREFIX_TO_ENCODING: dict[str, str] = {
    # chat
    "gpt-4-": "cl100k_base",  # e.g., gpt-4-0314, gpt-4-32k
    "gpt-3.5-turbo-": "cl100k_base",  # e.g., gpt-3.5-turbo-0301
    "gpt-35-turbo-": "cl100k_base",  # Azure deployment name
    # fine-tuned
    "ft:gpt-4": "cl100k_base",
    "ft:gpt-3.5-turbo": "cl100k_base",
    "ft:davinci-002": "cl100k_base",
    "ft:babbage-002": "cl100k_base",
}

_MODEL_TO_ENCODING: dict[str, str] = {
    # chat
    "gpt-4": "cl100k_base",
    "gpt-3.5-turbo": "cl100k_base",
    "gpt-35-turbo": "cl100k_base",  # Azure deployment name
    # base
    "davinci-002": "cl100k_base",
    "babbage-002": "cl100k_base",
    # embeddings
    "text-embedding-ada-002": "cl100k_base",
    # text (deprecated)
    "text-davinci-003": "p50k_base",
    "text-davinci-002": "p50k_base",
    "text-davinci-001": "r50k_base",
    "text-curie-001": "r50k_base",
    "text-babbage-001": "r50k_base",
    "text-ada-001": "r50k_base",
    "davinci": "r50k_base",
    "curie": "r50k_base",
    "babbage": "r50k_base",
    "ada": "r50k_base",
    # code (deprecated)
    "code-davinci-002": "p50k_base",
    "code-davinci-001": "p50k_base",
    "code-cushman-002": "p50k_base",
    "code-cushman-001": "p50k_base",
    "davinci-codex": "p50k_base",
    "cushman-codex": "p50k_base",
    # edit (deprecated)
    "text-davinci-edit-001": "p50k_edit",
    "code-davinci-edit-001": "p50k_edit",
    # old embeddings (deprecated)
    "text-similarity-davinci-001": "r50k_base",
    "text-similarity-curie-001": "r50k_base",
    "text-similarity-babbage-001": "r50k_base",
    "text-similarity-ada-001": "r50k_base",
    "text-search-davinci-doc-001": "r50k_base",
    "text-search-curie-doc-001": "r50k_base",
    "text-search-babbage-doc-001": "r50k_base",
    "text-search-ada-doc-001": "r50k_base",
    "code-search-babbage-code-001": "r50k_base",
    "code-search-ada-code-001": "r50k_base",
    # open source
    "gpt2": "gpt2",
}

_codecs: dict[str, Codec] = {}
_codecs_lock = threading.Lock()


def list_encodings() -> list[str]:
    """Return the names accepted by :func:`get_encoding`, sorted."""
    return sorted(_ENCODINGS)


def get_spec(name: str) -> EncodingSpec:
    """
    Return the static description of encoding ``name``.

    Raises
    ------
        UnsupportedEncodingError: If ``name`` is not a known encoding.
    """
    try:
        return _ENCODINGS[name]
    except KeyError:
        raise UnsupportedEncodingError(
            f"Encoding not supported: {name!r}",
            details={"encoding": name, "supported": list_encodings()},
        ) from None


def _build(spec: EncodingSpec) -> Codec:
    logger.debug("Building codec", extra={"encoding": spec.name})
    ranks = load_ranks(resolve_source(spec.filename), expected_hash=spec.expected_hash)
    vocabulary = Vocabulary(ranks, require_byte_coverage=True)
    n_vocab = len(vocabulary) + len(spec.special_tokens)
    if spec.explicit_n_vocab is not None and n_vocab != spec.explicit_n_vocab:
        logger.warning(
            "Vocabulary size mismatch",
            extra={"encoding": spec.name, "expected": spec.explicit_n_vocab, "actual": n_vocab},
        )
    return Codec(
        spec.name,
        vocabulary,
        Splitter(spec.pattern),
        special_tokens=spec.special_tokens,
    )


def get_encoding(name: str) -> Codec:
    """
    Return the codec for encoding ``name``.

    The first call for a name loads its rank file (see
    :mod:`bpecodec.vocab_loader`); later calls return the same codec.

    Raises
    ------
        UnsupportedEncodingError: If ``name`` is not a known encoding.
        IOError: If the rank file cannot be read or fetched.
        VocabularyError: If the rank file is malformed.
    """
    codec = _codecs.get(name)
    if codec is not None:
        return codec
    spec = get_spec(name)
    with _codecs_lock:
        codec = _codecs.get(name)
        if codec is None:
            codec = _build(spec)
            _codecs[name] = codec
    return codec


def encoding_for_model(model: str) -> str:
    """
    Return the encoding name used by ``model``.

    Exact model names are checked first, then known prefixes; when several
    prefixes match, the longest wins.

    Raises
    ------
        UnsupportedModelError: If the model is not recognised.

    Example:
        >>> encoding_for_model("gpt-3.5-turbo-0301")
        'cl100k_base'
    """
    encoding = _MODEL_TO_ENCODING.get(model)
    if encoding is not None:
        return encoding
    matches = [prefix for prefix in _MODEL_PREFIX_TO_ENCODING if model.startswith(prefix)]
    if matches:
        return _MODEL_PREFIX_TO_ENCODING[max(matches, key=len)]
    raise UnsupportedModelError(
        f"Model not supported: {model!r}",
        details={"model": model},
    )


def for_model(model: str) -> Codec:
    """
    Return the codec for ``model``.

    Raises
    ------
        UnsupportedModelError: If the model is not recognised.
        IOError: If the rank file cannot be read or fetched.
    """
    return get_encoding(encoding_for_model(model))


def clear_cache() -> None:
    """Drop all built codecs; the next :func:`get_encoding` call rebuilds."""
    with _codecs_lock:
        _codecs.clear()
