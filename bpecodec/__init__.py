"""
bpecodec - Byte pair encoding tokenizer.

Converts text into the integer token ids consumed by language models, and
back, using pre-built rank tables (``cl100k_base``, ``p50k_base``,
``r50k_base`` and friends). Counting tokens does not require building them.

Quick Start
-----------

    >>> import bpecodec
    >>> codec = bpecodec.get_encoding("cl100k_base")
    >>> tokens = codec.encode("hello world")
    >>> tokens.tolist()
    [15339, 1917]
    >>> tokens.tokens
    ['hello', ' world']
    >>> codec.decode(tokens)
    'hello world'
    >>> codec.count("hello world")
    2

By model name:

    >>> codec = bpecodec.for_model("gpt-3.5-turbo")
    >>> codec.name
    'cl100k_base'

Custom vocabulary:

    >>> from bpecodec import Codec
    >>> codec = Codec.from_ranks({b"a": 0, b"b": 1, b"ab": 2}, r"\\w+|\\s+")
    >>> codec.encode("ab").tolist()
    [2]


Rank Files
----------

Rank files are looked up in ``$BPECODEC_VOCAB_DIR``, then in the download
cache (``$BPECODEC_CACHE_DIR``), then downloaded. Set ``BPECODEC_OFFLINE=1``
to forbid downloads. See :mod:`bpecodec.vocab_loader`.


Thread Safety
-------------

A Codec is immutable after construction. One instance may be used from any
number of threads; ``encode_batch`` does exactly that.
"""

from bpecodec._logging import setup_logging
from bpecodec._version import __version__ as __version__

# Exceptions (commonly-used exceptions at root; all via bpecodec.exceptions)
from bpecodec.exceptions import (
    CodecError,
)
from bpecodec.exceptions import (
    ConfigError as ConfigError,
)
from bpecodec.exceptions import (
    IOError as IOError,
)
from bpecodec.exceptions import (
    MatchError as MatchError,
)
from bpecodec.exceptions import (
    TokenizerError as TokenizerError,
)
from bpecodec.exceptions import (
    UnknownTokenError as UnknownTokenError,
)
from bpecodec.exceptions import (
    UnsupportedEncodingError as UnsupportedEncodingError,
)
from bpecodec.exceptions import (
    UnsupportedModelError as UnsupportedModelError,
)
from bpecodec.exceptions import (
    ValidationError as ValidationError,
)
from bpecodec.exceptions import (
    VocabularyError as VocabularyError,
)

# Registry
from bpecodec.registry import encoding_for_model, for_model, get_encoding, list_encodings

# Tokenizer
from bpecodec.tokenizer import Codec, TokenArray, TokenOffset, Vocabulary

# =============================================================================
# Public API
# =============================================================================
#
# Only symbols that deserve top-level documentation are listed; everything
# else stays importable from its submodule (e.g., bpecodec.tokenizer.Splitter).
#
__all__ = [
    # Registry
    "get_encoding",
    "for_model",
    "encoding_for_model",
    "list_encodings",
    # Tokenizer
    "Codec",
    "Vocabulary",
    "TokenArray",
    "TokenOffset",
    # Logging
    "setup_logging",
    # Exceptions
    "CodecError",
]
