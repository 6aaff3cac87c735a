"""
bpecodec exceptions.

This module defines the exception hierarchy for bpecodec:

    CodecError (base)
    ├── ConfigError - Unknown encoding or model name
    │   ├── UnsupportedEncodingError - Encoding identifier not registered
    │   └── UnsupportedModelError - Model name matches no encoding
    ├── VocabularyError - Malformed or inconsistent vocabulary
    ├── TokenizerError - Errors during encoding or decoding
    │   ├── MatchError - Pre-tokenizer failed to scan the input
    │   └── UnknownTokenError - Token ID has no vocabulary piece
    ├── IOError - Vocabulary file and download errors
    └── ValidationError - Invalid parameter value
"""

from .exceptions import (
    CodecError,
    ConfigError,
    IOError,
    MatchError,
    TokenizerError,
    UnknownTokenError,
    UnsupportedEncodingError,
    UnsupportedModelError,
    ValidationError,
    VocabularyError,
)

# =============================================================================
# Public API - See bpecodec/__init__.py for the top-level re-exports
# =============================================================================
__all__ = [
    # Base
    "CodecError",
    # Configuration
    "ConfigError",
    "UnsupportedEncodingError",
    "UnsupportedModelError",
    # Vocabulary
    "VocabularyError",
    # Tokenizer
    "TokenizerError",
    "MatchError",
    "UnknownTokenError",
    # I/O
    "IOError",
    # Validation
    "ValidationError",
]
