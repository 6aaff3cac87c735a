"""
Tokenizer module - Byte pair encoding and decoding.

Provides:
- Codec: Text-to-token encoding and token-to-text decoding
- Vocabulary: Immutable piece/rank table
- Splitter: Pre-tokenizer that chunks text by a split grammar
- BytePairMerger: Greedy rank-ordered merge of a single chunk
- TokenArray: Encode result with ids, pieces and offsets
- TokenOffset: Byte offset pair for token-to-text mapping
"""

from .bpe import BoundaryPool, BytePairMerger
from .codec import Codec
from .splitter import CL100K_PATTERN, R50K_PATTERN, Splitter
from .token_array import TokenArray, TokenOffset
from .vocabulary import Vocabulary

# =============================================================================
# Public API - See bpecodec/__init__.py for the top-level re-exports
# =============================================================================
__all__ = [
    # Core
    "Codec",
    # Building blocks
    "Vocabulary",
    "Splitter",
    "BytePairMerger",
    "BoundaryPool",
    # Grammars
    "R50K_PATTERN",
    "CL100K_PATTERN",
    # Token Containers
    "TokenArray",
    "TokenOffset",
]
