"""
Tokenizer tests.

Tests for bpecodec.tokenizer module:
- test_vocabulary.py: Piece/rank table
- test_splitter.py: Pre-tokenizer grammars
- test_bpe.py: Byte pair merging and buffer pooling
- test_codec.py: Encode, count, decode
- test_thread_safety.py: Concurrent access
- test_reference.py: Known ids from the published rank files (network)

Maps to: bpecodec/tokenizer/
"""
