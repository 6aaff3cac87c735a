"""
Vocabulary loader tests.

Tests for bpecodec.vocab_loader: rank file parsing, local lookup, download
cache and offline mode.

Maps to: bpecodec/vocab_loader.py
"""
