"""
Registry tests.

Tests for bpecodec.registry: encoding lookup, model resolution, caching.

Maps to: bpecodec/registry.py
"""
