"""
Command line tests.

Maps to: bpecodec/cli.py
"""
