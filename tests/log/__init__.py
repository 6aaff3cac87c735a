"""
Logging tests.

Maps to: bpecodec/_logging.py
"""
