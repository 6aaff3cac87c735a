"""
Exception handling tests.

Tests for bpecodec.exceptions module:
- Exception hierarchy and stdlib base classes
- Stable error codes and structured details

Maps to: bpecodec/exceptions/
"""
