"""bpecodec test suite."""
