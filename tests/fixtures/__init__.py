"""
Shared test fixtures for bpecodec.

The fixtures themselves live in :mod:`tests.fixtures.vocab`, registered
through ``pytest_plugins`` in the root conftest.py.
"""

from .vocab import (
    SCENARIO_RANKS,
    SIMPLE_PATTERN,
    TOY_EOT_ID,
    TOY_RANKS,
    write_ranks_file,
)

__all__ = [
    # Rank tables
    "TOY_RANKS",
    "TOY_EOT_ID",
    "SCENARIO_RANKS",
    "SIMPLE_PATTERN",
    # Helpers
    "write_ranks_file",
]
