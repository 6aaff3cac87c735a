"""
Global pytest fixtures for bpecodec tests.

This module provides:
- Marker registration
- Environment isolation (no downloads, no writes to the real cache)
- Logger state restoration

Shared vocabulary fixtures live in tests/fixtures/vocab.py.

=============================================================================
Skip Policy
=============================================================================

Tests marked ``network`` fetch real rank files and are skipped unless
BPECODEC_TEST_NETWORK=1 is set. Everything else runs offline against the
toy vocabularies.
"""

import logging
import os

import pytest

NETWORK_ENABLED = os.environ.get("BPECODEC_TEST_NETWORK") == "1"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "network: marks tests requiring network access")


def pytest_collection_modifyitems(config, items):
    if NETWORK_ENABLED:
        return
    skip_network = pytest.mark.skip(reason="set BPECODEC_TEST_NETWORK=1 to run")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


@pytest.fixture(autouse=True)
def isolated_env(request, tmp_path, monkeypatch):
    """Point the download cache at a temp dir and forbid downloads."""
    if "network" in request.keywords:
        return
    monkeypatch.setenv("BPECODEC_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("BPECODEC_OFFLINE", "1")
    monkeypatch.delenv("BPECODEC_VOCAB_DIR", raising=False)
    monkeypatch.delenv("BPECODEC_BASE_URL", raising=False)


@pytest.fixture(autouse=True)
def restore_logger():
    """Undo handler and level changes made by a test."""
    from bpecodec._logging import logger

    handlers = logger.handlers[:]
    level = logger.level
    log_format = os.environ.get("BPECODEC_LOG_FORMAT")
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    if log_format is None:
        os.environ.pop("BPECODEC_LOG_FORMAT", None)
    else:
        os.environ["BPECODEC_LOG_FORMAT"] = log_format


@pytest.fixture
def caplog_bpecodec(caplog):
    """caplog capturing bpecodec records down to DEBUG."""
    caplog.set_level(logging.DEBUG, logger="bpecodec")
    return caplog
