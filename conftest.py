"""
Root pytest configuration.

Shared vocabulary fixtures (toy rank tables, codecs, a local vocabulary
directory) are registered here so every test package can use them;
pytest only honours pytest_plugins in the rootdir conftest.
"""

pytest_plugins = ["tests.fixtures.vocab"]
