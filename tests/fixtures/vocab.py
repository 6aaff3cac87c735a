"""
Vocabulary fixtures.

Provides small hand-built rank tables so every tokenizer path can be tested
without downloading real encodings:

- TOY_RANKS: all 256 single bytes (rank == byte value) plus a handful of
  merges spelling "hello", " world" and "aa".
- SCENARIO_RANKS: five pieces, no byte coverage, for exercising merge order.
"""

import base64
from pathlib import Path

import pytest

TOY_RANKS: dict[bytes, int] = {bytes((b,)): b for b in range(256)}
TOY_RANKS.update(
    {
        b"he": 256,
        b"ll": 257,
        b"llo": 258,
        b"hello": 259,
        b" w": 260,
        b"or": 261,
        b" wor": 262,
        b"ld": 263,
        b" world": 264,
        b"aa": 265,
    }
)

TOY_EOT_ID = 300

SCENARIO_RANKS: dict[bytes, int] = {b"a": 0, b"b": 1, b"c": 2, b"ab": 3, b"abc": 4}

# Word/space/punctuation grammar that covers any input.
SIMPLE_PATTERN = r"\w+|\s+|[^\w\s]+"


def write_ranks_file(path: Path, ranks: dict[bytes, int]) -> Path:
    """Write ``ranks`` in rank file format (``<base64 piece> <rank>`` per line)."""
    lines = [
        f"{base64.b64encode(piece).decode('ascii')} {rank}"
        for piece, rank in sorted(ranks.items(), key=lambda item: item[1])
    ]
    path.write_text("\n".join(lines) + "\n", encoding="ascii")
    return path


@pytest.fixture
def toy_ranks() -> dict[bytes, int]:
    """A fresh copy of TOY_RANKS."""
    return dict(TOY_RANKS)


@pytest.fixture
def toy_codec():
    """Codec over TOY_RANKS with the GPT-2 split grammar and one special token."""
    from bpecodec.tokenizer import R50K_PATTERN, Codec

    return Codec.from_ranks(
        TOY_RANKS,
        R50K_PATTERN,
        name="toy",
        special_tokens={"<|endoftext|>": TOY_EOT_ID},
        require_byte_coverage=True,
    )


@pytest.fixture
def scenario_codec():
    """Codec over SCENARIO_RANKS (no byte coverage)."""
    from bpecodec.tokenizer import Codec

    return Codec.from_ranks(SCENARIO_RANKS, SIMPLE_PATTERN, name="scenario")


@pytest.fixture
def vocab_dir(tmp_path, monkeypatch):
    """
    Local rank files for every registered encoding, built from TOY_RANKS.

    Sets BPECODEC_VOCAB_DIR to the directory and clears the codec cache
    before and after the test.
    """
    from bpecodec import registry

    directory = tmp_path / "vocab"
    directory.mkdir()
    for filename in ("r50k_base.tiktoken", "p50k_base.tiktoken", "cl100k_base.tiktoken"):
        write_ranks_file(directory / filename, TOY_RANKS)

    monkeypatch.setenv("BPECODEC_VOCAB_DIR", str(directory))
    registry.clear_cache()
    yield directory
    registry.clear_cache()
