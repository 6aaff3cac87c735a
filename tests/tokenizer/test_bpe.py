"""
Byte pair merge tests.

Tests for bpecodec.tokenizer.bpe (BytePairMerger, BoundaryPool).
"""

import pytest

from bpecodec.exceptions import TokenizerError
from bpecodec.tokenizer import BoundaryPool, BytePairMerger, Vocabulary
from bpecodec.tokenizer.bpe import MAX_POOLED_BOUNDARIES, UNRANKED
from tests.fixtures import SCENARIO_RANKS, TOY_RANKS


@pytest.fixture
def toy_merger():
    return BytePairMerger(Vocabulary(TOY_RANKS, require_byte_coverage=True))


class TestMerge:
    """Greedy lowest-rank merging."""

    def test_whole_piece_member(self):
        merger = BytePairMerger(Vocabulary(SCENARIO_RANKS))
        assert merger.merge(b"abc") == [(4, b"abc")]

    def test_lowest_rank_merges_first(self):
        """bc (rank 3) merges before ab (rank 4); abc is then unreachable."""
        merger = BytePairMerger(Vocabulary({b"a": 0, b"b": 1, b"c": 2, b"bc": 3, b"ab": 4}))
        assert merger.merge(b"abc") == [(0, b"a"), (3, b"bc")]

    def test_multi_step_merge(self, toy_merger):
        assert toy_merger.merge(b"hellos") == [(259, b"hello"), (115, b"s")]

    def test_leftmost_tie_wins(self, toy_merger):
        assert toy_merger.merge_ranks(b"aaa") == [265, 97]

    def test_tie_after_merge(self, toy_merger):
        assert toy_merger.merge_ranks(b"aaaa") == [265, 265]

    def test_multibyte_character(self, toy_merger):
        assert toy_merger.merge_ranks("héllo".encode()) == [104, 195, 169, 258]

    def test_single_byte(self, toy_merger):
        assert toy_merger.merge(b"x") == [(120, b"x")]

    def test_every_single_byte(self, toy_merger):
        for b in range(256):
            piece = bytes((b,))
            assert toy_merger.merge(piece) == [(b, piece)]

    def test_empty_piece(self, toy_merger):
        assert toy_merger.merge(b"") == []

    def test_no_merges_possible(self, toy_merger):
        assert toy_merger.merge_ranks(b"xyz") == [120, 121, 122]

    def test_concatenation_reproduces_input(self, toy_merger):
        piece = "hello wörld aaaaa llo".encode()
        assert b"".join(p for _, p in toy_merger.merge(piece)) == piece

    def test_deterministic(self, toy_merger):
        piece = b"hellohelloaaaaaworld"
        assert toy_merger.merge(piece) == toy_merger.merge(piece)

    def test_unranked_span(self):
        """Without byte coverage a leftover span may have no rank."""
        merger = BytePairMerger(Vocabulary(SCENARIO_RANKS))
        with pytest.raises(TokenizerError) as exc_info:
            merger.merge(b"abd")
        assert exc_info.value.code == "UNRANKED_PIECE"
        assert exc_info.value.details["piece"] == b"d"

    def test_count_matches_merge(self, toy_merger):
        for piece in (b"hellos", b"aaaa", b"xyz", b"", "héllo".encode()):
            assert toy_merger.count(piece) == len(toy_merger.merge(piece))


class TestBoundaryPool:
    """Scratch buffer reuse."""

    def test_checkout_resets_buffer(self):
        pool = BoundaryPool()
        with pool.checkout(4) as buf:
            assert buf.offsets == [0, 1, 2, 3]
            assert buf.scores == [UNRANKED] * 4
            assert len(buf) == 4

    def test_buffer_returned_and_reused(self):
        pool = BoundaryPool()
        with pool.checkout(4) as first:
            assert pool.idle == 0
        assert pool.idle == 1
        with pool.checkout(8) as second:
            assert second is first
            assert second.offsets == list(range(8))

    def test_oversized_buffer_discarded(self):
        pool = BoundaryPool()
        with pool.checkout(MAX_POOLED_BOUNDARIES + 1):
            pass
        assert pool.idle == 0

    def test_max_idle(self):
        pool = BoundaryPool(max_idle=2)
        with pool.checkout(2), pool.checkout(2), pool.checkout(2):
            pass
        assert pool.idle == 2

    def test_buffer_returned_on_error(self):
        pool = BoundaryPool()
        with pytest.raises(RuntimeError):
            with pool.checkout(3):
                raise RuntimeError("boom")
        assert pool.idle == 1

    def test_merger_returns_buffer(self):
        pool = BoundaryPool()
        merger = BytePairMerger(Vocabulary(TOY_RANKS), pool=pool)
        merger.merge(b"hellos")
        merger.merge(b"aaaa")
        assert merger.pool is pool
        assert pool.idle == 1

    def test_long_piece_not_pooled(self):
        pool = BoundaryPool()
        merger = BytePairMerger(Vocabulary(TOY_RANKS), pool=pool)
        piece = b"x" * (MAX_POOLED_BOUNDARIES + 10)
        assert merger.count(piece) == len(piece)
        assert pool.idle == 0
