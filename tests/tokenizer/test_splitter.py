"""
Pre-tokenizer tests.

Tests for bpecodec.tokenizer.splitter.Splitter and the built-in grammars.
"""

import pytest

from bpecodec.exceptions import MatchError, ValidationError
from bpecodec.tokenizer import CL100K_PATTERN, R50K_PATTERN, Splitter


class TestR50KGrammar:
    """GPT-2 family split grammar."""

    @pytest.fixture
    def splitter(self):
        return Splitter(R50K_PATTERN)

    def test_words_and_contraction(self, splitter):
        assert list(splitter.split("Hello world's")) == ["Hello", " world", "'s"]

    def test_contractions_are_case_sensitive(self, splitter):
        assert list(splitter.split("I'M")) == ["I", "'", "M"]

    def test_numbers_unbounded(self, splitter):
        assert list(splitter.split("123456")) == ["123456"]

    def test_whitespace_before_word(self, splitter):
        """Runs of spaces keep the last space attached to the next word."""
        assert list(splitter.split("hello   world")) == ["hello", "  ", " world"]

    def test_trailing_whitespace(self, splitter):
        assert list(splitter.split("hi  ")) == ["hi", "  "]

    def test_punctuation(self, splitter):
        assert list(splitter.split("a, b!")) == ["a", ",", " b", "!"]

    def test_empty_text(self, splitter):
        assert list(splitter.split("")) == []

    def test_chunks_cover_input(self, splitter):
        text = "It's 2024!\n\tNew   line  ünïcödé 😀 end "
        assert "".join(splitter.split(text)) == text


class TestCL100KGrammar:
    """cl100k_base split grammar."""

    @pytest.fixture
    def splitter(self):
        return Splitter(CL100K_PATTERN)

    def test_contractions_case_insensitive(self, splitter):
        assert list(splitter.split("I'M")) == ["I", "'M"]

    def test_digits_grouped_by_three(self, splitter):
        assert list(splitter.split("1234567")) == ["123", "456", "7"]

    def test_hello_world(self, splitter):
        assert list(splitter.split("hello world")) == ["hello", " world"]

    def test_chunks_cover_input(self, splitter):
        text = "def f(x):\n    return x**2  # ok\r\n\n"
        assert "".join(splitter.split(text)) == text


class TestSpans:
    """Span offsets and coverage checks."""

    def test_spans_are_contiguous(self):
        splitter = Splitter(R50K_PATTERN)
        spans = list(splitter.spans("one two three"))
        assert spans == [(0, 3), (3, 7), (7, 13)]

    def test_gap_at_end(self):
        splitter = Splitter(r"[a-z]+")
        with pytest.raises(MatchError) as exc_info:
            list(splitter.split("ab1"))
        assert exc_info.value.code == "SPLIT_GAP"
        assert exc_info.value.details["offset"] == 2

    def test_gap_in_middle(self):
        splitter = Splitter(r"[a-z]+")
        with pytest.raises(MatchError) as exc_info:
            list(splitter.split("ab1cd"))
        assert exc_info.value.code == "SPLIT_GAP"

    def test_empty_matches_skipped(self):
        splitter = Splitter(r"[a-z]*")
        assert list(splitter.split("abc")) == ["abc"]

    def test_engine_timeout_wrapped(self):
        """A timeout from the regex engine surfaces as MatchError."""

        class TimingOutPattern:
            pattern = "x"

            def finditer(self, text, timeout=None):
                raise TimeoutError("regex timed out")

        splitter = Splitter(r"\w+", timeout=0.001)
        splitter._pattern = TimingOutPattern()
        with pytest.raises(MatchError) as exc_info:
            list(splitter.split("hello"))
        assert exc_info.value.code == "MATCH_FAILED"
        assert isinstance(exc_info.value.__cause__, TimeoutError)


class TestConstruction:
    """Pattern compilation."""

    def test_invalid_pattern(self):
        with pytest.raises(ValidationError) as exc_info:
            Splitter("(unclosed")
        assert exc_info.value.code == "INVALID_PATTERN"

    def test_pattern_property(self):
        assert Splitter(R50K_PATTERN).pattern == R50K_PATTERN

    def test_repr(self):
        assert repr(Splitter(r"\w+")) == "Splitter('\\\\w+')"
