"""
Text encoding and decoding.

Provides the Codec class, which ties a vocabulary, a split grammar and the
byte pair merger together to encode text to token ids and decode ids back
to text.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor

from .._logging import scoped_logger
from ..exceptions import UnknownTokenError, ValidationError, VocabularyError
from .bpe import BoundaryPool, BytePairMerger
from .special_tokens import AllowedSpecial, SpecialTokensMixin, special_token_pattern
from .splitter import Splitter
from .token_array import TokenArray
from .vocabulary import Vocabulary

logger = scoped_logger("tokenizer")


class Codec(SpecialTokensMixin):
    """
    Byte pair encoding tokenizer over a fixed vocabulary.

    Converts text into token ids and back. Immutable and thread-safe after
    construction: the vocabulary (forward and reverse) is built up front and
    the only shared mutable state is a lock-guarded scratch buffer pool.

    Attributes
    ----------
    name : str
        Encoding name (e.g., "cl100k_base").
    vocab_size : int
        One more than the largest token id, special tokens included.
    special_tokens : Mapping[str, int]
        Special token text to id.

    Example:
        >>> codec = bpecodec.get_encoding("cl100k_base")
        >>> tokens = codec.encode("hello world")
        >>> tokens.tolist()
        [15339, 1917]
        >>> codec.decode(tokens)
        'hello world'
    """

    __slots__ = (
        "_name",
        "_vocab",
        "_splitter",
        "_merger",
        "_special_tokens",
        "_special_ids",
        "_special_pattern",
    )

    def __init__(
        self,
        name: str,
        vocabulary: Vocabulary,
        splitter: Splitter,
        *,
        special_tokens: Mapping[str, int] | None = None,
        pool: BoundaryPool | None = None,
    ):
        """
        Create a codec.

        Args:
            name: Encoding name, used in logs and repr.
            vocabulary: Piece/rank table. Ranks are the emitted token ids.
            splitter: Pre-tokenizer that chunks input text.
            special_tokens: Optional mapping of special token text to id.
            pool: Optional boundary buffer pool, shared with other codecs
                if desired.

        Raises
        ------
            VocabularyError: If a special token id is also an ordinary rank,
                or two special tokens share an id.
        """
        special_tokens = dict(special_tokens or {})
        special_ids: dict[int, bytes] = {}
        for token, token_id in special_tokens.items():
            if vocabulary.reverse_lookup(token_id) is not None or token_id in special_ids:
                raise VocabularyError(
                    f"Special token {token!r} reuses id {token_id}",
                    code="SPECIAL_TOKEN_COLLISION",
                    details={"token": token, "token_id": token_id},
                )
            special_ids[token_id] = token.encode("utf-8")

        self._name = name
        self._vocab = vocabulary
        self._splitter = splitter
        self._merger = BytePairMerger(vocabulary, pool=pool)
        self._special_tokens = special_tokens
        self._special_ids = special_ids
        self._special_pattern = special_token_pattern(special_tokens) if special_tokens else None

        logger.debug(
            "Codec created",
            extra={"encoding": name, "vocab_size": self.vocab_size, "special": len(special_ids)},
        )

    @classmethod
    def from_ranks(
        cls,
        ranks: Mapping[bytes, int],
        pattern: str,
        *,
        name: str = "custom",
        special_tokens: Mapping[str, int] | None = None,
        require_byte_coverage: bool = False,
        match_timeout: float | None = None,
    ) -> Codec:
        """
        Create a codec directly from a rank table and a split pattern.

        Useful for custom vocabularies and testing.

        Args:
            ranks: Mapping of piece bytes to rank.
            pattern: Split grammar for the pre-tokenizer.
            name: Encoding name.
            special_tokens: Optional mapping of special token text to id.
            require_byte_coverage: Reject vocabularies missing a single byte.
            match_timeout: Optional pre-tokenizer time limit in seconds.

        Raises
        ------
            VocabularyError: If the rank table is invalid.
            ValidationError: If the pattern does not compile.

        Example:
            >>> ranks = {b"a": 0, b"b": 1, b"c": 2, b"ab": 3, b"abc": 4}
            >>> codec = Codec.from_ranks(ranks, r"\\w+|\\s+")
            >>> codec.encode("abc").tolist()
            [4]
        """
        vocabulary = Vocabulary(ranks, require_byte_coverage=require_byte_coverage)
        splitter = Splitter(pattern, timeout=match_timeout)
        return cls(name, vocabulary, splitter, special_tokens=special_tokens)

    def __repr__(self) -> str:
        return f"Codec({self._name!r})"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def name(self) -> str:
        """Encoding name."""
        return self._name

    @property
    def vocabulary(self) -> Vocabulary:
        """The ordinary piece/rank table (special tokens excluded)."""
        return self._vocab

    @property
    def splitter(self) -> Splitter:
        """The pre-tokenizer."""
        return self._splitter

    @property
    def vocab_size(self) -> int:
        """Number of token ids, i.e. the largest id plus one."""
        return self.max_token_id + 1

    @property
    def max_token_id(self) -> int:
        """Largest ordinary or special token id."""
        return max(self._vocab.max_rank, max(self._special_ids, default=-1))

    # =========================================================================
    # Core Encoding/Decoding
    # =========================================================================

    def _segments(self, text: str, allowed: frozenset[str]) -> Iterator[tuple[str, int | None]]:
        """Split out allowed special tokens; yield ``(segment, special_id)``."""
        if not allowed or self._special_pattern is None:
            yield text, None
            return
        if len(allowed) == len(self._special_tokens):
            pattern = self._special_pattern
        else:
            # Match allowed tokens only; the rest stay ordinary text.
            pattern = special_token_pattern(allowed)
        pos = 0
        for match in pattern.finditer(text):
            token = match.group()
            if match.start() > pos:
                yield text[pos : match.start()], None
            yield token, self._special_tokens[token]
            pos = match.end()
        if pos < len(text):
            yield text[pos:], None

    def _iter_tokens(self, text: str, allowed: frozenset[str]) -> Iterator[tuple[int, bytes]]:
        for segment, special_id in self._segments(text, allowed):
            if special_id is not None:
                yield special_id, self._special_ids[special_id]
                continue
            for chunk in self._splitter.split(segment):
                piece = chunk.encode("utf-8")
                rank = self._vocab.lookup(piece)
                if rank is not None:
                    yield rank, piece
                else:
                    yield from self._merger.merge(piece)

    @staticmethod
    def _check_text(text: object) -> str:
        if not isinstance(text, str):
            raise ValidationError(
                f"text must be str, got {type(text).__name__}",
                details={"param": "text", "type": type(text).__name__},
            )
        try:
            text.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates have no UTF-8 form; replace them.
            text = text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
        return text

    def encode(self, text: str, *, allowed_special: AllowedSpecial = frozenset()) -> TokenArray:
        """
        Convert text to token ids.

        Chunks produced by the pre-tokenizer are resolved in input order: a
        chunk that is a vocabulary piece becomes one token, any other chunk is
        broken down by byte pair merging.

        Args:
            text: Text to tokenize.
            allowed_special: Special tokens recognised verbatim in ``text``
                ("all" or a collection of token strings). Special token text
                that is not allowed is encoded as ordinary text.

        Returns
        -------
            TokenArray with ids, pieces and byte offsets.

        Raises
        ------
            ValidationError: If text is not a str or allowed_special names an
                unknown token.
            MatchError: If the pre-tokenizer fails. No partial result is returned.

        Example:
            >>> codec.encode("hello <|endoftext|>", allowed_special="all").tolist()
            [15339, 220, 100257]
        """
        text = self._check_text(text)
        allowed = self._resolve_allowed_special(allowed_special)
        ids: list[int] = []
        pieces: list[bytes] = []
        for token_id, piece in self._iter_tokens(text, allowed):
            ids.append(token_id)
            pieces.append(piece)
        return TokenArray(ids, pieces)

    def encode_ordinary(self, text: str) -> list[int]:
        """Encode ``text`` treating all special token text as ordinary text."""
        return self.encode(text).tolist()

    def encode_batch(
        self,
        texts: list[str],
        *,
        allowed_special: AllowedSpecial = frozenset(),
        num_threads: int | None = None,
    ) -> list[TokenArray]:
        """
        Encode several texts concurrently.

        Args:
            texts: Texts to tokenize.
            allowed_special: As for :meth:`encode`.
            num_threads: Worker threads. Defaults to the executor's default.

        Returns
        -------
            One TokenArray per input, in input order.

        Raises
        ------
            ValidationError: If texts is not a list of str.
        """
        if not isinstance(texts, list):
            raise ValidationError(
                f"texts must be list[str], got {type(texts).__name__}",
                details={"param": "texts", "type": type(texts).__name__},
            )
        if not texts:
            return []
        with ThreadPoolExecutor(max_workers=num_threads) as pool:
            return list(pool.map(lambda t: self.encode(t, allowed_special=allowed_special), texts))

    def count(self, text: str, *, allowed_special: AllowedSpecial = frozenset()) -> int:
        """
        Count the tokens :meth:`encode` would produce, without building them.

        Always equal to ``len(codec.encode(text, allowed_special=...))``.

        Raises
        ------
            ValidationError: If text is not a str.
            MatchError: If the pre-tokenizer fails.
        """
        text = self._check_text(text)
        allowed = self._resolve_allowed_special(allowed_special)
        total = 0
        for segment, special_id in self._segments(text, allowed):
            if special_id is not None:
                total += 1
                continue
            for chunk in self._splitter.split(segment):
                piece = chunk.encode("utf-8")
                if piece in self._vocab:
                    total += 1
                else:
                    total += self._merger.count(piece)
        return total

    def tokenize(self, text: str, *, return_bytes: bool = False) -> list[str] | list[bytes]:
        """
        Split text into token strings.

        Args:
            text: Text to tokenize.
            return_bytes: If True, return raw byte pieces instead of strings.

        Example:
            >>> codec.tokenize("hello world")
            ['hello', ' world']
        """
        tokens = self.encode(text)
        if return_bytes:
            return list(tokens.pieces)
        return tokens.tokens

    def decode_bytes(self, tokens: TokenArray | Iterable[int]) -> bytes:
        """
        Convert token ids back to the raw bytes they stand for.

        Raises
        ------
            UnknownTokenError: On the first id with no piece. Nothing is
                returned for the ids before it.
        """
        out = []
        for position, token_id in enumerate(tokens):
            piece = self._vocab.reverse_lookup(token_id)
            if piece is None:
                piece = self._special_ids.get(token_id)
                if piece is None:
                    raise UnknownTokenError(
                        f"Invalid token: {token_id}",
                        details={"token_id": token_id, "position": position},
                    )
            out.append(piece)
        return b"".join(out)

    def decode(self, tokens: TokenArray | Iterable[int], errors: str = "replace") -> str:
        """
        Convert token ids back to text.

        Args:
            tokens: Token ids to decode.
            errors: UTF-8 error handling for byte sequences that are not valid
                text (e.g. a slice that splits a character). Default "replace".

        Returns
        -------
            Decoded text string.

        Raises
        ------
            UnknownTokenError: If any id has no piece.
        """
        return self.decode_bytes(tokens).decode("utf-8", errors=errors)

    # =========================================================================
    # Vocabulary Access
    # =========================================================================

    def token_to_id(self, token: str | bytes) -> int | None:
        """
        Look up the id of a single token.

        Args:
            token: Token text or raw piece bytes. Special token text is
                recognised.

        Returns
        -------
            The token id, or None if ``token`` is not a single token.
        """
        if isinstance(token, str):
            special = self._special_tokens.get(token)
            if special is not None:
                return special
            token = token.encode("utf-8")
        return self._vocab.lookup(token)

    def id_to_token(self, token_id: int) -> str | None:
        """
        Get the text of a token id, or None if the id is unknown.

        Pieces that are not valid UTF-8 on their own decode with replacement
        characters.
        """
        piece = self._vocab.reverse_lookup(token_id)
        if piece is None:
            piece = self._special_ids.get(token_id)
        if piece is None:
            return None
        return piece.decode("utf-8", errors="replace")
