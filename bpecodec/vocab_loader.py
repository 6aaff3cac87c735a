"""
Vocabulary source loading.

Rank files are newline-delimited text where each line is
``<base64-encoded piece> <decimal rank>``. They are looked up locally first,
then downloaded from the public encodings location and cached.

Lookup order for an encoding's rank file ``<name>.tiktoken``:
- ``$BPECODEC_VOCAB_DIR/<name>.tiktoken`` if the variable is set and the
  file exists
- the download cache (``$BPECODEC_CACHE_DIR``, default ``~/.cache/bpecodec``)
- a download from ``$BPECODEC_BASE_URL`` (unless ``BPECODEC_OFFLINE=1``)

Example
-------
>>> from bpecodec.vocab_loader import load_ranks
>>> ranks = load_ranks("/data/cl100k_base.tiktoken")
>>> ranks[b"hello"]
15339
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import http.client
import os
import tempfile
import urllib.error
import urllib.request
from collections.abc import Iterable
from pathlib import Path

from ._logging import scoped_logger
from .exceptions import IOError, VocabularyError

__all__ = [
    "parse_ranks",
    "load_ranks",
    "read_source",
    "resolve_source",
    "fetch",
    "cache_dir",
    "vocab_dir",
    "is_offline",
    "base_url",
    "DEFAULT_BASE_URL",
]

logger = scoped_logger("loader")

DEFAULT_BASE_URL = "https://openaipublic.blob.core.windows.net/encodings"

_DOWNLOAD_TIMEOUT = 60.0


# =============================================================================
# Configuration
# =============================================================================


def cache_dir() -> Path:
    """Return the download cache directory."""
    configured = os.environ.get("BPECODEC_CACHE_DIR")
    if configured:
        return Path(configured)
    return Path.home() / ".cache" / "bpecodec"


def vocab_dir() -> Path | None:
    """Return the local rank file directory, or None if not configured."""
    configured = os.environ.get("BPECODEC_VOCAB_DIR")
    return Path(configured) if configured else None


def is_offline() -> bool:
    """Return True if downloads are disabled."""
    return os.environ.get("BPECODEC_OFFLINE", "").lower() in ("1", "true", "yes")


def base_url() -> str:
    """Return the base URL rank files are downloaded from."""
    return os.environ.get("BPECODEC_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


# =============================================================================
# Parsing
# =============================================================================


def parse_ranks(lines: Iterable[str | bytes]) -> dict[bytes, int]:
    """
    Parse rank file lines into a piece-to-rank mapping.

    Blank lines are skipped.

    Raises
    ------
        VocabularyError: If a line does not have exactly two fields, the
            piece is not valid base64, the rank is not a non-negative
            decimal integer, or the piece already appeared on an earlier
            line. ``details["line"]`` holds the 1-based line number.
    """
    ranks: dict[bytes, int] = {}
    for lineno, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            line = line.decode("ascii", errors="replace")
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2:
            raise VocabularyError(
                f"Invalid line {lineno}: {line.strip()!r}",
                code="MALFORMED_LINE",
                details={"line": lineno},
            )
        encoded, rank_text = fields
        try:
            piece = base64.b64decode(encoded, validate=True)
        except binascii.Error as e:
            raise VocabularyError(
                f"Invalid piece on line {lineno}: {encoded!r}",
                code="MALFORMED_LINE",
                details={"line": lineno},
            ) from e
        if not (rank_text.isascii() and rank_text.isdigit()):
            raise VocabularyError(
                f"Invalid rank on line {lineno}: {rank_text!r}",
                code="MALFORMED_LINE",
                details={"line": lineno},
            )
        if piece in ranks:
            raise VocabularyError(
                f"Duplicate piece on line {lineno}: {encoded!r}",
                code="DUPLICATE_PIECE",
                details={"line": lineno, "rank": ranks[piece]},
            )
        ranks[piece] = int(rank_text)
    return ranks


# =============================================================================
# Reading and fetching
# =============================================================================


def _cache_path(url: str) -> Path:
    return cache_dir() / hashlib.sha1(url.encode("utf-8")).hexdigest()


def _verify(data: bytes, expected_hash: str | None, source: str) -> None:
    if expected_hash is None:
        return
    actual = hashlib.sha256(data).hexdigest()
    if actual != expected_hash:
        logger.error("Hash mismatch", extra={"source": source, "expected": expected_hash})
        raise IOError(
            f"Hash mismatch for {source}: expected {expected_hash}, got {actual}",
            code="HASH_MISMATCH",
            details={"source": source, "expected": expected_hash, "actual": actual},
        )


def fetch(url: str, *, force: bool = False, timeout: float = _DOWNLOAD_TIMEOUT) -> Path:
    """
    Download ``url`` into the cache and return the cached file path.

    Args:
        url: Rank file URL.
        force: Download even if a cached copy exists.
        timeout: Request timeout in seconds.

    Raises
    ------
        IOError: If downloads are disabled and nothing is cached, or the
            request fails.
    """
    path = _cache_path(url)
    if path.exists() and not force:
        logger.debug("Cache hit", extra={"url": url, "path": str(path)})
        return path

    if is_offline():
        raise IOError(
            f"{url} is not cached and BPECODEC_OFFLINE is set",
            code="OFFLINE",
            details={"url": url},
        )

    logger.info("Downloading vocabulary", extra={"url": url})
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            data = response.read()
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        raise IOError(f"Failed to fetch {url}: {e}", code="CONNECTION_ERROR") from e

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file so readers never see a partial file.
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise IOError(
            f"Cannot write cache file {path}: {e}",
            code="CACHE_WRITE_FAILED",
            details={"path": str(path)},
        ) from e
    logger.debug("Cached vocabulary", extra={"url": url, "path": str(path), "bytes": len(data)})
    return path


def read_source(source: str | os.PathLike, *, expected_hash: str | None = None) -> bytes:
    """
    Read a rank file from a local path or an http(s) URL.

    URLs go through the download cache. If ``expected_hash`` (SHA-256 hex)
    is given, the content is verified.

    Raises
    ------
        IOError: If the file cannot be read or fetched, or the hash differs.
    """
    source = os.fspath(source)
    if _is_url(source):
        path = fetch(source)
    else:
        path = Path(source)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise IOError(
            f"Cannot read vocabulary file {path}: {e}",
            code="FILE_NOT_FOUND" if isinstance(e, FileNotFoundError) else "IO_ERROR",
            details={"path": str(path)},
        ) from e
    _verify(data, expected_hash, source)
    return data


def load_ranks(source: str | os.PathLike, *, expected_hash: str | None = None) -> dict[bytes, int]:
    """
    Load a piece-to-rank mapping from a local path or URL.

    Raises
    ------
        IOError: If the source cannot be read.
        VocabularyError: If the content is malformed.
    """
    data = read_source(source, expected_hash=expected_hash)
    ranks = parse_ranks(data.splitlines())
    logger.debug("Loaded ranks", extra={"source": os.fspath(source), "size": len(ranks)})
    return ranks


def resolve_source(filename: str) -> str:
    """
    Return where to load rank file ``filename`` from.

    The local vocabulary directory wins if it holds the file; otherwise the
    download URL is returned.
    """
    local = vocab_dir()
    if local is not None and (local / filename).is_file():
        return str(local / filename)
    return f"{base_url()}/{filename}"
