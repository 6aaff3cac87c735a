"""
Structured logging (OpenTelemetry-compliant).

All bpecodec modules log through one ``bpecodec`` logger via scoped adapters.
Records are rendered either as OpenTelemetry Logging Data Model JSON (one
object per line) or as a compact human-readable line.

Usage::

    from ._logging import scoped_logger

    logger = scoped_logger("loader")
    logger.info("Downloading vocabulary", extra={"url": url})

Environment::

    BPECODEC_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    BPECODEC_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = ["logger", "setup_logging", "scoped_logger"]

_OFF = logging.CRITICAL + 10

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": _OFF,
}

# OpenTelemetry severity text
_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Levels that carry code location
_LOCATED = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

# Attributes every LogRecord has; anything else came from ``extra``.
_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName", "scope"}

_SCOPES = ("loader", "registry", "tokenizer", "cli")


def _level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    return _LEVELS.get(value.lower(), logging.INFO)


def _scope(record: logging.LogRecord) -> str:
    scope = getattr(record, "scope", None)
    if scope:
        return scope
    leaf = record.name.rsplit(".", 1)[-1]
    if leaf in ("codec", "bpe", "splitter", "vocabulary"):
        return "tokenizer"
    if leaf == "vocab_loader":
        return "loader"
    return leaf if leaf in _SCOPES else record.name or "bpecodec"


def _extra(record: logging.LogRecord) -> dict[str, Any]:
    """Attributes passed through ``extra=``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_FIELDS and not key.startswith("_")
    }


def _location(record: logging.LogRecord) -> tuple[str, int]:
    path = record.pathname.replace(os.sep, "/")
    marker = "bpecodec/"
    if marker in path:
        path = path[path.rindex(marker) + len(marker) :]
    return path, record.lineno


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """One OpenTelemetry log record per line."""

    def format(self, record: logging.LogRecord) -> str:
        # RFC3339 with nanosecond precision; Python only has microseconds.
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = created.strftime("%Y-%m-%dT%H:%M:%S") + f".{created.microsecond * 1000:09d}Z"

        attributes = {"scope": _scope(record), **_extra(record)}
        if record.levelno in _LOCATED:
            attributes["code.filepath"], attributes["code.lineno"] = _location(record)
        if record.exc_info:
            attributes["exception.stacktrace"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                "timestamp": timestamp,
                "severityText": _SEVERITY.get(record.levelno, "INFO"),
                "body": record.getMessage(),
                "attributes": attributes,
                "resource": {"service.name": "bpecodec", "service.version": __version__},
            },
            separators=(",", ":"),
            default=str,
        )


class HumanFormatter(logging.Formatter):
    """
    Single-line terminal output.

    ``12:00:01 INFO  [loader] Downloading vocabulary url=https://...``
    """

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _CYAN = "\x1b[36m"
    _COLORS = {
        logging.DEBUG: "\x1b[2m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31m",
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str | None) -> str:
        if not self._use_colors or not color:
            return text
        return f"{color}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S")
        severity = _SEVERITY.get(record.levelno, "INFO")

        line = " ".join(
            [
                time_str,
                self._paint(f"{severity:<5}", self._COLORS.get(record.levelno)),
                self._paint(f"[{_scope(record)}]", self._CYAN),
                record.getMessage(),
            ]
        )
        extra = _extra(record)
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        if record.levelno in _LOCATED:
            path, lineno = _location(record)
            line += " " + self._paint(f"[{path}:{lineno}]", self._DIM)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# =============================================================================
# Logger Setup
# =============================================================================

logger = logging.getLogger("bpecodec")


def _make_handler(format: str | None = None) -> logging.Handler:
    fmt = (format or os.environ.get("BPECODEC_LOG_FORMAT") or "").lower()
    if not fmt:
        fmt = "human" if sys.stderr.isatty() else "json"

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


def setup_logging(level: str | int = "INFO", format: str | None = None) -> None:
    """
    Configure bpecodec logging.

    Replaces any handlers on the ``bpecodec`` logger with a single stderr
    handler.

    Parameters
    ----------
    level : str or int, default "INFO"
        Level name ("trace", "debug", "info", "warn", "error", "fatal",
        "off"; case-insensitive) or a ``logging`` constant. Unknown names
        fall back to INFO.
    format : str, optional
        "json" or "human". Defaults to ``BPECODEC_LOG_FORMAT``, then to
        human on a terminal and json otherwise.

    Examples
    --------
        >>> import bpecodec
        >>> bpecodec.setup_logging("DEBUG", format="human")
    """
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_make_handler(format))
    logger.setLevel(_level(level))


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds a fixed scope to every record, keeping per-call ``extra``."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Return an adapter on the bpecodec logger that tags records with ``scope``.

    Scopes in use: "tokenizer", "registry", "loader", "cli".
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# Default handler unless the application configured one already
if not logger.handlers:
    logger.addHandler(_make_handler())
    logger.setLevel(_level(os.environ.get("BPECODEC_LOG_LEVEL", "info")))
