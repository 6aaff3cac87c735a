"""
Command line front end.

Usage:
    bpecodec --encode "hello world"
    bpecodec --encode "hello world" --tokens
    bpecodec --encoding p50k_base --decode 31373 995
    bpecodec --model gpt-4 --encode "hello world" --count
    bpecodec --list-encodings
"""

from __future__ import annotations

import argparse
import sys

from ._logging import scoped_logger, setup_logging
from .exceptions import CodecError, ValidationError
from .registry import for_model, get_encoding, list_encodings
from .tokenizer.codec import Codec

logger = scoped_logger("cli")

DEFAULT_MODEL = "gpt-3.5-turbo"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bpecodec",
        description="Encode text to token ids or decode token ids to text.",
    )
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help=f"model to tokenize for (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--encoding",
        help="encoding name; takes precedence over --model",
    )
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--encode", metavar="TEXT", help="text to encode")
    action.add_argument(
        "--decode",
        metavar="ID",
        nargs="+",
        help="token ids to decode (space separated)",
    )
    action.add_argument(
        "--list-encodings",
        action="store_true",
        help="list supported encodings and exit",
    )
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="print token strings instead of token ids",
    )
    parser.add_argument(
        "--count",
        action="store_true",
        help="print only the number of tokens",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="log level (trace|debug|info|warn|error|off)",
    )
    return parser


def _codec(model: str, encoding: str | None) -> Codec:
    if encoding:
        return get_encoding(encoding)
    return for_model(model)


def _parse_ids(values: list[str]) -> list[int]:
    ids = []
    for value in " ".join(values).split():
        try:
            token_id = int(value)
        except ValueError:
            raise ValidationError(
                f"invalid token id: {value}", details={"value": value}
            ) from None
        if token_id < 0:
            raise ValidationError(f"invalid token id: {value}", details={"value": value})
        ids.append(token_id)
    return ids


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line; return the exit status."""
    if args.list_encodings:
        for name in list_encodings():
            print(name)
        return 0

    codec = _codec(args.model, args.encoding)
    logger.debug("Using codec", extra={"encoding": codec.name})

    if args.encode is not None:
        if args.count:
            print(codec.count(args.encode))
            return 0
        tokens = codec.encode(args.encode)
        if args.tokens:
            print(" ".join(tokens.tokens))
        else:
            print(" ".join(str(t) for t in tokens))
        return 0

    ids = _parse_ids(args.decode)
    print(codec.decode(ids))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        setup_logging(args.log_level)
    if not args.list_encodings and args.encode is None and args.decode is None:
        parser.error("one of --encode, --decode or --list-encodings is required")

    try:
        return run(args)
    except CodecError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
