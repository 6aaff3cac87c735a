#!/usr/bin/env python3
"""
Prefetch rank files for the registered encodings.

Downloads each encoding's rank file into the bpecodec download cache so later
runs (including BPECODEC_OFFLINE=1 runs) never touch the network. Each file is
parsed after download to catch truncated or corrupted copies.

Usage:
    python scripts/fetch_vocabularies.py

    # Only some encodings
    python scripts/fetch_vocabularies.py cl100k_base p50k_base

    # Force re-download (skip cache)
    python scripts/fetch_vocabularies.py --force

    # Also copy the files into a directory usable as BPECODEC_VOCAB_DIR
    python scripts/fetch_vocabularies.py --export vocab/

Output:
    $BPECODEC_CACHE_DIR/<sha1 of url>   (default ~/.cache/bpecodec)
"""

import argparse
import shutil
import sys
from pathlib import Path

from bpecodec import registry, vocab_loader
from bpecodec.exceptions import CodecError


def fetch_all(names: list[str], force: bool = False, export: Path | None = None) -> dict:
    """Fetch the rank file of every named encoding; return per-status lists."""
    results = {"success": [], "failed": []}
    seen: set[str] = set()

    for i, name in enumerate(names, 1):
        spec = registry.get_spec(name)
        if spec.filename in seen:
            print(f"[{i}/{len(names)}] {name}... shares {spec.filename} ✓")
            results["success"].append(name)
            continue
        seen.add(spec.filename)

        url = f"{vocab_loader.base_url()}/{spec.filename}"
        print(f"[{i}/{len(names)}] {name}...", end=" ", flush=True)
        try:
            path = vocab_loader.fetch(url, force=force)
            ranks = vocab_loader.parse_ranks(path.read_bytes().splitlines())
        except CodecError as e:
            print(f"✗ {e}")
            results["failed"].append(name)
            continue

        if export is not None:
            export.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, export / spec.filename)

        print(f"✓ ({len(ranks)} ranks)")
        results["success"].append(name)

    return results


def main():
    parser = argparse.ArgumentParser(description="Prefetch bpecodec rank files")
    parser.add_argument(
        "encodings",
        nargs="*",
        help="encodings to fetch (default: all registered)",
    )
    parser.add_argument("--force", action="store_true", help="Re-download (ignore cache)")
    parser.add_argument("--export", type=Path, help="Copy rank files into this directory")
    args = parser.parse_args()

    names = args.encodings or registry.list_encodings()
    unknown = sorted(set(names) - set(registry.list_encodings()))
    if unknown:
        parser.error(f"unknown encodings: {', '.join(unknown)}")

    if vocab_loader.is_offline():
        print("⚠ BPECODEC_OFFLINE is set - only cached files will be found\n")

    results = fetch_all(names, force=args.force, export=args.export)

    print(f"\n{'=' * 70}")
    print("SUMMARY")
    print(f"{'=' * 70}")
    print(f"  Fetched: {len(results['success']):3}")
    print(f"  Failed:  {len(results['failed']):3}")
    print(f"\nCache directory: {vocab_loader.cache_dir()}")
    if args.export is not None:
        print(f"Exported to: {args.export} (set BPECODEC_VOCAB_DIR to use it)")

    return 1 if results["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
