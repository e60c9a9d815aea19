"""
Command-line entry point to fingerprint image files.

Usage:
    image-fingerprint [--algorithm ahash|dhash|both] [--json] PATH [PATH ...]
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from image_fingerprint.app_context import initialize_app
from image_fingerprint.services.batch import BatchFingerprinter, FingerprintResult, iter_image_files
from image_fingerprint.services.fingerprint_service import AHASH, DHASH
from image_fingerprint.utils.hashing import format_fingerprint

ALGORITHM_CHOICES = {"ahash": (AHASH,), "dhash": (DHASH,), "both": (AHASH, DHASH)}


def _format_line(result: FingerprintResult) -> str:
    if result.error:
        return f"{result.path}\terror={result.error}"
    fields = [str(result.path)]
    if result.ahash is not None:
        fields.append(f"ahash={format_fingerprint(result.ahash)}")
    if result.dhash is not None:
        fields.append(f"dhash={format_fingerprint(result.dhash)}")
    return "\t".join(fields)


def _as_record(result: FingerprintResult) -> dict[str, str | None]:
    return {
        "path": str(result.path),
        "ahash": format_fingerprint(result.ahash) if result.ahash is not None else None,
        "dhash": format_fingerprint(result.dhash) if result.dhash is not None else None,
        "error": result.error,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute average and difference hashes of images.")
    parser.add_argument("paths", nargs="+", type=Path, help="Image files or folders.")
    parser.add_argument("--config", type=Path, help="Config TOML path (defaults to ~/.image_fingerprint).")
    parser.add_argument(
        "--algorithm", choices=sorted(ALGORITHM_CHOICES), default="both", help="Hash(es) to compute."
    )
    parser.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Descend into sub-folders (defaults to config batch.recursive).",
    )
    parser.add_argument("--workers", type=int, help="Worker threads (defaults to config batch.max_workers).")
    parser.add_argument("--dump-dir", type=Path, help="Save the hashed thumbnails as JPEG here.")
    parser.add_argument("--json", action="store_true", help="Print results as JSON.")
    args = parser.parse_args(argv)

    context = initialize_app(config_path=args.config)
    recursive = context.recursive if args.recursive is None else args.recursive
    files = list(iter_image_files(args.paths, recursive=recursive))
    fingerprinter = BatchFingerprinter(
        backend=context.backend,
        max_workers=args.workers or context.max_workers,
        algorithms=ALGORITHM_CHOICES[args.algorithm],
        dump_dir=args.dump_dir,
    )
    results = fingerprinter.run(files)

    if args.json:
        print(json.dumps([_as_record(result) for result in results], indent=2))
    else:
        for result in results:
            print(_format_line(result))
    return 0 if all(result.ok for result in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
