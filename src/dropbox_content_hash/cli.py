#!/usr/bin/env python3
"""Calculate and print the Dropbox content hash of a file.

Usage:
    dropbox-content-hash path/to/file
    dropbox-content-hash --workers 4 --blocks big.iso
    python -m dropbox_content_hash --config ./config.yaml file.bin

Exit codes: 0 success, 1 config error, 2 I/O error (argparse also exits 2 on bad arguments).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dropbox_content_hash.checksum import hex_string
from dropbox_content_hash.config import load_config, parse_workers
from dropbox_content_hash.errors import ConfigError, ContentHashError
from dropbox_content_hash.files import content_hash_file

logger = logging.getLogger("dropbox_content_hash")

_LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s"
_stderr_handler: logging.Handler | None = None


def _configure_logging(level: str) -> None:
    """Attach a stderr handler to the package logger (idempotent)."""
    global _stderr_handler
    if _stderr_handler is None:
        _stderr_handler = logging.StreamHandler(sys.stderr)
        _stderr_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(_stderr_handler)
    logger.setLevel(level)
    _stderr_handler.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dropbox-content-hash",
        description="Calculate and print the Dropbox Content Hash of the given file.",
    )
    parser.add_argument("file", type=Path, help="file to hash")
    parser.add_argument(
        "-w",
        "--workers",
        help="worker threads for block digests (integer or 'auto'; default from config)",
    )
    parser.add_argument("-c", "--config", type=Path, help="path to config.yaml")
    parser.add_argument(
        "--blocks", action="store_true", help="print each block digest on stderr"
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="do not print read progress on stderr"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
        workers = parse_workers(args.workers) if args.workers is not None else cfg.workers
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _configure_logging("DEBUG" if args.verbose else cfg.log_level)

    path: Path = args.file
    try:
        size = path.stat().st_size
    except OSError:
        size = None  # no size, no progress

    show_progress = cfg.progress and not args.no_progress and bool(size)

    def on_progress(done: int) -> None:
        print(f"\r{done / size * 100:.1f}%", end="", file=sys.stderr, flush=True)

    def on_block(index: int, digest: bytes) -> None:
        print(f"block {index}: {hex_string(digest)}", file=sys.stderr)

    logger.info("Hashing %s with %d worker(s)", path, workers)
    try:
        result = content_hash_file(
            path,
            workers=workers,
            on_progress=on_progress if show_progress else None,
            on_block=on_block if args.blocks else None,
        )
    except OSError as e:
        if show_progress:
            print("\r", end="", file=sys.stderr)
        print(f"Failed to read {str(path)!r}: {e}", file=sys.stderr)
        return 2
    except ContentHashError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if show_progress:
        print("\r", end="", file=sys.stderr)
    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
