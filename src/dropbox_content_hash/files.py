"""Content hashes of files on disk."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from dropbox_content_hash.checksum import hex_string
from dropbox_content_hash.hasher import BlockCallback, ContentHasher
from dropbox_content_hash.parallel import hash_stream_parallel


class ProgressReader:
    """Wrap a binary stream and report the running byte count after each read."""

    def __init__(self, raw: BinaryIO, on_progress: Callable[[int], None]):
        self._raw = raw
        self._on_progress = on_progress
        self.bytes_read = 0

    def _advance(self, n: int) -> None:
        self.bytes_read += n
        self._on_progress(self.bytes_read)

    def read(self, size: int = -1) -> bytes | None:
        data = self._raw.read(size)
        if data:
            self._advance(len(data))
        return data

    def readinto(self, buf) -> int | None:
        n = self._raw.readinto(buf)
        if n:
            self._advance(n)
        return n


def content_hash_file(
    path: Path,
    workers: int = 1,
    on_progress: Callable[[int], None] | None = None,
    on_block: BlockCallback | None = None,
) -> str:
    """Compute the Dropbox content hash of a file.

    Args:
        path: File to hash.
        workers: 1 uses the sequential ContentHasher; more uses a thread pool.
        on_progress: Called with the cumulative byte count after each read.
        on_block: ``(index, digest)`` callback, called in stream order.

    Returns:
        Lowercase hex digest string (64 chars).

    Raises:
        FileNotFoundError: If path does not exist.
        IsADirectoryError: If path is a directory.
    """
    with open(path, "rb") as f:
        source: BinaryIO = f
        if on_progress is not None:
            source = ProgressReader(f, on_progress)  # type: ignore[assignment]
        if workers > 1:
            return hex_string(hash_stream_parallel(source, workers, on_block=on_block))
        return ContentHasher.from_stream(source, on_block=on_block).finalize_hex()
