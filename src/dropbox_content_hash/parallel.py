"""Compute a content hash using several threads.

Block digests are independent, so they can be computed concurrently and
then combined in stream order.  ``hashlib`` releases the GIL while hashing
large buffers, so a thread pool gives real parallelism here.

Both entry points collect digests by block position, never by completion
order, and finish with the same ``combine_block_digests`` the sequential
``ContentHasher`` uses.  The result is therefore byte-identical for any
worker count.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import BinaryIO

from dropbox_content_hash.checksum import BLOCK_SIZE, block_digest, combine_block_digests
from dropbox_content_hash.errors import IncompleteBlock, InvalidWorkerCount
from dropbox_content_hash.hasher import BlockCallback

logger = logging.getLogger(__name__)

# In-flight blocks per worker for the streaming reader.  Bounds memory to
# roughly IN_FLIGHT_PER_WORKER * max_workers * BLOCK_SIZE.
IN_FLIGHT_PER_WORKER = 2


def _check_workers(max_workers: int) -> None:
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise InvalidWorkerCount(max_workers)


def block_ranges(length: int) -> list[tuple[int, int]]:
    """Split ``[0, length)`` into block-aligned ``(start, end)`` ranges.

    Every range is BLOCK_SIZE long except possibly the last.  Zero length
    gives no ranges.
    """
    return [(start, min(start + BLOCK_SIZE, length)) for start in range(0, length, BLOCK_SIZE)]


def _cancel(futures: Iterable[Future]) -> None:
    for f in futures:
        f.cancel()


def _emit(digests: list[bytes], on_block: BlockCallback | None, start: int = 0) -> None:
    if on_block is not None:
        for index in range(start, len(digests)):
            on_block(index, digests[index])


def hash_parallel(
    data: bytes | bytearray | memoryview,
    max_workers: int,
    on_block: BlockCallback | None = None,
) -> bytes:
    """Content hash of an in-memory buffer, digesting blocks on a thread pool.

    Args:
        data: The complete input.
        max_workers: Pool size, at least 1.
        on_block: ``(index, digest)`` callback, called in stream order after
            every block has been digested.

    Returns:
        The 32-byte content hash, equal to the sequential result.

    Raises:
        InvalidWorkerCount: If *max_workers* < 1.
    """
    _check_workers(max_workers)
    view = memoryview(data).cast("B")
    ranges = block_ranges(len(view))
    digests: list[bytes] = [b""] * len(ranges)
    if ranges:
        logger.debug("Hashing %d block(s) on %d worker(s)", len(ranges), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dbx-hash") as pool:
            futures = {
                pool.submit(block_digest, view[start:end]): index
                for index, (start, end) in enumerate(ranges)
            }
            try:
                for fut in as_completed(futures):
                    digests[futures[fut]] = fut.result()
            except BaseException:
                _cancel(futures)
                raise
    _emit(digests, on_block)
    return combine_block_digests(digests)


def _read_block(source: BinaryIO) -> bytes:
    """Read up to one full block, looping over short reads until EOF."""
    parts: list[bytes] = []
    need = BLOCK_SIZE
    while need:
        try:
            chunk = source.read(need)
        except InterruptedError:
            continue
        if chunk is None:
            raise BlockingIOError("source returned no data before EOF")
        if not chunk:
            break
        parts.append(chunk)
        need -= len(chunk)
    return b"".join(parts)


def hash_stream_parallel(
    source: BinaryIO,
    max_workers: int,
    on_block: BlockCallback | None = None,
) -> bytes:
    """Content hash of a binary stream, digesting blocks on a thread pool.

    Blocks are read on the calling thread and handed to the pool, with at
    most ``IN_FLIGHT_PER_WORKER * max_workers`` blocks outstanding.  Digests
    are collected in submission order, and *on_block* sees them in that
    order as they are collected.

    Raises:
        InvalidWorkerCount: If *max_workers* < 1.
        IncompleteBlock: If a short block is followed by more data.
        OSError: Whatever the source raises; no partial hash is returned.
    """
    _check_workers(max_workers)
    limit = IN_FLIGHT_PER_WORKER * max_workers
    digests: list[bytes] = []
    pending: deque[Future] = deque()
    offset = 0
    short_at: int | None = None

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dbx-hash") as pool:
        try:
            while True:
                block = _read_block(source)
                if not block:
                    break
                if short_at is not None:
                    raise IncompleteBlock(short_at)
                if len(block) < BLOCK_SIZE:
                    short_at = offset
                pending.append(pool.submit(block_digest, block))
                offset += len(block)
                while len(pending) >= limit:
                    digests.append(pending.popleft().result())
                    _emit(digests, on_block, len(digests) - 1)
            while pending:
                digests.append(pending.popleft().result())
                _emit(digests, on_block, len(digests) - 1)
        except BaseException:
            _cancel(pending)
            raise

    logger.debug("Hashed %d bytes in %d block(s) on %d worker(s)", offset, len(digests), max_workers)
    return combine_block_digests(digests)
