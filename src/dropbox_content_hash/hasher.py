"""Incremental Dropbox content hashing.

``ContentHasher`` accepts bytes in chunks of any size and frames them into
4 MiB blocks.  A block digest is flushed only when the buffer holds exactly
BLOCK_SIZE bytes, so the result never depends on how the caller chunks its
writes.  ``finalize()`` digests the trailing partial block (if any) and
hashes the concatenated block digests.

Usage::

    h = ContentHasher()
    for chunk in chunks:
        h.write(chunk)
    print(h.finalize_hex())

Block framing:

    len == 0                 → 0 block digests → sha256(b"")
    len == N * BLOCK_SIZE    → N block digests (never an extra empty one)
    len == N * BLOCK_SIZE + r → N + 1 block digests, the last over r bytes
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import BinaryIO

from dropbox_content_hash.checksum import (
    BLOCK_SIZE,
    block_digest,
    combine_block_digests,
    hex_string,
)
from dropbox_content_hash.errors import HasherFinalized, HasherPoisoned

logger = logging.getLogger(__name__)

BlockCallback = Callable[[int, bytes], None]


class ContentHasher:
    """A single hashing session.  Not safe for concurrent use.

    Args:
        on_block: Optional ``(index, digest)`` callback, called in stream
            order each time a block digest is appended.
    """

    def __init__(self, on_block: BlockCallback | None = None):
        self._on_block = on_block
        self._buf = bytearray(BLOCK_SIZE)
        self._buffered = 0
        self._digests: list[bytes] = []
        self._finalized = False
        self._poisoned: BaseException | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def buffered(self) -> int:
        """Bytes held in the current, incomplete block (always < BLOCK_SIZE)."""
        return self._buffered

    @property
    def block_count(self) -> int:
        """Block digests accumulated so far."""
        return len(self._digests)

    @property
    def bytes_written(self) -> int:
        return len(self._digests) * BLOCK_SIZE + self._buffered

    @property
    def finalized(self) -> bool:
        return self._finalized

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _check_usable(self) -> None:
        if self._poisoned is not None:
            raise HasherPoisoned(self._poisoned)
        if self._finalized:
            raise HasherFinalized()

    def _append(self, digest: bytes) -> int:
        index = len(self._digests)
        self._digests.append(digest)
        logger.debug("block %d: %s", index, hex_string(digest))
        return index

    def _notify(self, index: int) -> None:
        if self._on_block is not None:
            self._on_block(index, self._digests[index])

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Append *data* to the stream.  Empty input is a no-op.

        An exception raised part way through (including from ``on_block``)
        poisons the session, since the bytes consumed are then unknown.
        """
        self._check_usable()
        view = memoryview(data).cast("B")
        n = len(view)
        pos = 0
        try:
            while pos < n:
                take = min(BLOCK_SIZE - self._buffered, n - pos)
                if self._buffered == 0 and take == BLOCK_SIZE:
                    # Whole block available in the input: digest it in place.
                    index = self._append(block_digest(view[pos : pos + take]))
                    pos += take
                    self._notify(index)
                    continue
                end = self._buffered + take
                self._buf[self._buffered : end] = view[pos : pos + take]
                pos += take
                if end == BLOCK_SIZE:
                    digest = block_digest(self._buf)
                    self._buffered = 0
                    self._notify(self._append(digest))
                else:
                    self._buffered = end
        except BaseException as e:
            self._poison(e)
            raise

    update = write

    def finalize(self) -> bytes:
        """Finish the session and return the 32-byte content hash.

        Raises:
            HasherFinalized: If called twice without ``reset()``.
            HasherPoisoned: If an earlier failure left the session unusable.
        """
        self._check_usable()
        self._finalized = True
        tail: int | None = None
        try:
            if self._buffered:
                tail = self._append(block_digest(memoryview(self._buf)[: self._buffered]))
                self._buffered = 0
            result = combine_block_digests(self._digests)
            if tail is not None:
                self._notify(tail)
        except BaseException as e:
            self._poison(e)
            raise
        logger.debug("content hash over %d block(s): %s", len(self._digests), hex_string(result))
        return result

    finish = finalize

    def finalize_hex(self) -> str:
        """Finish the session and return the hash as 64 lowercase hex chars."""
        return hex_string(self.finalize())

    hexdigest = finalize_hex

    def reset(self) -> None:
        """Discard all state so the hasher can be reused."""
        self._buffered = 0
        self._digests = []
        self._finalized = False
        self._poisoned = None

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def _poison(self, exc: BaseException) -> None:
        self._poisoned = exc
        logger.warning(
            "Hashing aborted after %d bytes; hasher is unusable: %r", self.bytes_written, exc
        )

    def read_stream(self, source: BinaryIO, read_size: int = BLOCK_SIZE) -> int:
        """Drain a binary file-like object into the hasher.

        Interrupted reads are retried.  Any other ``OSError`` poisons the
        session and is re-raised, since the consumed length is then unknown.

        Returns:
            Number of bytes consumed.
        """
        self._check_usable()
        buf = bytearray(read_size)
        mv = memoryview(buf)
        readinto = getattr(source, "readinto", None)
        total = 0
        while True:
            try:
                if readinto is not None:
                    n = readinto(mv)
                    chunk = mv[:n] if n else b""
                else:
                    chunk = source.read(read_size)
                    n = None if chunk is None else len(chunk)
            except InterruptedError:
                continue
            except OSError as e:
                self._poison(e)
                raise
            if n is None:
                # Non-blocking source with nothing ready: length consumed is ambiguous.
                err = BlockingIOError("source returned no data before EOF")
                self._poison(err)
                raise err
            if n == 0:
                break
            self.write(chunk)
            total += n
        return total

    @classmethod
    def from_stream(
        cls, source: BinaryIO, on_block: BlockCallback | None = None
    ) -> ContentHasher:
        """Create a hasher that has already consumed all of *source*."""
        h = cls(on_block=on_block)
        h.read_stream(source)
        return h


def content_hash(data: bytes | bytearray | memoryview) -> bytes:
    """One-shot sequential content hash of an in-memory buffer."""
    h = ContentHasher()
    h.write(data)
    return h.finalize()


def content_hash_hex(data: bytes | bytearray | memoryview) -> str:
    """One-shot sequential content hash, hex encoded."""
    return hex_string(content_hash(data))
