"""SHA-256 block digests and the final digest-of-digests.

These are the only two places the digest primitive is called. Each call
builds a fresh ``hashlib.sha256()`` object, so nothing is shared between
blocks or threads.
"""

from __future__ import annotations

import binascii
import hashlib
from collections.abc import Iterable

from dropbox_content_hash.errors import BlockTooLarge, ContractViolation, InvalidContentHash

BLOCK_SIZE = 4 * 1024 * 1024  # 4 MiB, fixed by Dropbox
HASH_OUTPUT_SIZE = 256 // 8


def block_digest(data: bytes | bytearray | memoryview) -> bytes:
    """Compute the SHA-256 digest of one block.

    Args:
        data: Between 0 and BLOCK_SIZE bytes.

    Returns:
        The 32-byte digest.

    Raises:
        BlockTooLarge: If *data* is longer than BLOCK_SIZE.
    """
    size = memoryview(data).nbytes
    if size > BLOCK_SIZE:
        raise BlockTooLarge(size, BLOCK_SIZE)
    return hashlib.sha256(data).digest()


def combine_block_digests(digests: Iterable[bytes]) -> bytes:
    """Hash the in-order concatenation of block digests into the content hash.

    An empty sequence gives ``sha256(b"")``.

    Raises:
        ContractViolation: If any entry is not a 32-byte digest.
    """
    h = hashlib.sha256()
    for i, d in enumerate(digests):
        if len(d) != HASH_OUTPUT_SIZE:
            raise ContractViolation(
                f"Block digest {i} is {len(d)} bytes, expected {HASH_OUTPUT_SIZE}."
            )
        h.update(d)
    return h.digest()


def hex_string(digest: bytes) -> str:
    """Lowercase hex, most significant byte first (64 chars for a content hash)."""
    return digest.hex()


def parse_hex(text: str) -> bytes:
    """Decode a 64-char hex content hash back to 32 bytes.

    Raises:
        InvalidContentHash: On wrong length or non-hex characters.
    """
    s = text.strip()
    if len(s) != HASH_OUTPUT_SIZE * 2:
        raise InvalidContentHash(text, f"length {len(s)}, expected {HASH_OUTPUT_SIZE * 2}")
    try:
        return binascii.unhexlify(s)
    except (binascii.Error, ValueError) as e:
        raise InvalidContentHash(text, "not hexadecimal") from e
