"""Shared test fixtures for dropbox_content_hash."""

import hashlib

import pytest

from dropbox_content_hash.checksum import BLOCK_SIZE


def _reference_hash(data: bytes) -> bytes:
    outer = hashlib.sha256()
    for start in range(0, len(data), BLOCK_SIZE):
        outer.update(hashlib.sha256(data[start : start + BLOCK_SIZE]).digest())
    return outer.digest()


@pytest.fixture
def reference_hash():
    """Content hash computed directly with hashlib, independent of the package."""
    return _reference_hash


@pytest.fixture(scope="session")
def one_block() -> bytes:
    """Exactly one block of 0x1e."""
    return bytes([30]) * BLOCK_SIZE


@pytest.fixture(scope="session")
def mixed_data() -> bytes:
    """Two and a half blocks (plus 7 bytes) whose blocks all differ."""
    pattern = bytes(range(251))  # prime length, so no two blocks are equal
    n = BLOCK_SIZE * 2 + BLOCK_SIZE // 2 + 7
    return (pattern * (n // len(pattern) + 1))[:n]
