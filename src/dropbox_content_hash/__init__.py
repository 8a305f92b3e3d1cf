"""Dropbox Content Hash calculation.

A Dropbox content hash divides a file into 4 MiB blocks, takes the SHA-256
of each block, concatenates those digests and takes the SHA-256 of that.
Dropbox reports this value for every stored file, so it can be used to
verify uploads and downloads without transferring the file again.
"""

from dropbox_content_hash.checksum import (
    BLOCK_SIZE,
    HASH_OUTPUT_SIZE,
    block_digest,
    combine_block_digests,
    hex_string,
    parse_hex,
)
from dropbox_content_hash.errors import (
    BlockTooLarge,
    ConfigError,
    ContentHashError,
    ContractViolation,
    HasherFinalized,
    HasherPoisoned,
    IncompleteBlock,
    InvalidContentHash,
    InvalidWorkerCount,
)
from dropbox_content_hash.files import content_hash_file
from dropbox_content_hash.hasher import ContentHasher, content_hash, content_hash_hex
from dropbox_content_hash.parallel import hash_parallel, hash_stream_parallel

__version__ = "0.1.0"

__all__ = [
    "BLOCK_SIZE",
    "HASH_OUTPUT_SIZE",
    "BlockTooLarge",
    "ConfigError",
    "ContentHashError",
    "ContentHasher",
    "ContractViolation",
    "HasherFinalized",
    "HasherPoisoned",
    "IncompleteBlock",
    "InvalidContentHash",
    "InvalidWorkerCount",
    "block_digest",
    "combine_block_digests",
    "content_hash",
    "content_hash_file",
    "content_hash_hex",
    "hash_parallel",
    "hash_stream_parallel",
    "hex_string",
    "parse_hex",
]
