"""Exception hierarchy for dropbox_content_hash.

Every error message says what happened and what to do about it.
Contract violations are caller mistakes and subclass ``ValueError`` so
generic argument checks still catch them.
"""


class ContentHashError(Exception):
    """Base class for all content hash errors."""


class ContractViolation(ContentHashError, ValueError):
    """The caller broke the hasher's usage contract."""


class BlockTooLarge(ContractViolation):
    """A single block digest was requested over more than one block of bytes."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Block of {size} bytes exceeds the {limit}-byte block size. "
            f"Split the input into blocks first, or feed it through ContentHasher."
        )
        self.size = size
        self.limit = limit


class HasherFinalized(ContractViolation):
    """write() or finalize() was called on a session that already finished."""

    def __init__(self):
        super().__init__(
            "This ContentHasher has already been finalized. "
            "Call reset() to start a new session, or create a new ContentHasher."
        )


class InvalidWorkerCount(ContractViolation):
    """The parallel path was asked to run with fewer than one worker."""

    def __init__(self, workers: object):
        super().__init__(
            f"max_workers must be an integer >= 1, got {workers!r}. "
            f"Use 1 for a single worker thread."
        )
        self.workers = workers


class InvalidContentHash(ContractViolation):
    """A string could not be decoded as a 32-byte content hash."""

    def __init__(self, value: str, reason: str):
        super().__init__(
            f"Not a content hash: {value!r} ({reason}). "
            f"Expected 64 hexadecimal characters."
        )
        self.value = value
        self.reason = reason


class HasherPoisoned(ContentHashError):
    """A read or observer failure left the consumed length unknown."""

    def __init__(self, cause: BaseException):
        super().__init__(
            f"ContentHasher is unusable after a failure mid-session: {cause}. "
            f"The number of bytes consumed is unknown, so no hash can be produced. "
            f"Call reset() and hash the source again."
        )
        self.cause = cause


class IncompleteBlock(ContentHashError):
    """A short block appeared before the end of the stream."""

    def __init__(self, offset: int):
        super().__init__(
            f"Incomplete block mid-stream at offset {offset:#x}. "
            f"Only the last block of a stream may be shorter than the block size; "
            f"check that the source returns full reads until EOF."
        )
        self.offset = offset


class ConfigError(ContentHashError):
    """Configuration is missing or invalid."""

    def __init__(self, detail: str, hint: str = ""):
        msg = f"Configuration error: {detail}."
        if hint:
            msg += f" {hint}"
        super().__init__(msg)
        self.detail = detail
        self.hint = hint
