"""Core module - Configuration, shared types and hashing."""

from yadloader.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LIMIT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_DELAY,
    DEFAULT_TIMEOUT,
    ClientConfig,
)
from yadloader.core.hashing import StreamHasher, compute_file_hash
from yadloader.core.types import BackoffStrategy, EntryType, FailurePolicy

__all__ = [
    # Config
    "ClientConfig",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_LIMIT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_PAGE_DELAY",
    "DEFAULT_TIMEOUT",
    # Hashing
    "StreamHasher",
    "compute_file_hash",
    # Types
    "BackoffStrategy",
    "EntryType",
    "FailurePolicy",
]
