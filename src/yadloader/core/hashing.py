"""Content hashing for downloaded files.

This module provides:
- StreamHasher: Incremental digest fed chunk by chunk during a download
- compute_file_hash: Digest of a file already on disk
"""

from __future__ import annotations

import hashlib
from pathlib import Path

SUPPORTED_ALGORITHMS = ("sha256", "md5")


class StreamHasher:
    """Incremental hash checked against an expected hex digest."""

    def __init__(self, algorithm: str, expected: str) -> None:
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.algorithm = algorithm
        self.expected = expected.lower()
        self._hasher = hashlib.new(algorithm)

    def update(self, chunk: bytes) -> None:
        self._hasher.update(chunk)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    def matches(self) -> bool:
        """Check whether the bytes seen so far produce the expected digest."""
        return self.hexdigest() == self.expected


def compute_file_hash(path: Path, algorithm: str = "sha256") -> str:
    """Compute the hash of a file.

    Reads the file in chunks to handle large files efficiently.

    Args:
        path: Path to the file to hash.
        algorithm: "sha256" or "md5".

    Returns:
        Hexadecimal hash string.
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(65536), b""):
            hasher.update(block)
    return hasher.hexdigest()
