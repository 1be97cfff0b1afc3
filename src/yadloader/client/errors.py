"""Exceptions raised by the Yandex.Disk public API client.

This module provides:
- YaDiskError: Base class for every client error
- TransportError: Network failure or non-2xx response after retries
- DecodeError: Listing response does not have the expected shape
- CancellationError: Operation cancelled by the caller
- SinkError: Local write failure while downloading
- ChecksumError: Downloaded bytes do not match the listed size or hash
- TreeLimitError: Configured depth or file-count bound exceeded
"""

from __future__ import annotations


class YaDiskError(Exception):
    """Base exception for client errors."""


class TransportError(YaDiskError):
    """Request failed permanently."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(YaDiskError):
    """Malformed or unexpected listing response."""


class CancellationError(YaDiskError):
    """Operation cancelled before completion."""


class SinkError(YaDiskError):
    """Destination rejected downloaded bytes."""


class ChecksumError(YaDiskError):
    """Downloaded content does not match the listed metadata."""

    def __init__(self, path: str, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch for {path}: expected {expected}, got {actual}")


class TreeLimitError(YaDiskError):
    """Walk exceeded max_depth or max_files."""
