"""Configuration for the Yandex.Disk public API client.

This module defines the ClientConfig dataclass shared by the HTTP client,
the tree walker, the downloader and the CLI.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any

from yadloader import __version__
from yadloader.core.types import BackoffStrategy, FailurePolicy

DEFAULT_API_BASE = "https://cloud-api.yandex.net"
DEFAULT_LIMIT = 100
DEFAULT_TIMEOUT = 10.0  # seconds
DEFAULT_PAGE_DELAY = 5.0  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_WAIT_MAX = 30.0  # seconds
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB


@dataclass(frozen=True)
class ClientConfig:
    """Settings for listing and downloading a public share.

    A config is immutable once built; one instance is shared by every
    request an HTTPClient makes.

    Attributes:
        api_base: Root URL of the public API (trailing slash removed).
        limit: Number of items requested per listing page.
        timeout: Per-request timeout in seconds.
        page_delay: Pause in seconds between two pages of the same directory.
        max_retries: Retries after the first attempt of a request.
        retry_wait_min: Minimum wait between attempts (defaults to page_delay).
        retry_wait_max: Upper bound for any wait between attempts.
        backoff: Exponential or fixed wait between attempts.
        chunk_size: Buffer size used when streaming a download.
        max_depth: Optional bound on directory nesting below the start path.
        max_files: Optional bound on the number of files a walk may return.
        verify_checksum: Check downloaded bytes against the listed hash.
        on_download_error: Batch policy when a single download fails.
        user_agent: User-Agent header sent with every request.
    """

    api_base: str = DEFAULT_API_BASE
    limit: int = DEFAULT_LIMIT
    timeout: float = DEFAULT_TIMEOUT
    page_delay: float = DEFAULT_PAGE_DELAY
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_wait_min: float | None = None
    retry_wait_max: float = DEFAULT_RETRY_WAIT_MAX
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_depth: int | None = None
    max_files: int | None = None
    verify_checksum: bool = False
    on_download_error: FailurePolicy = FailurePolicy.CONTINUE
    user_agent: str = f"yadloader/{__version__}"

    def __post_init__(self) -> None:
        """Normalize values and reject impossible settings."""
        # Frozen dataclass: normalization goes through object.__setattr__
        object.__setattr__(self, "api_base", self.api_base.rstrip("/"))
        object.__setattr__(self, "backoff", BackoffStrategy(self.backoff))
        object.__setattr__(
            self, "on_download_error", FailurePolicy(self.on_download_error)
        )
        if self.retry_wait_min is None:
            object.__setattr__(self, "retry_wait_min", self.page_delay)

        for name in ("limit", "chunk_size", "max_retries", "max_depth", "max_files"):
            value = getattr(self, name)
            if value is None and name in ("max_depth", "max_files"):
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("timeout", "page_delay", "retry_wait_min", "retry_wait_max"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")

        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        for name in ("page_delay", "retry_wait_min", "retry_wait_max"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("max_depth", "max_files"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Create from a mapping such as a parsed JSON config file.

        Raises:
            ValueError: If the mapping contains unknown keys or bad values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @property
    def resources_url(self) -> str:
        """URL of the public resources listing endpoint."""
        return f"{self.api_base}/v1/disk/public/resources"
