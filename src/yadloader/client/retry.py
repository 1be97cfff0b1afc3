"""Retry policy for HTTP requests.

This module provides:
- RetryPolicy: Attempt count and backoff schedule built from ClientConfig
- is_retryable_status: Classify an HTTP status as transient or permanent
- retry_request: Run a request function until it succeeds or gives up
- interruptible_sleep: Sleep that honours a cancellation check
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from yadloader.client.errors import CancellationError, TransportError
from yadloader.core.config import ClientConfig
from yadloader.core.types import BackoffStrategy

logger = logging.getLogger(__name__)

# Granularity of sleeps that can be cancelled
CANCEL_POLL_INTERVAL = 0.1  # seconds

CancelCheck = Callable[[], bool]


@dataclass(frozen=True)
class RetryPolicy:
    """When and how long to wait before retrying a request.

    Attributes:
        max_retries: Retries after the first attempt.
        wait_min: Base wait in seconds.
        wait_max: Upper bound for any single wait.
        strategy: Exponential (wait_min * 2**attempt) or fixed (wait_min).
    """

    max_retries: int = 3
    wait_min: float = 5.0
    wait_max: float = 30.0
    strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL

    @classmethod
    def from_config(cls, config: ClientConfig) -> RetryPolicy:
        """Build the policy described by a client config."""
        wait_min = config.retry_wait_min
        if wait_min is None:
            wait_min = config.page_delay
        return cls(
            max_retries=config.max_retries,
            wait_min=wait_min,
            wait_max=config.retry_wait_max,
            strategy=config.backoff,
        )

    def backoff(self, attempt: int, response: httpx.Response | None = None) -> float:
        """Seconds to wait after the given (0-based) failed attempt.

        A Retry-After header on 429/503 responses takes precedence over
        the computed schedule. Either way the wait never exceeds wait_max.
        """
        if response is not None and response.status_code in (429, 503):
            retry_after = _parse_retry_after(response)
            if retry_after is not None:
                return min(retry_after, self.wait_max)

        if self.strategy == BackoffStrategy.FIXED:
            wait = self.wait_min
        else:
            wait = self.wait_min * (2**attempt)
        return min(wait, self.wait_max)


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    # Whole seconds only; HTTP-date, fractional and non-finite values fall back
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return float(max(seconds, 0))


def is_retryable_status(status_code: int) -> bool:
    """Check if an HTTP status is worth retrying.

    Rate limiting (429) and server errors are transient, except 501
    which means the server will never support the request.
    """
    if status_code == 429:
        return True
    return 500 <= status_code <= 599 and status_code != 501


def check_cancelled(cancel_check: CancelCheck | None) -> None:
    """Raise CancellationError if the caller asked to stop."""
    if cancel_check is not None and cancel_check():
        raise CancellationError("Operation cancelled")


def interruptible_sleep(seconds: float, cancel_check: CancelCheck | None = None) -> None:
    """Sleep for the given time, waking up early to honour cancellation.

    Raises:
        CancellationError: If cancel_check returns True before or during the wait.
    """
    check_cancelled(cancel_check)
    if seconds <= 0:
        return
    if cancel_check is None:
        time.sleep(seconds)
        return

    deadline = time.monotonic() + seconds
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return
        time.sleep(min(remaining, CANCEL_POLL_INTERVAL))
        check_cancelled(cancel_check)


def retry_request(
    send: Callable[[], httpx.Response],
    policy: RetryPolicy,
    description: str,
    cancel_check: CancelCheck | None = None,
) -> httpx.Response:
    """Execute a request function with retry on transient failures.

    Network errors, 429 and retryable 5xx responses are retried according
    to the policy. Any other non-2xx response fails immediately. Responses
    that are not returned to the caller are closed.

    Args:
        send: Function performing one attempt and returning the response.
        policy: Attempt count and backoff schedule.
        description: Human-readable request label for logs and errors.
        cancel_check: Optional function polled before each attempt and while waiting.

    Returns:
        The first successful (2xx) response.

    Raises:
        TransportError: If the request fails permanently or retries are exhausted.
        CancellationError: If cancel_check returns True.
    """
    attempts = policy.max_retries + 1

    for attempt in range(attempts):
        check_cancelled(cancel_check)
        try:
            response = send()
        except httpx.TransportError as e:
            if attempt == policy.max_retries:
                logger.error(f"Giving up on {description} after {attempts} attempt(s): {e}")
                raise TransportError(
                    f"{description} failed after {attempts} attempt(s): {e}"
                ) from e
            wait = policy.backoff(attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{attempts} for {description} failed: {e}. "
                f"Retrying in {wait:.1f}s..."
            )
        else:
            if response.is_success:
                return response

            status = response.status_code
            response.close()
            if not is_retryable_status(status):
                raise TransportError(
                    f"{description} failed with status {status}", status_code=status
                )
            if attempt == policy.max_retries:
                logger.error(
                    f"Giving up on {description} after {attempts} attempt(s): status {status}"
                )
                raise TransportError(
                    f"{description} failed after {attempts} attempt(s) with status {status}",
                    status_code=status,
                )
            wait = policy.backoff(attempt, response)
            logger.warning(
                f"Attempt {attempt + 1}/{attempts} for {description} returned {status}. "
                f"Retrying in {wait:.1f}s..."
            )

        interruptible_sleep(wait, cancel_check)

    # Should not reach here, but satisfy type checker
    raise RuntimeError("Unexpected retry loop exit")
