"""Shared types for yadloader.

This module defines enums used by the API client, the configuration and the CLI.
"""

from __future__ import annotations

from enum import Enum


class EntryType(str, Enum):
    """Kind of a resource returned by the public resources API."""

    FILE = "file"
    DIR = "dir"


class BackoffStrategy(str, Enum):
    """How the wait between two retry attempts grows."""

    EXPONENTIAL = "exponential"
    FIXED = "fixed"


class FailurePolicy(str, Enum):
    """What a download batch does when a single file fails.

    CONTINUE logs the failure and moves on to the next file,
    ABORT stops the batch and re-raises the error.
    """

    CONTINUE = "continue"
    ABORT = "abort"
