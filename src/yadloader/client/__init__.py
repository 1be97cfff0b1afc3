"""Client module - Public API transport, tree walk, download and CLI.

Architecture:
    HTTPClient (transport + paging) → TreeWalker → [DiskFile] → FileDownloader

All public symbols are re-exported here.
"""

from yadloader.client.api import DiskFile, HTTPClient, Page, RemoteEntry
from yadloader.client.download import FileDownloader
from yadloader.client.errors import (
    CancellationError,
    ChecksumError,
    DecodeError,
    SinkError,
    TransportError,
    TreeLimitError,
    YaDiskError,
)
from yadloader.client.mirror import MirrorResult, local_path_for, mirror_files
from yadloader.client.retry import RetryPolicy, is_retryable_status
from yadloader.client.tree import ProgressCallback, TreeWalker, WalkState, get_tree

__all__ = [
    # Data model
    "DiskFile",
    "Page",
    "RemoteEntry",
    # Client
    "HTTPClient",
    "RetryPolicy",
    "is_retryable_status",
    # Walk
    "ProgressCallback",
    "TreeWalker",
    "WalkState",
    "get_tree",
    # Download
    "FileDownloader",
    "MirrorResult",
    "local_path_for",
    "mirror_files",
    # Errors
    "CancellationError",
    "ChecksumError",
    "DecodeError",
    "SinkError",
    "TransportError",
    "TreeLimitError",
    "YaDiskError",
]
