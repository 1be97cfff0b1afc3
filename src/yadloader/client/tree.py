"""Recursive listing of a public share.

This module provides:
- WalkState: Result list and running counters shared by one walk
- TreeWalker: Depth-first traversal driven by an explicit frame stack
- get_tree: Walk a share and return the flattened file list

Traversal order is depth-first: when a directory entry is met, its whole
subtree is listed before the next entry of the parent directory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yadloader.client.errors import TreeLimitError
from yadloader.client.retry import CancelCheck, check_cancelled, interruptible_sleep

if TYPE_CHECKING:
    from yadloader.client.api import DiskFile, HTTPClient, Page, RemoteEntry

logger = logging.getLogger(__name__)

# Called with (file count, cumulative size) after each file found
ProgressCallback = Callable[[int, int], None]


@dataclass
class WalkState:
    """Accumulator owned by a single walk."""

    files: list[DiskFile] = field(default_factory=list)
    count: int = 0
    total_size: int = 0


@dataclass
class _Frame:
    """Listing position inside one directory."""

    path: str
    depth: int
    offset: int = 0
    pages: int = 0
    items: tuple[RemoteEntry, ...] = ()
    index: int = 0


class TreeWalker:
    """Walks a public share page by page, directory by directory.

    Usage:
        walker = TreeWalker(client, progress=lambda n, size: print(n, size))
        state = WalkState()
        walker.walk(link, "/", state)
    """

    def __init__(
        self,
        client: HTTPClient,
        progress: ProgressCallback | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> None:
        """Initialize the walker.

        Args:
            client: Client used to list pages.
            progress: Optional callback invoked synchronously after each file.
                A slow callback slows the walk down.
            cancel_check: Optional function returning True to stop the walk.
        """
        self._client = client
        self._config = client.config
        self._progress = progress
        self._cancel_check = cancel_check

    def walk(self, link: str, start_path: str, state: WalkState) -> None:
        """List start_path and every directory below it into state.

        Args:
            link: Public link of the share.
            start_path: Directory to start from.
            state: Accumulator receiving files and counters.

        Raises:
            TransportError: If a page request fails at any depth.
            DecodeError: If a page cannot be decoded at any depth.
            TreeLimitError: If max_depth or max_files is exceeded.
            CancellationError: If cancel_check returns True.
        """
        stack = [_Frame(path=start_path, depth=0)]

        while stack:
            frame = stack[-1]

            if frame.index < len(frame.items):
                entry = frame.items[frame.index]
                frame.index += 1
                if entry.is_dir:
                    stack.append(self._enter(entry, frame.depth + 1))
                else:
                    self._add_file(entry, state)
                continue

            page = self._next_page(link, frame)
            if page.exhausted:
                logger.debug(f"Finished {frame.path} after {frame.pages} page(s)")
                stack.pop()
                continue
            frame.items = page.items
            frame.index = 0

    def _enter(self, entry: RemoteEntry, depth: int) -> _Frame:
        max_depth = self._config.max_depth
        if max_depth is not None and depth > max_depth:
            raise TreeLimitError(
                f"{entry.path} is nested {depth} levels deep (max_depth={max_depth})"
            )
        logger.debug(f"Entering {entry.path}")
        return _Frame(path=entry.path, depth=depth)

    def _next_page(self, link: str, frame: _Frame) -> Page:
        # Offset advances by the configured limit after every non-empty
        # page; the server's `total` is not consulted.
        if frame.pages > 0:
            frame.offset += self._config.limit
            interruptible_sleep(self._config.page_delay, self._cancel_check)
        else:
            check_cancelled(self._cancel_check)

        page = self._client.get_page(
            link,
            frame.path,
            offset=frame.offset,
            limit=self._config.limit,
            expect_dir=frame.depth == 0 and frame.pages == 0,
            cancel_check=self._cancel_check,
        )
        frame.pages += 1
        return page

    def _add_file(self, entry: RemoteEntry, state: WalkState) -> None:
        max_files = self._config.max_files
        if max_files is not None and state.count >= max_files:
            raise TreeLimitError(f"More than {max_files} files found (max_files={max_files})")

        disk_file = entry.to_disk_file()
        state.files.append(disk_file)
        state.count += 1
        state.total_size += disk_file.size

        if self._progress:
            self._progress(state.count, state.total_size)


def get_tree(
    client: HTTPClient,
    link: str,
    path: str = "/",
    progress: ProgressCallback | None = None,
    cancel_check: CancelCheck | None = None,
) -> list[DiskFile]:
    """Walk a public share and return every file below path.

    The walk is all-or-nothing: any error aborts it and nothing is
    returned.

    Args:
        client: Client used to list pages.
        link: Public link of the share.
        path: Directory to start from ("" means the share root).
        progress: Optional callback receiving (count, total_size) after each file.
        cancel_check: Optional function returning True to stop the walk.

    Returns:
        Files in depth-first order.
    """
    path = path or "/"
    state = WalkState()
    logger.info(f"Listing {link} from {path}")
    TreeWalker(client, progress=progress, cancel_check=cancel_check).walk(link, path, state)
    logger.info(f"Found {state.count} file(s), {state.total_size} bytes")
    return state.files
