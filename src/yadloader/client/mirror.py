"""Mirror a walked share into a local folder.

This module provides:
- local_path_for: Map a remote file to its place under the output root
- download_to_path: Download one file with an atomic write
- mirror_files: Download a batch with a per-file failure policy
- MirrorResult: Summary of a batch
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from yadloader.client.download import FileDownloader
from yadloader.client.errors import CancellationError, YaDiskError
from yadloader.core.hashing import compute_file_hash
from yadloader.core.types import FailurePolicy

if TYPE_CHECKING:
    from yadloader.client.api import DiskFile

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"

# Called after each file with (file, error or None)
FileCallback = Callable[["DiskFile", "Exception | None"], None]


@dataclass
class MirrorResult:
    """Outcome of downloading a batch of files."""

    downloaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    bytes_written: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


def local_path_for(disk_file: DiskFile, root: Path) -> Path:
    """Compute where a remote file lands under root.

    The remote folder (path without the file name) is mirrored below root.

    Raises:
        ValueError: If the remote path would escape root.
    """
    parts = [*PurePosixPath(disk_file.parent).parts, disk_file.name]
    relative = [p for p in parts if p not in ("/", "")]
    if not relative or any(p in (".", "..") or "\\" in p for p in relative):
        raise ValueError(f"Unsafe remote path: {disk_file.path!r}")
    return root.joinpath(*relative)


def is_up_to_date(disk_file: DiskFile, local_path: Path, check_hash: bool) -> bool:
    """Check if local_path already holds the listed file."""
    if not local_path.is_file() or local_path.stat().st_size != disk_file.size:
        return False
    if not check_hash:
        return True
    if disk_file.sha256:
        return compute_file_hash(local_path, "sha256") == disk_file.sha256.lower()
    return compute_file_hash(local_path, "md5") == disk_file.md5.lower()


def download_to_path(downloader: FileDownloader, disk_file: DiskFile, local_path: Path) -> int:
    """Download a file to local_path through a temporary .part file.

    The .part file is renamed into place on success and removed on failure,
    so no partial file is left under the final name.

    Returns:
        Number of bytes written.
    """
    local_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = local_path.with_name(local_path.name + PART_SUFFIX)

    try:
        with open(tmp_path, "wb") as f:
            written = downloader.download_file(disk_file, f)
        tmp_path.replace(local_path)
        return written
    except BaseException:
        if tmp_path.exists():
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise


def mirror_files(
    downloader: FileDownloader,
    files: Sequence[DiskFile],
    root: Path,
    policy: FailurePolicy = FailurePolicy.CONTINUE,
    skip_existing: bool = False,
    check_hash: bool = False,
    on_file: FileCallback | None = None,
) -> MirrorResult:
    """Download files one after another into root.

    With FailurePolicy.CONTINUE a failed file is logged and recorded and
    the batch goes on; with FailurePolicy.ABORT the first failure is
    re-raised. Cancellation always stops the batch.

    Args:
        downloader: Downloader to use for every file.
        files: Files returned by a walk.
        root: Output folder.
        policy: Per-file failure policy.
        skip_existing: Do not download files already present with the listed size.
        check_hash: With skip_existing, also compare the listed hash.
        on_file: Optional callback after each file (error is None on success).

    Returns:
        MirrorResult summarizing the batch.
    """
    result = MirrorResult()
    root.mkdir(parents=True, exist_ok=True)

    for disk_file in files:
        try:
            local_path = local_path_for(disk_file, root)
            if skip_existing and is_up_to_date(disk_file, local_path, check_hash):
                logger.info(f"Skipping up-to-date {disk_file.path}")
                result.skipped.append(disk_file.path)
            else:
                result.bytes_written += download_to_path(downloader, disk_file, local_path)
                result.downloaded.append(disk_file.path)
        except CancellationError:
            raise
        except (YaDiskError, OSError, ValueError) as e:
            if policy == FailurePolicy.ABORT:
                logger.error(f"Failed to download {disk_file.path}: {e}")
                raise
            logger.warning(f"Failed to download {disk_file.path}: {e}")
            result.failed.append((disk_file.path, str(e)))
            if on_file:
                on_file(disk_file, e)
            continue

        if on_file:
            on_file(disk_file, None)

    logger.info(
        f"Downloaded {len(result.downloaded)} file(s), skipped {len(result.skipped)}, "
        f"failed {len(result.failed)}"
    )
    return result
