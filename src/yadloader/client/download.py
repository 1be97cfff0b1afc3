"""Chunked file download.

This module provides:
- FileDownloader: Streams one remote file into a writable sink
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING

import httpx

from yadloader.client.errors import ChecksumError, SinkError, TransportError
from yadloader.client.retry import CancelCheck, check_cancelled
from yadloader.core.hashing import StreamHasher

if TYPE_CHECKING:
    from yadloader.client.api import DiskFile, HTTPClient

logger = logging.getLogger(__name__)


class FileDownloader:
    """Copies a remote file to a sink through a fixed-size buffer.

    Peak memory stays around one chunk whatever the file size. Nothing is
    cleaned up on failure: the caller owns the sink.
    """

    def __init__(
        self,
        client: HTTPClient,
        chunk_size: int | None = None,
        verify_checksum: bool | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            client: Client providing the retrying transport.
            chunk_size: Buffer size in bytes (defaults to config.chunk_size).
            verify_checksum: Check size and hash after download
                (defaults to config.verify_checksum).
            cancel_check: Optional function polled between chunks.
        """
        config = client.config
        self._client = client
        self._chunk_size = chunk_size or config.chunk_size
        self._verify = config.verify_checksum if verify_checksum is None else verify_checksum
        self._cancel_check = cancel_check

    def download_file(self, disk_file: DiskFile, sink: IO[bytes]) -> int:
        """Download a file into sink.

        Args:
            disk_file: File to download.
            sink: Writable binary stream.

        Returns:
            Number of bytes written.

        Raises:
            TransportError: If the request fails or the body cannot be read.
            SinkError: If writing to sink fails.
            ChecksumError: If verification is on and size or hash differ.
            CancellationError: If cancel_check returns True.
        """
        logger.info(f"Downloading {disk_file.path} ({disk_file.size} bytes)")
        hasher = self._make_hasher(disk_file)
        written = 0

        with self._client.stream(disk_file.file, cancel_check=self._cancel_check) as response:
            try:
                for chunk in response.iter_bytes(self._chunk_size):
                    check_cancelled(self._cancel_check)
                    try:
                        sink.write(chunk)
                    except OSError as e:
                        raise SinkError(f"Failed to write {disk_file.path}: {e}") from e
                    if hasher:
                        hasher.update(chunk)
                    written += len(chunk)
            except httpx.HTTPError as e:
                raise TransportError(f"Failed to read {disk_file.path}: {e}") from e

        if self._verify:
            self._check(disk_file, written, hasher)

        logger.debug(f"Downloaded {disk_file.path}: {written} bytes")
        return written

    def _make_hasher(self, disk_file: DiskFile) -> StreamHasher | None:
        if not self._verify:
            return None
        if disk_file.sha256:
            return StreamHasher("sha256", disk_file.sha256)
        if disk_file.md5:
            return StreamHasher("md5", disk_file.md5)
        logger.warning(f"No checksum listed for {disk_file.path}, checking size only")
        return None

    @staticmethod
    def _check(disk_file: DiskFile, written: int, hasher: StreamHasher | None) -> None:
        if written != disk_file.size:
            raise ChecksumError(disk_file.path, f"{disk_file.size} bytes", f"{written} bytes")
        if hasher and not hasher.matches():
            raise ChecksumError(
                disk_file.path,
                f"{hasher.algorithm} {hasher.expected}",
                f"{hasher.algorithm} {hasher.hexdigest()}",
            )
