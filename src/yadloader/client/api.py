"""HTTP client for the Yandex.Disk public resources API.

This module provides:
- RemoteEntry, Page: Decoded listing responses
- DiskFile: Flattened file descriptor produced by a walk
- HTTPClient: Retrying transport, page listing, tree walk and download entry points
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import IO, TYPE_CHECKING, Any

import httpx

from yadloader.client.errors import (
    CancellationError,
    ChecksumError,
    DecodeError,
    SinkError,
    TransportError,
    TreeLimitError,
    YaDiskError,
)
from yadloader.client.retry import CancelCheck, RetryPolicy, retry_request
from yadloader.core.config import ClientConfig
from yadloader.core.types import EntryType

if TYPE_CHECKING:
    from yadloader.client.tree import ProgressCallback

logger = logging.getLogger(__name__)


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{where}: field {key!r} missing or not a string")
    return value


def _require_int(data: dict[str, Any], key: str, where: str) -> int:
    value = data.get(key)
    # bool is an int subclass but never a valid count
    if not isinstance(value, int) or isinstance(value, bool):
        raise DecodeError(f"{where}: field {key!r} missing or not an integer")
    return value


def _entry_type(data: dict[str, Any], where: str) -> EntryType:
    raw = data.get("type")
    try:
        return EntryType(raw)
    except ValueError:
        raise DecodeError(f"{where}: unknown resource type {raw!r}") from None


@dataclass(frozen=True)
class DiskFile:
    """File found while walking a public share."""

    name: str
    path: str
    size: int
    file: str  # direct download URL
    md5: str
    sha256: str
    created: str
    modified: str

    @property
    def parent(self) -> str:
        """Remote folder holding the file (path with the name stripped)."""
        if self.path.endswith(self.name):
            return self.path[: len(self.path) - len(self.name)]
        return self.path.rpartition("/")[0] + "/"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class RemoteEntry:
    """One item of a listing page, either a file or a directory.

    Directory entries only carry name and path; their children are
    fetched with further listing requests.
    """

    name: str
    path: str
    type: EntryType
    created: str = ""
    modified: str = ""
    size: int | None = None
    file: str | None = None
    md5: str | None = None
    sha256: str | None = None
    media_type: str | None = None

    @property
    def is_file(self) -> bool:
        return self.type == EntryType.FILE

    @property
    def is_dir(self) -> bool:
        return self.type == EntryType.DIR

    @classmethod
    def from_dict(cls, data: Any) -> RemoteEntry:
        """Create from an item of `_embedded.items`.

        Raises:
            DecodeError: If the item is not an object, has an unknown type,
                or is a file lacking size, download URL or hashes.
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Listing item is not an object: {data!r}")
        path = _require_str(data, "path", "listing item")
        where = f"entry {path!r}"
        entry_type = _entry_type(data, where)
        entry = cls(
            name=_require_str(data, "name", where),
            path=path,
            type=entry_type,
            created=data.get("created") or "",
            modified=data.get("modified") or "",
            media_type=data.get("media_type"),
        )
        if entry_type == EntryType.DIR:
            return entry

        size = _require_int(data, "size", where)
        if size < 0:
            raise DecodeError(f"{where}: negative size {size}")
        return cls(
            name=entry.name,
            path=entry.path,
            type=entry.type,
            created=entry.created,
            modified=entry.modified,
            media_type=entry.media_type,
            size=size,
            file=_require_str(data, "file", where),
            md5=_require_str(data, "md5", where),
            sha256=_require_str(data, "sha256", where),
        )

    def to_disk_file(self) -> DiskFile:
        """Flatten a file entry into a DiskFile."""
        if not self.is_file:
            raise ValueError(f"{self.path} is a directory")
        if self.size is None or self.file is None or self.md5 is None or self.sha256 is None:
            raise ValueError(f"{self.path} is missing download metadata")
        return DiskFile(
            name=self.name,
            path=self.path,
            size=self.size,
            file=self.file,
            md5=self.md5,
            sha256=self.sha256,
            created=self.created,
            modified=self.modified,
        )


@dataclass(frozen=True)
class Page:
    """One listing response for a single directory.

    `total` is carried for information only: an empty `items` tuple is
    the sole end-of-listing signal.
    """

    path: str
    limit: int
    offset: int
    total: int
    items: tuple[RemoteEntry, ...] = ()

    @property
    def exhausted(self) -> bool:
        return not self.items

    @classmethod
    def from_dict(
        cls,
        data: Any,
        limit: int,
        offset: int,
        expect_dir: bool = False,
    ) -> Page:
        """Create from a decoded listing response.

        Args:
            data: Parsed JSON body.
            limit: Limit sent with the request (used if the body omits it).
            offset: Offset sent with the request (used if the body omits it).
            expect_dir: Reject a response describing a file.

        Raises:
            DecodeError: If the body does not match the listing schema.
        """
        if not isinstance(data, dict):
            raise DecodeError("Listing response is not a JSON object")
        path = _require_str(data, "path", "listing response")
        entry_type = _entry_type(data, f"resource {path!r}")
        if expect_dir and entry_type == EntryType.FILE:
            raise DecodeError(f"{path} is a file, expected a directory")

        embedded = data.get("_embedded")
        if embedded is None:
            return cls(path=path, limit=limit, offset=offset, total=0)
        if not isinstance(embedded, dict):
            raise DecodeError(f"resource {path!r}: '_embedded' is not an object")

        raw_items = embedded.get("items")
        if raw_items is None:
            raw_items = []
        if not isinstance(raw_items, list):
            raise DecodeError(f"resource {path!r}: '_embedded.items' is not a list")

        return cls(
            path=path,
            limit=embedded.get("limit", limit),
            offset=embedded.get("offset", offset),
            total=embedded.get("total", 0),
            items=tuple(RemoteEntry.from_dict(item) for item in raw_items),
        )


class HTTPClient:
    """HTTP client for the Yandex.Disk public resources API.

    Holds one httpx connection pool and one immutable ClientConfig,
    both reused by every call. Not safe for concurrent use.

    Usage:
        with HTTPClient(ClientConfig(page_delay=1.0)) as client:
            files = client.get_tree("https://disk.yandex.ru/d/abc123")
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        """Initialize the client.

        Args:
            config: Client settings (defaults to ClientConfig()).
        """
        self._config = config or ClientConfig()
        self._policy = RetryPolicy.from_config(self._config)
        self._client = httpx.Client(
            timeout=self._config.timeout,
            follow_redirects=True,
            headers={"User-Agent": self._config.user_agent},
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === Transport ===

    def request(
        self,
        url: str,
        params: dict[str, str] | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> bytes:
        """GET a URL with retry and return the whole response body.

        Args:
            url: URL to fetch.
            params: Optional query parameters.
            cancel_check: Optional function polled between attempts.

        Returns:
            Response body.

        Raises:
            TransportError: On network failure or non-2xx status after retries.
            CancellationError: If cancel_check returns True.
        """
        response = retry_request(
            lambda: self._client.get(url, params=params),
            self._policy,
            description=f"GET {url}",
            cancel_check=cancel_check,
        )
        return response.content

    @contextmanager
    def stream(
        self,
        url: str,
        cancel_check: CancelCheck | None = None,
    ) -> Iterator[httpx.Response]:
        """GET a URL with retry and yield the response unread.

        Retries cover obtaining a 2xx response; a failure while reading
        the body is not retried.

        Raises:
            TransportError: On network failure or non-2xx status after retries.
            CancellationError: If cancel_check returns True.
        """
        response = retry_request(
            lambda: self._client.send(self._client.build_request("GET", url), stream=True),
            self._policy,
            description=f"GET {url}",
            cancel_check=cancel_check,
        )
        try:
            yield response
        finally:
            response.close()

    # === Listing ===

    def get_page(
        self,
        link: str,
        path: str,
        offset: int = 0,
        limit: int | None = None,
        expect_dir: bool = False,
        cancel_check: CancelCheck | None = None,
    ) -> Page:
        """List one page of a directory of a public share.

        Args:
            link: Public link (public_key) of the share.
            path: Directory path inside the share.
            offset: Index of the first item to return.
            limit: Items per page (defaults to config.limit).
            expect_dir: Reject the response if path is a file.
            cancel_check: Optional cancellation check.

        Returns:
            Decoded page.

        Raises:
            TransportError: If the request fails (already retried).
            DecodeError: If the body is not a valid listing.
        """
        limit = self._config.limit if limit is None else limit
        body = self.request(
            self._config.resources_url,
            params={
                "path": path,
                "limit": str(limit),
                "offset": str(offset),
                "public_key": link,
            },
            cancel_check=cancel_check,
        )
        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"Listing of {path} is not valid JSON: {e}") from e

        page = Page.from_dict(data, limit=limit, offset=offset, expect_dir=expect_dir)
        logger.debug(f"Listed {path} offset={offset}: {len(page.items)} item(s)")
        return page

    # === Walk and download ===

    def get_tree(
        self,
        link: str,
        path: str = "/",
        progress: ProgressCallback | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> list[DiskFile]:
        """Walk a public share and return every file below path.

        See yadloader.client.tree.get_tree.
        """
        from yadloader.client.tree import get_tree

        return get_tree(self, link, path, progress=progress, cancel_check=cancel_check)

    def download_file(
        self,
        disk_file: DiskFile,
        sink: IO[bytes],
        cancel_check: CancelCheck | None = None,
    ) -> int:
        """Stream one file into a writable binary sink.

        See yadloader.client.download.FileDownloader.
        """
        from yadloader.client.download import FileDownloader

        return FileDownloader(self, cancel_check=cancel_check).download_file(disk_file, sink)


__all__ = [
    "CancellationError",
    "ChecksumError",
    "DecodeError",
    "DiskFile",
    "HTTPClient",
    "Page",
    "RemoteEntry",
    "SinkError",
    "TransportError",
    "TreeLimitError",
    "YaDiskError",
]
