"""Shared fixtures: an in-memory public share served through httpx_mock."""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from yadloader.core.config import ClientConfig

API_URL = "https://cloud-api.yandex.net/v1/disk/public/resources"
LINK = "https://disk.yandex.ru/d/abc123"
DOWNLOAD_BASE = "https://downloader.disk.test/file"

# A tree maps names to bytes (file content) or to a nested tree (folder)
Tree = dict[str, Any]


def file_item(path: str, content: bytes = b"data") -> dict[str, Any]:
    """Build a listing item for a file."""
    return {
        "path": path,
        "type": "file",
        "name": path.rsplit("/", 1)[-1],
        "created": "2024-01-01T10:00:00+00:00",
        "modified": "2024-01-02T10:00:00+00:00",
        "size": len(content),
        "md5": hashlib.md5(content).hexdigest(),
        "sha256": hashlib.sha256(content).hexdigest(),
        "media_type": "document",
        "file": f"{DOWNLOAD_BASE}{path}",
    }


def dir_item(path: str) -> dict[str, Any]:
    """Build a listing item for a folder."""
    return {
        "path": path,
        "type": "dir",
        "name": path.rsplit("/", 1)[-1],
        "created": "2024-01-01T10:00:00+00:00",
        "modified": "2024-01-02T10:00:00+00:00",
    }


def _join(parent: str, name: str) -> str:
    return f"{parent.rstrip('/')}/{name}"


class FakeDisk:
    """Serves a nested tree through the public resources endpoint.

    Pages are cut with the limit/offset query parameters like the real API.
    Paths listed in `failing` answer with a 500 error.
    """

    def __init__(self, tree: Tree) -> None:
        self.folders: dict[str, list[dict[str, Any]]] = {}
        self.contents: dict[str, bytes] = {}
        self.failing: set[str] = set()
        self.requests: list[tuple[str, int, int]] = []
        self._index("/", tree)

    def _index(self, path: str, tree: Tree) -> None:
        items = []
        for name, value in tree.items():
            child = _join(path, name)
            if isinstance(value, dict):
                items.append(dir_item(child))
                self._index(child, value)
            else:
                items.append(file_item(child, value))
                self.contents[child] = value
        self.folders[path] = items

    def file_paths(self) -> list[str]:
        return list(self.contents)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        path = params["path"]
        limit = int(params["limit"])
        offset = int(params["offset"])
        self.requests.append((path, offset, limit))

        if path in self.failing:
            return httpx.Response(500, json={"error": "InternalError"})
        if path not in self.folders:
            if path in self.contents:
                return httpx.Response(200, json=file_item(path, self.contents[path]))
            return httpx.Response(404, json={"error": "DiskNotFoundError"})

        items = self.folders[path]
        body = {
            "path": path,
            "type": "dir",
            "name": path.rsplit("/", 1)[-1] or "share",
            "created": "2024-01-01T10:00:00+00:00",
            "modified": "2024-01-02T10:00:00+00:00",
            "_embedded": {
                "path": path,
                "limit": limit,
                "offset": offset,
                "total": len(items),
                "sort": "",
                "items": items[offset : offset + limit],
            },
        }
        return httpx.Response(200, content=json.dumps(body).encode())


@pytest.fixture
def config() -> ClientConfig:
    """Client config without delays between pages or retries."""
    return ClientConfig(page_delay=0, retry_wait_min=0, max_retries=0)


@pytest.fixture
def fake_disk(httpx_mock) -> Callable[[Tree], FakeDisk]:  # type: ignore[no-untyped-def]
    """Factory registering a FakeDisk as the listing endpoint."""

    def _make(tree: Tree) -> FakeDisk:
        disk = FakeDisk(tree)
        httpx_mock.add_callback(disk, url=re.compile(re.escape(API_URL) + r"\?.*"), is_reusable=True)
        return disk

    return _make
