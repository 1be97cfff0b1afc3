"""Tests for the public API client and its data model."""

from __future__ import annotations

import re
from typing import Any

import pytest

from yadloader.client.api import DiskFile, HTTPClient, Page, RemoteEntry
from yadloader.client.errors import DecodeError, TransportError
from yadloader.core.config import ClientConfig
from yadloader.core.types import EntryType

from tests.conftest import API_URL, LINK, dir_item, file_item

API_PATTERN = re.compile(re.escape(API_URL) + r"\?.*")


class TestRemoteEntry:
    """Tests for RemoteEntry.from_dict."""

    def test_file_entry(self) -> None:
        """Should decode every field of a file item."""
        entry = RemoteEntry.from_dict(file_item("/docs/readme.txt", b"hello"))

        assert entry.is_file and not entry.is_dir
        assert entry.type is EntryType.FILE
        assert entry.name == "readme.txt"
        assert entry.path == "/docs/readme.txt"
        assert entry.size == 5
        assert entry.file == "https://downloader.disk.test/file/docs/readme.txt"
        assert entry.md5 == "5d41402abc4b2a76b9719d911017c592"
        assert entry.media_type == "document"
        assert entry.created == "2024-01-01T10:00:00+00:00"

    def test_dir_entry(self) -> None:
        """Should decode a folder item with name and path only."""
        entry = RemoteEntry.from_dict(dir_item("/docs"))

        assert entry.is_dir
        assert entry.name == "docs"
        assert entry.path == "/docs"
        assert entry.size is None
        assert entry.file is None

    @pytest.mark.parametrize("field", ["size", "file", "md5", "sha256"])
    def test_file_missing_field(self, field: str) -> None:
        """Should reject a file item lacking download metadata."""
        item = file_item("/a.txt")
        del item[field]
        with pytest.raises(DecodeError, match=field):
            RemoteEntry.from_dict(item)

    @pytest.mark.parametrize("field", ["size", "file", "md5", "sha256"])
    def test_file_null_field(self, field: str) -> None:
        item = file_item("/a.txt")
        item[field] = None
        with pytest.raises(DecodeError):
            RemoteEntry.from_dict(item)

    @pytest.mark.parametrize("size", [-1, True, "12", 1.5])
    def test_invalid_size(self, size: Any) -> None:
        item = file_item("/a.txt")
        item["size"] = size
        with pytest.raises(DecodeError):
            RemoteEntry.from_dict(item)

    def test_unknown_type(self) -> None:
        item = dir_item("/weird")
        item["type"] = "symlink"
        with pytest.raises(DecodeError, match="symlink"):
            RemoteEntry.from_dict(item)

    def test_not_an_object(self) -> None:
        with pytest.raises(DecodeError):
            RemoteEntry.from_dict(["not", "a", "dict"])

    def test_to_disk_file(self) -> None:
        """Should flatten a file entry."""
        disk_file = RemoteEntry.from_dict(file_item("/a/b.txt", b"abc")).to_disk_file()

        assert disk_file == DiskFile(
            name="b.txt",
            path="/a/b.txt",
            size=3,
            file="https://downloader.disk.test/file/a/b.txt",
            md5="900150983cd24fb0d6963f7d28e17f72",
            sha256="ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
            created="2024-01-01T10:00:00+00:00",
            modified="2024-01-02T10:00:00+00:00",
        )

    def test_dir_to_disk_file(self) -> None:
        with pytest.raises(ValueError):
            RemoteEntry.from_dict(dir_item("/a")).to_disk_file()

    def test_file_without_metadata_to_disk_file(self) -> None:
        """Should refuse a hand-built file entry lacking download fields."""
        entry = RemoteEntry(name="b.txt", path="/a/b.txt", type=EntryType.FILE, size=3)
        with pytest.raises(ValueError, match="missing download metadata"):
            entry.to_disk_file()


class TestDiskFile:
    """Tests for DiskFile helpers."""

    def test_parent(self) -> None:
        disk_file = RemoteEntry.from_dict(file_item("/a/b/c.txt")).to_disk_file()
        assert disk_file.parent == "/a/b/"

    def test_parent_at_root(self) -> None:
        disk_file = RemoteEntry.from_dict(file_item("/c.txt")).to_disk_file()
        assert disk_file.parent == "/"

    def test_to_dict(self) -> None:
        data = RemoteEntry.from_dict(file_item("/c.txt", b"x")).to_disk_file().to_dict()
        assert data["path"] == "/c.txt"
        assert data["size"] == 1
        assert set(data) == {"name", "path", "size", "file", "md5", "sha256", "created", "modified"}


class TestPage:
    """Tests for Page.from_dict."""

    def test_items(self) -> None:
        data = {
            "path": "/",
            "type": "dir",
            "_embedded": {
                "limit": 2,
                "offset": 4,
                "total": 7,
                "items": [file_item("/a.txt"), dir_item("/b")],
            },
        }
        page = Page.from_dict(data, limit=2, offset=4)

        assert page.path == "/"
        assert (page.limit, page.offset, page.total) == (2, 4, 7)
        assert [e.path for e in page.items] == ["/a.txt", "/b"]
        assert not page.exhausted

    def test_embedded_absent(self) -> None:
        """Should treat a folder without _embedded as an empty page."""
        page = Page.from_dict({"path": "/", "type": "dir"}, limit=100, offset=0)
        assert page.exhausted

    def test_items_absent(self) -> None:
        page = Page.from_dict({"path": "/", "type": "dir", "_embedded": {"total": 0}}, limit=10, offset=0)
        assert page.exhausted

    def test_file_rejected_when_dir_expected(self) -> None:
        with pytest.raises(DecodeError, match="is a file"):
            Page.from_dict(file_item("/a.txt"), limit=10, offset=0, expect_dir=True)

    def test_file_accepted_when_not_checked(self) -> None:
        page = Page.from_dict(file_item("/a.txt"), limit=10, offset=0)
        assert page.exhausted

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "text",
            {"type": "dir"},
            {"path": "/"},
            {"path": "/", "type": "dir", "_embedded": []},
            {"path": "/", "type": "dir", "_embedded": {"items": {"a": 1}}},
        ],
    )
    def test_malformed(self, data: Any) -> None:
        with pytest.raises(DecodeError):
            Page.from_dict(data, limit=10, offset=0)

    def test_malformed_item(self) -> None:
        data = {"path": "/", "type": "dir", "_embedded": {"items": [{"path": "/x", "type": "file", "name": "x"}]}}
        with pytest.raises(DecodeError):
            Page.from_dict(data, limit=10, offset=0)


class TestHTTPClient:
    """Tests for HTTPClient transport and paging."""

    def test_request_returns_body(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url="https://example.test/raw", content=b"\x00\x01raw")

        with HTTPClient(config) as client:
            assert client.request("https://example.test/raw") == b"\x00\x01raw"

    def test_sends_user_agent(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url="https://example.test/raw")

        with HTTPClient(config) as client:
            client.request("https://example.test/raw")

        assert httpx_mock.get_request().headers["User-Agent"] == config.user_agent

    def test_get_page_query(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        """Should send path, limit, offset and public_key."""
        httpx_mock.add_response(url=API_PATTERN, json={"path": "/Фото", "type": "dir"})

        with HTTPClient(config) as client:
            page = client.get_page(LINK, "/Фото", offset=200, limit=50)

        params = httpx_mock.get_request().url.params
        assert params["path"] == "/Фото"
        assert params["limit"] == "50"
        assert params["offset"] == "200"
        assert params["public_key"] == LINK
        assert page.exhausted

    def test_get_page_default_limit(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=API_PATTERN, json={"path": "/", "type": "dir"})

        with HTTPClient(ClientConfig(limit=25, page_delay=0)) as client:
            client.get_page(LINK, "/")

        assert httpx_mock.get_request().url.params["limit"] == "25"

    def test_get_page_invalid_json(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=API_PATTERN, content=b"<html>oops</html>")

        with HTTPClient(config) as client, pytest.raises(DecodeError):
            client.get_page(LINK, "/")

    def test_get_page_not_found(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        """Should surface a 404 as a TransportError without retrying."""
        httpx_mock.add_response(url=API_PATTERN, status_code=404, json={"error": "DiskNotFoundError"})

        with HTTPClient(ClientConfig(page_delay=0, max_retries=3)) as client:
            with pytest.raises(TransportError) as exc_info:
                client.get_page(LINK, "/missing")

        assert exc_info.value.status_code == 404
        assert len(httpx_mock.get_requests()) == 1

    def test_get_page_retries_transport(self, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Should rely on the transport retry, then decode the page."""
        httpx_mock.add_response(url=API_PATTERN, status_code=500)
        httpx_mock.add_response(
            url=API_PATTERN,
            json={"path": "/", "type": "dir", "_embedded": {"items": [file_item("/a.txt")]}},
        )

        with HTTPClient(ClientConfig(page_delay=0, max_retries=1)) as client:
            page = client.get_page(LINK, "/")

        assert [e.name for e in page.items] == ["a.txt"]

    def test_stream_follows_redirects(self, httpx_mock, config: ClientConfig) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(
            url="https://example.test/file",
            status_code=302,
            headers={"Location": "https://storage.example.test/blob"},
        )
        httpx_mock.add_response(url="https://storage.example.test/blob", content=b"payload")

        with HTTPClient(config) as client, client.stream("https://example.test/file") as response:
            assert response.read() == b"payload"
