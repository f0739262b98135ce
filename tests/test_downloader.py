"""Tests for the HTTP fetcher, using httpx's mock transport."""

import asyncio

import httpx
import pytest

from db_dumper.application.exceptions import DownloadError, RedirectLoopError
from db_dumper.infrastructure.downloader import HttpFetcher

PAYLOAD = b"archive-bytes" * 5000


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/file":
        return httpx.Response(200, content=PAYLOAD)
    if path == "/moved":
        return httpx.Response(302, headers={"Location": "https://cdn.test/file"})
    if path == "/relative":
        return httpx.Response(301, headers={"Location": "/file"})
    if path.startswith("/hop/"):
        remaining = int(path.rsplit("/", 1)[1])
        target = "/file" if remaining == 0 else f"/hop/{remaining - 1}"
        return httpx.Response(302, headers={"Location": target})
    if path == "/no-location":
        return httpx.Response(302)
    return httpx.Response(404)


def _fetch(url, destination, on_progress=None, chunk_size=65536):
    async def run():
        transport = httpx.MockTransport(_handler)
        async with httpx.AsyncClient(transport=transport) as client:
            fetcher = HttpFetcher(client, chunk_size=chunk_size)
            await fetcher.fetch(url, destination, on_progress)

    asyncio.run(run())


def test_direct_download_creates_parent_dirs(tmp_path):
    destination = tmp_path / "nested" / "dir" / "archive.tar.xz"
    _fetch("https://cdn.test/file", destination)
    assert destination.read_bytes() == PAYLOAD


def test_redirect_resolves_to_same_bytes(tmp_path):
    direct = tmp_path / "direct.bin"
    redirected = tmp_path / "redirected.bin"
    _fetch("https://cdn.test/file", direct)
    _fetch("https://origin.test/moved", redirected)
    assert redirected.read_bytes() == direct.read_bytes()


def test_relative_location_is_resolved(tmp_path):
    destination = tmp_path / "archive.bin"
    _fetch("https://cdn.test/relative", destination)
    assert destination.read_bytes() == PAYLOAD


def test_five_chained_redirects_are_followed(tmp_path):
    destination = tmp_path / "archive.bin"
    _fetch("https://cdn.test/hop/4", destination)
    assert destination.read_bytes() == PAYLOAD


def test_six_chained_redirects_fail(tmp_path):
    destination = tmp_path / "archive.bin"
    with pytest.raises(RedirectLoopError):
        _fetch("https://cdn.test/hop/5", destination)
    assert list(tmp_path.iterdir()) == []


def test_error_status_raises_download_error(tmp_path):
    destination = tmp_path / "archive.bin"
    with pytest.raises(DownloadError) as excinfo:
        _fetch("https://cdn.test/missing", destination)
    assert excinfo.value.status_code == 404
    assert not destination.exists()


def test_redirect_without_location_is_an_error(tmp_path):
    with pytest.raises(DownloadError) as excinfo:
        _fetch("https://cdn.test/no-location", tmp_path / "archive.bin")
    assert excinfo.value.status_code == 302


def test_progress_is_reported_per_chunk(tmp_path):
    seen = []
    _fetch(
        "https://cdn.test/file",
        tmp_path / "archive.bin",
        on_progress=seen.append,
        chunk_size=4096,
    )
    assert len(seen) > 1
    assert [p.received for p in seen] == sorted(p.received for p in seen)
    assert seen[-1].received == len(PAYLOAD)
    assert seen[-1].total == len(PAYLOAD)
