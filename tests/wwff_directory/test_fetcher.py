"""Cache-validating fetcher tests using an httpx MockTransport."""

from __future__ import annotations

import httpx
import pytest

from WwffDirectory.conditional import CacheValidators
from WwffDirectory.errors import FetchError
from WwffDirectory.fetcher import DirectoryFetcher, FetcherState
from WwffDirectory.http import build_http_client
from WwffDirectory.settings import HttpSettings
from tests.fixtures.directory_rows import make_row, render_csv_bytes
from tests.fixtures.http_mocking import DIRECTORY_URL, DirectoryServer

ETAG = '"v1"'
LAST_MODIFIED = "Wed, 01 May 2024 00:00:00 GMT"


def _body(*references: str) -> bytes:
    return render_csv_bytes([make_row(reference=reference) for reference in references])


def test_first_fetch_is_unconditional(directory_server: DirectoryServer, fetcher_factory) -> None:
    directory_server.reply(200, _body("OHFF-0001"), {"ETag": ETAG, "Last-Modified": LAST_MODIFIED})
    fetcher = fetcher_factory()
    assert fetcher.state is FetcherState.UNVALIDATED

    build = fetcher.fetch()

    request = directory_server.last_request
    assert str(request.url) == DIRECTORY_URL
    assert "If-None-Match" not in request.headers
    assert "If-Modified-Since" not in request.headers
    assert build is not None and list(build.directory) == ["OHFF-0001"]
    assert fetcher.state is FetcherState.VALIDATED
    assert fetcher.validators == CacheValidators(etag=ETAG, last_modified=LAST_MODIFIED)
    assert fetcher.parse_count == 1


def test_not_modified_short_circuits(directory_server: DirectoryServer, fetcher_factory) -> None:
    directory_server.reply(200, _body("OHFF-0001"), {"ETag": ETAG, "Last-Modified": LAST_MODIFIED})
    directory_server.reply(304)
    fetcher = fetcher_factory()
    fetcher.fetch()

    assert fetcher.fetch() is None

    request = directory_server.last_request
    assert request.headers["If-None-Match"] == ETAG
    assert request.headers["If-Modified-Since"] == LAST_MODIFIED
    assert fetcher.validators == CacheValidators(etag=ETAG, last_modified=LAST_MODIFIED)
    assert fetcher.parse_count == 1


def test_new_content_replaces_validators(directory_server: DirectoryServer, fetcher_factory) -> None:
    directory_server.reply(200, _body("OHFF-0001"), {"ETag": ETAG})
    directory_server.reply(200, _body("OHFF-0001", "OHFF-0002"), {"ETag": '"v2"'})
    fetcher = fetcher_factory()
    fetcher.fetch()

    build = fetcher.fetch()

    assert build is not None and len(build.directory) == 2
    assert fetcher.validators == CacheValidators(etag='"v2"')
    assert fetcher.parse_count == 2


def test_error_status_leaves_state_unchanged(
    directory_server: DirectoryServer, fetcher_factory
) -> None:
    directory_server.reply(200, _body("OHFF-0001"), {"ETag": ETAG})
    directory_server.reply(500, b"oops")
    fetcher = fetcher_factory()
    fetcher.fetch()

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch()

    assert excinfo.value.status_code == 500
    assert excinfo.value.url == DIRECTORY_URL
    assert fetcher.validators == CacheValidators(etag=ETAG)
    assert fetcher.parse_count == 1


def test_transport_error_is_fetch_error(directory_server: DirectoryServer, fetcher_factory) -> None:
    directory_server.fail(httpx.ConnectError("connection refused"))
    fetcher = fetcher_factory()

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch()

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.status_code is None
    assert fetcher.state is FetcherState.UNVALIDATED


def test_built_client_sends_configured_user_agent(directory_server: DirectoryServer) -> None:
    settings = HttpSettings(directory_url=DIRECTORY_URL, user_agent="WwffDirectory/9.9")
    directory_server.reply(200, _body("OHFF-0001"))
    client = build_http_client(settings, transport=httpx.MockTransport(directory_server.handler))

    with client, DirectoryFetcher(client, settings=settings) as fetcher:
        fetcher.fetch()

    assert directory_server.last_request.headers["User-Agent"] == "WwffDirectory/9.9"
    assert fetcher.url == DIRECTORY_URL
