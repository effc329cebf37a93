"""Tests for fetching the remote index and the httpx transport behind it."""

from __future__ import annotations

import logging

import httpx
import pytest

from boxpublish.domain.errors import IdentityMismatch, IndexCorrupt, TransportError
from boxpublish.domain.models import PackageIdentity
from boxpublish.services.index_fetcher import IndexFetcher, index_url
from boxpublish.services.transport import HttpxTransport
from fakes import FakeTransport, index_bytes

IDENTITY = PackageIdentity.parse("acme/box1")
URL = "http://h/files/acme/box1/metadata.json"


def test_index_url():
    assert index_url(IDENTITY, "http://h/files") == URL
    assert index_url(IDENTITY, "http://h/files/") == URL


class TestIndexFetcher:
    @pytest.mark.asyncio
    async def test_not_found_returns_none_with_warning(self, caplog):
        transport = FakeTransport()
        fetcher = IndexFetcher(transport, logger=logging.getLogger("tests.fetcher"))

        with caplog.at_level(logging.WARNING, logger="tests.fetcher"):
            result = await fetcher.fetch(IDENTITY, "http://h/files")

        assert result is None
        assert transport.requested == [URL]
        assert any(r.levelno == logging.WARNING and URL in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_returns_parsed_index(self, silent_logger):
        transport = FakeTransport({URL: index_bytes("acme/box1", "0.1.0", "0.2.0")})
        fetcher = IndexFetcher(transport, logger=silent_logger)

        index = await fetcher.fetch(IDENTITY, "http://h/files")

        assert index.name == "acme/box1"
        assert [v.version for v in index.versions] == ["0.1.0", "0.2.0"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"<html>not json</html>",
            b"",
            b"[]",
            b'{"versions": []}',
            b'{"name": "acme/box1", "versions": [{"providers": []}]}',
        ],
    )
    async def test_unparseable_body_is_corrupt(self, body, silent_logger):
        fetcher = IndexFetcher(FakeTransport({URL: body}), logger=silent_logger)

        with pytest.raises(IndexCorrupt) as exc_info:
            await fetcher.fetch(IDENTITY, "http://h/files")
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_name_mismatch_is_fatal(self, silent_logger):
        fetcher = IndexFetcher(FakeTransport({URL: index_bytes("other/box", "0.1.0")}), logger=silent_logger)

        with pytest.raises(IdentityMismatch) as exc_info:
            await fetcher.fetch(IDENTITY, "http://h/files")

        assert exc_info.value.expected == "acme/box1"
        assert exc_info.value.observed == "other/box"

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, silent_logger):
        fetcher = IndexFetcher(FakeTransport({URL: TransportError("boom", url=URL)}), logger=silent_logger)

        with pytest.raises(TransportError):
            await fetcher.fetch(IDENTITY, "http://h/files")


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(transport=httpx.MockTransport(handler))


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_success_returns_body(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=b'{"name": "acme/box1", "versions": []}')

        body = await _transport(handler).get(URL)

        assert body == b'{"name": "acme/box1", "versions": []}'
        assert seen == [URL]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 410])
    async def test_not_found_statuses_return_none(self, status):
        body = await _transport(lambda request: httpx.Response(status)).get(URL)
        assert body is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 500, 503])
    async def test_other_error_statuses_raise(self, status):
        with pytest.raises(TransportError) as exc_info:
            await _transport(lambda request: httpx.Response(status)).get(URL)
        assert exc_info.value.status_code == status
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_connection_errors_raise(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await _transport(handler).get(URL)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_redirects_are_followed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/metadata.json") and request.url.host == "h":
                return httpx.Response(302, headers={"Location": "http://mirror/acme/box1/metadata.json"})
            return httpx.Response(200, content=b"{}")

        assert await _transport(handler).get(URL) == b"{}"


@pytest.mark.asyncio
async def test_invalid_url_is_a_transport_error():
    transport = _transport(lambda request: httpx.Response(200, content=b"{}"))

    with pytest.raises(TransportError) as exc_info:
        await transport.get("http://h:notaport/files/acme/box1/metadata.json")

    assert exc_info.value.url == "http://h:notaport/files/acme/box1/metadata.json"


@pytest.mark.asyncio
async def test_index_without_checksums_is_accepted(silent_logger):
    body = b'{"name": "acme/box1", "versions": [{"version": "0.1.0", "providers": [{"name": "virtualbox", "url": "u"}]}]}'
    fetcher = IndexFetcher(FakeTransport({URL: body}), logger=silent_logger)

    index = await fetcher.fetch(IDENTITY, "http://h/files")

    assert index.versions[0].providers[0].checksum is None
