"""
Catalog gateway tests. All HTTP goes through httpx.MockTransport.
"""

import asyncio
import base64

import httpx
import pytest

from errors import CatalogNotConfigured, CatalogTimeout, CatalogUnavailable
from spotify import config
from spotify.client import SpotifyCatalog

ITEMS = [{"id": str(i), "name": f"Song {i}"} for i in range(5)]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class SpotifyStub:
    """Scriptable fake of the token and search endpoints."""

    def __init__(self, search_responses=None, expires_in=3600):
        self.token_requests: list[httpx.Request] = []
        self.search_requests: list[httpx.Request] = []
        self.search_responses = list(search_responses or [])
        self.expires_in = expires_in

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == config.TOKEN_URL:
            self.token_requests.append(request)
            token = f"tok{len(self.token_requests)}"
            return httpx.Response(200, json={"access_token": token, "expires_in": self.expires_in})

        self.search_requests.append(request)
        if self.search_responses:
            response = self.search_responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={"tracks": {"items": ITEMS}})


def _catalog(stub, **kwargs) -> SpotifyCatalog:
    return SpotifyCatalog("cid", "secret", transport=httpx.MockTransport(stub), **kwargs)


class TestSearch:

    def test_returns_track_items(self):
        stub = SpotifyStub()
        assert asyncio.run(_catalog(stub).search("daft punk")) == ITEMS

    def test_request_shape(self):
        stub = SpotifyStub()
        asyncio.run(_catalog(stub).search("daft punk"))

        token_request = stub.token_requests[0]
        expected = base64.b64encode(b"cid:secret").decode()
        assert token_request.method == "POST"
        assert token_request.headers["Authorization"] == f"Basic {expected}"
        assert token_request.content == b"grant_type=client_credentials"

        search_request = stub.search_requests[0]
        assert search_request.headers["Authorization"] == "Bearer tok1"
        assert search_request.url.params["q"] == "daft punk"
        assert search_request.url.params["type"] == "track"
        assert search_request.url.params["limit"] == "5"

    def test_result_is_capped_at_limit(self):
        many = [{"id": str(i)} for i in range(20)]
        stub = SpotifyStub([httpx.Response(200, json={"tracks": {"items": many}})])
        assert len(asyncio.run(_catalog(stub).search("x"))) == 5

    def test_missing_tracks_section_is_empty(self):
        stub = SpotifyStub([httpx.Response(200, json={"albums": {}})])
        assert asyncio.run(_catalog(stub).search("x")) == []


class TestTokenCache:

    def test_token_reused_until_margin(self):
        clock = FakeClock()
        stub = SpotifyStub(expires_in=3600)
        catalog = _catalog(stub, clock=clock)

        async def scenario():
            await catalog.search("a")
            clock.now += 3600 - config.TOKEN_REFRESH_MARGIN_SECONDS - 1
            await catalog.search("b")
            assert len(stub.token_requests) == 1

            clock.now += 2
            await catalog.search("c")
            assert len(stub.token_requests) == 2

        asyncio.run(scenario())
        assert stub.search_requests[-1].headers["Authorization"] == "Bearer tok2"

    def test_concurrent_searches_share_one_refresh(self):
        stub = SpotifyStub()
        catalog = _catalog(stub)

        async def scenario():
            await asyncio.gather(*(catalog.search(str(i)) for i in range(5)))

        asyncio.run(scenario())
        assert len(stub.token_requests) == 1
        assert len(stub.search_requests) == 5

    def test_401_refreshes_token_once(self):
        stub = SpotifyStub([httpx.Response(401, json={"error": "expired"})])
        result = asyncio.run(_catalog(stub).search("x"))

        assert result == ITEMS
        assert len(stub.token_requests) == 2
        assert stub.search_requests[1].headers["Authorization"] == "Bearer tok2"

    def test_repeated_401_gives_up(self):
        stub = SpotifyStub([httpx.Response(401), httpx.Response(401)])
        with pytest.raises(CatalogUnavailable):
            asyncio.run(_catalog(stub).search("x"))


class TestFailures:

    def test_missing_credentials(self):
        catalog = SpotifyCatalog(None, None, transport=httpx.MockTransport(SpotifyStub()))
        assert not catalog.configured
        with pytest.raises(CatalogNotConfigured):
            asyncio.run(catalog.search("x"))

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "cid")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
        assert SpotifyCatalog.from_env().configured

    def test_timeout(self):
        stub = SpotifyStub([httpx.ReadTimeout("slow")])
        with pytest.raises(CatalogTimeout):
            asyncio.run(_catalog(stub).search("x"))

    def test_connection_error(self):
        stub = SpotifyStub([httpx.ConnectError("refused")])
        with pytest.raises(CatalogUnavailable):
            asyncio.run(_catalog(stub).search("x"))

    def test_server_error(self):
        stub = SpotifyStub([httpx.Response(500)])
        with pytest.raises(CatalogUnavailable):
            asyncio.run(_catalog(stub).search("x"))

    def test_non_json_body(self):
        stub = SpotifyStub([httpx.Response(200, content=b"<html>")])
        with pytest.raises(CatalogUnavailable):
            asyncio.run(_catalog(stub).search("x"))

    def test_rejected_credentials(self):
        def handler(request):
            return httpx.Response(401, json={"error": "invalid_client"})

        catalog = SpotifyCatalog("cid", "wrong", transport=httpx.MockTransport(handler))
        with pytest.raises(CatalogUnavailable):
            asyncio.run(catalog.search("x"))
