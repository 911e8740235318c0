"""
Shared fixtures. No test talks to the real Spotify API: the catalog is
always built on an httpx.MockTransport.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from spotify import config
from spotify.client import SpotifyCatalog

TRACKS = [
    {"id": f"track{i}", "name": f"Song {i}", "artists": [{"name": "Band"}]}
    for i in range(5)
]


class FakeHandle:
    """Stands in for a Subscriber: records what the channel hands it."""

    def __init__(self, ready: bool = True):
        self.is_ready = ready
        self.received: list[dict] = []

    def deliver(self, payload: dict) -> None:
        self.received.append(payload)


def spotify_handler(request: httpx.Request) -> httpx.Response:
    if str(request.url) == config.TOKEN_URL:
        return httpx.Response(200, json={"access_token": "tok", "token_type": "Bearer", "expires_in": 3600})
    return httpx.Response(200, json={"tracks": {"items": TRACKS}})


@pytest.fixture
def make_handle():
    return FakeHandle


@pytest.fixture
def catalog():
    return SpotifyCatalog("client-id", "client-secret", transport=httpx.MockTransport(spotify_handler))


@pytest.fixture
def app(catalog):
    return create_app(catalog=catalog)


@pytest.fixture
def client(app):
    # Context manager: HTTP calls and WebSockets share one event loop
    with TestClient(app) as test_client:
        yield test_client
