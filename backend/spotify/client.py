"""
Spotify catalog gateway.

Searches Spotify's track catalog for the song-request flow. The core treats
the result as opaque track records and stores them verbatim.

Edge cases handled:
  - Missing credentials (CatalogNotConfigured, surfaced as 503)
  - Bearer token cached and refreshed a minute before it expires
  - Concurrent searches racing to refresh the token (single refresh via lock)
  - Token revoked early (401 on search: refresh once and retry)
  - Slow or hung upstream (bounded timeout, surfaced as 504)
  - Upstream errors and non-JSON bodies (surfaced as 502)
  - Responses without a "tracks" section (empty result)
"""

import asyncio
import logging
import os
import time
from typing import Any, Callable, Optional

import httpx

from errors import CatalogNotConfigured, CatalogTimeout, CatalogUnavailable
from spotify import config

logger = logging.getLogger(__name__)


class SpotifyCatalog:
    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        *,
        timeout: float = config.TIMEOUT_SECONDS,
        limit: int = config.SEARCH_LIMIT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._limit = limit
        self._clock = clock
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_env(cls, **kwargs) -> "SpotifyCatalog":
        return cls(
            os.environ.get("SPOTIFY_CLIENT_ID"),
            os.environ.get("SPOTIFY_CLIENT_SECRET"),
            **kwargs,
        )

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ─── Token handling ────────────────────────────────────────────────

    def _token_valid(self) -> bool:
        return self._token is not None and self._clock() < self._token_expires_at

    def invalidate_token(self) -> None:
        self._token = None
        self._token_expires_at = 0.0

    async def _fetch_token(self) -> None:
        response = await self._send(
            "POST",
            config.TOKEN_URL,
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
        )
        if response.status_code == 401:
            logger.warning("Spotify rejected client credentials")
            raise CatalogUnavailable("Catalog rejected credentials")
        data = self._json(response)

        token = data.get("access_token")
        if not token:
            raise CatalogUnavailable("Catalog returned no access token")

        expires_in = float(data.get("expires_in", 3600))
        self._token = token
        self._token_expires_at = self._clock() + max(expires_in - config.TOKEN_REFRESH_MARGIN_SECONDS, 0)
        logger.debug("Fetched Spotify token, valid for %.0fs", expires_in)

    async def get_token(self) -> str:
        if not self.configured:
            raise CatalogNotConfigured("Catalog credentials are not configured")

        if self._token_valid():
            return self._token

        async with self._token_lock:
            # Another search may have refreshed it while we waited
            if not self._token_valid():
                await self._fetch_token()
        return self._token

    # ─── HTTP helpers ──────────────────────────────────────────────────

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send one request, mapping transport failures onto catalog errors."""
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Spotify request to %s timed out", url)
            raise CatalogTimeout("Catalog timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Spotify request to %s failed: %s", url, exc)
            raise CatalogUnavailable("Catalog unavailable") from exc

        if response.status_code == 401:
            return response
        if response.is_error:
            logger.warning("Spotify %s %s returned %d", method, url, response.status_code)
            raise CatalogUnavailable(f"Catalog returned HTTP {response.status_code}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            logger.exception("Spotify returned a non-JSON body")
            raise CatalogUnavailable("Catalog returned an invalid response") from exc
        if not isinstance(data, dict):
            raise CatalogUnavailable("Catalog returned an invalid response")
        return data

    # ─── Public API ────────────────────────────────────────────────────

    async def search(self, query: str) -> list[dict[str, Any]]:
        """Return up to `limit` track objects matching `query`."""
        params = {"q": query, "type": "track", "limit": self._limit}

        for attempt in range(2):
            token = await self.get_token()
            response = await self._send(
                "GET",
                config.SEARCH_URL,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.status_code != 401:
                break
            logger.warning("Spotify rejected cached token (attempt %d), refreshing", attempt + 1)
            self.invalidate_token()
        else:
            raise CatalogUnavailable("Catalog rejected credentials")

        data = self._json(response)
        tracks = data.get("tracks")
        if not isinstance(tracks, dict):
            return []
        return list(tracks.get("items") or [])[: self._limit]

    async def aclose(self) -> None:
        await self._http.aclose()
