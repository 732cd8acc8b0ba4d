"""Async HTTP fetcher for images missing from both cache tiers."""

from __future__ import annotations

import logging

import httpx

from imgcache.errors.exceptions import FetchError

logger = logging.getLogger(__name__)


class ImageFetcher:
    """Downloads raw bytes for a locator over httpx.

    Fail-soft: ``fetch`` returns None on any network or HTTP failure. There
    is no retry; timeouts are whatever the client is configured with. An
    injected client belongs to the caller and is not closed by ``aclose``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def fetch(self, locator: str) -> bytes | None:
        """Return the body at ``locator``, or None if it could not be fetched."""
        try:
            return await self._download(locator)
        except FetchError as e:
            logger.warning("Fetch failed for %s: %s", locator, e.message)
            return None

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: dict = {"follow_redirects": True}
            if self._timeout:
                kwargs["timeout"] = httpx.Timeout(self._timeout)
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def _download(self, locator: str) -> bytes:
        try:
            response = await self._get_client().get(locator)
        except httpx.InvalidURL as e:
            raise FetchError(f"invalid URL: {e}", locator=locator, original=e) from e
        except httpx.HTTPError as e:
            raise FetchError(f"{type(e).__name__}: {e}", locator=locator, original=e) from e

        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code}",
                locator=locator,
                http_status=response.status_code,
            )
        if not response.content:
            raise FetchError("empty response body", locator=locator, http_status=response.status_code)

        logger.debug("Fetched %d bytes from %s", len(response.content), locator)
        return response.content
