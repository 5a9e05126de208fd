"""Star Wars API planets transport over httpx.

The listing endpoint takes ``search`` and ``page`` query parameters and
answers with ``{count, next, previous, results}``. An out-of-range page is a
404, which surfaces as a TransportError like any other failure.
"""

import logging

import httpx
from pydantic import ValidationError

from planetscope.models import SearchResult
from planetscope.transports.base import SearchTransport, TransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://swapi.dev/api/planets/"


class SwapiTransport(SearchTransport):
    """Search transport backed by the SWAPI planets listing."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url

    @property
    def name(self) -> str:
        return "swapi"

    async def search(self, text: str, page: int) -> SearchResult:
        try:
            response = await self._client.get(
                self._base_url,
                params={"search": text, "page": page},
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{self.name} search failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{self.name} search failed: {e}") from e

        try:
            return SearchResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.debug("Malformed listing body for %r page %d", text, page)
            raise TransportError(
                f"{self.name} returned a malformed body",
                status_code=response.status_code,
            ) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
