"""SerpAPI search provider (Google engine)."""

import logging
from typing import List, Optional

import httpx

from findorigin.config import SerpApiCredentials
from findorigin.models import SearchResult

from .base import DEFAULT_PROVIDER_TIMEOUT, SearchProvider

logger = logging.getLogger(__name__)

SERPAPI_SEARCH_URL = "https://serpapi.com/search"
SERPAPI_MAX_PER_REQUEST = 100


class SerpApiSearchProvider(SearchProvider):
    """Search using SerpAPI's Google results."""

    name = "serpapi"

    def __init__(
        self,
        credentials: SerpApiCredentials,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.credentials = credentials

    @property
    def is_eligible(self) -> bool:
        return self.credentials.is_complete

    async def _search(self, client: httpx.AsyncClient, query: str, max_results: int) -> List[SearchResult]:
        response = await client.get(
            SERPAPI_SEARCH_URL,
            params={
                "api_key": self.credentials.api_key,
                "q": query,
                "engine": "google",
                "num": max(1, min(max_results, SERPAPI_MAX_PER_REQUEST)),
            },
        )
        self._check_response(response)
        data = self._json(response)

        organic_results = data.get("organic_results") or []
        return self._to_results(organic_results, max_results, title_key="title", url_key="link")
