"""Bing Web Search provider."""

import logging
from typing import List, Optional

import httpx

from findorigin.config import BingCredentials
from findorigin.models import SearchResult

from .base import DEFAULT_PROVIDER_TIMEOUT, SearchProvider

logger = logging.getLogger(__name__)

BING_SEARCH_URL = "https://api.bing.microsoft.com/v7.0/search"
BING_MAX_PER_REQUEST = 50


class BingSearchProvider(SearchProvider):
    """Search using the Bing Web Search v7 API."""

    name = "bing"

    def __init__(
        self,
        credentials: BingCredentials,
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
            BING_SEARCH_URL,
            params={"q": query, "count": max(1, min(max_results, BING_MAX_PER_REQUEST))},
            headers={"Ocp-Apim-Subscription-Key": self.credentials.api_key},
        )
        self._check_response(response)
        data = self._json(response)

        web_pages = data.get("webPages")
        if not isinstance(web_pages, dict):
            return []
        items = web_pages.get("value") or []
        if not items:
            return []
        return self._to_results(items, max_results, title_key="name", url_key="url")
