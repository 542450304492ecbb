"""Google Custom Search provider (primary)."""

import logging
from typing import List, Optional

import httpx

from findorigin.config import GoogleCredentials
from findorigin.models import SearchResult

from .base import DEFAULT_PROVIDER_TIMEOUT, SearchProvider

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
# Custom Search returns at most 10 items per request
GOOGLE_MAX_PER_REQUEST = 10


class GoogleSearchProvider(SearchProvider):
    """Search using the Google Custom Search JSON API."""

    name = "google"

    def __init__(
        self,
        credentials: GoogleCredentials,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.credentials = credentials

    @property
    def is_eligible(self) -> bool:
        return self.credentials.is_complete

    async def _search(self, client: httpx.AsyncClient, query: str, max_results: int) -> List[SearchResult]:
        params = {
            "key": self.credentials.api_key,
            "cx": self.credentials.search_engine_id,
            "q": query,
            "num": max(1, min(max_results, GOOGLE_MAX_PER_REQUEST)),
        }
        response = await client.get(GOOGLE_SEARCH_URL, params=params)
        self._check_response(response)
        data = self._json(response)

        items = data.get("items") or []
        if not items:
            logger.info(f"Google returned no items for query: {query[:50]}")
            return []
        return self._to_results(items, max_results, title_key="title", url_key="link")
