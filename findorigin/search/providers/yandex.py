"""Yandex Search provider.

The endpoint answers either with JSON (``{"results": [...]}``) or with the
classic Yandex XML format, so both are accepted.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

import httpx

from findorigin.config import YandexCredentials
from findorigin.exceptions import ProviderError
from findorigin.models import SearchResult

from .base import DEFAULT_PROVIDER_TIMEOUT, USER_AGENT, SearchProvider

logger = logging.getLogger(__name__)

YANDEX_SEARCH_URL = "https://yandex.ru/search/xml"
YANDEX_MAX_PER_REQUEST = 100
# Yandex XML error code meaning "nothing found"
YANDEX_NO_RESULTS_CODE = "15"
LEGACY_AUTH_MARKERS = ("old authorization type", "Yandex Cloud gateway")


class YandexSearchProvider(SearchProvider):
    """Search using the Yandex Search API."""

    name = "yandex"

    def __init__(
        self,
        credentials: YandexCredentials,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.credentials = credentials

    @property
    def is_eligible(self) -> bool:
        return self.credentials.is_complete

    async def _search(self, client: httpx.AsyncClient, query: str, max_results: int) -> List[SearchResult]:
        groups_on_page = max(1, min(max_results, YANDEX_MAX_PER_REQUEST))
        params: Dict[str, Any] = {
            "key": self.credentials.api_key,
            "query": query,
            "page": "0",
            "groupby": f"attr=d.mode=deep.groups-on-page={groups_on_page}",
        }
        if self.credentials.folder_id:
            params["folderId"] = self.credentials.folder_id

        response = await client.get(
            YANDEX_SEARCH_URL,
            params=params,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/xml, text/xml, application/json",
                "Authorization": f"Api-Key {self.credentials.api_key}",
            },
        )
        if not response.is_success and any(marker in response.text for marker in LEGACY_AUTH_MARKERS):
            raise ProviderError(
                self.name,
                "the key uses the legacy authorization scheme; configure Yandex Cloud Search API",
                status_code=response.status_code,
                response_text=response.text[:1000],
            )
        self._check_response(response)

        body = response.text
        try:
            data = json.loads(body)
        except ValueError:
            return self._parse_xml(response.content, max_results)

        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response payload", status_code=response.status_code)
        items = data.get("results")
        if items is None:
            return []
        if not isinstance(items, list):
            raise ProviderError(self.name, "unexpected response payload: results is not a list")
        results: List[SearchResult] = []
        for item in items:
            if len(results) >= max_results:
                break
            if not isinstance(item, dict):
                continue
            result = self._make_result(
                item.get("title") or item.get("name"),
                item.get("url") or item.get("link"),
                item.get("snippet") or item.get("description"),
            )
            if result is not None:
                results.append(result)
        return results

    def _parse_xml(self, body: bytes, max_results: int) -> List[SearchResult]:
        try:
            root = ElementTree.fromstring(body)
        except ElementTree.ParseError as e:
            raise ProviderError(self.name, f"response is neither JSON nor XML: {e}") from e

        error = root.find(".//response/error")
        if error is not None:
            code = error.get("code", "")
            if code == YANDEX_NO_RESULTS_CODE:
                return []
            raise ProviderError(self.name, f"code {code}: {''.join(error.itertext()).strip()}")

        results: List[SearchResult] = []
        for doc in root.iter("doc"):
            if len(results) >= max_results:
                break
            url = (doc.findtext("url") or "").strip()
            title_el = doc.find("title")
            if not url or title_el is None:
                continue
            title = "".join(title_el.itertext()).strip()
            passage_el = next(doc.iter("passage"), None)
            snippet = "".join(passage_el.itertext()).strip() if passage_el is not None else ""
            result = self._make_result(title, url, snippet)
            if result is not None:
                results.append(result)
        return results
