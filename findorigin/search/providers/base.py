"""Common behaviour for web-search provider adapters."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from pydantic import ValidationError

from findorigin.exceptions import ProviderError, ProviderTimeout
from findorigin.models import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 20.0
USER_AGENT = "FindOrigin-Bot/1.0"


class SearchProvider(ABC):
    """
    Adapter turning one provider's API into a list of :class:`SearchResult`.

    Subclasses implement ``is_eligible`` and ``_search``; ``search`` wraps the
    call with a hard timeout and maps transport failures onto
    :class:`ProviderTimeout` / :class:`ProviderError`.
    """

    name: str = "provider"

    def __init__(self, timeout: float = DEFAULT_PROVIDER_TIMEOUT, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    @property
    @abstractmethod
    def is_eligible(self) -> bool:
        """Whether the full credential bundle for this provider is present."""

    @abstractmethod
    async def _search(self, client: httpx.AsyncClient, query: str, max_results: int) -> List[SearchResult]:
        """Perform the provider request and normalize its items."""

    async def search(self, query: str, max_results: int = 10) -> List[SearchResult]:
        """
        Search the provider.

        Raises:
            ProviderTimeout: the provider did not answer within ``timeout``
            ProviderError: non-success status, transport failure or unreadable payload
        """
        try:
            async with self._client_context() as client:
                results = await asyncio.wait_for(self._search(client, query, max_results), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProviderTimeout(self.name, self.timeout) from e
        except httpx.RequestError as e:
            raise ProviderError(self.name, f"network error: {e}") from e
        except (TypeError, KeyError, AttributeError, ValueError) as e:
            raise ProviderError(self.name, f"unexpected response payload: {e}") from e

        logger.info(f"{self.name} returned {len(results)} results for query: {query[:50]}")
        return results

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            yield client

    def _check_response(self, response: httpx.Response) -> None:
        """Raise :class:`ProviderError` carrying the provider's own error description."""
        if response.is_success:
            return
        error_text = response.text[:1000] if response.text else ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        description = _describe_error(payload) or error_text or response.reason_phrase
        logger.error(f"{self.name} API error {response.status_code}: {description[:300]}")
        raise ProviderError(
            self.name,
            description,
            status_code=response.status_code,
            response_text=error_text,
        )

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.name, "response is not valid JSON", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response payload", status_code=response.status_code)
        return data

    def _to_results(
        self,
        items: Any,
        max_results: int,
        title_key: str = "title",
        url_key: str = "link",
        snippet_key: str = "snippet",
    ) -> List[SearchResult]:
        if not isinstance(items, list):
            raise ProviderError(self.name, "unexpected response payload: result list is not a list")
        results: List[SearchResult] = []
        for item in items:
            if len(results) >= max_results:
                break
            if not isinstance(item, dict):
                continue
            result = self._make_result(item.get(title_key), item.get(url_key), item.get(snippet_key))
            if result is not None:
                results.append(result)
        return results

    def _make_result(self, title: Any, url: Any, snippet: Any) -> Optional[SearchResult]:
        if not url:
            return None
        try:
            return SearchResult(title=str(title or "Untitled"), url=str(url), snippet=str(snippet or ""))
        except ValidationError:
            logger.debug(f"{self.name}: skipping result with invalid URL {url!r}")
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(eligible={self.is_eligible}, timeout={self.timeout})"


def _describe_error(payload: Any) -> str:
    """Pull a human readable message out of the common JSON error shapes."""
    if not isinstance(payload, dict):
        return ""
    error = payload.get("error")
    if isinstance(error, dict):
        parts = [str(error.get(k)) for k in ("code", "status", "message") if error.get(k)]
        return " ".join(parts)
    if isinstance(error, str):
        return error
    message = payload.get("message")
    return str(message) if message else ""
