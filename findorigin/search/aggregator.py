"""Search aggregator coordinating the provider chain."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

import httpx

from findorigin.config import Settings
from findorigin.exceptions import ProviderError
from findorigin.models import SearchResult
from findorigin.source_types import SourceType

from .providers import (
    BingSearchProvider,
    GoogleSearchProvider,
    SearchProvider,
    SerpApiSearchProvider,
    YandexSearchProvider,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
DEFAULT_MULTI_QUERY_MAX_RESULTS = 20


def deduplicate_results(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Remove duplicate results by normalized URL, keeping the first occurrence."""
    seen_urls = set()
    unique = []
    for result in results:
        if result.dedup_key not in seen_urls:
            seen_urls.add(result.dedup_key)
            unique.append(result)
    return unique


def prioritize_source_types(
    results: Sequence[SearchResult],
    preferred_types: Optional[Iterable[SourceType | str]] = None,
) -> List[SearchResult]:
    """
    Move results of the preferred types to the front.

    Stable partition: both groups keep their relative order and nothing is dropped.
    """
    preferred = {SourceType(t) for t in preferred_types or ()}
    if not preferred:
        return list(results)
    first = [r for r in results if r.source_type in preferred]
    rest = [r for r in results if r.source_type not in preferred]
    return first + rest


class SearchAggregator:
    """
    Query providers in priority order with graceful degradation.

    Providers are never raced: the next one is tried only when the current
    one is ineligible, times out or fails. The first provider that answers
    (even with zero results) ends the chain.
    """

    def __init__(self, providers: Sequence[SearchProvider]):
        self.providers: List[SearchProvider] = list(providers)

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "SearchAggregator":
        """Build the fixed chain Google -> Yandex -> Bing -> SerpAPI."""
        timeout = settings.provider_timeout
        return cls(
            [
                GoogleSearchProvider(settings.google, timeout=timeout, client=client),
                YandexSearchProvider(settings.yandex, timeout=timeout, client=client),
                BingSearchProvider(settings.bing, timeout=timeout, client=client),
                SerpApiSearchProvider(settings.serpapi, timeout=timeout, client=client),
            ]
        )

    def eligible_providers(self) -> List[SearchProvider]:
        return [p for p in self.providers if p.is_eligible]

    @property
    def has_eligible_providers(self) -> bool:
        return any(p.is_eligible for p in self.providers)

    def is_provider_eligible(self, name: str) -> bool:
        return any(p.name == name and p.is_eligible for p in self.providers)

    async def search(self, query: str, max_results: int = DEFAULT_MAX_RESULTS) -> List[SearchResult]:
        """
        Search a single query through the provider chain.

        Returns an empty list when no provider is configured or all of them
        failed; the two cases are told apart only in the logs.
        """
        attempted = 0
        for provider in self.providers:
            if not provider.is_eligible:
                logger.debug(f"{provider.name} not configured, skipping")
                continue

            attempted += 1
            try:
                return await provider.search(query, max_results)
            except ProviderError as e:
                # ProviderTimeout included; the chain advances without retrying
                logger.warning(f"Provider {provider.name} failed: {e}", extra={"provider": provider.name})
                continue

        if attempted == 0:
            logger.warning(f"No search provider configured. Searching for: {query[:50]}")
        else:
            logger.error(f"All {attempted} configured providers failed for query: {query[:50]}")
        return []

    async def search_multiple_queries(
        self,
        queries: Sequence[str],
        max_results: int = DEFAULT_MULTI_QUERY_MAX_RESULTS,
        preferred_types: Optional[Iterable[SourceType | str]] = None,
    ) -> List[SearchResult]:
        """Search each query in order, then dedupe, prioritize and truncate."""
        all_results: List[SearchResult] = []
        for query in queries:
            results = await self.search(query, max_results)
            all_results.extend(results)

        unique = deduplicate_results(all_results)
        ordered = prioritize_source_types(unique, preferred_types)
        logger.info(
            f"Aggregated {len(all_results)} results from {len(queries)} queries, "
            f"{len(unique)} unique, returning {min(len(ordered), max_results)}"
        )
        return ordered[:max_results]
