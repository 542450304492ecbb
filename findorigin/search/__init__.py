"""Multi-provider web search."""

from .aggregator import SearchAggregator, deduplicate_results, prioritize_source_types

__all__ = ["SearchAggregator", "deduplicate_results", "prioritize_source_types"]
