"""Text cleaning and heuristic analysis."""

from .cleaning import clean_text
from .text_analyzer import (
    analyze_text,
    extract_dates,
    extract_key_claims,
    extract_links,
    extract_names,
    extract_numbers,
    generate_search_queries,
)

__all__ = [
    "analyze_text",
    "clean_text",
    "extract_dates",
    "extract_key_claims",
    "extract_links",
    "extract_names",
    "extract_numbers",
    "generate_search_queries",
]
