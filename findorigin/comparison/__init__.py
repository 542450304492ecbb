"""AI-assisted relevance scoring."""

from .comparator import (
    RelevanceComparator,
    build_comparison_prompt,
    heuristic_scores,
    parse_comparison,
    select_top,
)

__all__ = [
    "RelevanceComparator",
    "build_comparison_prompt",
    "heuristic_scores",
    "parse_comparison",
    "select_top",
]
