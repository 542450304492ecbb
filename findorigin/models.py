"""Domain models shared by the analysis, search and comparison stages."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, List
from urllib.parse import urlparse, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from findorigin.source_types import SourceType, classify_source

DEFAULT_RELEVANCE_SCORE = 50


class Confidence(str, Enum):
    """Reliability label attached to a relevance score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def normalize_url(url: str) -> str:
    """
    Return the key used to decide whether two results point at the same page.

    Scheme and host are case-insensitive; path, query and fragment are not.
    """
    parts = urlsplit(url.strip())
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path.rstrip("/"), parts.query, parts.fragment)
    )


def clamp_score(value: Any, default: int = DEFAULT_RELEVANCE_SCORE) -> int:
    """Coerce an untrusted score into an integer in ``[0, 100]``."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    if isinstance(value, float):
        if math.isnan(value):
            return default
        if math.isinf(value):
            return 100 if value > 0 else 0
        value = round(value)
    return max(0, min(100, int(value)))


class SearchResult(BaseModel):
    """One candidate source returned by a search provider."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    snippet: str = ""

    @field_validator("url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value

    @field_validator("title", "snippet", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def source_type(self) -> SourceType:
        """Category derived from the URL host, never taken from the provider."""
        return classify_source(self.url)

    @property
    def dedup_key(self) -> str:
        return normalize_url(self.url)


class ExtractedData(BaseModel):
    """Result of text analysis."""

    model_config = ConfigDict(frozen=True)

    key_claims: List[str] = Field(default_factory=list, description="Up to 3 declarative sentences")
    dates: List[str] = Field(default_factory=list)
    numbers: List[str] = Field(default_factory=list)
    names: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)
    search_queries: List[str] = Field(default_factory=list, description="Up to 5 queries, most useful first")


class ComparisonResult(BaseModel):
    """Relevance verdict for one candidate."""

    model_config = ConfigDict(frozen=True)

    source: SearchResult
    relevance_score: int = Field(default=DEFAULT_RELEVANCE_SCORE, ge=0, le=100)
    confidence: Confidence = Confidence.MEDIUM
    explanation: str = ""

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _clamp_relevance(cls, value: Any) -> int:
        return clamp_score(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> Any:
        if isinstance(value, Confidence):
            return value
        if isinstance(value, str) and value.strip().lower() in {c.value for c in Confidence}:
            return value.strip().lower()
        return Confidence.MEDIUM

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)
