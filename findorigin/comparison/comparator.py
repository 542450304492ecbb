"""Relevance scoring of candidate sources via the OpenAI Chat Completions API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from findorigin.config import OpenAICredentials, Settings
from findorigin.exceptions import ReasoningServiceError, ReasoningServiceMalformed
from findorigin.models import DEFAULT_RELEVANCE_SCORE, ComparisonResult, Confidence, SearchResult

logger = logging.getLogger(__name__)

OPENAI_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 30.0

MIN_RELEVANCE_SCORE = 30
DEFAULT_TOP_LIMIT = 3

UNSCORED_EXPLANATION = "Не удалось оценить релевантность"
REASONING_UNAVAILABLE_EXPLANATION = "AI сравнение недоступно"
DEFAULT_EXPLANATION = "Оценка релевантности"

SYSTEM_PROMPT = (
    "You are an expert fact-checker. Compare the original text with search results "
    "and evaluate their relevance. Return JSON format only."
)


def build_comparison_prompt(original_text: str, candidates: Sequence[SearchResult]) -> str:
    """Prompt listing every candidate with a 1-based index."""
    sources_text = "\n".join(
        f"\n{index}. Title: {source.title}\n"
        f"   URL: {source.url}\n"
        f"   Snippet: {source.snippet}\n"
        f"   Type: {source.source_type.value}"
        for index, source in enumerate(candidates, 1)
    )

    return f"""Compare the original text with the following search results and evaluate their relevance.

Original text:
"{original_text}"

Search results:
{sources_text}

For each source, provide:
- relevanceScore: number from 0 to 100 (how relevant is this source to the original text)
- confidence: "high", "medium", or "low" (how confident you are in this assessment)
- explanation: brief explanation in Russian (why this source is relevant or not)

Return JSON in this format:
{{
  "results": [
    {{
      "index": 1,
      "relevanceScore": 85,
      "confidence": "high",
      "explanation": "Источник подтверждает основное утверждение..."
    }}
  ]
}}"""


def _position(index: Any) -> Optional[int]:
    """0-based position for a 1-based index from the model, or None."""
    if isinstance(index, bool):
        return None
    if isinstance(index, str) and index.strip().isdigit():
        index = int(index.strip())
    if isinstance(index, float) and index.is_integer():
        index = int(index)
    if not isinstance(index, int):
        return None
    return index - 1


def parse_comparison(candidates: Sequence[SearchResult], payload: Any) -> List[ComparisonResult]:
    """
    Turn the model's verdict into sorted :class:`ComparisonResult` items.

    Entries with an index outside ``1..len(candidates)`` are ignored. Sorting
    is stable, so equal scores keep the order the model returned them in.

    Raises:
        ReasoningServiceMalformed: payload has no ``results`` list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise ReasoningServiceMalformed("response has no 'results' list")

    results: List[ComparisonResult] = []
    for entry in payload["results"]:
        if not isinstance(entry, dict):
            continue
        position = _position(entry.get("index"))
        if position is None:
            continue
        if not 0 <= position < len(candidates):
            continue
        results.append(
            ComparisonResult(
                source=candidates[position],
                relevance_score=entry.get("relevanceScore"),
                confidence=entry.get("confidence"),
                explanation=entry.get("explanation") or DEFAULT_EXPLANATION,
            )
        )

    results.sort(key=lambda r: r.relevance_score, reverse=True)
    return results


def neutral_scores(candidates: Sequence[SearchResult], explanation: str) -> List[ComparisonResult]:
    """Score every candidate 50/medium, preserving order."""
    return [
        ComparisonResult(
            source=source,
            relevance_score=DEFAULT_RELEVANCE_SCORE,
            confidence=Confidence.MEDIUM,
            explanation=explanation,
        )
        for source in candidates
    ]


def heuristic_scores(candidates: Sequence[SearchResult], limit: int = DEFAULT_TOP_LIMIT) -> List[ComparisonResult]:
    """Fallback used when the reasoning service is unreachable: the first ``limit`` candidates, unranked."""
    return neutral_scores(list(candidates)[:limit], REASONING_UNAVAILABLE_EXPLANATION)


def select_top(comparisons: Sequence[ComparisonResult], limit: int = DEFAULT_TOP_LIMIT) -> List[ComparisonResult]:
    """Drop low-relevance entries (score <= 30) and keep the best ``limit``."""
    relevant = [c for c in comparisons if c.relevance_score > MIN_RELEVANCE_SCORE]
    relevant.sort(key=lambda c: c.relevance_score, reverse=True)
    return relevant[:limit]


class RelevanceComparator:
    """Scores candidates against the original text with one chat-completion request."""

    def __init__(
        self,
        credentials: OpenAICredentials,
        model: str = DEFAULT_MODEL,
        base_url: str = OPENAI_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.credentials = credentials
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "RelevanceComparator":
        return cls(
            settings.openai,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.reasoning_timeout,
            client=client,
        )

    @property
    def is_configured(self) -> bool:
        return self.credentials.is_complete

    async def compare(self, original_text: str, candidates: Sequence[SearchResult]) -> List[ComparisonResult]:
        """
        Score ``candidates`` against ``original_text``.

        A response whose content is not the expected JSON shape falls back to
        neutral scores for the whole batch.

        Raises:
            ReasoningServiceError: missing key, timeout, non-success status or
                an unusable HTTP envelope
        """
        candidates = list(candidates)
        if not candidates:
            return []

        if not self.is_configured:
            logger.error("OPENAI_API_KEY is not set")
            raise ReasoningServiceError("OpenAI API key is not configured")

        logger.info(f"Starting comparison with {len(candidates)} sources")
        content = await self._call_openai(build_comparison_prompt(original_text, candidates))

        try:
            try:
                payload = json.loads(content)
            except json.JSONDecodeError as e:
                raise ReasoningServiceMalformed(f"content is not JSON: {e}") from e
            return parse_comparison(candidates, payload)
        except ReasoningServiceMalformed as e:
            logger.warning(f"Invalid AI response format, using fallback: {e} (content: {content[:200]})")
            return neutral_scores(candidates, UNSCORED_EXPLANATION)

    async def _call_openai(self, user_prompt: str) -> str:
        """Call Chat Completions with ``response_format=json_object`` and return the message content."""
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.credentials.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.3,
            "response_format": {"type": "json_object"},
        }

        try:
            response = await asyncio.wait_for(self._post(url, payload, headers), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ReasoningServiceError(f"OpenAI request timed out after {self.timeout:g}s") from e
        except httpx.RequestError as e:
            raise ReasoningServiceError(f"Network error connecting to OpenAI: {e}") from e

        if not response.is_success:
            logger.error(f"OpenAI API error {response.status_code}: {response.text[:300]}")
            raise ReasoningServiceError(
                f"OpenAI API returned {response.status_code}", status_code=response.status_code
            )

        try:
            data: Dict[str, Any] = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ReasoningServiceError(f"Unexpected OpenAI response envelope: {e}") from e
        if not isinstance(content, str) or not content:
            raise ReasoningServiceError("No content in OpenAI response")

        logger.info("Received response from OpenAI")
        return content

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=headers)
        timeout = httpx.Timeout(self.timeout, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, json=payload, headers=headers)
