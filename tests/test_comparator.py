"""Tests for relevance scoring and top-N selection."""

import asyncio
import json

import httpx
import pytest

from findorigin.comparison import RelevanceComparator, build_comparison_prompt, parse_comparison, select_top
from findorigin.comparison.comparator import heuristic_scores
from findorigin.config import OpenAICredentials
from findorigin.exceptions import ReasoningServiceError, ReasoningServiceMalformed
from findorigin.models import ComparisonResult, Confidence

from conftest import make_result, mock_client

KEY = OpenAICredentials(api_key="sk-test")


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def comparator_answering(content, status_code: int = 200, seen: dict = None) -> RelevanceComparator:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"message": "nope"}})
        return httpx.Response(200, json=completion(content))

    return RelevanceComparator(KEY, client=mock_client(handler))


def test_prompt_lists_candidates_with_one_based_index(candidates):
    prompt = build_comparison_prompt("Цены выросли", candidates[:2])

    assert '"Цены выросли"' in prompt
    assert "1. Title: ТАСС: цены выросли" in prompt
    assert "2. Title: Example article" in prompt
    assert "Type: news" in prompt
    assert '"results"' in prompt


def test_parse_comparison_sorts_by_score(candidates):
    payload = {
        "results": [
            {"index": 1, "relevanceScore": 40, "confidence": "low", "explanation": "слабо"},
            {"index": 2, "relevanceScore": 90, "confidence": "high", "explanation": "точно"},
            {"index": 3, "relevanceScore": 40, "confidence": "medium"},
        ]
    }

    results = parse_comparison(candidates, payload)

    assert [r.source.url for r in results] == [candidates[1].url, candidates[0].url, candidates[2].url]
    assert results[0].confidence == Confidence.HIGH
    assert results[2].explanation == "Оценка релевантности"


def test_parse_comparison_ignores_bad_indices(candidates):
    payload = {
        "results": [
            {"index": 0, "relevanceScore": 99},
            {"index": 5, "relevanceScore": 99},
            {"index": True, "relevanceScore": 99},
            {"index": "2", "relevanceScore": 70},
            {"index": 3.0, "relevanceScore": 60},
            {"index": float("nan"), "relevanceScore": 99},
            "garbage",
        ]
    }

    results = parse_comparison(candidates, payload)

    assert [r.source.url for r in results] == [candidates[1].url, candidates[2].url]


def test_parse_comparison_requires_results_list(candidates):
    with pytest.raises(ReasoningServiceMalformed):
        parse_comparison(candidates, {"items": []})
    with pytest.raises(ReasoningServiceMalformed):
        parse_comparison(candidates, [])


def test_select_top_filters_and_limits(candidates):
    comparisons = [
        ComparisonResult(source=candidates[0], relevance_score=30),
        ComparisonResult(source=candidates[1], relevance_score=31),
        ComparisonResult(source=candidates[2], relevance_score=80),
        ComparisonResult(source=candidates[3], relevance_score=80),
    ]

    top = select_top(comparisons, 2)

    assert [c.source.url for c in top] == [candidates[2].url, candidates[3].url]
    assert select_top(comparisons, 10)[-1].relevance_score == 31


def test_heuristic_scores_keep_candidate_order(candidates):
    scores = heuristic_scores(candidates, 3)

    assert [s.source for s in scores] == candidates[:3]
    assert all(s.relevance_score == 50 and s.confidence == Confidence.MEDIUM for s in scores)
    assert scores[0].explanation == "AI сравнение недоступно"


@pytest.mark.asyncio
async def test_compare_calls_chat_completions(candidates):
    seen = {}
    content = json.dumps(
        {"results": [{"index": 2, "relevanceScore": 88, "confidence": "high", "explanation": "совпадает"}]}
    )
    comparator = comparator_answering(content, seen=seen)

    results = await comparator.compare("Цены выросли", candidates)

    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert seen["body"]["temperature"] == 0.3
    assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]
    assert len(results) == 1
    assert results[0].source == candidates[1]
    assert results[0].relevance_score == 88


@pytest.mark.asyncio
async def test_compare_with_no_candidates_skips_the_call():
    def handler(request):
        raise AssertionError("no request expected")

    comparator = RelevanceComparator(KEY, client=mock_client(handler))
    assert await comparator.compare("text", []) == []


@pytest.mark.asyncio
async def test_non_json_content_falls_back_to_neutral_scores(candidates):
    results = await comparator_answering("I think the first one is best").compare("text", candidates)

    assert len(results) == len(candidates)
    assert [r.source for r in results] == candidates
    assert all(r.relevance_score == 50 for r in results)
    assert results[0].explanation == "Не удалось оценить релевантность"


@pytest.mark.asyncio
async def test_wrong_shape_falls_back_to_neutral_scores(candidates):
    results = await comparator_answering(json.dumps({"scores": [1, 2]})).compare("text", candidates)
    assert all(r.confidence == Confidence.MEDIUM for r in results)
    assert len(results) == len(candidates)


@pytest.mark.asyncio
async def test_missing_key_raises(candidates):
    comparator = RelevanceComparator(OpenAICredentials(api_key=""))
    assert not comparator.is_configured
    with pytest.raises(ReasoningServiceError):
        await comparator.compare("text", candidates)


@pytest.mark.asyncio
async def test_error_status_raises(candidates):
    with pytest.raises(ReasoningServiceError) as exc_info:
        await comparator_answering("", status_code=429).compare("text", candidates)
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_broken_envelope_raises(candidates):
    comparator = RelevanceComparator(
        KEY, client=mock_client(lambda request: httpx.Response(200, json={"choices": []}))
    )
    with pytest.raises(ReasoningServiceError):
        await comparator.compare("text", candidates)


@pytest.mark.asyncio
async def test_timeout_raises(candidates):
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=completion("{}"))

    comparator = RelevanceComparator(KEY, timeout=0.05, client=mock_client(handler))
    with pytest.raises(ReasoningServiceError, match="timed out"):
        await comparator.compare("text", candidates)


def test_from_settings(settings):
    comparator = RelevanceComparator.from_settings(settings)
    assert comparator.is_configured
    assert comparator.model == settings.openai_model
    assert comparator.timeout == settings.reasoning_timeout
