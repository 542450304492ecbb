"""Tests for the HTTP API."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from findorigin.dependencies import get_pipeline, get_telegram_client
from findorigin.exceptions import DeliveryError, ReasoningServiceError
from findorigin.main import create_app
from findorigin.models import ComparisonResult
from findorigin.pipeline import PipelineOptions, SourcePipeline
from findorigin.pipeline import messages
from findorigin.search import SearchAggregator

from conftest import StubProvider, make_result

TEXT = "Минфин сообщил, что инфляция замедлилась до 7% в марте 2024 года."


def build_pipeline(candidates, compare_result=None, compare_error=None, eligible=True) -> SourcePipeline:
    comparator = MagicMock()
    comparator.compare = AsyncMock(return_value=compare_result or [], side_effect=compare_error)
    return SourcePipeline(
        SearchAggregator([StubProvider("google", results=candidates, eligible=eligible)]),
        comparator,
        options=PipelineOptions(),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client without the lifespan, so nothing real is built."""
    return TestClient(app)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["hasTelegramToken"] is True
    assert data["message"] == "Bot is configured correctly"
    assert "timestamp" in data


def test_health_with_lifespan_lists_providers(settings):
    with TestClient(create_app(settings)) as client:
        data = client.get("/api/health").json()

    assert data["searchProviders"] == ["google"]
    assert data["reasoningConfigured"] is True


def test_request_id_header(client):
    response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_webhook_routes_command(app, client):
    pipeline = MagicMock()
    pipeline.notify = AsyncMock(return_value=True)
    pipeline.dispatch = AsyncMock()
    app.dependency_overrides[get_pipeline] = lambda: pipeline

    response = client.post(
        "/api/telegram",
        json={"update_id": 1, "message": {"message_id": 2, "chat": {"id": 5, "type": "private"}, "text": "/start"}},
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    pipeline.notify.assert_awaited_once_with(5, messages.WELCOME)


def test_webhook_dispatches_text(app, client):
    pipeline = MagicMock()
    pipeline.dispatch = AsyncMock()
    app.dependency_overrides[get_pipeline] = lambda: pipeline

    response = client.post(
        "/api/telegram",
        json={"update_id": 1, "message": {"message_id": 2, "chat": {"id": 5, "type": "private"}, "text": TEXT}},
    )

    assert response.json() == {"ok": True}
    pipeline.dispatch.assert_awaited_once_with(5, TEXT)


def test_webhook_ignores_malformed_update(app, client):
    app.dependency_overrides[get_pipeline] = lambda: MagicMock()

    response = client.post("/api/telegram", json={"hello": "world"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_webhook_rejects_wrong_secret(settings):
    app = create_app(settings.model_copy(update={"telegram_webhook_secret": "s3cr3t"}))
    app.dependency_overrides[get_pipeline] = lambda: MagicMock()
    client = TestClient(app)

    assert client.post("/api/telegram", json={"update_id": 1}).status_code == 401
    response = client.post(
        "/api/telegram",
        json={"update_id": 1},
        headers={"X-Telegram-Bot-Api-Secret-Token": "s3cr3t"},
    )
    assert response.status_code == 200


def test_webhook_before_startup_is_unavailable(client):
    assert client.post("/api/telegram", json={"update_id": 1}).status_code == 503


def test_set_webhook(app, client):
    telegram = MagicMock()
    telegram.set_webhook = AsyncMock(return_value={"ok": True, "result": True})
    app.dependency_overrides[get_telegram_client] = lambda: telegram

    response = client.post("/api/webhook/set", json={"url": "https://bot.example.com/api/telegram", "secretToken": "s"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    telegram.set_webhook.assert_awaited_once_with("https://bot.example.com/api/telegram", secret_token="s")


def test_set_webhook_failure(app, client):
    telegram = MagicMock()
    telegram.set_webhook = AsyncMock(side_effect=DeliveryError("Telegram API error: bad url", status_code=400))
    app.dependency_overrides[get_telegram_client] = lambda: telegram

    response = client.post("/api/webhook/set", json={"url": "http://bad"})

    assert response.status_code == 502


def test_set_webhook_requires_url(client):
    assert client.post("/api/webhook/set", json={}).status_code == 422


def test_mini_app_analyze(app, client):
    candidates = [make_result("https://tass.ru/1", "ТАСС"), make_result("https://example.com/2")]
    scored = [ComparisonResult(source=candidates[0], relevance_score=91, confidence="high", explanation="да")]
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline(candidates, compare_result=scored)

    response = client.post("/api/mini-app/analyze", json={"text": TEXT})

    data = response.json()
    assert data["count"] == 1
    assert data["results"][0] == {
        "title": "ТАСС",
        "url": "https://tass.ru/1",
        "snippet": "",
        "relevanceScore": 91,
        "confidence": "high",
        "explanation": "да",
        "sourceType": "news",
    }
    assert data["usedFallback"] is False


def test_mini_app_analyze_reasoning_fallback(app, client):
    candidates = [make_result(f"https://example.com/{i}") for i in range(5)]
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline(
        candidates, compare_error=ReasoningServiceError("down")
    )

    data = client.post("/api/mini-app/analyze", json={"text": TEXT}).json()

    assert data["count"] == 3
    assert all(r["relevanceScore"] == 50 for r in data["results"])
    assert data["usedFallback"] is True


def test_mini_app_analyze_no_sources(app, client):
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline([])

    data = client.post("/api/mini-app/analyze", json={"text": TEXT}).json()

    assert data == {"results": [], "count": 0, "message": messages.NO_SOURCES_FOUND}


def test_mini_app_analyze_requires_text(app, client):
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline([])

    assert client.post("/api/mini-app/analyze", json={"text": ""}).status_code == 422
    assert client.post("/api/mini-app/analyze", json={"text": "   "}).status_code == 400


def test_test_analyze(app, client):
    candidates = [make_result(f"https://example.com/{i}") for i in range(5)] + [make_result("https://tass.ru/n")]
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline(candidates)

    data = client.post("/api/test-analyze", json={"text": "**Цены** выросли на 15% в 2024 году"}).json()

    assert data["cleanedText"] == "Цены выросли на 15% в 2024 году"
    assert "15%" in data["analysis"]["numbers"]
    assert data["analysis"]["dates"] == []
    assert len(data["searchResults"]) == 3
    assert data["searchResults"][0]["url"] == "https://tass.ru/n"
    assert data["searchResults"][0]["source_type"] == "news"
    assert data["note"] is None


def test_test_analyze_without_provider(app, client):
    app.dependency_overrides[get_pipeline] = lambda: build_pipeline([], eligible=False)

    data = client.post("/api/test-analyze", json={"text": TEXT}).json()

    assert data["searchResults"] == []
    assert data["note"]
