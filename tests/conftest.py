"""Shared fixtures and fakes."""

import asyncio
from typing import Callable, List, Optional, Tuple

import httpx
import pytest

from findorigin.config import Settings
from findorigin.models import SearchResult
from findorigin.search.providers import SearchProvider


def make_result(url: str, title: str = "Title", snippet: str = "") -> SearchResult:
    return SearchResult(title=title, url=url, snippet=snippet)


class StubProvider(SearchProvider):
    """Provider returning canned results or raising a canned error."""

    def __init__(
        self,
        name: str,
        results: Optional[List[SearchResult]] = None,
        error: Optional[Exception] = None,
        eligible: bool = True,
        delay: float = 0.0,
        timeout: float = 20.0,
    ):
        super().__init__(timeout=timeout)
        self.name = name
        self.results = results or []
        self.error = error
        self.eligible = eligible
        self.delay = delay
        self.calls: List[Tuple[str, int]] = []

    @property
    def is_eligible(self) -> bool:
        return self.eligible

    async def _search(self, client, query, max_results):
        self.calls.append((query, max_results))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.results[:max_results])

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordingNotifier:
    """Notifier that records every message and can be told to fail."""

    def __init__(self, fail_on: Optional[Callable[[str], bool]] = None):
        self.sent: List[Tuple[int, str]] = []
        self.fail_on = fail_on

    async def notify(self, session_id, text: str) -> bool:
        if self.fail_on is not None and self.fail_on(text):
            return False
        self.sent.append((session_id, text))
        return True

    @property
    def texts(self) -> List[str]:
        return [text for _, text in self.sent]


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings() -> Settings:
    """Settings built without reading the environment or a .env file."""
    return Settings(
        _env_file=None,
        telegram_bot_token="123:abc",
        google_api_key="g-key",
        google_search_engine_id="cx-1",
        openai_api_key="sk-test",
        log_json=False,
    )


@pytest.fixture
def candidates() -> List[SearchResult]:
    return [
        make_result("https://tass.ru/economy/1", "ТАСС: цены выросли"),
        make_result("https://example.com/article", "Example article"),
        make_result("https://habr.com/post/2", "Habr post"),
        make_result("https://minfin.gov.ru/press/3", "Минфин"),
    ]
