"""End-to-end source discovery: analyze, search, compare, select, deliver."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Set, Tuple

from findorigin.analysis import analyze_text, clean_text
from findorigin.comparison import RelevanceComparator, heuristic_scores, select_top
from findorigin.config import Settings
from findorigin.exceptions import DeliveryError, ReasoningServiceError
from findorigin.models import ComparisonResult, ExtractedData, SearchResult
from findorigin.search import SearchAggregator
from findorigin.source_types import SourceType
from findorigin.utils.logging import get_logger

from . import messages

logger = get_logger(__name__)


class PipelineState(str, Enum):
    RECEIVED = "received"
    ANALYZED = "analyzed"
    SEARCHING = "searching"
    SEARCH_FAILED = "search_failed"
    SEARCH_EMPTY = "search_empty"
    SEARCH_OK = "search_ok"
    COMPARING = "comparing"
    COMPARE_FAILED = "compare_failed"
    FALLBACK_SCORED = "fallback_scored"
    COMPARE_OK = "compare_ok"
    SELECTED = "selected"
    DELIVERED = "delivered"


class Notifier(Protocol):
    """Pushes a text notification to a chat session."""

    async def notify(self, session_id: int | str, text: str) -> bool: ...


ProgressCallback = Callable[[PipelineState, int], Awaitable[None]]


@dataclass(frozen=True)
class PipelineOptions:
    max_results: int = 10
    top_limit: int = 3
    preferred_types: Tuple[SourceType, ...] = (
        SourceType.OFFICIAL,
        SourceType.NEWS,
        SourceType.RESEARCH,
        SourceType.BLOG,
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineOptions":
        return cls(
            max_results=settings.max_search_results,
            top_limit=settings.top_sources_limit,
            preferred_types=tuple(settings.preferred_source_types),
        )


@dataclass
class PipelineOutcome:
    """Everything one run produced, plus the states it went through."""

    text: str
    extracted: ExtractedData
    queries: List[str] = field(default_factory=list)
    candidates: List[SearchResult] = field(default_factory=list)
    results: List[ComparisonResult] = field(default_factory=list)
    used_fallback: bool = False
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])

    @property
    def state(self) -> PipelineState:
        return self.history[-1]

    def advance(self, state: PipelineState) -> None:
        self.history.append(state)

    def reached(self, state: PipelineState) -> bool:
        return state in self.history

    @property
    def message(self) -> str:
        """Final chat text for this outcome; every terminal state has one."""
        if self.reached(PipelineState.SEARCH_FAILED):
            return messages.SEARCH_NOT_CONFIGURED
        if self.reached(PipelineState.SEARCH_EMPTY):
            return messages.NO_SOURCES_FOUND
        if not self.results:
            return messages.NO_RELEVANT_SOURCES
        return messages.format_results(self.results, used_fallback=self.used_fallback)


class SourcePipeline:
    """
    Drives one request through analysis, search, comparison and selection.

    Runs hold no shared state: every call builds its own outcome, so many
    runs can be in flight on the same instance.
    """

    def __init__(
        self,
        aggregator: SearchAggregator,
        comparator: RelevanceComparator,
        notifier: Optional[Notifier] = None,
        options: Optional[PipelineOptions] = None,
    ):
        self.aggregator = aggregator
        self.comparator = comparator
        self.notifier = notifier
        self.options = options or PipelineOptions()
        self._tasks: Set[asyncio.Task] = set()

    async def find_sources(self, text: str, progress: Optional[ProgressCallback] = None) -> PipelineOutcome:
        """Run analysis through selection without talking to the chat."""
        cleaned = clean_text(text)
        extracted = analyze_text(cleaned)
        outcome = PipelineOutcome(text=cleaned, extracted=extracted)
        outcome.advance(PipelineState.ANALYZED)

        # Texts too short for any derived query are searched verbatim
        outcome.queries = list(extracted.search_queries) or ([cleaned] if cleaned else [])
        outcome.advance(PipelineState.SEARCHING)

        if not self.aggregator.has_eligible_providers:
            logger.warning("No search provider is configured")
            outcome.advance(PipelineState.SEARCH_FAILED)
            return outcome
        if not outcome.queries:
            outcome.advance(PipelineState.SEARCH_EMPTY)
            return outcome

        if progress is not None:
            await progress(PipelineState.SEARCHING, len(outcome.queries))
        outcome.candidates = await self.aggregator.search_multiple_queries(
            outcome.queries,
            max_results=self.options.max_results,
            preferred_types=self.options.preferred_types,
        )
        if not outcome.candidates:
            outcome.advance(PipelineState.SEARCH_EMPTY)
            return outcome
        outcome.advance(PipelineState.SEARCH_OK)

        outcome.advance(PipelineState.COMPARING)
        if progress is not None:
            await progress(PipelineState.COMPARING, len(outcome.candidates))
        try:
            comparisons = await self.comparator.compare(cleaned, outcome.candidates)
            outcome.advance(PipelineState.COMPARE_OK)
        except ReasoningServiceError as e:
            logger.error(f"AI comparison failed: {e}")
            outcome.advance(PipelineState.COMPARE_FAILED)
            comparisons = heuristic_scores(outcome.candidates, self.options.top_limit)
            outcome.used_fallback = True
            outcome.advance(PipelineState.FALLBACK_SCORED)

        outcome.results = select_top(comparisons, self.options.top_limit)
        outcome.advance(PipelineState.SELECTED)
        return outcome

    async def run(self, session_id: int | str, text: str) -> PipelineOutcome:
        """Find sources for ``text`` and report progress and the result to ``session_id``."""
        log = logger.bind(run_id=uuid.uuid4().hex[:12], session_id=session_id)

        async def report(state: PipelineState, count: int) -> None:
            if state is PipelineState.SEARCHING:
                await self.notify(session_id, messages.searching(count))
            elif state is PipelineState.COMPARING:
                await self.notify(session_id, messages.comparing(count))

        try:
            outcome = await self.find_sources(text, progress=report)
        except Exception:
            # The chat still gets a final answer; the error goes on to the task callback
            log.exception("Pipeline run failed")
            await self.notify(session_id, messages.INTERNAL_ERROR)
            raise
        log.info(
            f"Pipeline finished in state {outcome.state.value}: {len(outcome.candidates)} candidates, "
            f"{len(outcome.results)} selected, fallback={outcome.used_fallback}"
        )

        if await self.notify(session_id, outcome.message):
            outcome.advance(PipelineState.DELIVERED)
        else:
            log.warning("Final result could not be delivered")
        return outcome

    async def dispatch(self, session_id: int | str, text: str) -> asyncio.Task:
        """
        Acknowledge the request, then continue the run as a detached task.

        A failed acknowledgment is logged and does not stop the run. Errors
        from the detached task go to the log only.
        """
        if not await self.notify(session_id, messages.ACKNOWLEDGEMENT):
            logger.warning(f"Acknowledgment to chat {session_id} was not delivered, continuing")

        task = asyncio.create_task(self.run(session_id, text), name=f"find-sources-{session_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_run_done)
        return task

    def _on_run_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Pipeline task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Pipeline task {task.get_name()} failed: {error}", exc_info=error)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for detached runs to finish (used on shutdown)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def notify(self, session_id: int | str, text: str) -> bool:
        if self.notifier is None:
            return False
        try:
            return await self.notifier.notify(session_id, text)
        except DeliveryError as e:
            logger.error(f"Failed to notify chat {session_id}: {e}")
            return False
