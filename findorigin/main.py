"""FastAPI application: Telegram webhook plus a small JSON API."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from findorigin.analysis import analyze_text, clean_text
from findorigin.comparison import RelevanceComparator
from findorigin.config import Settings, get_settings
from findorigin.dependencies import get_app_settings, get_pipeline, get_telegram_client
from findorigin.exceptions import DeliveryError
from findorigin.middleware import RequestLoggingMiddleware
from findorigin.models import ComparisonResult
from findorigin.pipeline import PipelineOptions, PipelineState, SourcePipeline
from findorigin.search import SearchAggregator
from findorigin.search.providers.base import USER_AGENT
from findorigin.telegram import TelegramClient, TelegramNotifier, TelegramUpdate, handle_update
from findorigin.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"
TEST_ANALYZE_SAMPLE = 3
NO_PROVIDER_NOTE = (
    "Поисковый API не настроен. Настройте один из API (Google, Yandex, Bing, SerpAPI) "
    "для получения результатов поиска."
)


class AnalyzeRequest(BaseModel):
    text: str = Field(..., min_length=1)


class WebhookSetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., min_length=1)
    secret_token: Optional[str] = Field(default=None, alias="secretToken")


def _result_payload(result: ComparisonResult) -> Dict[str, Any]:
    source = result.source
    return {
        "title": source.title,
        "url": source.url,
        "snippet": source.snippet,
        "relevanceScore": result.relevance_score,
        "confidence": result.confidence.value,
        "explanation": result.explanation,
        "sourceType": source.source_type.value,
    }


def build_pipeline(settings: Settings, http: httpx.AsyncClient, telegram: Optional[TelegramClient]) -> SourcePipeline:
    return SourcePipeline(
        SearchAggregator.from_settings(settings, client=http),
        RelevanceComparator.from_settings(settings, client=http),
        notifier=TelegramNotifier(telegram) if telegram is not None else None,
        options=PipelineOptions.from_settings(settings),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    http = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.reasoning_timeout, connect=10.0),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )

    telegram = None
    if settings.telegram_bot_token:
        telegram = TelegramClient.from_settings(settings, client=http)
    else:
        logger.warning("TELEGRAM_BOT_TOKEN is not set; chat notifications are disabled")

    pipeline = build_pipeline(settings, http, telegram)
    if not pipeline.aggregator.has_eligible_providers:
        logger.warning("No search provider is configured; searches will return nothing")
    if not pipeline.comparator.is_configured:
        logger.warning("OPENAI_API_KEY is not set; relevance scoring falls back to unranked results")

    app.state.telegram = telegram
    app.state.pipeline = pipeline
    try:
        yield
    finally:
        if pipeline.pending:
            logger.info(f"Waiting for {pipeline.pending} running searches to finish")
        await pipeline.drain()
        await http.aclose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory; reads settings from the environment when none are given."""
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file)

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        description="Finds likely original sources for a piece of text",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.add_middleware(RequestLoggingMiddleware)

    @app.post("/api/telegram")
    async def telegram_webhook(
        request: Request,
        pipeline: SourcePipeline = Depends(get_pipeline),
        settings: Settings = Depends(get_app_settings),
    ):
        """Telegram webhook; answers at once and keeps searching in the background."""
        secret = settings.telegram_webhook_secret
        if secret and request.headers.get(SECRET_HEADER) != secret:
            logger.warning("Rejected webhook call with a wrong secret token")
            raise HTTPException(status_code=401, detail="Invalid secret token")

        try:
            update = TelegramUpdate.model_validate(await request.json())
        except (ValueError, ValidationError) as e:
            # Telegram keeps redelivering updates that were not acknowledged
            logger.warning(f"Ignoring malformed update: {e}")
            return {"ok": True}

        await handle_update(update, pipeline)
        return {"ok": True}

    @app.post("/api/webhook/set")
    async def set_webhook(body: WebhookSetRequest, telegram: TelegramClient = Depends(get_telegram_client)):
        try:
            result = await telegram.set_webhook(body.url, secret_token=body.secret_token)
        except DeliveryError as e:
            logger.error(f"Error setting webhook: {e}")
            raise HTTPException(status_code=502, detail=f"Failed to set webhook: {e}") from e
        return {"success": True, "result": result}

    @app.post("/api/mini-app/analyze")
    async def mini_app_analyze(body: AnalyzeRequest, pipeline: SourcePipeline = Depends(get_pipeline)):
        """Run the full search without any chat traffic and return the selected sources."""
        if not body.text.strip():
            raise HTTPException(status_code=400, detail="Text is required")

        outcome = await pipeline.find_sources(body.text)
        if not outcome.reached(PipelineState.SELECTED):
            return {"results": [], "count": 0, "message": outcome.message}

        results = [_result_payload(r) for r in outcome.results]
        return {"results": results, "count": len(results), "usedFallback": outcome.used_fallback}

    @app.post("/api/test-analyze")
    async def test_analyze(body: AnalyzeRequest, pipeline: SourcePipeline = Depends(get_pipeline)):
        """Show the analysis and the first aggregated search results for a text."""
        cleaned = clean_text(body.text)
        analysis = analyze_text(cleaned)
        results = await pipeline.aggregator.search_multiple_queries(
            analysis.search_queries,
            max_results=pipeline.options.max_results,
            preferred_types=pipeline.options.preferred_types,
        )
        return {
            "originalText": body.text,
            "cleanedText": cleaned,
            "analysis": {
                "keyClaims": analysis.key_claims,
                "dates": analysis.dates,
                "numbers": analysis.numbers,
                "names": analysis.names,
                "links": analysis.links,
                "searchQueries": analysis.search_queries,
            },
            "searchResults": [r.model_dump(mode="json") for r in results[:TEST_ANALYZE_SAMPLE]],
            "note": NO_PROVIDER_NOTE if not results else None,
        }

    @app.get("/api/health")
    async def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
        has_token = bool(settings.telegram_bot_token)
        pipeline: Optional[SourcePipeline] = getattr(request.app.state, "pipeline", None)
        providers = [p.name for p in pipeline.aggregator.eligible_providers()] if pipeline else []
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
            "hasTelegramToken": has_token,
            "searchProviders": providers,
            "reasoningConfigured": bool(settings.openai_api_key),
            "message": (
                "Bot is configured correctly"
                if has_token
                else "TELEGRAM_BOT_TOKEN is not set in environment variables"
            ),
        }

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    settings = get_settings()
    uvicorn.run("findorigin.main:create_app", factory=True, host=settings.host, port=settings.port)
