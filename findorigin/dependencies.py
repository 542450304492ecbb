"""FastAPI dependencies."""

from fastapi import HTTPException, Request

from findorigin.config import Settings
from findorigin.pipeline import SourcePipeline
from findorigin.telegram import TelegramClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> SourcePipeline:
    """Pipeline built by the application lifespan."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return pipeline


def get_telegram_client(request: Request) -> TelegramClient:
    telegram = getattr(request.app.state, "telegram", None)
    if telegram is None:
        raise HTTPException(status_code=503, detail="TELEGRAM_BOT_TOKEN is not set in environment variables")
    return telegram
