"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from findorigin.source_types import SourceType


class GoogleCredentials(BaseModel):
    """Google Custom Search credential bundle."""

    api_key: str = ""
    search_engine_id: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key and self.search_engine_id)


class YandexCredentials(BaseModel):
    """Yandex Search credential bundle. The folder id is optional."""

    api_key: str = ""
    folder_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key)


class BingCredentials(BaseModel):
    """Bing Web Search credential bundle."""

    api_key: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key)


class SerpApiCredentials(BaseModel):
    """SerpAPI credential bundle."""

    api_key: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key)


class OpenAICredentials(BaseModel):
    """Credentials for the reasoning service."""

    api_key: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram Configuration
    telegram_bot_token: str = Field(default="", description="Bot token issued by @BotFather")
    telegram_api_url: str = Field(
        default="https://api.telegram.org/bot", description="Bot API base URL (token is appended)"
    )
    telegram_webhook_secret: str | None = Field(
        default=None, description="Secret expected in X-Telegram-Bot-Api-Secret-Token"
    )
    delivery_timeout: float = Field(default=10.0, description="Timeout for outbound chat messages")

    # Search providers
    google_api_key: str = Field(default="", description="Google Custom Search API key")
    google_search_engine_id: str = Field(default="", description="Google Programmable Search engine id (cx)")
    yandex_api_key: str = Field(default="", description="Yandex Search API key")
    yandex_folder_id: str | None = Field(default=None, description="Yandex Cloud folder id")
    bing_api_key: str = Field(default="", description="Bing Web Search subscription key")
    serpapi_key: str = Field(default="", description="SerpAPI key")
    provider_timeout: float = Field(
        default=20.0, ge=15.0, le=30.0, description="Per-provider request timeout in seconds"
    )

    # Reasoning service
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model used for relevance scoring")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    reasoning_timeout: float = Field(default=30.0, description="Reasoning service timeout in seconds")

    # Pipeline
    max_search_results: int = Field(default=10, ge=1, le=50, description="Candidates passed to scoring")
    top_sources_limit: int = Field(default=3, ge=1, le=10, description="Sources shown to the user")
    preferred_source_types: List[SourceType] = Field(
        default_factory=lambda: [SourceType.OFFICIAL, SourceType.NEWS, SourceType.RESEARCH, SourceType.BLOG],
        description="Source types moved to the front of the candidate list",
    )

    # Application Configuration
    app_title: str = Field(default="FindOrigin", description="Application title")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    host: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(default=8000, description="Bind port for the HTTP server")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Use JSON log format")
    log_file: str | None = Field(default=None, description="Optional log file path")

    @property
    def google(self) -> GoogleCredentials:
        return GoogleCredentials(api_key=self.google_api_key, search_engine_id=self.google_search_engine_id)

    @property
    def yandex(self) -> YandexCredentials:
        return YandexCredentials(api_key=self.yandex_api_key, folder_id=self.yandex_folder_id)

    @property
    def bing(self) -> BingCredentials:
        return BingCredentials(api_key=self.bing_api_key)

    @property
    def serpapi(self) -> SerpApiCredentials:
        return SerpApiCredentials(api_key=self.serpapi_key)

    @property
    def openai(self) -> OpenAICredentials:
        return OpenAICredentials(api_key=self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
