"""Telegram Bot API client and the chat notifier built on it."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from findorigin.config import Settings
from findorigin.exceptions import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot"
MAX_MESSAGE_LENGTH = 4096


class TelegramClient:
    """Async client for the handful of Bot API methods the bot uses."""

    def __init__(
        self,
        token: str,
        api_url: str = TELEGRAM_API_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set in environment variables")
        self.token = token
        self.api_url = api_url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "TelegramClient":
        return cls(
            settings.telegram_bot_token,
            api_url=settings.telegram_api_url,
            timeout=settings.delivery_timeout,
            client=client,
        )

    @property
    def api_base(self) -> str:
        return f"{self.api_url}{self.token}"

    async def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.api_base}/{method}"
        try:
            response = await asyncio.wait_for(self._post(url, payload or {}), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise DeliveryError(f"Telegram {method} timed out after {self.timeout:g}s") from e
        except httpx.RequestError as e:
            raise DeliveryError(f"Network error calling Telegram {method}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success or not data.get("ok", False):
            description = data.get("description") or response.text[:300]
            raise DeliveryError(
                f"Telegram API error: {description}",
                status_code=response.status_code,
                response_text=response.text[:1000],
            )
        return data

    async def _post(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=payload)

    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        parse_mode: Optional[str] = None,
        reply_to_message_id: Optional[int] = None,
        disable_web_page_preview: bool = True,
    ) -> Dict[str, Any]:
        """Send a text message; texts over the Bot API limit are truncated."""
        if len(text) > MAX_MESSAGE_LENGTH:
            text = text[: MAX_MESSAGE_LENGTH - 1] + "…"
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": disable_web_page_preview,
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id
        return await self._call("sendMessage", payload)

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"url": url}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)

    async def get_me(self) -> Dict[str, Any]:
        return await self._call("getMe")


class TelegramNotifier:
    """Pushes plain-text notifications to a chat; failures are reported, never raised."""

    def __init__(self, client: TelegramClient):
        self.client = client

    async def notify(self, session_id: int | str, text: str) -> bool:
        try:
            await self.client.send_message(session_id, text)
        except DeliveryError as e:
            logger.error(f"Failed to deliver message to chat {session_id}: {e}", extra={"session_id": session_id})
            return False
        return True
