"""Telegram transport: update parsing and outbound messages."""

from .client import TelegramClient, TelegramNotifier
from .handler import handle_update
from .updates import (
    ParsedMessage,
    TelegramLink,
    TelegramUpdate,
    is_text_message,
    is_valid_telegram_link,
    parse_telegram_link,
    parse_update,
)

__all__ = [
    "ParsedMessage",
    "TelegramClient",
    "TelegramLink",
    "TelegramNotifier",
    "TelegramUpdate",
    "handle_update",
    "is_text_message",
    "is_valid_telegram_link",
    "parse_telegram_link",
    "parse_update",
]
