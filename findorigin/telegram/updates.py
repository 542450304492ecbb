"""Pydantic schemas for incoming Telegram updates and message parsing."""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TELEGRAM_LINK_RE = re.compile(r"(?:https?://)?(?:t\.me|telegram\.me)/([a-zA-Z0-9_]+)/(\d+)")


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: str = ""
    username: Optional[str] = None


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: Literal["private", "group", "supergroup", "channel"] = "private"
    title: Optional[str] = None
    username: Optional[str] = None


class MessageEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    offset: int
    length: int
    url: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    chat: TelegramChat
    date: int = 0
    text: Optional[str] = None
    caption: Optional[str] = None
    entities: List[MessageEntity] = Field(default_factory=list)


class TelegramUpdate(BaseModel):
    """Update delivered to the webhook. Only plain messages are handled."""

    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Optional[TelegramMessage] = None


class TelegramLink(BaseModel):
    channel: str
    message_id: int


class ParsedMessage(BaseModel):
    """Chat id and text pulled out of an update."""

    chat_id: int
    message_id: int
    text: str
    is_link: bool = False
    telegram_link: Optional[TelegramLink] = None

    @property
    def is_command(self) -> bool:
        return self.text.startswith("/")


def parse_telegram_link(text: str) -> Optional[TelegramLink]:
    """Find a ``t.me/<channel>/<post id>`` link in ``text``."""
    match = TELEGRAM_LINK_RE.search(text or "")
    if not match:
        return None
    return TelegramLink(channel=match.group(1), message_id=int(match.group(2)))


def is_valid_telegram_link(text: str) -> bool:
    return parse_telegram_link(text) is not None


def is_text_message(text: str) -> bool:
    """Non-empty text that is not a link to a Telegram post."""
    return bool(text and text.strip()) and not is_valid_telegram_link(text)


def parse_update(update: TelegramUpdate) -> Optional[ParsedMessage]:
    """Extract chat id and text from ``update.message``; None when there is no message."""
    message = update.message
    if message is None:
        return None

    # Forwarded media posts carry their text in the caption
    text = message.text or message.caption or ""
    link = parse_telegram_link(text)
    return ParsedMessage(
        chat_id=message.chat.id,
        message_id=message.message_id,
        text=text,
        is_link=link is not None,
        telegram_link=link,
    )
