"""Routes an incoming Telegram update to a reply or a pipeline run."""

import asyncio
from typing import Optional

from findorigin.pipeline import SourcePipeline
from findorigin.pipeline import messages
from findorigin.utils.logging import get_logger

from .updates import TelegramUpdate, parse_update

logger = get_logger(__name__)


async def handle_update(update: TelegramUpdate, pipeline: SourcePipeline) -> Optional[asyncio.Task]:
    """
    Answer commands, links and empty messages directly; start a run for anything else.

    Returns the detached run task when one was started.
    """
    parsed = parse_update(update)
    if parsed is None:
        logger.debug(f"Update {update.update_id} has no message, ignoring")
        return None

    chat_id = parsed.chat_id
    text = parsed.text.strip()

    if not text:
        await pipeline.notify(chat_id, messages.EMPTY_MESSAGE)
        return None

    if parsed.is_command:
        command = text.split()[0].split("@")[0].lower()
        reply = messages.WELCOME if command == "/start" else messages.HELP
        await pipeline.notify(chat_id, reply)
        return None

    if parsed.is_link:
        await pipeline.notify(chat_id, messages.FORWARD_REQUEST)
        return None

    logger.info(f"Starting source search for chat {chat_id}", extra={"session_id": chat_id})
    return await pipeline.dispatch(chat_id, text)
