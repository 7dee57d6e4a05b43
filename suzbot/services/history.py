"""Reconstructs what was already announced from the bot's own channel posts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Union

from suzbot.connectors.discord import ChatClient
from suzbot.errors import ChatError, HistoryReadError
from suzbot.models.domain import EPOCH, AnnouncedUrls, AnnouncedWatermark, ChatEmbed, ChatMessage
from suzbot.settings import IdentityStrategy
from suzbot.utils.logging import get_logger
from suzbot.utils.urls import comparison_key

logger = get_logger(__name__)

Announced = Union[AnnouncedUrls, AnnouncedWatermark]


def _bot_embeds(messages: Iterable[ChatMessage]) -> Iterator[ChatEmbed]:
    for message in messages:
        if not message.author.bot or not message.embeds:
            logger.warning(
                "history.suspicious_message",
                extra={"message_id": message.id, "author": message.author.username},
            )
            continue
        yield message.embeds[0]


def announced_urls(messages: Iterable[ChatMessage]) -> AnnouncedUrls:
    keys = set()
    for embed in _bot_embeds(messages):
        if not embed.url:
            logger.warning("history.embed_without_url", extra={"title": embed.title})
            continue
        keys.add(comparison_key(embed.url))
    return AnnouncedUrls(keys=frozenset(keys))


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def announced_watermark(messages: Iterable[ChatMessage]) -> AnnouncedWatermark:
    watermark = EPOCH
    for embed in _bot_embeds(messages):
        parsed = _parse_timestamp(embed.timestamp or "")
        if parsed is None:
            logger.warning("history.bad_timestamp", extra={"timestamp": embed.timestamp, "title": embed.title})
            continue
        if parsed > watermark:
            watermark = parsed
    return AnnouncedWatermark(watermark=watermark)


def read_announced(
    chat: ChatClient,
    channel_id: str,
    limit: int,
    strategy: IdentityStrategy = IdentityStrategy.URL,
) -> Announced:
    """Read the last ``limit`` messages and rebuild the announced record.

    A failed read is fatal: without history nothing can be deduplicated.
    """
    try:
        messages = chat.read_recent_messages(channel_id, limit)
    except ChatError as exc:
        raise HistoryReadError(f"Failed to read old messages: {exc}") from exc
    logger.info("history.read", extra={"channel_id": channel_id, "messages": len(messages)})

    if strategy is IdentityStrategy.DATE:
        return announced_watermark(messages)
    return announced_urls(messages)
