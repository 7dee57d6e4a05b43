"""Renders articles into Discord embeds and posts them."""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Any, Dict, Optional

from suzbot.connectors.discord import ChatClient
from suzbot.errors import ArchivalError, ChatError
from suzbot.models.domain import ArchivedArticle, Article
from suzbot.utils.logging import get_logger

logger = get_logger(__name__)

# https://www.figma.com/colors/
CATEGORY_COLORS: Dict[str, int] = {
    "Stravování": 0xFF1D8D,  # rose
    "Ubytování": 0x90D5FF,  # light blue
    "Obecné": 0xF2B949,  # mimosa
    "Akce": 0x89F336,  # lime green
}
DEFAULT_COLOR = 0xEDEA2B

THUMBNAIL_WIDTH = 520
THUMBNAIL_HEIGHT = 252
ARCHIVE_LINK_LABEL = "Archiv"


def category_color(category: Optional[str]) -> int:
    return CATEGORY_COLORS.get((category or "").strip(), DEFAULT_COLOR)


def render_embed(article: Article, archived_url: str) -> Dict[str, Any]:
    """Build the embed payload for one article.

    The embed links to the original article; the archive link only appears in
    the description. A publish date becomes the embed timestamp, which is
    what the date-watermark history reads back.
    """
    embed: Dict[str, Any] = {
        "type": "article",
        "url": article.canonical_url,
        "title": article.title,
        "description": f"{article.body_excerpt}\n\n[**{ARCHIVE_LINK_LABEL}**]({archived_url})",
        "color": category_color(article.category),
    }
    if article.image_url:
        embed["thumbnail"] = {
            "url": article.image_url,
            "width": THUMBNAIL_WIDTH,
            "height": THUMBNAIL_HEIGHT,
        }
    if article.published_date is not None:
        stamp = datetime.combine(article.published_date, time(0, 0), tzinfo=timezone.utc)
        embed["timestamp"] = stamp.isoformat()
    return embed


class NotificationPublisher:
    """Posts archived articles to one channel and crossposts them to followers."""

    def __init__(self, chat: ChatClient, channel_id: str) -> None:
        self._chat = chat
        self._channel_id = channel_id

    def publish(self, archived: ArchivedArticle) -> str:
        """Send the message and return its id.

        A failed send raises ``ChatError``; a failed crosspost is only logged
        because the message is already in the channel.
        """
        if archived.archived_url is None:
            raise ArchivalError(f"Article {archived.article.canonical_url} has no archive link")
        embed = render_embed(archived.article, archived.archived_url)
        message = self._chat.send_message(self._channel_id, embed)
        logger.info("publish.sent", extra={"message_id": message.id, "title": archived.article.title})

        try:
            self._chat.crosspost(message.channel_id or self._channel_id, message.id)
        except ChatError as exc:
            logger.warning("publish.crosspost_failed", extra={"message_id": message.id, "error": str(exc)})
        return message.id
