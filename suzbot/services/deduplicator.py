"""Decides which freshly scraped articles must be published now."""

from __future__ import annotations

from typing import List, Sequence

from suzbot.models.domain import AnnouncedRecord, Article
from suzbot.utils.logging import get_logger

logger = get_logger(__name__)


def decide(articles: Sequence[Article], announced: AnnouncedRecord) -> List[Article]:
    """Return the not yet announced articles, oldest first.

    The listing is newest first, so the batch is reversed before filtering;
    the last message in the channel is then always the newest article.
    """
    decision: List[Article] = []
    for article in reversed(articles):
        if announced.is_announced(article):
            continue
        decision.append(article)
    logger.info("dedupe.decided", extra={"candidates": len(articles), "new": len(decision)})
    return decision
