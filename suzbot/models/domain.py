"""Domain DTOs for the publication pipeline."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from suzbot.utils.urls import comparison_key

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Article(BaseModel):
    """One news entry scraped from the listing page."""

    model_config = ConfigDict(frozen=True)

    image_url: Optional[str] = None
    title: str
    body_excerpt: str = ""
    canonical_url: str = Field(..., description="Direct link on the source site; identity key.")
    category: Optional[str] = None
    published_date: Optional[date] = None

    @field_validator("canonical_url")
    @classmethod
    def _non_empty_url(cls, value: str) -> str:
        url = value.strip()
        if not url:
            raise ValueError("canonical_url must not be empty.")
        return url


class ArchivedArticle(BaseModel):
    """An article paired with its archive link, ready to be rendered."""

    model_config = ConfigDict(frozen=True)

    article: Article
    archived_url: Optional[str] = None

    @property
    def archived(self) -> bool:
        return self.archived_url is not None


class ChatAuthor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    username: str = ""
    bot: bool = False


class ChatEmbed(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[str] = None


class ChatMessage(BaseModel):
    """The part of a channel message that history reconstruction looks at."""

    model_config = ConfigDict(extra="ignore")

    id: str
    channel_id: Optional[str] = None
    author: ChatAuthor = Field(default_factory=ChatAuthor)
    embeds: List[ChatEmbed] = Field(default_factory=list)


class AnnouncedRecord(Protocol):
    def is_announced(self, article: Article) -> bool: ...  # noqa: D401


class AnnouncedUrls(BaseModel):
    """Comparison keys of every article link found in the bot's recent posts."""

    model_config = ConfigDict(frozen=True)

    keys: frozenset[str] = frozenset()

    def is_announced(self, article: Article) -> bool:
        return comparison_key(article.canonical_url) in self.keys


class AnnouncedWatermark(BaseModel):
    """Newest embed timestamp found in the bot's recent posts.

    Comparison happens at day granularity, so several articles from the same
    day as the watermark all count as announced.
    """

    model_config = ConfigDict(frozen=True)

    watermark: datetime = EPOCH

    def is_announced(self, article: Article) -> bool:
        if article.published_date is None:
            return True
        return article.published_date <= self.watermark.date()


class CycleReport(BaseModel):
    """Counters of one poll cycle."""

    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    extracted: int = 0
    announced: int = 0
    decided: int = 0
    published: int = 0
    skipped: int = 0
    root_archived: bool = False
