"""One poll cycle: extract, reconstruct history, decide, archive and publish."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol

from celery import shared_task

from suzbot.connectors.archive import WaybackArchiver
from suzbot.connectors.discord import ChatClient, DiscordClient
from suzbot.connectors.listing import ListingExtractor
from suzbot.errors import ArchivalError, ChatError
from suzbot.models.domain import ArchivedArticle, Article, AnnouncedUrls, CycleReport
from suzbot.services.deduplicator import decide
from suzbot.services.history import read_announced
from suzbot.services.publisher import NotificationPublisher
from suzbot.settings import IdentityStrategy, Settings, get_settings
from suzbot.utils.logging import get_logger

logger = get_logger(__name__)


class Extractor(Protocol):
    def fetch(self) -> List[Article]: ...  # noqa: D401


class Archiver(Protocol):
    def archive_page(self, url: str) -> str: ...  # noqa: D401
    def archive_article(self, article_url: str) -> str: ...  # noqa: D401


ChatFactory = Callable[[Settings], ChatClient]


def build_extractor(settings: Settings) -> ListingExtractor:
    return ListingExtractor(
        settings.domain,
        timeout=float(settings.http_timeout_seconds),
        require_date=settings.identity_strategy is IdentityStrategy.DATE,
    )


def build_archiver(settings: Settings) -> WaybackArchiver:
    return WaybackArchiver(
        settings.domain,
        timeout=float(settings.archive_timeout_seconds),
        page_timeout=float(settings.http_timeout_seconds),
    )


def connect_discord(settings: Settings) -> DiscordClient:
    return DiscordClient.connect(
        settings.auth_token.get_secret_value(),
        api_base=settings.discord_api_base,
        timeout=float(settings.http_timeout_seconds),
    )


class CycleRecorder:
    """Context manager that logs the lifecycle of one cycle."""

    def __init__(self, report: CycleReport, log: logging.Logger) -> None:
        self._report = report
        self._log = log
        self._started = 0.0

    def __enter__(self) -> CycleReport:
        self._started = time.monotonic()
        self._log.info("poll.start", extra={"trace_id": self._report.trace_id})
        return self._report

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        elapsed = round(time.monotonic() - self._started, 3)
        if exc is None:
            self._log.info(
                "poll.succeeded",
                extra={"elapsed_s": elapsed, **self._report.model_dump()},
            )
        else:
            self._log.error(
                "poll.failed",
                extra={"elapsed_s": elapsed, "error": str(exc), **self._report.model_dump()},
            )


def _publish_one(
    article: Article,
    archiver: Archiver,
    publisher: NotificationPublisher,
    report: CycleReport,
) -> bool:
    extra = {"trace_id": report.trace_id, "url": article.canonical_url}
    try:
        archived_url = archiver.archive_article(article.canonical_url)
    except ArchivalError as exc:
        logger.warning("poll.archive_failed", extra={**extra, "error": str(exc)})
        return False
    try:
        publisher.publish(ArchivedArticle(article=article, archived_url=archived_url))
    except ChatError as exc:
        logger.warning("poll.send_failed", extra={**extra, "error": str(exc)})
        return False
    return True


def _publish_all(
    new_articles: List[Article],
    archiver: Archiver,
    publisher: NotificationPublisher,
    report: CycleReport,
    *,
    stop_on_failure: bool = False,
) -> None:
    """Publish oldest first; with ``stop_on_failure`` nothing newer follows a failed article.

    Under the date watermark a newer post would move the watermark past the
    failed article and it would never be new again.
    """
    for index, article in enumerate(new_articles):
        if _publish_one(article, archiver, publisher, report):
            report.published += 1
            continue
        report.skipped += 1
        if stop_on_failure:
            remaining = len(new_articles) - index - 1
            report.skipped += remaining
            logger.warning("poll.publish_halted", extra={"trace_id": report.trace_id, "deferred": remaining})
            break


def poll_core(
    settings: Settings,
    *,
    extractor: Optional[Extractor] = None,
    archiver: Optional[Archiver] = None,
    chat_factory: Optional[ChatFactory] = None,
) -> CycleReport:
    """Run one cycle; test-friendly through the injectable collaborators.

    Fatal errors (authentication, connection, history read) propagate. The
    chat connection is closed before the root page is archived, whatever
    happened while publishing.
    """
    extractor = extractor or build_extractor(settings)
    archiver = archiver or build_archiver(settings)
    chat_factory = chat_factory or connect_discord

    report = CycleReport()
    with CycleRecorder(report, logger):
        articles = extractor.fetch()
        report.extracted = len(articles)
        logger.info("poll.extracted", extra={"trace_id": report.trace_id, "articles": len(articles)})

        chat = chat_factory(settings)
        try:
            announced = read_announced(
                chat,
                settings.channel_id,
                int(settings.history_limit),
                settings.identity_strategy,
            )
            if isinstance(announced, AnnouncedUrls):
                report.announced = len(announced.keys)
            new_articles = decide(articles, announced)
            report.decided = len(new_articles)
            _publish_all(
                new_articles,
                archiver,
                NotificationPublisher(chat, settings.channel_id),
                report,
                stop_on_failure=settings.identity_strategy is IdentityStrategy.DATE,
            )
        finally:
            chat.close()

        if report.published > 0:
            logger.info("poll.archive_root", extra={"trace_id": report.trace_id, "url": settings.root_archive_url})
            try:
                archiver.archive_page(settings.root_archive_url)
                report.root_archived = True
            except ArchivalError as exc:
                logger.warning("poll.archive_root_failed", extra={"trace_id": report.trace_id, "error": str(exc)})
    return report


@shared_task(name="suzbot.tasks.poll.poll_channel")
def poll_channel() -> dict:  # pragma: no cover - thin Celery wrapper
    return poll_core(get_settings()).model_dump()
