"""Listing page connector: scrapes the news overview into Article records."""

from __future__ import annotations

import re
from datetime import date
from typing import Iterator, List, Optional, Set

import httpx
from bs4 import BeautifulSoup, Tag

from suzbot.errors import ExtractionError
from suzbot.models.domain import Article
from suzbot.utils.logging import get_logger
from suzbot.utils.urls import absolutize

logger = get_logger(__name__)

ARTICLE_SELECTOR = ".news-list-block div .cell a"
IMAGE_SELECTOR = ".img-wrapper img"
TITLE_SELECTOR = "h2"
BODY_SELECTOR = ".body-wrapper p"
LABEL_SELECTOR = ".labels-container"
DATE_SELECTOR = ".date"

_HEADERS = {"User-Agent": "suzbot/1.0 (+https://www.suz.cvut.cz/cz/aktuality)"}

_CZECH_DATE_RE = re.compile(r"(\d{1,2})\.\s*(\d{1,2})\.\s*(\d{4})")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def parse_published_date(text: str) -> Optional[date]:
    """Parse ``1. 3. 2024``, ``01.03.2024`` or ``2024-03-01``; None when nothing matches."""
    text = text.strip()
    if not text:
        return None
    m = _ISO_DATE_RE.search(text)
    if m:
        year, month, day = (int(g) for g in m.groups())
    else:
        m = _CZECH_DATE_RE.search(text)
        if not m:
            return None
        day, month, year = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _text(node: Tag, selector: str) -> str:
    found = node.select_one(selector)
    return found.get_text(" ", strip=True) if found is not None else ""


class ListingExtractor:
    """Fetches ``https://<domain>/cz/aktuality`` and yields its articles newest first.

    With ``require_date`` set (date-watermark identity) an entry whose date is
    missing or unparsable is skipped, otherwise it is kept without a date.
    """

    def __init__(
        self,
        domain: str,
        *,
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
        require_date: bool = False,
    ) -> None:
        self._domain = domain
        self._timeout = timeout
        self._client = client
        self._require_date = require_date

    @property
    def listing_url(self) -> str:
        return f"https://{self._domain}/cz/aktuality"

    def fetch(self) -> List[Article]:
        html = self.fetch_page()
        articles = list(self.extract(html))
        logger.info("extract.done", extra={"url": self.listing_url, "articles": len(articles)})
        return articles

    def fetch_page(self) -> str:
        try:
            if self._client is not None:
                resp = self._client.get(self.listing_url, headers=_HEADERS, timeout=self._timeout)
            else:
                resp = httpx.get(self.listing_url, headers=_HEADERS, timeout=self._timeout, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Listing page request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ExtractionError(f"Listing page returned HTTP {resp.status_code}")
        return resp.text

    def extract(self, html: str) -> Iterator[Article]:
        soup = BeautifulSoup(html, "html.parser")
        seen: Set[str] = set()
        for position, anchor in enumerate(soup.select(ARTICLE_SELECTOR)):
            article = self._parse_entry(anchor, position)
            if article is None:
                continue
            if article.canonical_url in seen:
                logger.debug("extract.duplicate_link", extra={"url": article.canonical_url})
                continue
            seen.add(article.canonical_url)
            yield article

    def _parse_entry(self, anchor: Tag, position: int) -> Optional[Article]:
        href = (anchor.get("href") or "").strip()
        title = _text(anchor, TITLE_SELECTOR)
        if not href or not title:
            logger.warning("extract.malformed_entry", extra={"position": position, "href": href})
            return None

        published = parse_published_date(_text(anchor, DATE_SELECTOR))
        if published is None and self._require_date:
            logger.warning("extract.missing_date", extra={"position": position, "href": href})
            return None

        image = anchor.select_one(IMAGE_SELECTOR)
        image_src = (image.get("src") or "").strip() if image is not None else ""
        return Article(
            image_url=absolutize(image_src, self._domain) if image_src else None,
            title=title,
            body_excerpt=_text(anchor, BODY_SELECTOR),
            canonical_url=absolutize(href, self._domain),
            category=_text(anchor, LABEL_SELECTOR) or None,
            published_date=published,
        )
