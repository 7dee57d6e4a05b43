"""Wayback Machine connector."""

from __future__ import annotations

from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from suzbot.errors import ArchivalError
from suzbot.utils.logging import get_logger
from suzbot.utils.urls import absolutize, save_url, view_url

logger = get_logger(__name__)

CONTENT_LINK_SELECTOR = ".block-suzcvut-content .body a"


class WaybackArchiver:
    """Submits pages to the Wayback Machine.

    ``archive_article`` also archives every link found in the article body, so
    attachments stay retrievable after the site replaces them. Those extra
    submissions are best effort; only the article itself decides the result.
    """

    def __init__(
        self,
        domain: str,
        *,
        timeout: float = 60.0,
        page_timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._domain = domain
        self._timeout = timeout
        self._page_timeout = page_timeout
        self._client = client

    def _get(self, url: str, timeout: float) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, timeout=timeout)
        return httpx.get(url, timeout=timeout, follow_redirects=True)

    def archive_page(self, url: str) -> str:
        if not url.startswith(("http://", "https://")):
            raise ArchivalError(f"Refusing to archive a URL without http(s) scheme: {url!r}")
        logger.info("archive.submit", extra={"url": url})
        try:
            resp = self._get(save_url(url), self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ArchivalError(f"Archive request failed for {url}: {exc}") from exc
        if resp.status_code >= 400:
            raise ArchivalError(f"Archive request for {url} returned HTTP {resp.status_code}")
        archived = view_url(url)
        logger.info("archive.ok", extra={"archived_url": archived})
        return archived

    def discover_links(self, article_url: str) -> List[str]:
        try:
            resp = self._get(article_url, self._page_timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("archive.discover_failed", extra={"url": article_url, "error": str(exc)})
            return []
        if resp.status_code >= 400:
            logger.warning("archive.discover_failed", extra={"url": article_url, "status": resp.status_code})
            return []

        soup = BeautifulSoup(resp.text, "html.parser")
        links: List[str] = []
        for anchor in soup.select(CONTENT_LINK_SELECTOR):
            href = (anchor.get("href") or "").strip()
            if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
                continue
            link = absolutize(href, self._domain)
            if link not in links:
                links.append(link)
        return links

    def archive_article(self, article_url: str) -> str:
        for link in self.discover_links(article_url):
            try:
                self.archive_page(link)
            except ArchivalError as exc:
                logger.warning("archive.link_failed", extra={"url": link, "article": article_url, "error": str(exc)})
        return self.archive_page(article_url)
