"""URL helpers for archive links and announced-article identity."""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

ARCHIVE_HOST = "web.archive.org"
ARCHIVE_SAVE_PREFIX = f"https://{ARCHIVE_HOST}/save/"
ARCHIVE_VIEW_PREFIX = f"https://{ARCHIVE_HOST}/web/"

# Wayback snapshot selector, e.g. "20240301120000/" or "20240301120000id_/".
_SNAPSHOT_RE = re.compile(r"^\d{1,14}(?:[a-z]{2}_)?/")
# The archive sometimes collapses "https://" into "https:/".
_COLLAPSED_SCHEME_RE = re.compile(r"^(https?):/+")


def save_url(url: str) -> str:
    return ARCHIVE_SAVE_PREFIX + url


def view_url(url: str) -> str:
    return ARCHIVE_VIEW_PREFIX + url


def is_archive_url(url: str) -> bool:
    parts = urlsplit(url.strip())
    return parts.netloc.lower() == ARCHIVE_HOST and parts.path.startswith("/web/")


def unwrap_archive_url(url: str) -> str:
    """Recover the original URL from a Wayback Machine reference URL.

    - ``https://web.archive.org/web/https://example.com/x`` -> ``https://example.com/x``
    - ``https://web.archive.org/web/20240301000000/http://example.com/x`` -> ``http://example.com/x``
    - ``https://web.archive.org/web/example.com/x`` -> ``https://example.com/x``
    - anything that is not an archive URL is returned stripped but unchanged
    """
    url = url.strip()
    if not is_archive_url(url):
        return url
    wrapped = url.split("/web/", 1)[1]
    wrapped = _SNAPSHOT_RE.sub("", wrapped, count=1)
    wrapped = _COLLAPSED_SCHEME_RE.sub(r"\1://", wrapped, count=1)
    if wrapped.startswith(("http://", "https://")):
        return wrapped
    return "https://" + wrapped.lstrip("/")


def comparison_key(url: str) -> str:
    """Scheme-insensitive identity of a link.

    Host case, fragments and a trailing slash are ignored too, so the same
    article compares equal however it was written into the channel.
    """
    parts = urlsplit(unwrap_archive_url(url))
    if not parts.netloc:
        return url.strip()
    path = parts.path.rstrip("/")
    return urlunsplit(("", parts.netloc.lower(), path, parts.query, "")).lstrip("/")


def absolutize(href: str, domain: str) -> str:
    """Turn a site-relative link into ``https://<domain><href>``."""
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return "https:" + href
    if not href.startswith("/"):
        href = "/" + href
    return f"https://{domain}{href}"
