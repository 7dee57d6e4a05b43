from __future__ import annotations

from datetime import date

import httpx
import pytest

from suzbot.connectors.listing import ListingExtractor, parse_published_date
from suzbot.errors import ExtractionError

LISTING_URL = "https://suz.cvut.cz/cz/aktuality"

LISTING_HTML = """
<html><body>
<div class="news-list-block">
  <div class="grid">
    <div class="cell">
      <a href="/cz/aktuality/menza-strahov">
        <div class="img-wrapper"><img src="/files/menza.jpg"></div>
        <div class="labels-container">Stravování</div>
        <span class="date">2. 3. 2024</span>
        <h2>Menza Strahov zavřena</h2>
        <div class="body-wrapper"><p>Od pondělí bude menza zavřena.</p></div>
      </a>
    </div>
    <div class="cell">
      <a href="/cz/aktuality/bez-nadpisu">
        <div class="body-wrapper"><p>Entry without a title.</p></div>
      </a>
    </div>
    <div class="cell">
      <a href="/cz/aktuality/kolej-sinkuleho">
        <div class="labels-container">Ubytování</div>
        <span class="date">datum neznámé</span>
        <h2>Kolej Sinkuleho</h2>
        <div class="body-wrapper"><p>Výměna oken.</p></div>
      </a>
    </div>
    <div class="cell">
      <a href="/cz/aktuality/menza-strahov">
        <h2>Menza Strahov zavřena (duplicate)</h2>
      </a>
    </div>
    <div class="cell">
      <a href="/cz/aktuality/ples">
        <div class="img-wrapper"><img src="/files/ples.png"></div>
        <div class="labels-container">Akce</div>
        <span class="date">01.03.2024</span>
        <h2>Ples</h2>
        <div class="body-wrapper"><p>Zveme vás na ples.</p></div>
      </a>
    </div>
  </div>
</div>
</body></html>
"""


def test_extract_keeps_page_order_and_skips_malformed_entries():
    articles = list(ListingExtractor("suz.cvut.cz").extract(LISTING_HTML))

    assert [a.title for a in articles] == ["Menza Strahov zavřena", "Kolej Sinkuleho", "Ples"]
    first = articles[0]
    assert first.canonical_url == "https://suz.cvut.cz/cz/aktuality/menza-strahov"
    assert first.image_url == "https://suz.cvut.cz/files/menza.jpg"
    assert first.category == "Stravování"
    assert first.body_excerpt == "Od pondělí bude menza zavřena."
    assert first.published_date == date(2024, 3, 2)
    assert articles[1].image_url is None
    assert articles[1].published_date is None
    assert articles[2].published_date == date(2024, 3, 1)


def test_extract_requires_date_for_watermark_identity():
    articles = list(ListingExtractor("suz.cvut.cz", require_date=True).extract(LISTING_HTML))

    assert [a.title for a in articles] == ["Menza Strahov zavřena", "Ples"]


def test_extract_empty_page():
    assert list(ListingExtractor("suz.cvut.cz").extract("<html></html>")) == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2. 3. 2024", date(2024, 3, 2)),
        ("Publikováno 02.03.2024", date(2024, 3, 2)),
        ("2024-03-02", date(2024, 3, 2)),
        ("31. 2. 2024", None),
        ("", None),
    ],
)
def test_parse_published_date(text, expected):
    assert parse_published_date(text) == expected


def test_fetch_downloads_listing(httpx_mock):
    httpx_mock.add_response(method="GET", url=LISTING_URL, text=LISTING_HTML)

    articles = ListingExtractor("suz.cvut.cz").fetch()

    assert len(articles) == 3


def test_fetch_http_error_raises(httpx_mock):
    httpx_mock.add_response(method="GET", url=LISTING_URL, status_code=503)

    with pytest.raises(ExtractionError):
        ListingExtractor("suz.cvut.cz").fetch()


def test_fetch_transport_error_raises(httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("down"), url=LISTING_URL)

    with pytest.raises(ExtractionError):
        ListingExtractor("suz.cvut.cz").fetch()
