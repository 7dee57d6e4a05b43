from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from fakes import make_article
from suzbot.models.domain import AnnouncedWatermark, Article, ArchivedArticle


def test_article_requires_non_empty_url():
    with pytest.raises(ValidationError):
        Article(title="t", canonical_url="   ")


def test_article_is_immutable():
    article = make_article("a")

    with pytest.raises(ValidationError):
        article.title = "changed"


def test_archived_flag():
    assert ArchivedArticle(article=make_article("a"), archived_url="https://web.archive.org/web/x").archived
    assert not ArchivedArticle(article=make_article("a")).archived


def test_watermark_compares_by_day():
    late_evening = AnnouncedWatermark(watermark=datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc))

    assert late_evening.is_announced(make_article("a", published=date(2024, 3, 1)))
    assert not late_evening.is_announced(make_article("b", published=date(2024, 3, 2)))
