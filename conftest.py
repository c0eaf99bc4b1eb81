"""Shared fixtures for the Storyline test suite."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from storyline.config import Settings
from storyline.schemas.news import Article

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_article(
    title,
    *,
    id=None,
    url=None,
    summary="",
    source="Hacker News",
    minutes_ago=0.0,
    popularity=0.5,
    published_at=None,
):
    article_id = id or uuid4().hex
    return Article(
        id=article_id,
        title=title,
        summary=summary,
        url=url or f"https://example.com/{article_id}",
        source_name=source,
        published_at=published_at or NOW - timedelta(minutes=minutes_ago),
        popularity_score=popularity,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def settings():
    return Settings()
