"""
Pairwise article similarity.

SIGNALS (weighted into an overall score):
  title    0.4  Jaccard over title tokens
  content  0.3  Jaccard over summary/content tokens
  time     0.2  linear decay of publish-time distance over 24h
  source   0.1  1 if both come from the same source

The duplicate VERDICT does not use the overall score. It is decided by the
title signal alone (or title + content together). The overall score is what the
clustering stage uses to decide "same event".

A URL shortcut runs first: identical canonical URLs, or same host with
near-identical paths (AMP vs canonical pages), are duplicates regardless of
text.
"""

import logging
from typing import Optional

from storyline.config import Settings, get_settings
from storyline.news.normalizer import (
    jaccard, normalize_url, text_similarity, tokenize, url_host_and_path,
)
from storyline.schemas.news import Article, DuplicateResult

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 0.4
CONTENT_WEIGHT = 0.3
TIME_WEIGHT = 0.2
SOURCE_WEIGHT = 0.1


def url_similarity(url1: str, url2: str) -> float:
    """1.0 for the same canonical URL, path-token Jaccard on the same host, else 0."""
    if normalize_url(url1) == normalize_url(url2):
        return 1.0

    loc1 = url_host_and_path(url1)
    loc2 = url_host_and_path(url2)
    if loc1 is None or loc2 is None:
        return 0.0

    host1, path1 = loc1
    host2, path2 = loc2
    if host1 != host2:
        return 0.0
    return jaccard(tokenize(path1), tokenize(path2))


def time_proximity(article1: Article, article2: Article, window_hours: float = 24.0) -> float:
    delta_hours = abs((article1.published_at - article2.published_at).total_seconds()) / 3600
    return max(0.0, 1.0 - delta_hours / window_hours)


def compare_articles(
    article: Article,
    other: Article,
    settings: Optional[Settings] = None,
) -> DuplicateResult:
    """
    Compare `article` against `other` (an already accepted article).

    Returns a DuplicateResult whose `similarity` is the URL similarity when
    the URL shortcut fired, otherwise the weighted overall similarity.
    """
    settings = settings or get_settings()

    url_sim = url_similarity(article.url, other.url)
    if url_sim > settings.url_similarity_threshold:
        return DuplicateResult(
            is_duplicate=True,
            similarity=url_sim,
            duplicate_of=other.id,
            reasoning="URL similarity",
        )

    title_sim = text_similarity(article.title, other.title)
    content_sim = text_similarity(article.body, other.body)
    proximity = time_proximity(article, other, settings.proximity_window_hours)
    source_match = 1.0 if article.source_name == other.source_name else 0.0

    overall = (
        title_sim * TITLE_WEIGHT
        + content_sim * CONTENT_WEIGHT
        + proximity * TIME_WEIGHT
        + source_match * SOURCE_WEIGHT
    )

    is_duplicate = (
        title_sim > settings.title_similarity_threshold
        or (
            title_sim > settings.title_content_threshold
            and content_sim > settings.content_similarity_threshold
        )
    )

    if is_duplicate:
        reasoning = f"Title similarity {title_sim:.2f}, content similarity {content_sim:.2f}"
    else:
        reasoning = "Below similarity threshold"

    return DuplicateResult(
        is_duplicate=is_duplicate,
        similarity=min(1.0, overall),
        duplicate_of=other.id if is_duplicate else None,
        reasoning=reasoning,
    )
