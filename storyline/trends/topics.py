"""
Coarse topic labelling and source reputation lookup.

Topic labels come from an ordered table of keyword buckets in config;
the first bucket that matches the headline wins. The label is only used
for grouping and display.
"""

import re
from typing import FrozenSet, Optional, Sequence, Tuple

from storyline.config import (
    DEFAULT_SOURCE_REPUTATION, DEFAULT_TOPIC, SOURCE_REPUTATION, TOPIC_KEYWORDS,
)
from storyline.news.normalizer import extract_keywords, jaccard
from storyline.schemas.news import Article

_WORD = re.compile(r'\w+')


def _bucket_matches(title_lower: str, title_tokens: set, keywords: FrozenSet[str]) -> bool:
    for keyword in keywords:
        if " " in keyword:
            if keyword in title_lower:
                return True
        elif keyword in title_tokens:
            return True
    return False


def classify_topic(
    title: str,
    buckets: Sequence[Tuple[str, FrozenSet[str]]] = TOPIC_KEYWORDS,
    default: str = DEFAULT_TOPIC,
) -> str:
    """Label of the first bucket whose keywords intersect the title."""
    title_lower = (title or "").lower()
    # Bucket keywords include 2-letter terms ("ai"), so no length filter here
    title_tokens = set(_WORD.findall(title_lower))

    for label, keywords in buckets:
        if _bucket_matches(title_lower, title_tokens, keywords):
            return label
    return default


def source_reputation(source_name: Optional[str]) -> float:
    """Static reputation score for a source; unknown sources get the default."""
    return SOURCE_REPUTATION.get(source_name or "", DEFAULT_SOURCE_REPUTATION)


def topic_similarity(article: Article, representative: Article, max_keywords: int = 10) -> float:
    """Jaccard over the extracted keyword sets of both articles' title + summary."""
    article_keywords = extract_keywords(f"{article.title} {article.summary}", max_keywords)
    cluster_keywords = extract_keywords(f"{representative.title} {representative.summary}", max_keywords)
    return jaccard(article_keywords, cluster_keywords)
