"""
Two-stage article deduplication for multi-feed aggregation.

DEDUP PIPELINE (2 stages):
  1. EXACT DEDUP:  canonical URL + normalized title key (syndicated reposts,
                   the same link fetched from two feeds)
  2. NEAR DEDUP:   pairwise title/content similarity against the articles
                   already accepted in this batch

Both stages keep the FIRST occurrence and preserve input order, so the
output is deterministic for a given batch ordering.

Near dedup is O(n^2) in the worst case. Batches are bounded by the fetch
size (tens to a few hundred articles), which keeps this well under a second.
"""

import logging
from typing import List, Optional, Tuple

from storyline.config import Settings, get_settings
from storyline.news.normalizer import normalize_url, title_key
from storyline.news.similarity import compare_articles
from storyline.schemas.news import Article

logger = logging.getLogger(__name__)


def exact_key(article: Article) -> str:
    return f"{normalize_url(article.url)}::{title_key(article.title)}"


class ExactDuplicateFilter:
    """Drops articles whose canonical URL and normalized title were already seen."""

    def filter(self, articles: List[Article]) -> Tuple[List[Article], int]:
        """Returns (unique articles in original order, number removed)."""
        seen = set()
        unique = []
        removed = 0

        for article in articles:
            key = exact_key(article)
            if key in seen:
                removed += 1
                logger.debug(f"Exact duplicate: '{article.title[:70]}' ({article.source_name})")
                continue
            seen.add(key)
            unique.append(article)

        logger.info(f"Exact dedup: {len(articles)} → {len(unique)} ({removed} duplicates)")
        return unique, removed


class NearDuplicateDetector:
    """
    Flags articles that are near-copies of an earlier article in the batch.

    Each candidate is compared only against articles already accepted as
    unique in this pass, never against the full batch. That makes the check
    order-sensitive by construction: the first occurrence of a
    near-duplicate group is always the one kept.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def detect(self, articles: List[Article]) -> Tuple[List[Article], List[Article]]:
        """Returns (unique articles, near-duplicates that were removed)."""
        unique: List[Article] = []
        duplicates: List[Article] = []
        dup_examples = []

        for article in articles:
            for accepted in unique:
                result = compare_articles(article, accepted, self.settings)
                if result.is_duplicate:
                    duplicates.append(article)
                    if len(dup_examples) < 5:
                        dup_examples.append({
                            "removed": article.title[:50],
                            "kept": accepted.title[:50],
                            "reason": result.reasoning,
                        })
                    logger.debug(
                        f"Near duplicate: '{article.title[:60]}' ~ '{accepted.title[:60]}' "
                        f"({result.reasoning}, similarity={result.similarity:.2f})"
                    )
                    break
            else:
                unique.append(article)

        logger.info(f"Near dedup: {len(articles)} → {len(unique)} ({len(duplicates)} duplicates)")
        if dup_examples:
            logger.info(f"  Near dedup examples: {dup_examples}")

        return unique, duplicates
