"""
Layer 1: Article normalization and deduplication.

Modules:
- normalizer: URL canonicalization, tokenization, keyword extraction
- similarity: Pairwise article similarity and duplicate verdict
- dedup: Exact-duplicate filter and near-duplicate detector
"""

from storyline.news.dedup import ExactDuplicateFilter, NearDuplicateDetector
from storyline.news.similarity import compare_articles
