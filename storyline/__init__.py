"""
Storyline — deduplication and event clustering for multi-feed news.

    from storyline import Article, deduplicate_and_cluster
    result = deduplicate_and_cluster(articles, existing_clusters)
"""

from storyline.schemas import Article, ArticleCluster, ClusteringResult, DuplicateResult
from storyline.pipeline import ClusterWorkspace, deduplicate_and_cluster

__all__ = [
    "Article", "ArticleCluster", "ClusteringResult", "DuplicateResult",
    "ClusterWorkspace", "deduplicate_and_cluster",
]
