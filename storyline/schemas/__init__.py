"""
Schemas package — all data models for the Storyline engine.

Models are organized by domain in submodules:
  - base.py: Common enums (ClusterState)
  - news.py: Article, DuplicateResult, ArticleCluster, ClusteringResult
"""

from storyline.schemas.base import ClusterState
from storyline.schemas.news import Article, DuplicateResult, ArticleCluster, ClusteringResult

__all__ = [
    "ClusterState",
    "Article", "DuplicateResult", "ArticleCluster", "ClusteringResult",
]
