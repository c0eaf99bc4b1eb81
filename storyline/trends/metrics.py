"""
Cluster metrics and read-only cluster queries.

update_cluster_metrics() runs after every clustering pass and recomputes
the two derived fields of each touched cluster:

  cluster_score = mean(member popularity)
  velocity      = members / max(1, age_hours)

The 1-hour floor stops brand-new clusters from reporting absurd rates
(3 members in 5 minutes is not 36 articles/hour).

The query helpers below never mutate clusters. They are what the ranking
and notification consumers use to pick trending or recent stories.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from storyline.schemas.news import ArticleCluster, ensure_utc

logger = logging.getLogger(__name__)


def update_cluster_metrics(
    clusters: List[ArticleCluster],
    touched_ids: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> List[ArticleCluster]:
    """Recompute score and velocity for touched clusters (all when touched_ids is None)."""
    now = ensure_utc(now or datetime.now(timezone.utc))
    touched = set(touched_ids) if touched_ids is not None else None

    for cluster in clusters:
        if touched is not None and cluster.id not in touched:
            continue
        scores = [m.popularity_score for m in cluster.members]
        cluster.cluster_score = sum(scores) / len(scores)
        cluster.velocity = len(cluster.members) / max(1.0, cluster.age_hours(now))

    return clusters


def get_cluster_by_id(clusters: List[ArticleCluster], cluster_id: str) -> Optional[ArticleCluster]:
    return next((c for c in clusters if c.id == cluster_id), None)


def top_clusters_by_velocity(clusters: List[ArticleCluster], limit: int = 5) -> List[ArticleCluster]:
    """Fastest-growing clusters first."""
    return sorted(clusters, key=lambda c: c.velocity, reverse=True)[:limit]


def recent_clusters(
    clusters: List[ArticleCluster],
    hours_back: float = 24,
    now: Optional[datetime] = None,
) -> List[ArticleCluster]:
    """Clusters updated within the last `hours_back` hours, most recent first."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=hours_back)
    recent = [c for c in clusters if c.updated_at > cutoff]
    return sorted(recent, key=lambda c: c.updated_at, reverse=True)


def trending_clusters(
    clusters: List[ArticleCluster],
    min_velocity: float = 3.0,
    min_members: int = 3,
    limit: int = 3,
) -> List[ArticleCluster]:
    """
    Stories picking up coverage fast enough to notify about.

    Both conditions are needed: a single fresh article has velocity 1, and a
    big cluster that stopped growing decays below min_velocity.
    """
    hot = [c for c in clusters if c.velocity > min_velocity and len(c.members) >= min_members]
    return top_clusters_by_velocity(hot, limit)
