"""
Incremental event clustering — groups deduplicated articles into stories.

ALGORITHM (greedy first-fit):
  For each article, in batch order:
    1. Walk the active clusters (at most max_clusters_to_check) in order
    2. Skip a cluster if the article is outside its 72h window or it is full
    3. Admit into the FIRST cluster whose representative is similar enough
       (overall similarity > 0.70) or shares enough topic keywords (> 0.70)
    4. No admission and room left → the article founds a new cluster
    5. No admission and no room → the article is returned unclustered

First-fit is order-dependent: a batch reordering can produce different
groupings.

The cluster list is state owned by the caller. It is mutated in place and
handed back; nothing is kept between calls.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Collection, List, Optional, Set

from storyline.config import Settings, get_settings
from storyline.news.similarity import compare_articles
from storyline.schemas.news import Article, ArticleCluster, ensure_utc
from storyline.trends.topics import classify_topic, source_reputation, topic_similarity

logger = logging.getLogger(__name__)


@dataclass
class ClusterAssignment:
    """Outcome of one clustering pass."""
    clusters: List[ArticleCluster]
    unclustered: List[Article] = field(default_factory=list)
    touched_ids: Set[str] = field(default_factory=set)
    created: int = 0


def make_cluster_id(article: Article, taken: Collection[str] = ()) -> str:
    """
    Cluster id derived from its founding article, so reruns are reproducible.

    A founder re-delivered after its first cluster filled up or aged out
    founds a second cluster; that one gets a numbered suffix (_2, _3...).
    """
    base = f"cluster_{hashlib.md5(article.id.encode()).hexdigest()[:12]}"
    cluster_id, n = base, 1
    while cluster_id in taken:
        n += 1
        cluster_id = f"{base}_{n}"
    return cluster_id


def should_replace_representative(candidate: Article, current: Article) -> bool:
    """Higher popularity wins; otherwise a more reputable source wins."""
    if candidate.popularity_score > current.popularity_score:
        return True
    return source_reputation(candidate.source_name) > source_reputation(current.source_name)


class EventClusterer:
    """First-fit event clustering over a caller-owned cluster list."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def admits(self, cluster: ArticleCluster, article: Article) -> bool:
        """Whether `cluster` accepts `article` as a new member."""
        window = timedelta(hours=self.settings.time_window_hours)
        if abs(article.published_at - cluster.created_at) > window:
            return False

        if len(cluster.members) >= self.settings.max_cluster_size:
            return False

        threshold = self.settings.cluster_similarity_threshold
        similarity = compare_articles(article, cluster.representative, self.settings).similarity
        if similarity > threshold:
            return True

        topic_sim = topic_similarity(article, cluster.representative, self.settings.max_keywords)
        return topic_sim > threshold

    def add_to_cluster(self, cluster: ArticleCluster, article: Article, now: datetime) -> None:
        cluster.members.append(article)
        cluster.updated_at = now

        if should_replace_representative(article, cluster.representative):
            logger.debug(
                f"New representative for {cluster.id}: '{article.title[:60]}' "
                f"(was '{cluster.representative.title[:60]}')"
            )
            cluster.representative = article

        # Interim rate; the metrics pass recomputes it with the max(1, age) floor
        elapsed_hours = (cluster.updated_at - cluster.created_at).total_seconds() / 3600
        cluster.velocity = len(cluster.members) / (max(0.0, elapsed_hours) + 1)

    def new_cluster(
        self, article: Article, now: datetime, taken: Collection[str] = (),
    ) -> ArticleCluster:
        return ArticleCluster(
            id=make_cluster_id(article, taken),
            representative=article,
            members=[article],
            cluster_score=article.popularity_score,
            topic=classify_topic(article.title),
            created_at=now,
            updated_at=now,
            velocity=1.0,
        )

    def cluster(
        self,
        articles: List[Article],
        clusters: List[ArticleCluster],
        now: Optional[datetime] = None,
    ) -> ClusterAssignment:
        """
        Assign each article to a cluster, creating clusters as needed.

        Args:
            articles: Fully deduplicated articles, in batch order.
            clusters: Active clusters; mutated in place and returned sorted
                      by updated_at, most recent first.
            now: Clock reading used for every timestamp in this batch.
        """
        now = ensure_utc(now or datetime.now(timezone.utc))
        max_clusters = self.settings.max_clusters_to_check
        result = ClusterAssignment(clusters=clusters)
        taken = {c.id for c in clusters}

        for article in articles:
            target = None
            for cluster in clusters[:max_clusters]:
                if self.admits(cluster, article):
                    target = cluster
                    break

            if target is not None:
                self.add_to_cluster(target, article, now)
                result.touched_ids.add(target.id)
                logger.debug(f"Added '{article.title[:60]}' to cluster: {target.topic}")
                continue

            if len(clusters) < max_clusters:
                created = self.new_cluster(article, now, taken)
                clusters.append(created)
                taken.add(created.id)
                result.touched_ids.add(created.id)
                result.created += 1
                logger.debug(f"Created new cluster: {created.topic} ('{article.title[:60]}')")
                continue

            result.unclustered.append(article)

        clusters.sort(key=lambda c: c.updated_at, reverse=True)

        logger.info(
            f"Clustering: {len(articles)} articles → {result.created} new clusters, "
            f"{len(result.touched_ids) - result.created} grown, {len(result.unclustered)} unclustered "
            f"({len(clusters)} active)"
        )
        if result.unclustered:
            logger.warning(
                f"  Cluster cap ({max_clusters}) reached: {len(result.unclustered)} articles left unclustered"
            )
        return result
