"""
Batch entry point: dedup + event clustering for one fetch batch.

  articles + existing clusters
    → exact dedup → near dedup → event clustering → metrics
    → ClusteringResult

FAILURE MODE: a batch never raises. Any internal error falls back to the
no-op result (existing clusters unchanged, every article unclustered, zero
duplicates) so a bad batch cannot block ingestion. The caller persists
whatever comes back.

CONCURRENCY: a batch is one synchronous unit of work. Two batches must not
cluster against the same cluster list at the same time: first-fit
mutation races create duplicate clusters for one event. ClusterWorkspace
serializes read → batch → replace behind a lock for in-process callers.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storyline.config import Settings, get_settings
from storyline.news.dedup import ExactDuplicateFilter, NearDuplicateDetector
from storyline.schemas.news import Article, ArticleCluster, ClusteringResult, ensure_utc
from storyline.trends.clustering import EventClusterer
from storyline.trends.metrics import update_cluster_metrics

logger = logging.getLogger(__name__)


def deduplicate_and_cluster(
    articles: List[Article],
    existing_clusters: Optional[List[ArticleCluster]] = None,
    *,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> ClusteringResult:
    """
    Remove duplicates from a batch and assign the survivors to event clusters.

    Args:
        articles: Newly fetched articles, in feed order.
        existing_clusters: Active clusters from the store. Not modified; the
                           updated clusters are returned as copies.
        settings: Threshold overrides (defaults to environment settings).
        now: Clock reading for the whole batch. Fixing it makes the result
             fully reproducible.

    Returns:
        ClusteringResult with clusters (most recently updated first),
        unclustered articles, and exact + near duplicate count.
    """
    existing_clusters = list(existing_clusters or [])

    logger.info(
        f"Deduplicating {len(articles)} articles against {len(existing_clusters)} existing clusters"
    )

    try:
        # Resolved inside the guard so a malformed env value degrades the batch
        settings = settings or get_settings()
        now = ensure_utc(now or datetime.now(timezone.utc))

        unique, exact_removed = ExactDuplicateFilter().filter(articles)
        deduped, near_duplicates = NearDuplicateDetector(settings).detect(unique)

        # Work on copies so a failure halfway leaves the caller's clusters intact
        working = [c.model_copy(deep=True) for c in existing_clusters]
        assignment = EventClusterer(settings).cluster(deduped, working, now=now)
        clusters = update_cluster_metrics(assignment.clusters, assignment.touched_ids, now=now)

        return ClusteringResult(
            clusters=clusters,
            unclustered=assignment.unclustered,
            duplicates_removed=exact_removed + len(near_duplicates),
            clusters_formed=len(clusters),
            near_duplicates=near_duplicates,
        )
    except Exception:
        logger.exception("Deduplication failed, returning batch unclustered and clusters unchanged")
        return ClusteringResult(
            clusters=existing_clusters,
            unclustered=list(articles),
            duplicates_removed=0,
            clusters_formed=0,
            degraded=True,
        )


class ClusterWorkspace:
    """
    Single-writer holder for the active cluster list.

    Usage:
        workspace = ClusterWorkspace.from_records(store.load_clusters())
        result = workspace.process(batch)      # serialized across threads
        store.save_clusters(workspace.to_records())
    """

    def __init__(
        self,
        clusters: Optional[List[ArticleCluster]] = None,
        settings: Optional[Settings] = None,
    ):
        self._clusters: List[ArticleCluster] = list(clusters or [])
        self._lock = threading.Lock()
        # None defers to the environment on every batch
        self.settings = settings

    @classmethod
    def from_records(
        cls,
        records: List[Dict[str, Any]],
        settings: Optional[Settings] = None,
    ) -> "ClusterWorkspace":
        return cls([ArticleCluster.model_validate(r) for r in records], settings=settings)

    def process(self, articles: List[Article], now: Optional[datetime] = None) -> ClusteringResult:
        """Run one batch against the current clusters and keep the result."""
        with self._lock:
            snapshot = [c.model_copy(deep=True) for c in self._clusters]
            result = deduplicate_and_cluster(articles, snapshot, settings=self.settings, now=now)
            if result.degraded:
                logger.warning(f"Batch of {len(articles)} articles produced no update; clusters kept as-is")
            else:
                # The caller owns result.clusters; keep a private copy
                self._clusters = [c.model_copy(deep=True) for c in result.clusters]
            return result

    @property
    def clusters(self) -> List[ArticleCluster]:
        """Deep copies; readers must not mutate live cluster state."""
        with self._lock:
            return [c.model_copy(deep=True) for c in self._clusters]

    def to_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [c.model_dump(mode="json") for c in self._clusters]
