"""
Article and event-cluster data models.

Articles are produced by the feed adapters and never mutated here. Clusters
are the engine's stateful entity: the caller hands the current list in,
the engine returns the updated list, and the caller persists it.

Hierarchy: Article → ArticleCluster → ClusteringResult
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from storyline.config import MAX_CLUSTER_MEMBERS

from .base import ClusterState


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Article(BaseModel):
    """
    A single harvested article, already normalized by its feed adapter.

    This is the atomic input unit. popularity_score is the adapter's
    engagement signal scaled to 0-1 (upvotes, points, retweets...).
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str
    summary: str = ""
    content: Optional[str] = None
    url: str
    source_name: str
    published_at: datetime
    popularity_score: float = Field(ge=0.0, le=1.0, default=0.5)

    @field_validator('published_at')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator('summary', mode='before')
    @classmethod
    def none_summary(cls, v):
        return v or ""

    @property
    def body(self) -> str:
        """Text used for content similarity: summary, else full content."""
        return self.summary or self.content or ""

    class Config:
        frozen = True


class DuplicateResult(BaseModel):
    """Verdict of comparing one article against another."""
    is_duplicate: bool
    similarity: float = Field(ge=0.0, le=1.0, default=0.0)
    duplicate_of: Optional[str] = None
    reasoning: str = ""


class ArticleCluster(BaseModel):
    """
    Group of articles believed to describe the same real-world event.

    The representative is the member shown as the headline and the anchor
    new articles are compared against. members keeps insertion order.
    """
    id: str
    representative: Article
    members: List[Article]
    cluster_score: float = Field(ge=0.0, le=1.0, default=0.5)
    topic: str = "General"
    created_at: datetime
    updated_at: datetime
    velocity: float = Field(ge=0.0, default=1.0)  # members per hour of cluster age

    @field_validator('created_at', 'updated_at')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode='after')
    def check_invariants(self):
        if not self.members:
            raise ValueError("cluster must have at least one member")
        if len(self.members) > MAX_CLUSTER_MEMBERS:
            raise ValueError(f"cluster cannot hold more than {MAX_CLUSTER_MEMBERS} members")
        if self.representative.id not in {m.id for m in self.members}:
            raise ValueError("representative must be one of the members")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self

    @property
    def size(self) -> int:
        return len(self.members)

    def age_hours(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.created_at).total_seconds() / 3600

    def state(self, now: Optional[datetime] = None, window_hours: float = 72.0) -> ClusterState:
        """Derived lifecycle state; DORMANT once the admission window has passed."""
        now = now or datetime.now(timezone.utc)
        if now - self.created_at > timedelta(hours=window_hours):
            return ClusterState.DORMANT
        if len(self.members) > 1:
            return ClusterState.GROWING
        return ClusterState.CREATED


class ClusteringResult(BaseModel):
    """Output of one dedup + clustering batch."""
    clusters: List[ArticleCluster] = Field(default_factory=list)
    unclustered: List[Article] = Field(default_factory=list)
    duplicates_removed: int = 0
    clusters_formed: int = 0

    # Audit trail, not persisted
    near_duplicates: List[Article] = Field(default_factory=list)
    degraded: bool = False
