"""
Configuration management for the Storyline dedup & clustering engine.

Thresholds are loaded from environment variables (or a .env file) so they
can be tuned per deployment without code changes. Static lookup tables
(source reputation, topic buckets) are module constants and immutable.
"""

from functools import lru_cache
from types import MappingProxyType

from pydantic import Field
from pydantic_settings import BaseSettings

# Hard ceiling on cluster membership; max_cluster_size may only lower it.
MAX_CLUSTER_MEMBERS = 10


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # ── Near-duplicate detection ──
    # Title-only verdict: titles sharing >85% of their tokens are the same story.
    title_similarity_threshold: float = Field(default=0.85, alias="DEDUP_TITLE_THRESHOLD")
    # Combined verdict: title above this AND content above content_similarity_threshold.
    title_content_threshold: float = Field(default=0.70, alias="DEDUP_TITLE_CONTENT_THRESHOLD")
    content_similarity_threshold: float = Field(default=0.75, alias="DEDUP_CONTENT_THRESHOLD")
    # Same host + near-identical path (AMP vs canonical, trailing slash variants)
    url_similarity_threshold: float = Field(default=0.90, alias="DEDUP_URL_THRESHOLD")
    # Publish-time proximity decays linearly to 0 over this window
    proximity_window_hours: float = Field(default=24.0, alias="DEDUP_PROXIMITY_WINDOW_HOURS")

    # ── Event clustering ──
    cluster_similarity_threshold: float = Field(default=0.70, alias="CLUSTER_SIMILARITY_THRESHOLD")
    max_cluster_size: int = Field(
        default=MAX_CLUSTER_MEMBERS, ge=1, le=MAX_CLUSTER_MEMBERS, alias="MAX_CLUSTER_SIZE",
    )
    max_clusters_to_check: int = Field(default=50, alias="MAX_CLUSTERS_TO_CHECK")
    # Articles further than this from a cluster's creation time are never admitted
    time_window_hours: float = Field(default=72.0, alias="CLUSTER_TIME_WINDOW_HOURS")

    # ── Topic keywords ──
    max_keywords: int = Field(default=10, alias="TOPIC_MAX_KEYWORDS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Source reputation used as the representative tie-break when popularity
# does not decide. Unknown sources score DEFAULT_SOURCE_REPUTATION.
DEFAULT_SOURCE_REPUTATION = 0.5

SOURCE_REPUTATION = MappingProxyType({
    "Reuters": 0.95,
    "Associated Press": 0.95,
    "BBC News": 0.90,
    "The New York Times": 0.90,
    "The Wall Street Journal": 0.88,
    "Bloomberg": 0.87,
    "Hacker News": 0.85,
    "CNN": 0.80,
    "TechCrunch": 0.75,
    "Reddit": 0.60,
})

# Topic buckets, evaluated in order. The first bucket matching the title wins.
# Single words match title tokens; multi-word phrases match as substrings.
DEFAULT_TOPIC = "General"

TOPIC_KEYWORDS = (
    ("AI & Technology", frozenset({
        "ai", "artificial intelligence", "machine learning", "tech", "software",
        "computer", "automation", "robot", "robotics", "llm", "chip", "startup",
    })),
    ("Finance & Markets", frozenset({
        "stock", "stocks", "market", "markets", "finance", "investment",
        "economy", "funding", "ipo", "crypto", "bitcoin", "bank", "inflation",
    })),
    ("Politics & Government", frozenset({
        "politics", "government", "election", "policy", "congress", "senate",
        "regulation", "law", "minister", "parliament", "court",
    })),
    ("Health & Medicine", frozenset({
        "health", "medical", "medicine", "hospital", "doctor", "vaccine",
        "disease", "drug", "fda",
    })),
    ("Science & Research", frozenset({
        "science", "research", "study", "discovery", "experiment", "space",
        "nasa", "climate", "physics",
    })),
    ("Business & Industry", frozenset({
        "business", "company", "industry", "corporate", "enterprise",
        "acquisition", "merger", "layoffs", "ceo",
    })),
    ("Sports & Entertainment", frozenset({
        "sports", "game", "movie", "music", "entertainment", "film",
        "football", "olympics",
    })),
)
