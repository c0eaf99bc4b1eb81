"""
Tests for topic labelling, first-fit event clustering and cluster metrics.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from storyline.config import SOURCE_REPUTATION, Settings
from storyline.schemas.base import ClusterState
from storyline.schemas.news import ArticleCluster
from storyline.trends.clustering import (
    EventClusterer, make_cluster_id, should_replace_representative,
)
from storyline.trends.metrics import (
    get_cluster_by_id, recent_clusters, top_clusters_by_velocity,
    trending_clusters, update_cluster_metrics,
)
from storyline.trends.topics import classify_topic, source_reputation, topic_similarity

from conftest import NOW, make_article

ROBOT_SUMMARY = "The startup showed a bipedal robot moving boxes in a live warehouse demo"


def robot_article(**kwargs):
    kwargs.setdefault("summary", ROBOT_SUMMARY)
    return make_article("Acme Robotics unveils warehouse humanoid robot", **kwargs)


def cluster_of(*members, created_at=NOW, topic="AI & Technology"):
    return ArticleCluster(
        id=make_cluster_id(members[0]),
        representative=members[0],
        members=list(members),
        cluster_score=members[0].popularity_score,
        topic=topic,
        created_at=created_at,
        updated_at=created_at,
        velocity=1.0,
    )


# ════════════════════════════════════════════════════════════════════
# Topics & source reputation
# ════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("title,expected", [
    ("OpenAI ships a new AI model", "AI & Technology"),
    ("New machine learning benchmark released", "AI & Technology"),
    ("Stock market rallies after rate cut", "Finance & Markets"),
    ("Election results delayed in three states", "Politics & Government"),
    ("Hospital staff strike over pay", "Health & Medicine"),
    ("AI stocks surge on earnings", "AI & Technology"),
    ("Officials said nothing at the briefing", "General"),
    ("Quiet afternoon in the park", "General"),
])
def test_classify_topic_first_bucket_wins(title, expected):
    assert classify_topic(title) == expected


def test_source_reputation_defaults_and_is_immutable():
    assert source_reputation("Reuters") == 0.95
    assert source_reputation("Reddit") == 0.60
    assert source_reputation("Some Substack") == 0.5
    assert source_reputation(None) == 0.5
    with pytest.raises(TypeError):
        SOURCE_REPUTATION["Reddit"] = 1.0


def test_topic_similarity_uses_title_and_summary_keywords():
    a = robot_article()
    b = robot_article(source="Reddit")
    unrelated = make_article("Volcano erupts near remote island village")
    assert topic_similarity(a, b) == 1.0
    assert topic_similarity(a, unrelated) == 0.0


def test_should_replace_representative():
    current = make_article("Story", source="Reddit", popularity=0.5)
    assert should_replace_representative(make_article("Story", source="Reddit", popularity=0.9), current)
    # popularity tie, better source
    assert should_replace_representative(make_article("Story", source="Reuters", popularity=0.5), current)
    # lower popularity but more reputable source still wins the tie-break
    assert should_replace_representative(make_article("Story", source="Bloomberg", popularity=0.3), current)
    assert not should_replace_representative(make_article("Story", source="Reddit", popularity=0.5), current)


# ════════════════════════════════════════════════════════════════════
# Cluster model
# ════════════════════════════════════════════════════════════════════

def test_cluster_requires_representative_among_members():
    a = robot_article()
    outsider = make_article("Somewhere else entirely")
    with pytest.raises(ValidationError):
        ArticleCluster(
            id="c1", representative=outsider, members=[a],
            created_at=NOW, updated_at=NOW,
        )
    with pytest.raises(ValidationError):
        ArticleCluster(id="c2", representative=a, members=[], created_at=NOW, updated_at=NOW)
    with pytest.raises(ValidationError):
        ArticleCluster(
            id="c3", representative=a, members=[a],
            created_at=NOW, updated_at=NOW - timedelta(minutes=1),
        )
    with pytest.raises(ValidationError):
        ArticleCluster(
            id="c4", representative=a, members=[a] + [robot_article(source="Reddit") for _ in range(10)],
            created_at=NOW, updated_at=NOW,
        )


def test_settings_cannot_raise_cluster_size_above_member_ceiling():
    with pytest.raises(ValidationError):
        Settings(MAX_CLUSTER_SIZE=11)
    assert Settings(MAX_CLUSTER_SIZE=10).max_cluster_size == 10


def test_cluster_state():
    a = robot_article()
    cluster = cluster_of(a)
    assert cluster.state(NOW) == ClusterState.CREATED
    cluster.members.append(robot_article(source="Reddit"))
    assert cluster.state(NOW) == ClusterState.GROWING
    assert cluster.state(NOW + timedelta(hours=73)) == ClusterState.DORMANT


# ════════════════════════════════════════════════════════════════════
# Event clustering
# ════════════════════════════════════════════════════════════════════

def test_single_article_creates_cluster(settings):
    article = robot_article(popularity=0.8)
    assignment = EventClusterer(settings).cluster([article], [], now=NOW)

    assert assignment.created == 1
    assert assignment.unclustered == []
    cluster = assignment.clusters[0]
    assert cluster.members == [article]
    assert cluster.representative == article
    assert cluster.velocity == 1.0
    assert cluster.cluster_score == 0.8
    assert cluster.topic == "AI & Technology"
    assert cluster.created_at == cluster.updated_at == NOW
    assert cluster.id == make_cluster_id(article)


def test_similar_article_joins_existing_cluster(settings):
    founder = robot_article(popularity=0.4, source="Reddit")
    cluster = cluster_of(founder)
    later = NOW + timedelta(hours=1)
    newcomer = robot_article(popularity=0.9, source="Hacker News", minutes_ago=-30)

    assignment = EventClusterer(settings).cluster([newcomer], [cluster], now=later)

    assert assignment.created == 0
    assert assignment.touched_ids == {cluster.id}
    assert cluster.members == [founder, newcomer]
    assert cluster.representative == newcomer
    assert cluster.updated_at == later
    # interim velocity: 2 members / (1h elapsed + 1)
    assert cluster.velocity == pytest.approx(1.0)


def test_article_outside_time_window_starts_new_cluster(settings):
    founder = robot_article()
    cluster = cluster_of(founder)
    stale = robot_article(published_at=NOW - timedelta(hours=73))

    assignment = EventClusterer(settings).cluster([stale], [cluster], now=NOW)

    assert assignment.created == 1
    assert cluster.members == [founder]
    new_cluster = next(c for c in assignment.clusters if c.id != cluster.id)
    assert new_cluster.members == [stale]


def test_article_at_window_edge_is_admitted(settings):
    cluster = cluster_of(robot_article())
    edge = robot_article(published_at=NOW - timedelta(hours=72))
    assignment = EventClusterer(settings).cluster([edge], [cluster], now=NOW)
    assert assignment.created == 0
    assert len(cluster.members) == 2


def test_full_cluster_rejects_new_members(settings):
    members = [robot_article(id=f"member-{i:03d}") for i in range(10)]
    full = cluster_of(*members)
    extra = robot_article(id="member-extra")

    assignment = EventClusterer(settings).cluster([extra], [full], now=NOW)

    assert len(full.members) == 10
    assert assignment.created == 1
    assert all(len(c.members) <= 10 for c in assignment.clusters)


def test_first_fit_picks_first_matching_cluster(settings):
    first = cluster_of(robot_article(id="rep-first"))
    second = cluster_of(robot_article(id="rep-second"))
    article = robot_article(id="joiner-001")

    EventClusterer(settings).cluster([article], [first, second], now=NOW)

    assert len(first.members) == 2
    assert len(second.members) == 1


def test_cluster_cap_leaves_remainder_unclustered(settings):
    articles = [
        make_article(f"Headline item{i:03d} zone{i:03d}", id=f"cap-{i:03d}")
        for i in range(51)
    ]
    assignment = EventClusterer(settings).cluster(articles, [], now=NOW)

    assert len(assignment.clusters) == 50
    assert assignment.created == 50
    assert assignment.unclustered == [articles[50]]


def test_clusters_sorted_most_recently_updated_first(settings):
    old = cluster_of(make_article("Volcano erupts near remote island village"), created_at=NOW - timedelta(hours=5))
    grown = cluster_of(robot_article(), created_at=NOW - timedelta(hours=3))
    untouched = cluster_of(make_article("Chess champion retires after final match"), created_at=NOW - timedelta(hours=1))

    assignment = EventClusterer(settings).cluster(
        [robot_article(source="Reddit", minutes_ago=170)], [old, grown, untouched], now=NOW,
    )

    assert [c.id for c in assignment.clusters] == [grown.id, untouched.id, old.id]


def test_custom_settings_shrink_cluster_size():
    settings = Settings(MAX_CLUSTER_SIZE=2)
    cluster = cluster_of(robot_article(), robot_article(source="Reddit"))
    assignment = EventClusterer(settings).cluster([robot_article(source="CNN")], [cluster], now=NOW)
    assert assignment.created == 1
    assert len(cluster.members) == 2


def test_redelivered_founder_gets_distinct_cluster_id(settings):
    founder = robot_article(id="story-1")
    full = cluster_of(founder, *[robot_article(source="Reddit") for _ in range(9)])

    later = NOW + timedelta(hours=1)
    assignment = EventClusterer(settings).cluster([founder], [full], now=later)

    assert assignment.created == 1
    ids = [c.id for c in assignment.clusters]
    assert len(set(ids)) == 2
    assert ids[0] == f"{make_cluster_id(founder)}_2"
    assert assignment.touched_ids == {ids[0]}
    assert get_cluster_by_id(assignment.clusters, full.id) is full
    assert len(full.members) == 10


def test_naive_clock_is_treated_as_utc(settings):
    assignment = EventClusterer(settings).cluster([robot_article()], [], now=NOW.replace(tzinfo=None))
    assert assignment.clusters[0].created_at == NOW


# ════════════════════════════════════════════════════════════════════
# Metrics & queries
# ════════════════════════════════════════════════════════════════════

def test_update_metrics_only_touches_given_clusters():
    members = [robot_article(popularity=p) for p in (0.2, 0.4, 0.9)]
    touched = cluster_of(*members, created_at=NOW - timedelta(hours=5))
    untouched = cluster_of(make_article("Quiet afternoon in the park", popularity=0.3),
                           created_at=NOW - timedelta(hours=5))
    untouched.velocity = 7.0

    update_cluster_metrics([touched, untouched], {touched.id}, now=NOW)

    assert touched.cluster_score == pytest.approx(0.5)
    assert touched.velocity == pytest.approx(3 / 5)
    assert untouched.velocity == 7.0


def test_update_metrics_floors_age_at_one_hour():
    cluster = cluster_of(robot_article(), robot_article(source="Reddit"),
                         created_at=NOW - timedelta(minutes=10))
    update_cluster_metrics([cluster], now=NOW)
    assert cluster.velocity == 2.0


def test_cluster_queries():
    fast = cluster_of(*[robot_article() for _ in range(4)], created_at=NOW - timedelta(hours=1))
    fast.velocity = 4.0
    slow = cluster_of(make_article("Chess champion retires"), created_at=NOW - timedelta(hours=30))
    slow.velocity = 0.1
    medium = cluster_of(make_article("Volcano erupts"), created_at=NOW - timedelta(hours=2))
    medium.velocity = 2.5
    clusters = [slow, medium, fast]

    assert get_cluster_by_id(clusters, medium.id) is medium
    assert get_cluster_by_id(clusters, "missing") is None
    assert top_clusters_by_velocity(clusters, limit=2) == [fast, medium]
    assert clusters == [slow, medium, fast]
    assert recent_clusters(clusters, hours_back=24, now=NOW) == [fast, medium]
    assert trending_clusters(clusters) == [fast]
