"""
Layer 2: Event clustering.

Modules:
- topics: Keyword-bucket topic labels, source reputation, topic similarity
- clustering: First-fit incremental event clustering (EventClusterer)
- metrics: Cluster score/velocity recomputation and read-only queries
"""

from storyline.trends.clustering import EventClusterer
from storyline.trends.metrics import update_cluster_metrics
