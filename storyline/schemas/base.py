"""
Common enums used across the engine.
"""

from enum import Enum


class ClusterState(str, Enum):
    """
    Lifecycle of an event cluster.

    CREATED -> GROWING happens inside the engine when a second member is
    admitted. DORMANT is derived: the cluster's time window has elapsed so no
    article can be admitted any more. Retiring dormant clusters is the
    store's job, the engine never deletes one.
    """
    CREATED = "created"
    GROWING = "growing"
    DORMANT = "dormant"
