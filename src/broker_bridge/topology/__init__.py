"""Pod topology: which pod groups and pods make up a broker cluster.

Backends: StaticPodGroupResolver, KubernetesPodGroupResolver.
"""

from broker_bridge.topology.resolver import (
    PodGroupResolver,
    in_cluster_groups,
    node_name,
)
from broker_bridge.topology.static import StaticPodGroupResolver

__all__ = [
    "PodGroupResolver",
    "StaticPodGroupResolver",
    "in_cluster_groups",
    "node_name",
]
