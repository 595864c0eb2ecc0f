"""Pod group resolver protocol and topology helpers.

A pod group is one generation of the broker's pod template. In steady
state an instance has one live group; mid-rollout it has two (the
outgoing and the incoming one). Backends only enumerate what exists;
the helpers here decide which groups are currently part of the broker
cluster and how pods map to broker node names.

Built-in backends: StaticPodGroupResolver (development/testing) and
KubernetesPodGroupResolver (StatefulSets and Pods via the k8s API).
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from broker_bridge.errors import PodSetEmpty
from broker_bridge.models import ClusterInstance, Pod, PodGroup

logger = logging.getLogger(__name__)


@runtime_checkable
class PodGroupResolver(Protocol):
    """Protocol for pod topology backends.

    Any object with ``list_groups()`` and ``list_pods()`` methods
    satisfies this protocol.
    """

    def list_groups(self, instance: ClusterInstance) -> list[PodGroup]:
        """Return every pod group of the instance, oldest first.

        Raises:
            TopologyError: If the orchestration platform cannot be queried.
        """
        ...

    def list_pods(
        self,
        instance: ClusterInstance,
        groups: list[PodGroup],
    ) -> dict[str, list[Pod]]:
        """Return the pods of each requested group, keyed by group UID.

        Every requested group has an entry, possibly empty. Pods owned by
        other groups are left out.

        Raises:
            TopologyError: If the orchestration platform cannot be queried.
        """
        ...


def node_name(instance: ClusterInstance, pod: Pod, prefix: str = "emqx") -> str:
    """Broker node name of a pod, as the broker cluster knows it."""
    return (
        f"{prefix}@{pod.name}.{instance.headless_service_name}"
        f".{instance.namespace}.svc.cluster.local"
    )


def in_cluster_groups(
    resolver: PodGroupResolver,
    instance: ClusterInstance,
    prefix: str = "emqx",
) -> list[PodGroup]:
    """Groups with at least one pod among the instance's observed nodes.

    Keeps the oldest-first order of ``list_groups()``.

    Raises:
        PodSetEmpty: If no group has a pod in the broker cluster.
    """
    groups = resolver.list_groups(instance)
    pods_by_group = resolver.list_pods(instance, groups)
    observed = {n.node for n in instance.status.nodes or []}

    result = [
        group for group in groups
        if any(
            node_name(instance, pod, prefix) in observed
            for pod in pods_by_group.get(group.uid, [])
        )
    ]
    if not result:
        raise PodSetEmpty(
            f"No pod group of {instance.namespace}/{instance.name} "
            f"is part of the broker cluster"
        )
    logger.debug(
        "In-cluster pod groups for %s/%s: %s",
        instance.namespace, instance.name, [g.name for g in result],
    )
    return result


def sort_groups(groups: list[PodGroup]) -> list[PodGroup]:
    """Order groups oldest first; name breaks creation-time ties."""
    return sorted(groups, key=lambda g: (g.created_at, g.name))
