"""In-memory pod group resolver for development and testing.

Holds a fixed topology per instance. Does not talk to any orchestration
platform; use KubernetesPodGroupResolver for real clusters.
"""

from __future__ import annotations

from broker_bridge.models import ClusterInstance, Pod, PodGroup
from broker_bridge.topology.resolver import sort_groups


def _key(instance: ClusterInstance) -> str:
    return f"{instance.namespace}/{instance.name}"


class StaticPodGroupResolver:
    """Pod group resolver backed by a static mapping.

    Topology is registered per instance with :meth:`register`. Unknown
    instances have no groups.
    """

    def __init__(self) -> None:
        self._groups: dict[str, list[PodGroup]] = {}
        self._pods: dict[str, list[Pod]] = {}

    def register(
        self,
        instance: ClusterInstance,
        groups: list[PodGroup],
        pods: list[Pod],
    ) -> None:
        """Set the groups and pods of an instance, replacing earlier ones."""
        self._groups[_key(instance)] = list(groups)
        self._pods[_key(instance)] = list(pods)

    def list_groups(self, instance: ClusterInstance) -> list[PodGroup]:
        return sort_groups(self._groups.get(_key(instance), []))

    def list_pods(
        self,
        instance: ClusterInstance,
        groups: list[PodGroup],
    ) -> dict[str, list[Pod]]:
        result: dict[str, list[Pod]] = {g.uid: [] for g in groups}
        for pod in self._pods.get(_key(instance), []):
            if pod.group_uid in result:
                result[pod.group_uid].append(pod)
        return result
