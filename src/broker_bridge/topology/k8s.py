"""KubernetesPodGroupResolver: pod topology from StatefulSets and Pods.

Each StatefulSet selected by the instance labels is one pod group; pods
are assigned to a group through their controller owner reference.
Read-only: only list calls are issued.

Requires: ``pip install broker-bridge[k8s]``
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from broker_bridge.errors import TopologyError
from broker_bridge.kube import (
    api_instance,
    build_api_client,
    check_kubernetes_available,
    describe_api_error,
)
from broker_bridge.models import ClusterInstance, ContainerStatus, Pod, PodGroup
from broker_bridge.topology.resolver import sort_groups

logger = logging.getLogger(__name__)


class KubernetesPodGroupResolver:
    """Pod group resolver that uses the kubernetes Python client.

    Pass ``api_client`` to reuse an existing ``kubernetes.client.ApiClient``;
    otherwise one is built per call from ``kubeconfig``/``context`` or the
    in-cluster service account.
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        in_cluster: bool = False,
        api_client: Any | None = None,
    ) -> None:
        check_kubernetes_available()
        self._kubeconfig = kubeconfig
        self._context = context
        self._in_cluster = in_cluster
        self._api_client = api_client

    def list_groups(self, instance: ClusterInstance) -> list[PodGroup]:
        try:
            apps = self._api("AppsV1Api")
            result = apps.list_namespaced_stateful_set(
                namespace=instance.namespace,
                label_selector=instance.selector,
            )
        except Exception as exc:
            raise TopologyError(
                f"Listing StatefulSets of {instance.namespace}/{instance.name} "
                f"failed: {describe_api_error(exc)}"
            ) from exc

        groups = [self._to_group(sts) for sts in result.items]
        return sort_groups(groups)

    def list_pods(
        self,
        instance: ClusterInstance,
        groups: list[PodGroup],
    ) -> dict[str, list[Pod]]:
        try:
            core = self._api("CoreV1Api")
            result = core.list_namespaced_pod(
                namespace=instance.namespace,
                label_selector=instance.selector,
            )
        except Exception as exc:
            raise TopologyError(
                f"Listing pods of {instance.namespace}/{instance.name} "
                f"failed: {describe_api_error(exc)}"
            ) from exc

        pods_by_group: dict[str, list[Pod]] = {g.uid: [] for g in groups}
        for item in result.items:
            pod = self._to_pod(item)
            if pod.group_uid in pods_by_group:
                pods_by_group[pod.group_uid].append(pod)
        return pods_by_group

    # --- Private: client setup ---

    def _api(self, api_class_name: str) -> Any:
        api_client = self._api_client or build_api_client(
            kubeconfig=self._kubeconfig,
            context=self._context,
            in_cluster=self._in_cluster,
        )
        return api_instance(api_class_name, api_client)

    # --- Private: conversion ---

    def _to_group(self, sts: Any) -> PodGroup:
        created = sts.metadata.creation_timestamp or datetime.fromtimestamp(0, tz=UTC)
        return PodGroup(
            uid=sts.metadata.uid,
            name=sts.metadata.name,
            created_at=created,
            replicas=(sts.spec.replicas if sts.spec else None) or 0,
        )

    def _to_pod(self, item: Any) -> Pod:
        controller_uid = ""
        for ref in item.metadata.owner_references or []:
            if ref.controller:
                controller_uid = ref.uid
                break

        status = item.status
        containers = [
            ContainerStatus(name=cs.name, ready=bool(cs.ready))
            for cs in (status.container_statuses if status else None) or []
        ]
        return Pod(
            name=item.metadata.name,
            namespace=item.metadata.namespace,
            ip=(status.pod_ip if status else None) or "",
            group_uid=controller_uid,
            containers=containers,
        )
