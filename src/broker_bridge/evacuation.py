"""EvacuationOrchestrator: start and observe node evacuations.

During a blue-green update, clients are moved off nodes of the outgoing
generation before those pods are retired. The broker owns the
evacuation once started; broker-bridge only starts it and polls the
global status. Per node, as observed through polling::

    not-evacuating --start()--> evacuating --(broker done)--> not-evacuating

Only deployment flavors with the load-rebalance API support this; the
capability is checked before any network call.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from broker_bridge.client import (
    EVACUATION_STATUS_PATH,
    AdminContext,
    ControlPlaneClient,
    decode_list_field,
    evacuation_start_path,
)
from broker_bridge.errors import DecodeFailed, UnsupportedOperation
from broker_bridge.models import (
    ClusterInstance,
    EvacuationSession,
    EvacuationStrategy,
    Pod,
)
from broker_bridge.topology.resolver import node_name

logger = logging.getLogger(__name__)

_SESSIONS = TypeAdapter(list[EvacuationSession])


class EvacuationOrchestrator:
    """Starts evacuations and reports the ones in flight."""

    def __init__(self, client: ControlPlaneClient) -> None:
        self._client = client

    def start(
        self,
        ctx: AdminContext,
        instance: ClusterInstance,
        destination_pods: list[Pod],
        source_node: str,
    ) -> None:
        """Ask the broker to evacuate *source_node* onto *destination_pods*.

        Raises:
            UnsupportedOperation: If the instance cannot evacuate nodes.
            RequestFailed: On a non-2xx answer (e.g. already evacuating).
        """
        strategy = _require_strategy(instance)
        migrate_to = [
            node_name(instance, pod, self._client.config.node_prefix)
            for pod in destination_pods
        ]
        body = build_start_body(strategy, migrate_to)

        response = self._client.call(
            ctx, instance, "POST", evacuation_start_path(source_node), body,
        )
        response.raise_for_status()
        logger.info(
            "Started evacuation of %s to %d node(s)", source_node, len(migrate_to),
        )

    def status(
        self, ctx: AdminContext, instance: ClusterInstance,
    ) -> list[EvacuationSession]:
        """Evacuations currently in flight; empty when none.

        Raises:
            UnsupportedOperation: If the instance cannot evacuate nodes.
            RequestFailed: On a non-2xx answer.
            DecodeFailed: If the ``evacuations`` field cannot be decoded.
        """
        _require_strategy(instance)
        response = self._client.call(ctx, instance, "GET", EVACUATION_STATUS_PATH)
        response.raise_for_status()
        data = decode_list_field(response, "evacuations")
        try:
            return _SESSIONS.validate_python(data)
        except ValidationError as exc:
            raise DecodeFailed(f"failed to unmarshal evacuation statuses: {exc}") from exc

    def is_evacuating(
        self, ctx: AdminContext, instance: ClusterInstance, node: str,
    ) -> bool:
        """True while *node* still appears in the global evacuation status."""
        return any(session.node == node for session in self.status(ctx, instance))


def build_start_body(
    strategy: EvacuationStrategy, migrate_to: list[str],
) -> dict[str, Any]:
    """Evacuation start payload. ``wait_takeover`` is sent only when set."""
    body: dict[str, Any] = {
        "conn_evict_rate": strategy.conn_evict_rate,
        "sess_evict_rate": strategy.sess_evict_rate,
        "migrate_to": migrate_to,
    }
    if strategy.wait_takeover > 0:
        body["wait_takeover"] = strategy.wait_takeover
    return body


def _require_strategy(instance: ClusterInstance) -> EvacuationStrategy:
    strategy = instance.evacuation_strategy
    if not instance.supports_evacuation or strategy is None:
        raise UnsupportedOperation(
            f"failed to evacuate node of {instance.namespace}/{instance.name}: "
            f"flavor {instance.flavor} with an evacuation strategy is required"
        )
    return strategy
