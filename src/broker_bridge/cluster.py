"""Cluster-wide views built from admin API answers.

Node listing is answered truthfully by any live member, so it is passed
through. Listener listing is reconciled: during a rollout the contacted
node reports the listeners of every member it sees, old and new
generation alike, and only listeners served by all of them may be
exposed.
"""

from __future__ import annotations

import logging
import re

from pydantic import TypeAdapter, ValidationError

from broker_bridge.client import (
    LISTENERS_PATH,
    NODES_PATH,
    AdminContext,
    ControlPlaneClient,
    decode_list_field,
)
from broker_bridge.errors import DecodeFailed
from broker_bridge.models import (
    BrokerNodeStatus,
    ClusterInstance,
    ListenerConfig,
    NodeListeners,
    PortSpec,
    Transport,
)

logger = logging.getLogger(__name__)

_NODES = TypeAdapter(list[BrokerNodeStatus])
_NODE_LISTENERS = TypeAdapter(list[NodeListeners])

# Substrings of a listener protocol tag that mark a datagram transport.
UDP_MARKERS: tuple[str, ...] = ("udp", "dtls", "sn")

_PORT_SUFFIX = re.compile(r":[0-9]+")
_PORT_NUMBER = re.compile(r"[+-]?[0-9]+")


class ClusterStateAggregator:
    """Answers cluster-wide questions through a ControlPlaneClient."""

    def __init__(self, client: ControlPlaneClient) -> None:
        self._client = client

    def list_nodes(
        self, ctx: AdminContext, instance: ClusterInstance,
    ) -> list[BrokerNodeStatus]:
        """Status of every broker cluster member.

        Raises:
            RequestFailed: On a non-2xx answer.
            DecodeFailed: If the ``data`` field cannot be decoded.
        """
        response = self._client.call(ctx, instance, "GET", NODES_PATH)
        response.raise_for_status()
        data = decode_list_field(response, "data")
        try:
            return _NODES.validate_python(data)
        except ValidationError as exc:
            raise DecodeFailed(f"failed to unmarshal node statuses: {exc}") from exc

    def listener_ports(
        self, ctx: AdminContext, instance: ClusterInstance,
    ) -> list[PortSpec]:
        """Ports of the listeners served by every reporting node.

        Raises:
            RequestFailed: On a non-2xx answer.
            DecodeFailed: If the ``data`` field cannot be decoded.
        """
        response = self._client.call(ctx, instance, "GET", LISTENERS_PATH)
        response.raise_for_status()
        data = decode_list_field(response, "data")
        try:
            per_node = _NODE_LISTENERS.validate_python(data)
        except ValidationError as exc:
            raise DecodeFailed(f"failed to unmarshal listeners: {exc}") from exc

        listeners = reconcile_listeners([n.listeners for n in per_node])
        logger.debug(
            "%d node(s) agree on %d listener(s) for %s/%s",
            len(per_node), len(listeners),
            instance.namespace, instance.name,
        )
        return [to_port_spec(listener) for listener in listeners]


# --- Reconciliation ---


def intersect_listeners(
    left: list[ListenerConfig],
    right: list[ListenerConfig],
) -> list[ListenerConfig]:
    """Listeners of *right* whose bind address also appears in *left*.

    Keeps *right*'s order and entries; a bind address is kept once.
    """
    remaining = {listener.listen_on for listener in left}
    result: list[ListenerConfig] = []
    for listener in right:
        if listener.listen_on in remaining:
            result.append(listener)
            remaining.discard(listener.listen_on)
    return result


def reconcile_listeners(per_node: list[list[ListenerConfig]]) -> list[ListenerConfig]:
    """Fold per-node listener lists into the set every node serves.

    A single list is returned as is. Several lists are intersected left
    to right, each against the running result.
    """
    if not per_node:
        return []
    if len(per_node) == 1:
        return list(per_node[0])

    result = per_node[0]
    for listeners in per_node[1:]:
        result = intersect_listeners(result, listeners)
    return result


# --- Port derivation ---


def classify_transport(protocol: str) -> Transport:
    """UDP for datagram listener tags (udp, dtls, sn), TCP otherwise."""
    tag = protocol.lower()
    if any(marker in tag for marker in UDP_MARKERS):
        return Transport.UDP
    return Transport.TCP


def split_port(listen_on: str) -> str:
    """Port text of a bind address (``host:port``, ``[v6]:port`` or ``port``).

    A bind string that cannot be split is returned whole.
    """
    if ":" not in listen_on:
        return listen_on
    if listen_on.startswith("["):
        host_end = listen_on.find("]:")
        if host_end == -1:
            return listen_on
        return listen_on[host_end + 2:]
    host, _, port = listen_on.rpartition(":")
    if ":" in host:
        # Unbracketed IPv6 address: ambiguous, no split.
        return listen_on
    return port


def parse_port(port_text: str) -> int:
    """Numeric port, 0 when *port_text* is not a plain ASCII integer."""
    if not _PORT_NUMBER.fullmatch(port_text):
        return 0
    return int(port_text)


def port_name(protocol: str, port_text: str) -> str:
    """Service port name: ``mqtt:wss:8084`` + ``8084`` -> ``mqtt-wss-8084``."""
    name = _PORT_SUFFIX.sub("", protocol).replace(":", "-")
    return f"{name}-{port_text}"


def to_port_spec(listener: ListenerConfig) -> PortSpec:
    port_text = split_port(listener.listen_on)
    port = parse_port(port_text)
    return PortSpec(
        name=port_name(listener.protocol, port_text),
        protocol=classify_transport(listener.protocol),
        port=port,
        target_port=port,
    )
