"""ControlPlaneClient: the single egress point to the broker admin API.

Every call picks its target from scratch:

1. Enumerate the pod groups that are part of the broker cluster
   (all groups instead, for a node listing before any node was observed)
2. Take the most recent group
3. Send the request to the first pod whose broker container is ready

Exactly one HTTP request is issued per call, or none when no target can
be selected. Nothing is retried; the reconcile loop re-invokes later.

Uses stdlib ``urllib.request``, no extra dependencies required.
"""

from __future__ import annotations

import base64
import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from broker_bridge.config import BridgeConfig
from broker_bridge.errors import (
    DecodeFailed,
    PodNotReady,
    PodSetEmpty,
    RequestFailed,
    TransportError,
)
from broker_bridge.models import ClusterInstance, Credential, Pod
from broker_bridge.topology.resolver import PodGroupResolver, in_cluster_groups

if TYPE_CHECKING:
    from broker_bridge.credentials.resolver import CredentialResolver

logger = logging.getLogger(__name__)

# --- Admin API paths (relative to the API prefix) ---

NODES_PATH = "nodes"
LISTENERS_PATH = "listeners"
PLUGINS_PATH = "plugins"
EVACUATION_STATUS_PATH = "load_rebalance/global_status"


def evacuation_start_path(node: str) -> str:
    return f"load_rebalance/{node}/evacuation/start"


def plugin_action_path(node: str, plugin: str, action: str) -> str:
    return f"nodes/{node}/plugins/{plugin}/{action}"


# --- Context and response values ---


@dataclass(frozen=True)
class AdminContext:
    """Resolved credential plus the topology backend used to pick targets.

    Built once per reconcile pass and passed into every operation.
    """

    credential: Credential
    topology: PodGroupResolver

    @classmethod
    def resolve(
        cls,
        instance: ClusterInstance,
        credentials: CredentialResolver,
        topology: PodGroupResolver,
    ) -> AdminContext:
        """Resolve the bootstrap credential and bundle it with *topology*.

        Raises:
            CredentialNotFound: If the bootstrap secret cannot be read.
            CredentialMalformed: If it has no bootstrap user entry.
        """
        return cls(credential=credentials.resolve(instance), topology=topology)


@dataclass(frozen=True)
class AdminResponse:
    """Raw admin API answer. Non-2xx answers are returned, not raised."""

    status: int
    reason: str = ""
    body: bytes = b""
    path: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def raise_for_status(self) -> None:
        """Raise RequestFailed unless the status is 2xx."""
        if not self.ok:
            raise RequestFailed(self.status, self.reason, self.path)

    def json(self) -> Any:
        try:
            return json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeFailed(f"Invalid JSON in response to {self.path}: {exc}") from exc


def decode_field(response: AdminResponse, key: str) -> Any:
    """Return top-level *key* of a JSON object response.

    Raises:
        DecodeFailed: If the body is not a JSON object holding *key*.
    """
    payload = response.json()
    if not isinstance(payload, dict) or key not in payload:
        raise DecodeFailed(f"Response to {response.path} has no {key!r} field")
    return payload[key]


def decode_list_field(response: AdminResponse, key: str) -> Any:
    """Like decode_field, but a JSON null list decodes as an empty list."""
    value = decode_field(response, key)
    return [] if value is None else value


# --- Client ---


class ControlPlaneClient:
    """Issues admin API requests against one ready broker pod."""

    def __init__(self, config: BridgeConfig | None = None) -> None:
        self._config = config or BridgeConfig()

    @property
    def config(self) -> BridgeConfig:
        return self._config

    def call(
        self,
        ctx: AdminContext,
        instance: ClusterInstance,
        method: str,
        path: str,
        body: Any = None,
        timeout: float | None = None,
    ) -> AdminResponse:
        """Send one request to a ready pod of the instance.

        *body* is JSON-encoded unless it is already ``bytes``.

        Raises:
            PodSetEmpty: If no pod group or no pod could be found.
            PodNotReady: If no pod of the selected group is ready.
            TopologyError: If the pod topology cannot be queried.
            TransportError: If the pod cannot be reached in time.
        """
        pod = self.select_target(ctx, instance, path)
        return self._send(ctx.credential, pod, method, path, body, timeout)

    def select_target(
        self,
        ctx: AdminContext,
        instance: ClusterInstance,
        path: str,
    ) -> Pod:
        """Pick the pod that will receive a request for *path*."""
        if path == NODES_PATH and not instance.nodes_observed:
            # First reconcile: nothing is known to be in the cluster yet.
            groups = ctx.topology.list_groups(instance)
        else:
            groups = in_cluster_groups(ctx.topology, instance, self._config.node_prefix)
        if not groups:
            raise PodSetEmpty(
                f"No pod group found for {instance.namespace}/{instance.name}"
            )

        group = groups[-1]
        pods = ctx.topology.list_pods(instance, [group]).get(group.uid, [])
        if not pods:
            raise PodSetEmpty(f"Pod group {group.name} has no pods")

        for pod in pods:
            if pod.is_ready(self._config.container_name):
                logger.debug("Selected pod %s of group %s", pod.name, group.name)
                return pod
        raise PodNotReady(f"No pod of group {group.name} is ready")

    # --- Private: HTTP ---

    def _url(self, pod: Pod, path: str) -> str:
        host = f"[{pod.ip}]" if ":" in pod.ip else pod.ip
        prefix = self._config.api_prefix.strip("/")
        return f"http://{host}:{self._config.admin_port}/{prefix}/{path.lstrip('/')}"

    def _send(
        self,
        credential: Credential,
        pod: Pod,
        method: str,
        path: str,
        body: Any,
        timeout: float | None,
    ) -> AdminResponse:
        data: bytes | None = None
        if body is not None:
            data = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")

        token = base64.b64encode(
            f"{credential.username}:{credential.password}".encode()
        ).decode("ascii")
        req = urllib.request.Request(
            self._url(pod, path),
            data=data,
            headers={
                "Authorization": f"Basic {token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method=method,
        )

        logger.debug("%s %s on pod %s", method, path, pod.name)
        try:
            with urllib.request.urlopen(  # noqa: S310
                req, timeout=self._config.timeout if timeout is None else timeout,
            ) as resp:
                return AdminResponse(
                    status=resp.status,
                    reason=resp.reason or "",
                    body=resp.read(),
                    path=path,
                )
        except urllib.error.HTTPError as e:
            logger.warning("%s %s on pod %s returned %d", method, path, pod.name, e.code)
            return AdminResponse(
                status=e.code,
                reason=str(e.reason or ""),
                body=e.read() or b"",
                path=path,
            )
        except (OSError, http.client.HTTPException) as exc:
            raise TransportError(
                f"{method} {path} on pod {pod.name} failed: {exc}"
            ) from exc
