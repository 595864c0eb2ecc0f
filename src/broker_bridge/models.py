"""Core data models for broker-bridge.

Defines the schemas for:
- Cluster instances (the managed broker cluster and its update strategy)
- Pod topology (pod groups, pods, container readiness)
- Admin API payloads (nodes, listeners, evacuations, plugins)
- Derived values (service port specs, credentials)
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class DeploymentFlavor(enum.StrEnum):
    OPEN_SOURCE = "open-source"
    ENTERPRISE = "enterprise"


class Transport(enum.StrEnum):
    TCP = "TCP"
    UDP = "UDP"


class PluginAction(enum.StrEnum):
    LOAD = "load"
    RELOAD = "reload"
    UNLOAD = "unload"


# Flavors whose broker ships the load-rebalance API used for blue-green updates.
BLUE_GREEN_FLAVORS: frozenset[DeploymentFlavor] = frozenset({
    DeploymentFlavor.ENTERPRISE,
})


# --- Cluster Instance ---


class EvacuationStrategy(BaseModel):
    """Rate limits for moving clients off a node being retired.

    ``wait_takeover`` is the number of seconds the broker waits for
    clients to reconnect elsewhere before evicting sessions. 0 leaves the
    broker's default in place.
    """

    conn_evict_rate: int = Field(..., ge=1)
    sess_evict_rate: int = Field(..., ge=1)
    wait_takeover: int = Field(0, ge=0)


class BlueGreenUpdate(BaseModel):
    """Blue-green update settings declared on the instance."""

    initial_delay_seconds: int = Field(0, ge=0)
    evacuation_strategy: EvacuationStrategy | None = None


class BrokerNodeStatus(BaseModel):
    """One member of the broker cluster as reported by the admin API."""

    node: str
    node_status: str = ""
    otp_release: str = ""
    version: str = ""
    uptime: str = ""
    connections: int = 0
    role: str = ""


class ClusterStatus(BaseModel):
    """Observed state written back by the reconcile loop.

    ``nodes`` is None until the first successful node listing.
    """

    nodes: list[BrokerNodeStatus] | None = None


class ClusterInstance(BaseModel):
    """A managed broker cluster.

    Read-only from broker-bridge's point of view: the reconcile loop builds
    it from the declarative resource and hands it in.
    """

    name: str = Field(..., min_length=1)
    namespace: str = Field(..., min_length=1)
    image: str = ""
    flavor: DeploymentFlavor = DeploymentFlavor.OPEN_SOURCE
    labels: dict[str, str] = Field(default_factory=dict)
    blue_green_update: BlueGreenUpdate | None = None
    status: ClusterStatus = Field(default_factory=ClusterStatus)

    @property
    def selector_labels(self) -> dict[str, str]:
        """Labels carried by every StatefulSet and Pod of this instance."""
        return self.labels or {
            "apps.emqx.io/instance": self.name,
            "apps.emqx.io/managed-by": "emqx-operator",
        }

    @property
    def selector(self) -> str:
        return ",".join(f"{k}={v}" for k, v in sorted(self.selector_labels.items()))

    @property
    def headless_service_name(self) -> str:
        return f"{self.name}-headless"

    @property
    def nodes_observed(self) -> bool:
        return bool(self.status.nodes)

    @property
    def evacuation_strategy(self) -> EvacuationStrategy | None:
        if self.blue_green_update is None:
            return None
        return self.blue_green_update.evacuation_strategy

    @property
    def supports_evacuation(self) -> bool:
        return (
            self.flavor in BLUE_GREEN_FLAVORS
            and self.evacuation_strategy is not None
        )


# --- Pod Topology ---


class PodGroup(BaseModel):
    """One generation of the broker pod template (a StatefulSet)."""

    uid: str
    name: str
    created_at: datetime
    replicas: int = 0


class ContainerStatus(BaseModel):
    name: str
    ready: bool = False


class Pod(BaseModel):
    """A broker pod and the readiness of its containers."""

    name: str
    namespace: str
    ip: str = ""
    group_uid: str = ""
    containers: list[ContainerStatus] = Field(default_factory=list)

    def is_ready(self, container_name: str) -> bool:
        """True if the named container exists and reports ready."""
        return any(c.name == container_name and c.ready for c in self.containers)


# --- Listeners ---


class ListenerConfig(BaseModel):
    """A listener entry as reported by one broker node.

    ``protocol`` may be compound, e.g. ``mqtt:wss:8084`` or ``mqtt:tcp``.
    """

    protocol: str
    listen_on: str


class NodeListeners(BaseModel):
    node: str = ""
    listeners: list[ListenerConfig] = Field(default_factory=list)


class PortSpec(BaseModel):
    """An externally exposable port derived from a listener."""

    name: str
    protocol: Transport
    port: int
    target_port: int


# --- Evacuation ---


class EvacuationStats(BaseModel):
    initial_connected: int | None = None
    current_connected: int | None = None
    initial_sessions: int | None = None
    current_sessions: int | None = None


class EvacuationSession(BaseModel):
    """An in-flight evacuation as reported by the load-rebalance API."""

    node: str
    state: str = ""
    session_recipients: list[str] = Field(default_factory=list)
    session_goal: int = 0
    session_eviction_rate: int = 0
    connection_goal: int = 0
    connection_eviction_rate: int = 0
    stats: EvacuationStats = Field(default_factory=EvacuationStats)


# --- Plugins ---


class PluginInfo(BaseModel):
    name: str
    description: str = ""
    active: bool = False
    type: str = ""


class NodePlugins(BaseModel):
    """Plugins known to one broker node."""

    node: str
    plugins: list[PluginInfo] = Field(default_factory=list)


# --- Credential ---


class Credential(BaseModel):
    """The bootstrap admin username/password pair.

    Immutable once resolved. The password is excluded from ``repr`` so it
    cannot leak through logs or tracebacks.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(..., repr=False)
