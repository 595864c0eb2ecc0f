"""broker-bridge: admin API bridge between a broker operator and its pods."""

__version__ = "0.1.0"

# Optional backend imports (don't crash if optional deps are missing)
import contextlib

from broker_bridge.client import (
    AdminContext,
    AdminResponse,
    ControlPlaneClient,
    decode_field,
    decode_list_field,
)
from broker_bridge.cluster import ClusterStateAggregator
from broker_bridge.config import BridgeConfig, find_config, load_config
from broker_bridge.credentials.resolver import CredentialResolver
from broker_bridge.credentials.store import SecretStore, SecretStoreError, StaticSecretStore
from broker_bridge.errors import (
    BridgeError,
    CredentialError,
    CredentialMalformed,
    CredentialNotFound,
    DecodeFailed,
    PodNotReady,
    PodSetEmpty,
    RequestFailed,
    TopologyError,
    TransportError,
    UnsupportedOperation,
)
from broker_bridge.evacuation import EvacuationOrchestrator
from broker_bridge.models import (
    BlueGreenUpdate,
    BrokerNodeStatus,
    ClusterInstance,
    ClusterStatus,
    ContainerStatus,
    Credential,
    DeploymentFlavor,
    EvacuationSession,
    EvacuationStrategy,
    ListenerConfig,
    NodeListeners,
    NodePlugins,
    PluginAction,
    PluginInfo,
    Pod,
    PodGroup,
    PortSpec,
    Transport,
)
from broker_bridge.plugins import PluginManager
from broker_bridge.topology.resolver import PodGroupResolver, in_cluster_groups, node_name
from broker_bridge.topology.static import StaticPodGroupResolver

with contextlib.suppress(ImportError):
    from broker_bridge.topology.k8s import KubernetesPodGroupResolver

with contextlib.suppress(ImportError):
    from broker_bridge.credentials.k8s_store import KubernetesSecretStore

__all__ = [
    "AdminContext",
    "AdminResponse",
    "BlueGreenUpdate",
    "BridgeConfig",
    "BridgeError",
    "BrokerNodeStatus",
    "ClusterInstance",
    "ClusterStateAggregator",
    "ClusterStatus",
    "ContainerStatus",
    "ControlPlaneClient",
    "Credential",
    "CredentialError",
    "CredentialMalformed",
    "CredentialNotFound",
    "CredentialResolver",
    "decode_field",
    "decode_list_field",
    "DecodeFailed",
    "DeploymentFlavor",
    "EvacuationOrchestrator",
    "EvacuationSession",
    "EvacuationStrategy",
    "find_config",
    "in_cluster_groups",
    "KubernetesPodGroupResolver",
    "KubernetesSecretStore",
    "ListenerConfig",
    "load_config",
    "node_name",
    "NodeListeners",
    "NodePlugins",
    "PluginAction",
    "PluginInfo",
    "PluginManager",
    "Pod",
    "PodGroup",
    "PodGroupResolver",
    "PodNotReady",
    "PodSetEmpty",
    "PortSpec",
    "RequestFailed",
    "SecretStore",
    "SecretStoreError",
    "StaticPodGroupResolver",
    "StaticSecretStore",
    "TopologyError",
    "Transport",
    "TransportError",
    "UnsupportedOperation",
    "__version__",
]
