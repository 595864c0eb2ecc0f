"""Bootstrap credential lookup.

Stores: StaticSecretStore, KubernetesSecretStore.
"""

from broker_bridge.credentials.resolver import CredentialResolver, parse_bootstrap_users
from broker_bridge.credentials.store import SecretStore, SecretStoreError, StaticSecretStore

__all__ = [
    "CredentialResolver",
    "SecretStore",
    "SecretStoreError",
    "StaticSecretStore",
    "parse_bootstrap_users",
]
