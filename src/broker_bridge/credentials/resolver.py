"""Credential resolver: fetches the bootstrap admin credential.

The resolver:
1. Derives the secret name from the instance (``<name>-bootstrap-user``)
2. Reads the secret through a SecretStore
3. Parses the ``bootstrap_user`` blob of ``username:password`` lines
4. Returns the Credential of the bootstrap user

Only the bootstrap user is accepted; other entries in the blob are
ignored.
"""

from __future__ import annotations

import logging

from broker_bridge.config import BridgeConfig
from broker_bridge.credentials.store import SecretStore, SecretStoreError
from broker_bridge.errors import CredentialMalformed, CredentialNotFound
from broker_bridge.models import ClusterInstance, Credential

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Resolves the bootstrap credential of a cluster instance.

    Stateless: all context comes from the instance, config, and store.
    """

    def __init__(
        self,
        store: SecretStore,
        config: BridgeConfig | None = None,
    ) -> None:
        self._store = store
        self._config = config or BridgeConfig()

    def secret_name(self, instance: ClusterInstance) -> str:
        return f"{instance.name}{self._config.secret_suffix}"

    def resolve(self, instance: ClusterInstance) -> Credential:
        """Resolve the bootstrap credential for an instance.

        Raises:
            CredentialNotFound: If the secret cannot be read.
            CredentialMalformed: If the secret has no entry for the
                bootstrap user.
        """
        name = self.secret_name(instance)
        try:
            data = self._store.read_secret(instance.namespace, name)
        except SecretStoreError as exc:
            raise CredentialNotFound(f"get secret failed: {exc}") from exc

        blob = data.get(self._config.secret_key)
        if blob is not None:
            credential = parse_bootstrap_users(blob, self._config.bootstrap_username)
            if credential is not None:
                logger.debug(
                    "Resolved bootstrap user %s from secret %s/%s",
                    credential.username, instance.namespace, name,
                )
                return credential

        raise CredentialMalformed(
            f"the secret {instance.namespace}/{name} does not contain "
            f"the {self._config.secret_key}"
        )


def parse_bootstrap_users(blob: str, username: str) -> Credential | None:
    """Find *username* in a newline-separated list of ``user:password`` lines.

    The first line whose key equals *username* wins. The split happens at
    the first colon, so passwords may contain colons. Returns None when no
    line matches.
    """
    for line in blob.split("\n"):
        key, sep, password = line.partition(":")
        if sep and key and key == username:
            return Credential(username=key, password=password)
    return None
