"""Secret store protocol and error types.

Defines the interface that secret backends must satisfy.
Built-in backends: StaticSecretStore (development/testing) and
KubernetesSecretStore (reads ``Secret`` objects via the k8s API).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class SecretStoreError(Exception):
    """Raised when a secret store cannot read a secret."""


@runtime_checkable
class SecretStore(Protocol):
    """Protocol for secret store backends.

    Any object with a ``read_secret()`` method satisfies this protocol.
    """

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        """Return the decoded text values of a secret, keyed by data key.

        Raises:
            SecretStoreError: If the secret does not exist or cannot be read.
        """
        ...


class StaticSecretStore:
    """Secret store backed by a static mapping.

    Keys are ``"<namespace>/<name>"``, values map data keys to plain
    text. Use for local development and tests.
    """

    def __init__(self, secrets: dict[str, dict[str, str]] | None = None) -> None:
        self._secrets = dict(secrets or {})

    def put(self, namespace: str, name: str, data: dict[str, str]) -> None:
        self._secrets[f"{namespace}/{name}"] = dict(data)

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        data = self._secrets.get(f"{namespace}/{name}")
        if data is None:
            raise SecretStoreError(f"Secret not found: {namespace}/{name}")
        return dict(data)
