"""Kubernetes secret store: reads ``Secret`` objects via the k8s API.

Requires: ``pip install broker-bridge[k8s]``
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

from broker_bridge.credentials.store import SecretStoreError
from broker_bridge.kube import (
    api_instance,
    build_api_client,
    check_kubernetes_available,
    describe_api_error,
)


class KubernetesSecretStore:
    """Secret store that uses the kubernetes Python client.

    ``V1Secret.data`` values arrive base64-encoded and are decoded to
    UTF-8 text; ``string_data`` is not consulted (the API server never
    returns it).
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

    def read_secret(self, namespace: str, name: str) -> dict[str, str]:
        try:
            api_client = self._api_client or build_api_client(
                kubeconfig=self._kubeconfig,
                context=self._context,
                in_cluster=self._in_cluster,
            )
            core = api_instance("CoreV1Api", api_client)
            secret = core.read_namespaced_secret(name=name, namespace=namespace)
        except Exception as exc:
            raise SecretStoreError(
                f"Get secret {namespace}/{name} failed: {describe_api_error(exc)}"
            ) from exc

        decoded: dict[str, str] = {}
        for key, value in (secret.data or {}).items():
            try:
                decoded[key] = base64.b64decode(value).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise SecretStoreError(
                    f"Secret {namespace}/{name} key {key!r} is not valid "
                    f"base64-encoded UTF-8"
                ) from exc
        return decoded
