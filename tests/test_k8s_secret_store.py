"""Tests for KubernetesSecretStore.

All kubernetes client calls are mocked; no real cluster needed.
"""

from __future__ import annotations

import base64
import sys
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from broker_bridge.credentials.k8s_store import KubernetesSecretStore
from broker_bridge.credentials.resolver import CredentialResolver
from broker_bridge.credentials.store import SecretStore, SecretStoreError
from broker_bridge.errors import CredentialNotFound
from broker_bridge.models import ClusterInstance


@contextmanager
def _mock_kubernetes_modules():
    mock_k8s = MagicMock()
    modules = {
        "kubernetes": mock_k8s,
        "kubernetes.client": mock_k8s.client,
        "kubernetes.config": mock_k8s.config,
    }
    with patch.dict(sys.modules, modules):
        yield mock_k8s.client


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestKubernetesSecretStore:
    def test_satisfies_protocol(self):
        with _mock_kubernetes_modules():
            assert isinstance(KubernetesSecretStore(api_client=MagicMock()), SecretStore)

    def test_decodes_data(self):
        with _mock_kubernetes_modules() as mock_client:
            core = mock_client.CoreV1Api.return_value
            core.read_namespaced_secret.return_value.data = {
                "bootstrap_user": _b64("emqx_operator_controller:pa:ss"),
            }
            store = KubernetesSecretStore(api_client=MagicMock())
            data = store.read_secret("default", "emqx-bootstrap-user")

        assert data == {"bootstrap_user": "emqx_operator_controller:pa:ss"}
        core.read_namespaced_secret.assert_called_once_with(
            name="emqx-bootstrap-user", namespace="default",
        )

    def test_empty_secret(self):
        with _mock_kubernetes_modules() as mock_client:
            mock_client.CoreV1Api.return_value.read_namespaced_secret.return_value.data = None
            store = KubernetesSecretStore(api_client=MagicMock())
            assert store.read_secret("default", "x") == {}

    def test_not_found(self):
        with _mock_kubernetes_modules() as mock_client:
            exc = type("ApiException", (Exception,), {"status": 404, "reason": "Not Found"})()
            mock_client.CoreV1Api.return_value.read_namespaced_secret.side_effect = exc
            store = KubernetesSecretStore(api_client=MagicMock())
            with pytest.raises(SecretStoreError, match="404"):
                store.read_secret("default", "x")

    def test_invalid_utf8(self):
        with _mock_kubernetes_modules() as mock_client:
            mock_client.CoreV1Api.return_value.read_namespaced_secret.return_value.data = {
                "bootstrap_user": base64.b64encode(b"\xff\xfe").decode("ascii"),
            }
            store = KubernetesSecretStore(api_client=MagicMock())
            with pytest.raises(SecretStoreError, match="bootstrap_user"):
                store.read_secret("default", "x")

    def test_resolver_reports_not_found(self):
        with _mock_kubernetes_modules() as mock_client:
            mock_client.CoreV1Api.return_value.read_namespaced_secret.side_effect = OSError("x")
            resolver = CredentialResolver(KubernetesSecretStore(api_client=MagicMock()))
            with pytest.raises(CredentialNotFound):
                resolver.resolve(ClusterInstance(name="emqx", namespace="default"))
