"""Kubernetes API client construction shared by the k8s-backed resolvers.

Uses the official ``kubernetes`` Python client library. Supports a
kubeconfig file (optionally with a context), in-cluster config, or a
pre-built ``ApiClient`` handed in by the caller.

Requires: ``pip install broker-bridge[k8s]``
"""

from __future__ import annotations

from typing import Any


def check_kubernetes_available() -> None:
    """Raise ImportError with helpful message if kubernetes is not installed."""
    try:
        import kubernetes  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'kubernetes' package is required for the Kubernetes backends. "
            "Install it with: pip install broker-bridge[k8s]"
        ) from None


def build_api_client(
    kubeconfig: str | None = None,
    context: str | None = None,
    in_cluster: bool = False,
) -> Any:
    """Build a kubernetes ApiClient from in-cluster or kubeconfig settings."""
    from kubernetes import client, config

    if in_cluster:
        config.load_incluster_config()
    else:
        kwargs: dict[str, Any] = {}
        if kubeconfig:
            kwargs["config_file"] = kubeconfig
        if context:
            kwargs["context"] = context
        config.load_kube_config(**kwargs)
    return client.ApiClient()


def api_instance(api_class_name: str, api_client: Any) -> Any:
    """Instantiate the named API class (``CoreV1Api``, ``AppsV1Api``...)."""
    from kubernetes import client

    api_cls = getattr(client, api_class_name)
    return api_cls(api_client)


def describe_api_error(exc: Exception) -> str:
    """Short description of a kubernetes client failure."""
    # Detect kubernetes ApiException by class name to avoid import
    if type(exc).__name__ == "ApiException":
        return f"K8s API error ({exc.status}): {exc.reason}"  # type: ignore[attr-defined]
    return f"K8s client error: {exc}"
