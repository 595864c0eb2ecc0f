"""Config file loading and auto-discovery for broker-bridge.

Searches for ``broker-bridge.yaml`` in the current directory and parent
directories, parses it, and resolves relative paths against the config
file's location.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

CONFIG_FILENAME = "broker-bridge.yaml"


@dataclass(frozen=True)
class BridgeConfig:
    """Parsed broker-bridge configuration."""

    config_path: Path | None = None
    admin_port: int = 8081
    api_prefix: str = "api/v4"
    timeout: float = 10.0
    bootstrap_username: str = "emqx_operator_controller"
    secret_suffix: str = "-bootstrap-user"
    secret_key: str = "bootstrap_user"
    container_name: str = "emqx"
    node_prefix: str = "emqx"
    kubeconfig: str | None = None
    kube_context: str | None = None
    in_cluster: bool = False


_KEYS = frozenset(f.name for f in fields(BridgeConfig)) - {"config_path"}


def find_config(start: Path | None = None) -> Path | None:
    """Walk from *start* (default ``cwd()``) up to the filesystem root.

    Returns the first ``broker-bridge.yaml`` found, or ``None``.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
) -> BridgeConfig:
    """Load a broker-bridge config file.

    Resolution order:

    1. Explicit *path* (error if it doesn't exist).
    2. Auto-discover by walking parent directories.
    3. Return a default ``BridgeConfig``.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).resolve()
        if not config_path.is_file():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
    elif auto_discover:
        config_path = find_config()

    if config_path is None:
        return BridgeConfig()

    return _parse_config(config_path)


def _parse_config(config_path: Path) -> BridgeConfig:
    """Read and parse a YAML config file, resolving relative paths."""
    text = config_path.read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        raise ValueError(msg)

    unknown = sorted(set(data) - _KEYS)
    if unknown:
        msg = f"Unknown config keys in {config_path}: {', '.join(unknown)}"
        raise ValueError(msg)

    kubeconfig = data.get("kubeconfig")
    if kubeconfig is not None:
        data["kubeconfig"] = str((config_path.parent / kubeconfig).resolve())

    return BridgeConfig(config_path=config_path, **data)
