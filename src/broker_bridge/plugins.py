"""PluginManager: load, reload, and unload broker plugins per node."""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from broker_bridge.client import (
    PLUGINS_PATH,
    AdminContext,
    ControlPlaneClient,
    decode_list_field,
    plugin_action_path,
)
from broker_bridge.errors import DecodeFailed
from broker_bridge.models import ClusterInstance, NodePlugins, PluginAction

logger = logging.getLogger(__name__)

_NODE_PLUGINS = TypeAdapter(list[NodePlugins])


class PluginManager:
    def __init__(self, client: ControlPlaneClient) -> None:
        self._client = client

    def set_plugin_state(
        self,
        ctx: AdminContext,
        instance: ClusterInstance,
        node: str,
        plugin: str,
        action: PluginAction | str,
    ) -> None:
        """Apply *action* to *plugin* on *node*.

        Raises:
            ValueError: If *action* is not a known plugin action.
            RequestFailed: On a non-2xx answer.
        """
        action = PluginAction(action)
        response = self._client.call(
            ctx, instance, "PUT", plugin_action_path(node, plugin, action.value),
        )
        response.raise_for_status()
        logger.info("Plugin %s on %s: %s", plugin, node, action.value)

    def list_plugins(
        self, ctx: AdminContext, instance: ClusterInstance,
    ) -> list[NodePlugins]:
        """Plugins of every node.

        Raises:
            RequestFailed: On a non-2xx answer.
            DecodeFailed: If the ``data`` field cannot be decoded.
        """
        response = self._client.call(ctx, instance, "GET", PLUGINS_PATH)
        response.raise_for_status()
        data = decode_list_field(response, "data")
        try:
            return _NODE_PLUGINS.validate_python(data)
        except ValidationError as exc:
            raise DecodeFailed(f"failed to unmarshal plugins: {exc}") from exc
