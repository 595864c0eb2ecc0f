"""Builders for test topology, instances, and mocked HTTP responses."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

from broker_bridge.models import (
    BlueGreenUpdate,
    BrokerNodeStatus,
    ClusterInstance,
    ClusterStatus,
    ContainerStatus,
    DeploymentFlavor,
    EvacuationStrategy,
    Pod,
    PodGroup,
)

OLD_GROUP = PodGroup(
    uid="uid-old", name="emqx-aaa", created_at=datetime(2026, 1, 1, tzinfo=UTC), replicas=2,
)
NEW_GROUP = PodGroup(
    uid="uid-new", name="emqx-bbb", created_at=datetime(2026, 2, 1, tzinfo=UTC), replicas=2,
)


def make_pod(
    name: str,
    group_uid: str,
    ip: str,
    ready: bool = True,
    container: str = "emqx",
) -> Pod:
    return Pod(
        name=name,
        namespace="default",
        ip=ip,
        group_uid=group_uid,
        containers=[ContainerStatus(name=container, ready=ready)],
    )


def node_of(pod_name: str) -> str:
    return f"emqx@{pod_name}.emqx-headless.default.svc.cluster.local"


def make_instance(**overrides: Any) -> ClusterInstance:
    defaults: dict[str, Any] = {
        "name": "emqx",
        "namespace": "default",
        "image": "emqx/emqx-ee:4.4.19",
        "flavor": DeploymentFlavor.ENTERPRISE,
        "blue_green_update": BlueGreenUpdate(
            evacuation_strategy=EvacuationStrategy(
                conn_evict_rate=10, sess_evict_rate=20, wait_takeover=0,
            ),
        ),
        "status": ClusterStatus(nodes=[
            BrokerNodeStatus(node=node_of("emqx-aaa-0"), node_status="Running"),
            BrokerNodeStatus(node=node_of("emqx-bbb-0"), node_status="Running"),
        ]),
    }
    defaults.update(overrides)
    return ClusterInstance(**defaults)


def http_response(status: int = 200, payload: Any = None, reason: str = "OK") -> MagicMock:
    """A urlopen() result usable as a context manager."""
    resp = MagicMock()
    resp.status = status
    resp.reason = reason
    resp.read.return_value = b"" if payload is None else json.dumps(payload).encode("utf-8")
    resp.__enter__ = lambda s: s
    resp.__exit__ = MagicMock(return_value=False)
    return resp


def sent_request(mock_urlopen: MagicMock) -> Any:
    """The urllib Request passed to the single urlopen() call."""
    assert mock_urlopen.call_count == 1
    return mock_urlopen.call_args.args[0]


def sent_json(mock_urlopen: MagicMock) -> Any:
    return json.loads(sent_request(mock_urlopen).data.decode("utf-8"))
