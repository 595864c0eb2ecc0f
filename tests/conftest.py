"""Shared fixtures: a two-generation broker instance and its topology.

The old generation (emqx-aaa) has both pods ready; the new generation
(emqx-bbb) has its first pod not ready yet. One pod of each generation
is a member of the broker cluster.
"""

from __future__ import annotations

import pytest

from broker_bridge.client import AdminContext, ControlPlaneClient
from broker_bridge.models import ClusterInstance, Credential
from broker_bridge.topology.static import StaticPodGroupResolver
from tests.factories import NEW_GROUP, OLD_GROUP, make_instance, make_pod


@pytest.fixture()
def instance() -> ClusterInstance:
    return make_instance()


@pytest.fixture()
def topology(instance: ClusterInstance) -> StaticPodGroupResolver:
    resolver = StaticPodGroupResolver()
    resolver.register(
        instance,
        groups=[NEW_GROUP, OLD_GROUP],
        pods=[
            make_pod("emqx-aaa-0", OLD_GROUP.uid, "10.0.0.1"),
            make_pod("emqx-aaa-1", OLD_GROUP.uid, "10.0.0.2"),
            make_pod("emqx-bbb-0", NEW_GROUP.uid, "10.0.1.1", ready=False),
            make_pod("emqx-bbb-1", NEW_GROUP.uid, "10.0.1.2"),
        ],
    )
    return resolver


@pytest.fixture()
def ctx(topology: StaticPodGroupResolver) -> AdminContext:
    return AdminContext(
        credential=Credential(username="emqx_operator_controller", password="s3cr:et"),
        topology=topology,
    )


@pytest.fixture()
def client() -> ControlPlaneClient:
    return ControlPlaneClient()
