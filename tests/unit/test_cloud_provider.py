"""
Unit tests for the cloud provider facade and its builder.
"""

from __future__ import annotations

import pytest

from fleetmesh.core.cloud_provider import GPU_LABEL, FleetCloudProvider, build_cloud_provider
from fleetmesh.core.clients import InMemoryFleetClient


@pytest.fixture
def fleets():
    """One in-memory fleet per model, two ready workers in ``default``."""
    clients = {"default": InMemoryFleetClient("default"), "edge": InMemoryFleetClient("edge")}
    for _ in range(2):
        clients["default"].inject_unit("worker")
    clients["edge"].inject_unit("gateway")
    return clients


@pytest.fixture
def provider(fleets):
    return build_cloud_provider(["1:5:default:worker", "0:3:edge:gateway"], fleets.__getitem__)


def test_build_cloud_provider(provider):
    groups = provider.node_groups()
    assert [group.id() for group in groups] == ["juju-default-worker", "juju-edge-gateway"]
    assert [group.target_size() for group in groups] == [2, 1]
    assert groups[0].manager.model == "default"
    assert groups[1].manager.application == "gateway"


def test_build_cloud_provider_rejects_duplicates(fleets):
    with pytest.raises(ValueError, match="duplicate"):
        build_cloud_provider(["1:5:default:worker", "0:2:default:worker"], fleets.__getitem__)


def test_build_cloud_provider_fails_fast_on_init_error(fleets):
    fleets["edge"].fail_next("status", RuntimeError("controller unreachable"))
    with pytest.raises(RuntimeError, match="controller unreachable"):
        build_cloud_provider(["1:5:default:worker", "0:3:edge:gateway"], fleets.__getitem__)


def test_node_group_for_node(provider):
    assert provider.node_group_for_node("default-1").id() == "juju-default-worker"
    assert provider.node_group_for_node("edge-0").id() == "juju-edge-gateway"
    assert provider.node_group_for_node("unknown") is None
    assert provider.get_node_group("juju-edge-gateway") is not None
    assert provider.get_node_group("juju-missing") is None


def test_static_provider_surface():
    provider = FleetCloudProvider([], resource_limiter={"cores": (0, 64)})
    assert provider.name() == "juju"
    assert provider.gpu_label() == GPU_LABEL
    assert provider.get_available_gpu_types() == {}
    assert provider.get_available_machine_types() == []
    assert provider.get_resource_limiter() == {"cores": (0, 64)}
    assert provider.cleanup() is None
    with pytest.raises(NotImplementedError):
        provider.pricing()
    with pytest.raises(NotImplementedError):
        provider.new_node_group("m5.large", labels={})


def test_refresh_updates_targets_and_isolates_failures(provider, fleets):
    fleets["default"].inject_unit("worker")
    fleets["edge"].fail_next("status", RuntimeError("edge down"))

    failed = provider.refresh()

    assert failed == ["juju-edge-gateway"]
    default_group, edge_group = provider.node_groups()
    assert default_group.target_size() == 3
    assert edge_group.target_size() == 1

    assert provider.refresh() == []
