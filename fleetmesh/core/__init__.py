"""
Core package bootstrap for the fleetmesh runtime.

Re-exports the primary classes so callers can simply do::

    from fleetmesh.core import FleetManager
"""

from __future__ import annotations

from fleetmesh.core.cloud_provider import FleetCloudProvider, build_cloud_provider
from fleetmesh.core.manager import FleetManager
from fleetmesh.core.node_group import NodeGroup, NodeGroupSpec, parse_node_group_spec

__all__ = [
    "FleetCloudProvider",
    "FleetManager",
    "NodeGroup",
    "NodeGroupSpec",
    "build_cloud_provider",
    "parse_node_group_spec",
]
