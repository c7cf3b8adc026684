"""
Cloud provider facade over a fixed set of fleet-backed node groups.

Groups are created once at start-up from ``<min>:<max>:<model>:<application>``
specs; there is no dynamic group creation, pricing or GPU awareness.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from fleetmesh.core.clients.base import FleetClient
from fleetmesh.core.manager import FleetManager
from fleetmesh.core.node_group import NodeGroup, parse_node_group_spec
from fleetmesh.core.resolver import NodeIdentityResolver

logger = logging.getLogger(__name__)

PROVIDER_NAME = "juju"
GPU_LABEL = "juju/gpu-node"


class FleetCloudProvider:
    def __init__(self, node_groups: Iterable[NodeGroup], resource_limiter: Optional[Any] = None):
        self._node_groups: List[NodeGroup] = list(node_groups)
        self._resource_limiter = resource_limiter

    def name(self) -> str:
        return PROVIDER_NAME

    def node_groups(self) -> List[NodeGroup]:
        return list(self._node_groups)

    def get_node_group(self, group_id: str) -> Optional[NodeGroup]:
        for group in self._node_groups:
            if group.id() == group_id:
                return group
        return None

    def node_group_for_node(self, node_id: str) -> Optional[NodeGroup]:
        """Return the group owning ``node_id``, ``None`` if no group does."""
        for group in self._node_groups:
            for instance in group.nodes():
                if instance.id == node_id:
                    return group
        return None

    def pricing(self) -> Any:
        raise NotImplementedError("pricing is not supported by the juju provider")

    def get_available_machine_types(self) -> List[str]:
        return []

    def new_node_group(self, *args: Any, **kwargs: Any) -> NodeGroup:
        raise NotImplementedError("node groups cannot be created at runtime")

    def get_resource_limiter(self) -> Optional[Any]:
        return self._resource_limiter

    def gpu_label(self) -> str:
        return GPU_LABEL

    def get_available_gpu_types(self) -> Dict[str, None]:
        return {}

    def cleanup(self) -> None:
        return None

    def refresh(self) -> List[str]:
        """
        Reconcile every group and sync its target to the tracked size.

        A group whose reconcile fails keeps its previous state and target;
        the remaining groups are still refreshed. Returns the failed group ids.
        """
        failed: List[str] = []
        for group in self._node_groups:
            try:
                group.refresh()
            except Exception:
                logger.exception("refreshing node group %s failed", group.id())
                failed.append(group.id())
                continue
            logger.debug("node group %s target updated to %d", group.id(), group.target)
        return failed


def build_cloud_provider(
    specs: Iterable[str],
    client_factory: Callable[[str], FleetClient],
    *,
    resolver: Optional[NodeIdentityResolver] = None,
    resource_limiter: Optional[Any] = None,
) -> FleetCloudProvider:
    """Create one initialised manager and node group per spec string."""
    groups: List[NodeGroup] = []
    for raw in specs:
        spec = parse_node_group_spec(raw)
        if any(group.id() == spec.group_id for group in groups):
            raise ValueError(f"duplicate node group {spec.group_id}")
        manager = FleetManager(client_factory(spec.model), spec.model, spec.application, resolver=resolver)
        manager.init()
        group = NodeGroup(
            spec.group_id,
            spec.min_size,
            spec.max_size,
            manager,
            target=manager.size(),
        )
        groups.append(group)
        logger.info("registered node group %s", group.debug())
    return FleetCloudProvider(groups, resource_limiter=resource_limiter)
