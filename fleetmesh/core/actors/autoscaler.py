"""
Autoscaler actor.

Owns the cloud provider (and therefore every fleet manager) of one process.
Ray runs the methods of an actor one at a time, so managers never see two
operations concurrently.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import ray

from .config import ActorConfig
from fleetmesh.core.clients.base import FleetClient
from fleetmesh.core.cloud_provider import FleetCloudProvider, build_cloud_provider
from fleetmesh.core.node_group import NodeGroup
from fleetmesh.core.resolver import NodeIdentityResolver
from fleetmesh.core.utils import configure_runtime_logging

logger = logging.getLogger(__name__)


@ray.remote
class AutoscalerActor:
    """Reconciles and scales fleet-backed node groups."""

    def __init__(
        self,
        config: ActorConfig,
        node_group_specs: List[str],
        client_factory: Callable[[str], FleetClient],
        resolver: Optional[NodeIdentityResolver] = None,
    ):
        configure_runtime_logging()
        self.config = config
        self.node_group_specs = list(node_group_specs)
        self.client_factory = client_factory
        self.resolver = resolver
        self.provider: Optional[FleetCloudProvider] = None
        self.cycles = 0
        logger.debug("AutoscalerActor[%s] initialised", config.name)

    def _group(self, group_id: str) -> Optional[NodeGroup]:
        if self.provider is None:
            return None
        return self.provider.get_node_group(group_id)

    def bootstrap(self) -> dict:
        """Initialise one manager per configured node group."""
        if self.provider is not None:
            return {"success": True, "node_groups": self._describe_groups()}
        try:
            self.provider = build_cloud_provider(
                self.node_group_specs,
                self.client_factory,
                resolver=self.resolver,
            )
        except Exception as exc:
            logger.exception("AutoscalerActor[%s] bootstrap failed", self.config.name)
            return {"success": False, "error": str(exc)}
        logger.info(
            "AutoscalerActor[%s] bootstrapped %d node groups",
            self.config.name,
            len(self.provider.node_groups()),
        )
        return {"success": True, "node_groups": self._describe_groups()}

    def _describe_groups(self) -> list[dict]:
        if self.provider is None:
            return []
        return [group.to_dict() for group in self.provider.node_groups()]

    def reconcile(self) -> dict:
        """Run one reconciliation cycle over all node groups."""
        if self.provider is None:
            return {"success": False, "error": "Autoscaler not bootstrapped"}
        failed = self.provider.refresh()
        self.cycles += 1
        sizes = {group.id(): group.target_size() for group in self.provider.node_groups()}
        logger.debug("Autoscaler reconcile cycle %d executed: %s", self.cycles, sizes)
        return {"success": not failed, "failed": failed, "sizes": sizes, "cycle": self.cycles}

    def increase_size(self, group_id: str, delta: int) -> dict:
        group = self._group(group_id)
        if group is None:
            return {"success": False, "error": f"Node group '{group_id}' not found"}
        try:
            group.increase_size(delta)
        except Exception as exc:
            logger.warning("Node group %s increase_size(%s) failed: %s", group_id, delta, exc)
            return {"success": False, "error": str(exc), "node_group": group.to_dict()}
        return {"success": True, "node_group": group.to_dict()}

    def delete_nodes(self, group_id: str, hostnames: List[str]) -> dict:
        group = self._group(group_id)
        if group is None:
            return {"success": False, "error": f"Node group '{group_id}' not found"}
        try:
            group.delete_nodes(hostnames)
        except Exception as exc:
            logger.warning("Node group %s delete_nodes(%s) failed: %s", group_id, hostnames, exc)
            return {"success": False, "error": str(exc), "node_group": group.to_dict()}
        return {"success": True, "node_group": group.to_dict()}

    def node_group_for_node(self, node_id: str) -> dict:
        if self.provider is None:
            return {"success": False, "error": "Autoscaler not bootstrapped"}
        group = self.provider.node_group_for_node(node_id)
        if group is None:
            return {"success": False, "error": f"No node group owns node '{node_id}'"}
        return {"success": True, "node_group": group.id()}

    def list_node_groups(self) -> dict:
        return {"success": True, "node_groups": self._describe_groups()}

    def snapshot_state(self) -> dict:
        """Expose current state for inspection/testing."""
        managers = []
        if self.provider is not None:
            managers = [group.manager.snapshot_state() for group in self.provider.node_groups()]
        return {
            "name": self.config.name,
            "cycles": self.cycles,
            "node_groups": self._describe_groups(),
            "managers": managers,
        }
