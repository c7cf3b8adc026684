"""
Client-facing FleetAutoscaler façade.

The façade proxies all operations to the autoscaler actor while exposing a
synchronous API, and drives the fixed-period reconcile loop.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Optional

import ray

from fleetmesh.core.actors.autoscaler import AutoscalerActor
from fleetmesh.core.actors.config import ActorConfig
from fleetmesh.core.clients.base import FleetClient
from fleetmesh.core.resolver import NodeIdentityResolver

logger = logging.getLogger(__name__)


class FleetAutoscaler:
    """Thin wrapper around the AutoscalerActor."""

    def __init__(
        self,
        node_group_specs: List[str],
        client_factory: Callable[[str], FleetClient],
        *,
        name: str = "fleetmesh-autoscaler",
        reconcile_interval: float = 10.0,
        resolver: Optional[NodeIdentityResolver] = None,
        max_restarts: int = 0,
    ):
        """
        Create the autoscaler actor and bootstrap every node group.

        Args:
            node_group_specs: ``<min>:<max>:<model>:<application>`` strings.
            client_factory: Builds the fleet client for a model name.
            name: Logical name for the actor.
            reconcile_interval: Seconds between reconcile cycles in :meth:`run`.
            resolver: Node identity resolver; hostname based when omitted.
            max_restarts: Passed to Ray to restart the actor on failure.

        Raises:
            RuntimeError: If bootstrapping any node group fails.
        """
        if reconcile_interval <= 0:
            raise ValueError("reconcile_interval must be positive")
        self.name = name
        self.config = ActorConfig(name=name, reconcile_interval=reconcile_interval, max_restarts=max_restarts)
        self._actor = AutoscalerActor.options(max_restarts=max_restarts).remote(
            self.config, list(node_group_specs), client_factory, resolver
        )
        result = ray.get(self._actor.bootstrap.remote())
        if not result.get("success"):
            ray.kill(self._actor, no_restart=True)
            self._actor = None
            raise RuntimeError(f"Autoscaler bootstrap failed: {result.get('error')}")
        logger.info("FleetAutoscaler[%s] started", name)

    def _ensure_actor(self) -> ray.actor.ActorHandle:
        if self._actor is None:
            raise RuntimeError("FleetAutoscaler has been shut down")
        return self._actor

    def reconcile(self) -> Any:
        return ray.get(self._ensure_actor().reconcile.remote())

    def increase_size(self, group_id: str, delta: int) -> Any:
        return ray.get(self._ensure_actor().increase_size.remote(group_id, delta))

    def delete_nodes(self, group_id: str, hostnames: List[str]) -> Any:
        return ray.get(self._ensure_actor().delete_nodes.remote(group_id, list(hostnames)))

    def node_group_for_node(self, node_id: str) -> Any:
        return ray.get(self._ensure_actor().node_group_for_node.remote(node_id))

    def list_node_groups(self) -> Any:
        return ray.get(self._ensure_actor().list_node_groups.remote())

    def snapshot_state(self) -> Any:
        return ray.get(self._ensure_actor().snapshot_state.remote())

    def run(self, max_cycles: Optional[int] = None, stop_event: Optional[threading.Event] = None) -> int:
        """
        Reconcile every ``reconcile_interval`` seconds until ``max_cycles`` is
        reached or ``stop_event`` is set. Failed cycles are logged and the
        next one simply runs on schedule. Returns the number of cycles run.
        """
        stop_event = stop_event or threading.Event()
        interval = self.config.reconcile_interval
        cycles = 0
        while not stop_event.is_set():
            started = time.monotonic()
            result = self.reconcile()
            cycles += 1
            if not result.get("success"):
                logger.warning("reconcile cycle %d incomplete: %s", cycles, result.get("failed") or result.get("error"))
            if max_cycles is not None and cycles >= max_cycles:
                break
            stop_event.wait(max(0.0, interval - (time.monotonic() - started)))
        return cycles

    def shutdown(self) -> None:
        if self._actor is not None:
            ray.kill(self._actor, no_restart=True)
            self._actor = None
            logger.info("FleetAutoscaler[%s] stopped", self.name)
