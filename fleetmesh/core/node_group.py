"""
Node group adapter.

Translates the autoscaler's node-group vocabulary (min/max bounds, target
size, delete nodes by name) into :class:`FleetManager` operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from fleetmesh.core.entities.types import Instance, InstanceState
from fleetmesh.core.manager import FleetManager

logger = logging.getLogger(__name__)

PROVIDER_ID_PREFIX = "juju://"


@dataclass(frozen=True)
class NodeGroupSpec:
    min_size: int
    max_size: int
    model: str
    application: str

    @property
    def group_id(self) -> str:
        return f"juju-{self.model}-{self.application}"


def parse_node_group_name(name: str) -> Tuple[str, str]:
    """Split ``<model>:<application>``."""
    parts = name.split(":")
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise ValueError(f"failed to parse node group name: {name}, expected <model>:<application>")
    return parts[0].strip(), parts[1].strip()


def parse_node_group_spec(value: str) -> NodeGroupSpec:
    """Parse ``<min>:<max>:<model>:<application>`` as passed with ``--nodes``."""
    min_raw, sep1, rest = value.partition(":")
    max_raw, sep2, name = rest.partition(":")
    if not sep1 or not sep2:
        raise ValueError(f"failed to parse node group spec: {value}, expected <min>:<max>:<model>:<application>")
    try:
        min_size = int(min_raw)
        max_size = int(max_raw)
    except ValueError as exc:
        raise ValueError(f"node group spec {value} has non-integer bounds") from exc
    if min_size < 0 or max_size < 0:
        raise ValueError(f"node group spec {value} has negative bounds")
    if min_size > max_size:
        raise ValueError(f"node group spec {value}: min size {min_size} exceeds max size {max_size}")
    model, application = parse_node_group_name(name)
    return NodeGroupSpec(min_size=min_size, max_size=max_size, model=model, application=application)


class NodeGroup:
    """A scalable group backed by one fleet application."""

    def __init__(self, group_id: str, min_size: int, max_size: int, manager: FleetManager, target: int = 0):
        self._id = group_id
        self._min_size = min_size
        self._max_size = max_size
        self.manager = manager
        self.target = target

    def id(self) -> str:
        return self._id

    def min_size(self) -> int:
        return self._min_size

    def max_size(self) -> int:
        return self._max_size

    def target_size(self) -> int:
        return self.target

    def exist(self) -> bool:
        return True

    def autoprovisioned(self) -> bool:
        return False

    def debug(self) -> str:
        return f"{self._id} (min={self._min_size}, max={self._max_size}, target={self.target})"

    def increase_size(self, delta: int) -> None:
        if delta <= 0:
            raise ValueError("size increase must be positive")
        new_size = self.target + delta
        if new_size > self._max_size:
            raise ValueError(f"size increase too large - desired:{new_size} max:{self._max_size}")
        self.manager.scale_up(delta)
        self.target = new_size
        logger.info("node group %s target increased to %d", self._id, self.target)

    def delete_nodes(self, hostnames: Iterable[str]) -> None:
        hostnames = list(hostnames)
        if self.target - len(hostnames) < self._min_size:
            raise ValueError(
                f"cannot delete {len(hostnames)} nodes from {self._id}: "
                f"target {self.target} would drop below min size {self._min_size}"
            )
        for hostname in hostnames:
            if hostname.startswith(PROVIDER_ID_PREFIX):
                # Unresolved units are reported by their unit name.
                self.manager.scale_down_unit(hostname[len(PROVIDER_ID_PREFIX) :])
            else:
                self.manager.scale_down(hostname)
            self.target -= 1
            logger.info("node group %s deleted node %s, target now %d", self._id, hostname, self.target)

    def decrease_target_size(self, delta: int) -> None:
        if delta >= 0:
            raise ValueError("size decrease must be negative")
        new_size = self.target + delta
        if new_size < self.manager.size():
            raise ValueError(
                f"attempt to delete existing nodes targetSize:{self.target} delta:{delta} "
                f"existingNodes: {self.manager.size()}"
            )
        self.target = new_size

    def nodes(self) -> List[Instance]:
        instances: List[Instance] = []
        for unit in self.manager.units().values():
            node_id = unit.node_identity or f"{PROVIDER_ID_PREFIX}{unit.external_id}"
            instances.append(Instance(id=node_id, state=InstanceState.from_phase(unit.phase)))
        return instances

    def refresh(self) -> None:
        self.manager.reconcile()
        self.target = self.manager.size()

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "min_size": self._min_size,
            "max_size": self._max_size,
            "target": self.target,
            "size": self.manager.size(),
            "nodes": [instance.to_dict() for instance in self.nodes()],
        }
