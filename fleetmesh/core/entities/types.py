"""
Common type definitions shared by the node group adapter and the actors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from fleetmesh.core.entities.unit import UnitPhase


class InstanceState(str, Enum):
    """Instance states in the autoscaler's node-group vocabulary."""

    RUNNING = "running"
    CREATING = "creating"
    DELETING = "deleting"

    @classmethod
    def from_phase(cls, phase: UnitPhase) -> "InstanceState":
        return cls(phase.value)


@dataclass
class Instance:
    id: str
    state: InstanceState

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "state": self.state.value}
