"""
Unit entity definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from fleetmesh.core.entities.snapshot import UnitStatus


class UnitPhase(str, Enum):
    """Lifecycle phase of a tracked unit."""

    CREATING = "creating"
    RUNNING = "running"
    DELETING = "deleting"


@dataclass
class Unit:
    """One externally-managed compute unit, mapped to at most one cluster node."""

    external_id: str
    phase: UnitPhase = UnitPhase.CREATING
    node_identity: str = ""
    last_observed_status: Optional[UnitStatus] = None

    def __post_init__(self) -> None:
        if not self.external_id:
            raise ValueError("Unit requires a non-empty external_id")

    @property
    def is_deleting(self) -> bool:
        return self.phase is UnitPhase.DELETING

    def to_dict(self) -> Dict[str, object]:
        return {
            "external_id": self.external_id,
            "phase": self.phase.value,
            "node_identity": self.node_identity,
            "last_observed_status": self.last_observed_status.to_dict()
            if self.last_observed_status
            else None,
        }
