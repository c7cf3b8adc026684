"""
Domain entities used throughout the fleetmesh runtime.
"""

from .snapshot import ApplicationStatus, FleetSnapshot, MachineStatus, UnitStatus  # noqa: F401
from .types import Instance, InstanceState  # noqa: F401
from .unit import Unit, UnitPhase  # noqa: F401

__all__ = [
    "ApplicationStatus",
    "FleetSnapshot",
    "MachineStatus",
    "UnitStatus",
    "Instance",
    "InstanceState",
    "Unit",
    "UnitPhase",
]
