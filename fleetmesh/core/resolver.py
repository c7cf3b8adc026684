"""
Node identity resolution.

Maps a unit reported in a snapshot to the address/hostname used to correlate
it with a cluster node. An empty string means "not resolvable yet".
"""

from __future__ import annotations

import abc

from fleetmesh.core.entities.snapshot import FleetSnapshot, UnitStatus


class NodeIdentityResolver(abc.ABC):
    @abc.abstractmethod
    def resolve(self, unit_status: UnitStatus, snapshot: FleetSnapshot) -> str:
        """Return the node identity of the unit, or ``""`` if unknown."""


class MachineHostnameResolver(NodeIdentityResolver):
    """Use the hostname of the machine hosting the unit."""

    def resolve(self, unit_status: UnitStatus, snapshot: FleetSnapshot) -> str:
        return snapshot.hostname_for(unit_status.machine)
