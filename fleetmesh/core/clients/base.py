"""
Fleet client contract consumed by :class:`~fleetmesh.core.manager.FleetManager`.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from fleetmesh.core.entities.snapshot import FleetSnapshot


@dataclass
class AddUnitsParams:
    application: str
    num_units: int


@dataclass
class DestroyUnitsParams:
    units: List[str] = field(default_factory=list)
    destroy_storage: bool = False
    force: bool = False


@dataclass
class DestroyUnitResult:
    unit: str
    error: Optional[str] = None


class FleetClient(abc.ABC):
    """
    Blocking call/response access to the fleet API.

    ``add_units`` and ``destroy_units`` are asynchronous on the fleet side:
    success only means the request was accepted, and the affected units may
    not show up (or disappear) in the next :meth:`status` call.

    Implementations raise :class:`~fleetmesh.core.errors.FleetClientError`
    (or their transport's own exception) on any failure and never retry.
    """

    @abc.abstractmethod
    def status(self, patterns: Optional[Sequence[str]] = None) -> FleetSnapshot:
        """Fetch a full snapshot, optionally filtered by ``patterns``."""

    @abc.abstractmethod
    def add_units(self, params: AddUnitsParams) -> List[str]:
        """Request ``params.num_units`` additional units."""

    @abc.abstractmethod
    def destroy_units(self, params: DestroyUnitsParams) -> List[DestroyUnitResult]:
        """Request removal of ``params.units``."""
