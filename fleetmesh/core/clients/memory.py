"""
In-memory fleet used for dry runs, demos and tests.

Units go through the same asynchronous life the real fleet shows: a newly
added unit is reported as ``allocating``/``waiting`` without a hostname until
:meth:`InMemoryFleetClient.settle` is called, and a destroyed unit lingers as
``dying`` until the next settle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from fleetmesh.core.clients.base import (
    AddUnitsParams,
    DestroyUnitResult,
    DestroyUnitsParams,
    FleetClient,
)
from fleetmesh.core.entities.snapshot import (
    ApplicationStatus,
    FleetSnapshot,
    MachineStatus,
    UnitStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class _SimUnit:
    application: str
    machine: str
    agent_status: str = "allocating"
    workload_status: str = "waiting"


class InMemoryFleetClient(FleetClient):
    """Simulated fleet of units spread over auto-numbered machines."""

    def __init__(self, hostname_prefix: str = "node", initial_units: Optional[Dict[str, int]] = None):
        self.hostname_prefix = hostname_prefix
        self.units: Dict[str, _SimUnit] = {}
        self.hostnames: Dict[str, str] = {}
        self.calls: List[Tuple[str, object]] = []
        self._next_unit: Dict[str, int] = {}
        self._next_machine = 0
        self._failures: Dict[str, Exception] = {}
        for application, count in (initial_units or {}).items():
            for _ in range(count):
                self.inject_unit(application)

    # ------------------------------------------------------------------
    # Simulation helpers

    def fail_next(self, operation: str, exc: Exception) -> None:
        """Make the next ``operation`` (``status``/``add_units``/``destroy_units``) raise ``exc``."""
        if operation not in {"status", "add_units", "destroy_units"}:
            raise ValueError(f"Unknown operation '{operation}'")
        self._failures[operation] = exc

    def _maybe_fail(self, operation: str) -> None:
        exc = self._failures.pop(operation, None)
        if exc is not None:
            raise exc

    def _new_unit(self, application: str) -> str:
        index = self._next_unit.get(application, 0)
        self._next_unit[application] = index + 1
        machine = str(self._next_machine)
        self._next_machine += 1
        unit_id = f"{application}/{index}"
        self.units[unit_id] = _SimUnit(application=application, machine=machine)
        return unit_id

    def inject_unit(self, application: str, *, ready: bool = True) -> str:
        """Add a unit behind the manager's back, as an operator would."""
        unit_id = self._new_unit(application)
        if ready:
            self._settle_unit(unit_id)
        logger.debug("Injected unit %s (ready=%s)", unit_id, ready)
        return unit_id

    def drop_unit(self, unit_id: str) -> None:
        """Remove a unit immediately, as an operator would."""
        unit = self.units.pop(unit_id)
        self.hostnames.pop(unit.machine, None)

    def _settle_unit(self, unit_id: str) -> None:
        unit = self.units[unit_id]
        unit.agent_status = "idle"
        unit.workload_status = "active"
        self.hostnames.setdefault(unit.machine, f"{self.hostname_prefix}-{unit.machine}")

    def settle(self) -> None:
        """Finish every pending provisioning and teardown."""
        for unit_id, unit in list(self.units.items()):
            if unit.agent_status == "dying":
                self.drop_unit(unit_id)
            else:
                self._settle_unit(unit_id)

    # ------------------------------------------------------------------
    # FleetClient

    def status(self, patterns: Optional[Sequence[str]] = None) -> FleetSnapshot:
        self.calls.append(("status", list(patterns) if patterns else None))
        self._maybe_fail("status")
        applications: Dict[str, ApplicationStatus] = {}
        for unit_id, unit in self.units.items():
            if patterns and unit.application not in patterns and unit_id not in patterns:
                continue
            app = applications.setdefault(unit.application, ApplicationStatus(name=unit.application))
            app.units[unit_id] = UnitStatus(
                agent_status=unit.agent_status,
                workload_status=unit.workload_status,
                machine=unit.machine,
            )
        machines = {
            unit.machine: MachineStatus(machine_id=unit.machine, hostname=self.hostnames.get(unit.machine, ""))
            for unit in self.units.values()
        }
        return FleetSnapshot(applications=applications, machines=machines)

    def add_units(self, params: AddUnitsParams) -> List[str]:
        self.calls.append(("add_units", params))
        self._maybe_fail("add_units")
        return [self._new_unit(params.application) for _ in range(params.num_units)]

    def destroy_units(self, params: DestroyUnitsParams) -> List[DestroyUnitResult]:
        self.calls.append(("destroy_units", params))
        self._maybe_fail("destroy_units")
        results: List[DestroyUnitResult] = []
        for unit_id in params.units:
            unit = self.units.get(unit_id)
            if unit is None:
                results.append(DestroyUnitResult(unit=unit_id, error=f"unit {unit_id} not found"))
                continue
            unit.agent_status = "dying"
            unit.workload_status = "terminated"
            results.append(DestroyUnitResult(unit=unit_id))
        return results
