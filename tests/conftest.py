"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, Tuple, Union

import pytest
import ray

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

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s", force=True)
logging.getLogger("fleetmesh").setLevel(logging.DEBUG)

APPLICATION = "test_application"
MODEL = "test_model"

# (unit_id, agent, workload, machine, hostname)
UnitRow = Tuple[str, str, str, str, str]


def make_snapshot(rows: Sequence[UnitRow], application: str = APPLICATION) -> FleetSnapshot:
    units: Dict[str, UnitStatus] = {}
    machines: Dict[str, MachineStatus] = {}
    for unit_id, agent, workload, machine, hostname in rows:
        units[unit_id] = UnitStatus(agent_status=agent, workload_status=workload, machine=machine)
        machines[machine] = MachineStatus(machine_id=machine, hostname=hostname)
    return FleetSnapshot(
        applications={application: ApplicationStatus(name=application, units=units)},
        machines=machines,
    )


class ScriptedFleetClient(FleetClient):
    """Fleet client replaying queued responses in order and recording every call."""

    def __init__(self):
        self.statuses: Deque[Union[FleetSnapshot, Exception]] = deque()
        self.add_results: Deque[Union[List[str], Exception]] = deque()
        self.destroy_results: Deque[Union[List[DestroyUnitResult], Exception]] = deque()
        self.calls: List[Tuple[str, object]] = []

    def queue_status(self, *items: Union[FleetSnapshot, Exception]) -> "ScriptedFleetClient":
        self.statuses.extend(items)
        return self

    def status(self, patterns: Optional[Sequence[str]] = None) -> FleetSnapshot:
        self.calls.append(("status", patterns))
        item = self.statuses.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    def add_units(self, params: AddUnitsParams) -> List[str]:
        self.calls.append(("add_units", params))
        item = self.add_results.popleft() if self.add_results else []
        if isinstance(item, Exception):
            raise item
        return item

    def destroy_units(self, params: DestroyUnitsParams) -> List[DestroyUnitResult]:
        self.calls.append(("destroy_units", params))
        item = self.destroy_results.popleft() if self.destroy_results else []
        if isinstance(item, Exception):
            raise item
        return item

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def scripted_client():
    return ScriptedFleetClient()


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def ray_runtime():
    """Spin up a local Ray runtime for tests and mirror worker logs to the driver."""
    try:
        ray.init(
            ignore_reinit_error=True,
            local_mode=True,
            logging_level=logging.INFO,
        )
    except PermissionError as exc:
        pytest.skip(f"Ray init requires system permissions not available in this environment: {exc}")
    except Exception as exc:  # pragma: no cover - defensive guard for restricted sandboxes
        if "Operation not permitted" in str(exc):
            pytest.skip(f"Ray init skipped due to restricted environment: {exc}")
        raise
    try:
        yield
    finally:
        ray.shutdown()
