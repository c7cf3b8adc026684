"""
Fleet manager: tracks the units of one application and reconciles them
against freshly polled fleet snapshots.

The manager is not thread-safe. Callers serialise access (one control loop
per manager); inside the runtime this is the autoscaler actor, whose methods
Ray executes one at a time.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Set

from fleetmesh.core.clients.base import AddUnitsParams, DestroyUnitsParams, FleetClient
from fleetmesh.core.entities.snapshot import FleetSnapshot, UnitStatus
from fleetmesh.core.entities.unit import Unit, UnitPhase
from fleetmesh.core.errors import ManagerNotInitialisedError, UnitNotFoundError
from fleetmesh.core.resolver import MachineHostnameResolver, NodeIdentityResolver

logger = logging.getLogger(__name__)


class FleetManager:
    """Owns the map of tracked units for one ``model``/``application`` pair."""

    def __init__(
        self,
        client: FleetClient,
        model: str,
        application: str,
        *,
        resolver: Optional[NodeIdentityResolver] = None,
    ):
        self.client = client
        self.model = model
        self.application = application
        self.resolver = resolver or MachineHostnameResolver()
        self._units: Dict[str, Unit] = {}
        # External IDs marked for removal that may still be reported by the
        # fleet; never re-adopted while present.
        self._pending_removals: Set[str] = set()
        self._initialised = False

    # ------------------------------------------------------------------
    # Helpers

    def _ensure_initialised(self) -> None:
        if not self._initialised:
            raise ManagerNotInitialisedError(
                f"FleetManager[{self.model}:{self.application}] used before init()"
            )

    def _fetch(self) -> FleetSnapshot:
        try:
            return self.client.status(None)
        except Exception as exc:
            logger.warning("Status call for %s:%s failed: %s", self.model, self.application, exc)
            raise

    def _resolve(self, status: UnitStatus, snapshot: FleetSnapshot) -> str:
        return self.resolver.resolve(status, snapshot) or ""

    # ------------------------------------------------------------------
    # Lifecycle

    def init(self) -> None:
        """Build the unit map from one snapshot; raises the client's error on failure."""
        snapshot = self._fetch()

        units: Dict[str, Unit] = {}
        for unit_id, status in snapshot.units_for(self.application).items():
            phase = UnitPhase.RUNNING if status.is_ready() else UnitPhase.CREATING
            units[unit_id] = Unit(
                external_id=unit_id,
                phase=phase,
                node_identity=self._resolve(status, snapshot),
                last_observed_status=status,
            )

        self._units = units
        self._pending_removals = set()
        self._initialised = True
        logger.info(
            "FleetManager[%s:%s] initialised with %d units",
            self.model,
            self.application,
            len(units),
        )

    # ------------------------------------------------------------------
    # Scaling operations

    def scale_up(self, delta: int) -> None:
        """
        Request ``delta`` more units and start tracking the ones that appear.

        New units are detected by diffing the snapshots taken before and after
        the request; the IDs returned by ``add_units`` are not trusted.
        """
        self._ensure_initialised()
        if delta <= 0:
            raise ValueError(f"scale_up delta must be positive, got {delta}")

        before = self._fetch()
        try:
            self.client.add_units(AddUnitsParams(application=self.application, num_units=delta))
        except Exception as exc:
            logger.warning("AddUnits(%s, %d) failed: %s", self.application, delta, exc)
            raise
        after = self._fetch()

        previous = before.units_for(self.application)
        added = 0
        for unit_id, status in after.units_for(self.application).items():
            if unit_id in previous or unit_id in self._units:
                continue
            self._units[unit_id] = Unit(
                external_id=unit_id,
                phase=UnitPhase.CREATING,
                last_observed_status=status,
            )
            added += 1
            logger.info("added unit %s to managed units", unit_id)

        if added < delta:
            logger.info(
                "scale_up(%d) for %s: %d new units visible so far",
                delta,
                self.application,
                added,
            )

    def scale_down(self, node_identity: str) -> None:
        """Mark the unit backing ``node_identity`` as deleting and request its removal."""
        self._ensure_initialised()
        unit = self.lookup(node_identity)
        if unit is None:
            raise UnitNotFoundError(node_identity)

        self._remove(unit)

    def scale_down_unit(self, external_id: str) -> None:
        """Same as :meth:`scale_down`, addressing the unit by its external ID."""
        self._ensure_initialised()
        unit = self._units.get(external_id)
        if unit is None:
            raise UnitNotFoundError(external_id)
        self._remove(unit)

    def _remove(self, unit: Unit) -> None:
        # Deleting is final even if the request below fails.
        unit.phase = UnitPhase.DELETING
        self._pending_removals.add(unit.external_id)
        logger.info("unit %s state changed to deleting", unit.external_id)

        try:
            self.client.destroy_units(DestroyUnitsParams(units=[unit.external_id]))
        except Exception as exc:
            logger.warning("DestroyUnits(%s) failed: %s", unit.external_id, exc)
            raise

    # ------------------------------------------------------------------
    # Reconciliation

    def reconcile(self) -> None:
        """
        Converge the unit map with one fresh snapshot.

        1. Tracked units present in the snapshot get their status refreshed,
           identity resolved (once) and ``creating`` units promoted when ready.
        2. Untracked, ready units are adopted as ``running``.
        3. Tracked units missing from the snapshot are marked ``deleting``.
        4. Every ``deleting`` unit is dropped from the map.

        Nothing is mutated when the status call fails.
        """
        self._ensure_initialised()
        snapshot = self._fetch()
        observed = snapshot.units_for(self.application)

        for unit_id, status in observed.items():
            unit = self._units.get(unit_id)
            if unit is not None:
                unit.last_observed_status = status
                if not unit.node_identity:
                    unit.node_identity = self._resolve(status, snapshot)
                if unit.phase is UnitPhase.CREATING and status.is_ready():
                    unit.phase = UnitPhase.RUNNING
                    logger.info("unit %s state changed to running", unit_id)
                continue

            if unit_id in self._pending_removals:
                continue
            # Units still shown while being torn down are not ready, so only
            # ready ones are treated as added by an operator.
            if status.is_ready():
                self._units[unit_id] = Unit(
                    external_id=unit_id,
                    phase=UnitPhase.RUNNING,
                    node_identity=self._resolve(status, snapshot),
                    last_observed_status=status,
                )
                logger.info("detected unmanaged unit %s", unit_id)
                logger.info("added unit %s to managed units", unit_id)

        for unit_id, unit in list(self._units.items()):
            if unit_id not in observed and not unit.is_deleting:
                unit.phase = UnitPhase.DELETING
                logger.info("detected managed unit %s that has been removed", unit_id)
            if unit.is_deleting:
                del self._units[unit_id]
                logger.info("removed unit %s from managed units", unit_id)

        self._pending_removals.intersection_update(observed.keys())

    # ------------------------------------------------------------------
    # Accessors

    def size(self) -> int:
        return len(self._units)

    def lookup(self, node_identity: str) -> Optional[Unit]:
        """Linear scan for the unit whose node identity equals ``node_identity``."""
        if not node_identity:
            return None
        for unit in self._units.values():
            if unit.node_identity == node_identity:
                return unit
        return None

    def units(self) -> Dict[str, Unit]:
        return dict(self._units)

    def pending_removals(self) -> Set[str]:
        return set(self._pending_removals)

    def snapshot_state(self) -> dict:
        """Expose current state for inspection/testing."""
        return {
            "model": self.model,
            "application": self.application,
            "size": self.size(),
            "units": [unit.to_dict() for unit in sorted(self._units.values(), key=lambda u: u.external_id)],
        }
