"""
Fleet client backed by the ``juju`` command line.

Every call runs one ``juju`` subprocess and blocks until it exits.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import List, Optional, Sequence

from fleetmesh.core.clients.base import (
    AddUnitsParams,
    DestroyUnitResult,
    DestroyUnitsParams,
    FleetClient,
)
from fleetmesh.core.entities.snapshot import FleetSnapshot
from fleetmesh.core.errors import FleetClientError

logger = logging.getLogger(__name__)


class JujuCliClient(FleetClient):
    """Run ``juju status``/``add-unit``/``remove-unit`` against one model."""

    def __init__(self, model: str, *, controller: str = "", binary: str = "juju", timeout: float = 60.0):
        if not model:
            raise ValueError("JujuCliClient requires a model name")
        # -m accepts [<controller>:]<model>
        self.model = f"{controller}:{model}" if controller else model
        self.binary = binary
        self.timeout = timeout

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        command = [self.binary, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise FleetClientError(f"{self.binary} binary not found", command=command) from exc
        except subprocess.TimeoutExpired as exc:
            raise FleetClientError(
                f"{' '.join(command)} timed out after {self.timeout}s", command=command
            ) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise FleetClientError(
                f"{' '.join(command)} exited with {result.returncode}: {stderr}",
                command=command,
                stderr=stderr,
                returncode=result.returncode,
            )
        return result

    def status(self, patterns: Optional[Sequence[str]] = None) -> FleetSnapshot:
        args = ["status", "-m", self.model, "--format=json"]
        if patterns:
            args.extend(patterns)
        result = self._run(args)
        try:
            payload = json.loads(result.stdout or "{}")
            return FleetSnapshot.from_dict(payload)
        except (ValueError, AttributeError) as exc:
            raise FleetClientError(f"Unable to decode status output: {exc}", command=args) from exc

    def add_units(self, params: AddUnitsParams) -> List[str]:
        # add-unit does not print the new unit names reliably; callers detect
        # them by diffing snapshots.
        self._run(["add-unit", "-m", self.model, "-n", str(params.num_units), params.application])
        return []

    def destroy_units(self, params: DestroyUnitsParams) -> List[DestroyUnitResult]:
        if not params.units:
            return []
        args = ["remove-unit", "-m", self.model]
        if params.destroy_storage:
            args.append("--destroy-storage")
        if params.force:
            args.append("--force")
        args.extend(params.units)
        self._run(args)
        return [DestroyUnitResult(unit=unit) for unit in params.units]
