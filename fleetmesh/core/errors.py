"""
Exception hierarchy for the fleetmesh runtime.
"""

from __future__ import annotations

from typing import Optional, Sequence


class FleetmeshError(Exception):
    """Base class for fleetmesh errors."""


class FleetClientError(FleetmeshError):
    """A call against the fleet API failed (transport, protocol or CLI error)."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = list(command) if command else []
        self.stderr = stderr
        self.returncode = returncode


class UnitNotFoundError(FleetmeshError, LookupError):
    """No tracked unit matches the given node identity."""

    def __init__(self, node_identity: str):
        super().__init__(f"unit with hostname {node_identity} not found")
        self.node_identity = node_identity


class ManagerNotInitialisedError(FleetmeshError, RuntimeError):
    """The manager was used before a successful ``init()``."""
