"""
fleetmesh: keeps Juju applications sized for a cluster autoscaler.

``FleetManager`` tracks the units of one application, ``FleetCloudProvider``
groups managers into node groups, and ``FleetAutoscaler`` drives them from a
Ray actor. Names are resolved on first access, so ``import fleetmesh`` stays
cheap and does not start Ray.
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version

_EXPORTS = {
    "fleetmesh.core.manager": ("FleetManager",),
    "fleetmesh.core.cloud_provider": ("FleetCloudProvider", "build_cloud_provider"),
    "fleetmesh.core.clients": ("InMemoryFleetClient", "JujuCliClient"),
    "fleetmesh.core.config": ("load_fleet_config",),
    "fleetmesh.core.controllers": ("FleetAutoscaler",),
    "fleetmesh.core.errors": ("FleetClientError", "UnitNotFoundError"),
}
_OWNER = {name: module for module, names in _EXPORTS.items() for name in names}

__all__ = sorted(_OWNER) + ["__version__"]

try:
    __version__ = version("fleetmesh-core")
except PackageNotFoundError:
    __version__ = "0.0.0"


def __getattr__(name: str):
    module_name = _OWNER.get(name)
    if module_name is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value


def __dir__():
    return sorted(set(globals()) | set(_OWNER))
