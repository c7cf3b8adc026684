"""
Fleet API clients.
"""

from .base import AddUnitsParams, DestroyUnitResult, DestroyUnitsParams, FleetClient  # noqa: F401
from .cli import JujuCliClient  # noqa: F401
from .memory import InMemoryFleetClient  # noqa: F401

__all__ = [
    "AddUnitsParams",
    "DestroyUnitResult",
    "DestroyUnitsParams",
    "FleetClient",
    "JujuCliClient",
    "InMemoryFleetClient",
]
