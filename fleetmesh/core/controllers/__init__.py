"""
Controller façades exposed to library consumers.
"""

from .fleet_autoscaler import FleetAutoscaler  # noqa: F401

__all__ = ["FleetAutoscaler"]
