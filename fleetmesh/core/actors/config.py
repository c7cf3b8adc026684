"""
Shared configuration dataclasses for runtime actors.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ActorConfig:
    """
    Generic configuration for the autoscaler actor and the facade driving it.
    """

    name: str
    reconcile_interval: float = 10.0
    max_restarts: int = 0
