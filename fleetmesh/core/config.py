"""Configuration helpers for fleetmesh.

This module loads the YAML cloud configuration describing how to reach the
fleet (controller, CLI binary, call timeout) and the autoscaler settings.
Configuration precedence:

1. An explicit path passed to :func:`load_fleet_config`.
2. Environment variable ``FLEETMESH_CONFIG`` pointing to a YAML file.
3. ``fleetmesh.yaml`` in the current working directory.
4. Built-in defaults (current controller, no node groups).

Example::

    controller: prod-controller
    juju-binary: /snap/bin/juju
    timeout: 60
    autoscaler:
      reconcile-interval: 10
      node-groups:
        - "1:5:default:kubernetes-worker"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

__all__ = [
    "AutoscalerSettings",
    "CloudConfig",
    "FleetConfig",
    "get_fleet_config",
    "load_fleet_config",
    "reset_fleet_config",
]


_ENV_VAR = "FLEETMESH_CONFIG"
_CWD_FILE = "fleetmesh.yaml"


@dataclass
class CloudConfig:
    controller: str = ""
    binary: str = "juju"
    timeout: float = 60.0


@dataclass
class AutoscalerSettings:
    reconcile_interval: float = 10.0
    node_groups: List[str] = field(default_factory=list)


@dataclass
class FleetConfig:
    cloud: CloudConfig = field(default_factory=CloudConfig)
    autoscaler: AutoscalerSettings = field(default_factory=AutoscalerSettings)
    source: Optional[Path] = None


_fleet_config: Optional[FleetConfig] = None


def _resolve_config_path(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(f"Config file {candidate} does not exist")
        return candidate

    env_path = os.environ.get(_ENV_VAR)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate.is_file():
            return candidate

    cwd_file = Path.cwd() / _CWD_FILE
    if cwd_file.is_file():
        return cwd_file
    return None


def _load_yaml_dict(path: Optional[Path]) -> Dict[str, object]:
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _build_cloud_config(data: Dict[str, object]) -> CloudConfig:
    raw_timeout = data.get("timeout", 60.0)
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid timeout: {raw_timeout!r}") from exc
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    return CloudConfig(
        controller=str(data.get("controller") or "").strip(),
        binary=str(data.get("juju-binary") or data.get("binary") or "juju").strip(),
        timeout=timeout,
    )


def _build_autoscaler_settings(data: Dict[str, object]) -> AutoscalerSettings:
    node = data.get("autoscaler", {}) or {}
    if not isinstance(node, dict):
        raise ValueError("'autoscaler' section must be a mapping")

    raw_interval = node.get("reconcile-interval", node.get("reconcile_interval", 10.0))
    try:
        interval = float(raw_interval)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid reconcile-interval: {raw_interval!r}") from exc
    if interval <= 0:
        raise ValueError("reconcile-interval must be positive")

    raw_groups = node.get("node-groups", node.get("node_groups", [])) or []
    if not isinstance(raw_groups, list):
        raise ValueError("'node-groups' must be a list of strings")

    return AutoscalerSettings(
        reconcile_interval=interval,
        node_groups=[str(item).strip() for item in raw_groups if str(item).strip()],
    )


def load_fleet_config(path: Optional[Union[str, Path]] = None) -> FleetConfig:
    """Load configuration without touching the module cache."""
    resolved = _resolve_config_path(path)
    data = _load_yaml_dict(resolved)
    return FleetConfig(
        cloud=_build_cloud_config(data),
        autoscaler=_build_autoscaler_settings(data),
        source=resolved,
    )


def get_fleet_config() -> FleetConfig:
    global _fleet_config
    if _fleet_config is None:
        _fleet_config = load_fleet_config()
    return _fleet_config


def reset_fleet_config() -> None:
    """Reset cached configuration (intended for tests)."""
    global _fleet_config
    _fleet_config = None
