"""
Fleet snapshot entity definitions.

A snapshot is one full, point-in-time read of the fleet status API: the
units of every application plus the machines hosting them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

READY_AGENT_STATUS = "idle"
READY_WORKLOAD_STATUS = "active"


def _current(value: Any) -> str:
    """Extract the ``current`` field of a ``juju status`` detailed status block."""
    if isinstance(value, Mapping):
        return str(value.get("current") or value.get("status") or "")
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class UnitStatus:
    """Agent/workload health of one unit as last reported by the fleet."""

    agent_status: str = ""
    workload_status: str = ""
    machine: str = ""

    def is_ready(self) -> bool:
        return (
            self.agent_status == READY_AGENT_STATUS
            and self.workload_status == READY_WORKLOAD_STATUS
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "agent_status": self.agent_status,
            "workload_status": self.workload_status,
            "machine": self.machine,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UnitStatus":
        """
        Build a status from either the flat shape produced by :meth:`to_dict`
        or the nested shape of ``juju status --format=json``.
        """
        if "agent_status" in payload or "workload_status" in payload:
            agent = payload.get("agent_status")
            workload = payload.get("workload_status")
        else:
            agent = payload.get("juju-status")
            workload = payload.get("workload-status")
        return cls(
            agent_status=_current(agent),
            workload_status=_current(workload),
            machine=str(payload.get("machine") or ""),
        )


@dataclass(frozen=True)
class MachineStatus:
    """Machine hosting one or more units."""

    machine_id: str
    hostname: str = ""
    instance_id: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "machine_id": self.machine_id,
            "hostname": self.hostname,
            "instance_id": self.instance_id,
        }

    @classmethod
    def from_dict(cls, machine_id: str, payload: Mapping[str, Any]) -> "MachineStatus":
        return cls(
            machine_id=str(machine_id),
            hostname=str(payload.get("hostname") or ""),
            instance_id=str(payload.get("instance-id") or payload.get("instance_id") or ""),
        )


@dataclass
class ApplicationStatus:
    name: str
    units: Dict[str, UnitStatus] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "units": {unit_id: status.to_dict() for unit_id, status in self.units.items()},
        }


@dataclass
class FleetSnapshot:
    """Full fleet status: applications keyed by name, machines keyed by id."""

    applications: Dict[str, ApplicationStatus] = field(default_factory=dict)
    machines: Dict[str, MachineStatus] = field(default_factory=dict)

    def units_for(self, application: str) -> Dict[str, UnitStatus]:
        """Units of ``application``; an absent application simply has no units."""
        app = self.applications.get(application)
        if app is None:
            return {}
        return app.units

    def hostname_for(self, machine_id: Optional[str]) -> str:
        if not machine_id:
            return ""
        machine = self.machines.get(machine_id)
        return machine.hostname if machine else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applications": {name: app.to_dict() for name, app in self.applications.items()},
            "machines": {machine_id: m.to_dict() for machine_id, m in self.machines.items()},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FleetSnapshot":
        """
        从 ``juju status --format=json`` 的输出构建快照

        Args:
            payload: 解码后的 JSON 字典

        Returns:
            FleetSnapshot 对象

        Raises:
            ValueError: 如果 applications/machines/units 不是映射类型
        """
        raw_apps = payload.get("applications") or {}
        raw_machines = payload.get("machines") or {}
        if not isinstance(raw_apps, Mapping) or not isinstance(raw_machines, Mapping):
            raise ValueError("'applications' and 'machines' must be mappings")

        applications: Dict[str, ApplicationStatus] = {}
        for app_name, app_payload in raw_apps.items():
            raw_units = (app_payload or {}).get("units") or {}
            if not isinstance(raw_units, Mapping):
                raise ValueError(f"Application '{app_name}' units must be a mapping")
            units = {
                normalise_unit_name(unit_name): UnitStatus.from_dict(unit_payload or {})
                for unit_name, unit_payload in raw_units.items()
            }
            applications[app_name] = ApplicationStatus(name=app_name, units=units)

        machines: Dict[str, MachineStatus] = {}
        _collect_machines(raw_machines, machines)
        return cls(applications=applications, machines=machines)


def _collect_machines(raw: Mapping[str, Any], into: Dict[str, MachineStatus]) -> None:
    """Flatten machines and the containers nested under them (``0/lxd/1``)."""
    for machine_id, machine_payload in raw.items():
        machine_payload = machine_payload or {}
        into[str(machine_id)] = MachineStatus.from_dict(machine_id, machine_payload)
        containers = machine_payload.get("containers") or {}
        if not isinstance(containers, Mapping):
            raise ValueError(f"Machine '{machine_id}' containers must be a mapping")
        _collect_machines(containers, into)


def normalise_unit_name(name: str) -> str:
    """Strip the leader marker (``app/0*``) that the status output may carry."""
    return str(name).strip().replace("*", "")
