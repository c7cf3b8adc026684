"""
Unit tests for snapshot parsing and the Unit entity.
"""

from __future__ import annotations

import pytest

from fleetmesh.core.entities import FleetSnapshot, Instance, InstanceState, Unit, UnitPhase, UnitStatus

JUJU_STATUS = {
    "model": {"name": "default"},
    "machines": {
        "0": {"hostname": "worker-0", "instance-id": "i-000"},
        "1": {"instance-id": "pending"},
    },
    "applications": {
        "kubernetes-worker": {
            "units": {
                "kubernetes-worker/0*": {
                    "workload-status": {"current": "active", "message": "Kubernetes worker running."},
                    "juju-status": {"current": "idle"},
                    "machine": "0",
                },
                "kubernetes-worker/1": {
                    "workload-status": {"current": "waiting"},
                    "juju-status": {"current": "allocating"},
                    "machine": "1",
                },
            }
        },
        "etcd": {},
    },
}


def test_snapshot_from_juju_status_json():
    snapshot = FleetSnapshot.from_dict(JUJU_STATUS)

    units = snapshot.units_for("kubernetes-worker")
    assert set(units) == {"kubernetes-worker/0", "kubernetes-worker/1"}
    leader = units["kubernetes-worker/0"]
    assert leader == UnitStatus(agent_status="idle", workload_status="active", machine="0")
    assert leader.is_ready()
    assert not units["kubernetes-worker/1"].is_ready()

    assert snapshot.hostname_for("0") == "worker-0"
    assert snapshot.hostname_for("1") == ""
    assert snapshot.hostname_for("42") == ""
    assert snapshot.hostname_for("") == ""
    assert snapshot.machines["0"].instance_id == "i-000"
    assert snapshot.units_for("etcd") == {}
    assert snapshot.units_for("missing") == {}


def test_snapshot_resolves_units_on_containers():
    payload = {
        "machines": {
            "0": {
                "hostname": "host-0",
                "containers": {
                    "0/lxd/1": {
                        "hostname": "juju-0-lxd-1",
                        "containers": {"0/lxd/1/kvm/0": {"hostname": "nested"}},
                    },
                },
            },
        },
        "applications": {
            "worker": {
                "units": {
                    "worker/0": {
                        "workload-status": {"current": "active"},
                        "juju-status": {"current": "idle"},
                        "machine": "0/lxd/1",
                    }
                }
            }
        },
    }

    snapshot = FleetSnapshot.from_dict(payload)

    unit = snapshot.units_for("worker")["worker/0"]
    assert snapshot.hostname_for(unit.machine) == "juju-0-lxd-1"
    assert snapshot.hostname_for("0") == "host-0"
    assert snapshot.hostname_for("0/lxd/1/kvm/0") == "nested"

    with pytest.raises(ValueError, match="containers"):
        FleetSnapshot.from_dict({"machines": {"0": {"containers": ["0/lxd/0"]}}})


def test_snapshot_round_trips_through_flat_shape():
    snapshot = FleetSnapshot.from_dict(JUJU_STATUS)
    flat = snapshot.to_dict()
    units_payload = {
        name: {"units": app["units"]} for name, app in flat["applications"].items()
    }
    machines_payload = {
        machine_id: {"hostname": m["hostname"], "instance_id": m["instance_id"]}
        for machine_id, m in flat["machines"].items()
    }

    rebuilt = FleetSnapshot.from_dict({"applications": units_payload, "machines": machines_payload})

    assert rebuilt == snapshot


def test_snapshot_rejects_malformed_sections():
    with pytest.raises(ValueError):
        FleetSnapshot.from_dict({"applications": ["not", "a", "mapping"]})
    with pytest.raises(ValueError):
        FleetSnapshot.from_dict({"applications": {"app": {"units": ["app/0"]}}})


@pytest.mark.parametrize(
    "agent, workload, ready",
    [
        ("idle", "active", True),
        ("executing", "active", False),
        ("idle", "waiting", False),
        ("idle", "blocked", False),
        ("", "", False),
    ],
)
def test_unit_status_readiness(agent, workload, ready):
    assert UnitStatus(agent_status=agent, workload_status=workload).is_ready() is ready


def test_unit_requires_external_id():
    with pytest.raises(ValueError):
        Unit(external_id="")


def test_unit_to_dict_and_defaults():
    unit = Unit(external_id="app/3")
    assert unit.phase is UnitPhase.CREATING
    assert unit.node_identity == ""
    assert unit.to_dict() == {
        "external_id": "app/3",
        "phase": "creating",
        "node_identity": "",
        "last_observed_status": None,
    }

    unit.last_observed_status = UnitStatus("idle", "active", "7")
    assert unit.to_dict()["last_observed_status"]["machine"] == "7"


def test_instance_state_follows_unit_phase():
    for phase in UnitPhase:
        assert InstanceState.from_phase(phase).value == phase.value
    assert Instance(id="host-1", state=InstanceState.RUNNING).to_dict() == {"id": "host-1", "state": "running"}
