"""
Unit tests for the CLI-backed and in-memory fleet clients.
"""

from __future__ import annotations

import json
import subprocess

import pytest

from fleetmesh.core.clients import (
    AddUnitsParams,
    DestroyUnitsParams,
    InMemoryFleetClient,
    JujuCliClient,
)
from fleetmesh.core.errors import FleetClientError


class FakeRun:
    """Stand-in for ``subprocess.run`` recording commands."""

    def __init__(self, stdout="", returncode=0, stderr="", exc=None):
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.exc = exc
        self.commands = []

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        self.kwargs = kwargs
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def _install(**kwargs):
        runner = FakeRun(**kwargs)
        monkeypatch.setattr("fleetmesh.core.clients.cli.subprocess.run", runner)
        return runner

    return _install


def test_cli_status_parses_json(fake_run):
    payload = {
        "applications": {
            "worker": {
                "units": {
                    "worker/0*": {
                        "juju-status": {"current": "idle"},
                        "workload-status": {"current": "active"},
                        "machine": "3",
                    }
                }
            }
        },
        "machines": {"3": {"hostname": "node-3"}},
    }
    runner = fake_run(stdout=json.dumps(payload))
    client = JujuCliClient("default", timeout=5.0)

    snapshot = client.status(["worker"])

    assert runner.commands == [["juju", "status", "-m", "default", "--format=json", "worker"]]
    assert runner.kwargs["timeout"] == 5.0
    assert snapshot.units_for("worker")["worker/0"].is_ready()
    assert snapshot.hostname_for("3") == "node-3"


def test_cli_qualifies_model_with_controller(fake_run):
    runner = fake_run(stdout="{}")
    JujuCliClient("default", controller="prod", binary="/snap/bin/juju").status()
    assert runner.commands == [["/snap/bin/juju", "status", "-m", "prod:default", "--format=json"]]


def test_cli_add_and_remove_units(fake_run):
    runner = fake_run()
    client = JujuCliClient("default")

    assert client.add_units(AddUnitsParams(application="worker", num_units=2)) == []
    results = client.destroy_units(DestroyUnitsParams(units=["worker/1", "worker/2"], force=True))

    assert runner.commands == [
        ["juju", "add-unit", "-m", "default", "-n", "2", "worker"],
        ["juju", "remove-unit", "-m", "default", "--force", "worker/1", "worker/2"],
    ]
    assert [result.unit for result in results] == ["worker/1", "worker/2"]
    assert all(result.error is None for result in results)


def test_cli_destroy_nothing_runs_nothing(fake_run):
    runner = fake_run()
    assert JujuCliClient("default").destroy_units(DestroyUnitsParams(units=[])) == []
    assert runner.commands == []


def test_cli_non_zero_exit_raises(fake_run):
    fake_run(returncode=1, stderr="ERROR model not found\n")
    with pytest.raises(FleetClientError) as excinfo:
        JujuCliClient("missing").status()
    assert excinfo.value.returncode == 1
    assert excinfo.value.stderr == "ERROR model not found"
    assert excinfo.value.command[:2] == ["juju", "status"]


@pytest.mark.parametrize(
    "exc",
    [FileNotFoundError("juju"), subprocess.TimeoutExpired(cmd="juju", timeout=1)],
)
def test_cli_transport_failures_raise_client_error(fake_run, exc):
    fake_run(exc=exc)
    with pytest.raises(FleetClientError):
        JujuCliClient("default").add_units(AddUnitsParams(application="worker", num_units=1))


def test_cli_invalid_json_raises(fake_run):
    fake_run(stdout="not json")
    with pytest.raises(FleetClientError, match="decode"):
        JujuCliClient("default").status()


def test_cli_requires_model():
    with pytest.raises(ValueError):
        JujuCliClient("")


def test_in_memory_units_settle_and_die():
    client = InMemoryFleetClient()
    client.add_units(AddUnitsParams(application="worker", num_units=2))

    pending = client.status().units_for("worker")
    assert set(pending) == {"worker/0", "worker/1"}
    assert not any(status.is_ready() for status in pending.values())
    assert client.status().hostname_for(pending["worker/0"].machine) == ""

    client.settle()
    snapshot = client.status()
    ready = snapshot.units_for("worker")
    assert all(status.is_ready() for status in ready.values())
    assert snapshot.hostname_for(ready["worker/1"].machine) == "node-1"

    results = client.destroy_units(DestroyUnitsParams(units=["worker/0", "worker/9"]))
    assert results[0].error is None
    assert results[1].error == "unit worker/9 not found"
    assert client.status().units_for("worker")["worker/0"].agent_status == "dying"

    client.settle()
    assert set(client.status().units_for("worker")) == {"worker/1"}


def test_in_memory_external_changes_and_failures():
    client = InMemoryFleetClient(hostname_prefix="vm")
    unit_id = client.inject_unit("worker")
    snapshot = client.status()
    assert snapshot.units_for("worker")[unit_id].is_ready()
    assert snapshot.hostname_for("0") == "vm-0"

    client.drop_unit(unit_id)
    assert client.status().units_for("worker") == {}

    error = RuntimeError("boom")
    client.fail_next("status", error)
    with pytest.raises(RuntimeError):
        client.status()
    client.status()

    with pytest.raises(ValueError):
        client.fail_next("explode", error)
    assert [name for name, _ in client.calls].count("status") == 4


def test_in_memory_initial_units_are_ready():
    client = InMemoryFleetClient("seed", initial_units={"worker": 2, "db": 1})
    snapshot = client.status()
    assert set(snapshot.units_for("worker")) == {"worker/0", "worker/1"}
    assert snapshot.units_for("db")["db/0"].is_ready()
    assert snapshot.hostname_for(snapshot.units_for("db")["db/0"].machine) == "seed-2"
    assert set(client.status(["db"]).applications) == {"db"}
