"""
Command line entry point: ``fleetmesh-autoscaler``.
"""

from __future__ import annotations

import functools
import logging
import signal
import threading
from typing import Optional, Tuple

import click
import ray

from fleetmesh.core.clients.cli import JujuCliClient
from fleetmesh.core.config import load_fleet_config
from fleetmesh.core.controllers import FleetAutoscaler
from fleetmesh.core.utils import configure_runtime_logging, demote_ray_logging

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="YAML cloud config file.")
@click.option(
    "--nodes",
    multiple=True,
    help="Node group as <min>:<max>:<model>:<application>; repeatable. Overrides the config file.",
)
@click.option("--interval", type=float, default=None, help="Seconds between reconcile cycles.")
@click.option("--controller", default=None, help="Juju controller; defaults to the config file or the current one.")
@click.option("--juju-binary", default=None, help="Path to the juju CLI.")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds for each juju call.")
@click.option("--once", is_flag=True, help="Run a single reconcile cycle and exit.")
@click.option("--log-level", default="INFO", show_default=True)
def main(
    config_path: Optional[str],
    nodes: Tuple[str, ...],
    interval: Optional[float],
    controller: Optional[str],
    juju_binary: Optional[str],
    timeout: Optional[float],
    once: bool,
    log_level: str,
) -> None:
    """Keep fleet-backed node groups in sync with their fleet."""
    configure_runtime_logging(log_level)
    demote_ray_logging()

    try:
        config = load_fleet_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    specs = list(nodes) or config.autoscaler.node_groups
    if not specs:
        raise click.UsageError("at least one node group is required (--nodes or autoscaler.node-groups)")
    reconcile_interval = interval or config.autoscaler.reconcile_interval

    ray.init(ignore_reinit_error=True, logging_level=logging.WARNING)
    client_factory = functools.partial(
        JujuCliClient,
        controller=controller or config.cloud.controller,
        binary=juju_binary or config.cloud.binary,
        timeout=timeout or config.cloud.timeout,
    )
    try:
        autoscaler = FleetAutoscaler(specs, client_factory, reconcile_interval=reconcile_interval)
    except (RuntimeError, ValueError) as exc:
        ray.shutdown()
        raise click.ClickException(str(exc)) from exc

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop_event.set())
    try:
        cycles = autoscaler.run(max_cycles=1 if once else None, stop_event=stop_event)
        click.echo(f"fleetmesh: {cycles} reconcile cycle(s) completed")
    except KeyboardInterrupt:
        logger.info("interrupted, shutting down")
    finally:
        autoscaler.shutdown()
        ray.shutdown()


if __name__ == "__main__":  # pragma: no cover
    main()
