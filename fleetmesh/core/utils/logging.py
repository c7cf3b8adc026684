"""Logging utilities for fleetmesh runtime components."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union


_HANDLER_TAG = "_fleetmesh_stream_handler"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_runtime_logging(
    level: Union[int, str] = logging.INFO,
    formatter: Optional[logging.Formatter] = None,
) -> None:
    """Make actor and driver processes log to stdout once, with one format."""
    level = _coerce_level(level)
    root_logger = logging.getLogger()
    formatter = formatter or logging.Formatter(_DEFAULT_FORMAT)

    tagged = [handler for handler in root_logger.handlers if getattr(handler, _HANDLER_TAG, False)]
    if tagged:
        handler = tagged[0]
    else:
        handler = logging.StreamHandler(sys.stdout)
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)
    handler.setFormatter(formatter)
    handler.setLevel(level)

    if root_logger.level == logging.NOTSET or root_logger.level > level:
        root_logger.setLevel(level)


def install_stdout_logger(
    level: Union[int, str] = logging.INFO,
    *,
    include_timestamp: bool = True,
    prefix: str = "fleetmesh",
) -> logging.Logger:
    """Attach a stream handler to the ``prefix`` logger for CLI / demo scripts."""
    level = _coerce_level(level)
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s" if include_timestamp else "%(levelname)s %(name)s: %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))
    logger = logging.getLogger(prefix)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def demote_ray_logging(level: int = logging.ERROR) -> None:
    for name in ("ray", "ray.ray_logger"):
        logging.getLogger(name).setLevel(level)
