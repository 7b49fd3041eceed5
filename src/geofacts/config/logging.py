"""Shared logging helpers for geofacts."""

from __future__ import annotations

import logging

from .env import optional_env_var


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``GEOFACTS_LOG_LEVEL`` (or INFO) and the format is terse enough for
    CLI output. Pass ``force=True`` to reconfigure during tests or specialised
    entry points.
    """

    if level is None:
        level = logging.getLevelNamesMapping().get(
            (optional_env_var("GEOFACTS_LOG_LEVEL") or "INFO").upper(),
            logging.INFO,
        )

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
