"""Shared logging helpers for midata."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "MIDATA_LOG_LEVEL"


def resolve_log_level(value: str | int | None) -> int:
    """Turn ``"debug"``, ``"INFO"``, ``10`` or ``None`` into a logging level."""

    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def configure_logging(*, level: str | int | None = None, force: bool = False) -> None:
    """Initialise the root logger once for scripts driving a connection.

    Without an explicit ``level`` the ``MIDATA_LOG_LEVEL`` environment variable is
    consulted, falling back to INFO. ``httpx`` request lines are kept at WARNING
    unless we run at DEBUG. Pass ``force=True`` to reconfigure during tests.
    """

    resolved = resolve_log_level(level if level is not None else os.getenv(LOG_LEVEL_ENV))
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if resolved > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
