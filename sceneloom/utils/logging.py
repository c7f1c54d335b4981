"""
Logging helpers for SceneLoom.

Centralising log configuration keeps the rest of the modules focused on their
domain logic; modules only ever call ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def configure_logging(
    level: Union[int, str] = logging.INFO,
    format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Ensure the root logger is configured exactly once.

    ``level`` may be a logging constant or its name (``"debug"``).  Per-tick
    render progress is emitted at INFO, skipped ticks at DEBUG.
    """

    if logging.getLogger().handlers:
        # Respect any user provided configuration.
        return

    logging.basicConfig(
        level=_coerce_level(level),
        format=format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(stream or sys.stdout)],
    )
