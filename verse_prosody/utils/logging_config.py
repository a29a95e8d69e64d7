"""Helpers for configuring consistent logging output for the prosody engine."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "VERSE_PROSODY_LOG_LEVEL"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_CONFIGURED = False


def resolve_level(level: str | int | None) -> int:
    """Translate a level name or number into a :mod:`logging` level."""

    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    try:
        return int(level)
    except (TypeError, ValueError):
        normalized = str(level).strip().upper()
        resolved = logging.getLevelName(normalized)
        return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[str | int] = None, *, force: bool = False) -> None:
    """Install a root handler for applications embedding the engine.

    The library itself never calls this on import; editors and scripts that
    want the load/analysis events on stderr call it once at start-up. The
    level falls back to ``VERSE_PROSODY_LOG_LEVEL`` and then ``INFO``.
    """

    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    resolved_level = resolve_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV))

    logging.basicConfig(level=resolved_level, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger("verse_prosody").setLevel(resolved_level)
    _CONFIGURED = True


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "resolve_level"]
