"""Loguru sink setup driven by Settings."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from recall.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Replace loguru's default sink with the configured ones.

    stderr always gets `log_level`; when `log_file` is set, a rotating file
    sink records the same level.
    """
    settings = settings or get_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
