"""Loguru configuration and helpers for recipe-scoped log records."""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from ..config.settings import Settings, get_settings

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[recipe]}</cyan> | "
    "<magenta>{extra[step]}</magenta> | "
    "{message}"
)
_DEFAULT_EXTRA = {"recipe": "-", "step": "-"}


def configure_logging(settings: Settings | None = None, level: str | None = None) -> Path | None:
    """Replace loguru sinks with stderr plus the configured rotating file.

    Returns the log file path, or ``None`` when file logging is disabled.
    """

    cfg = (settings or get_settings()).log
    resolved_level = (level or cfg.level).upper()

    logger.remove()
    logger.configure(extra=dict(_DEFAULT_EXTRA))
    logger.add(sys.stderr, level=resolved_level, format=_LOG_FORMAT, backtrace=False, diagnose=False)

    log_file = cfg.file
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=resolved_level,
            format=_LOG_FORMAT,
            rotation=cfg.rotation,
            retention=cfg.retention,
            encoding="utf-8",
        )
    return log_file


def get_logger(**context: Any):
    """Return a logger with *context* bound into every record's extras."""

    return logger.bind(**context)


@contextmanager
def recipe_scope(recipe: str | None, step: str) -> Iterator[None]:
    """Tag every record emitted inside the block with a recipe and step."""

    with logger.contextualize(recipe=recipe or "-", step=step):
        yield


@contextmanager
def log_timing(step: str, **context: Any) -> Iterator[None]:
    """Log how long the wrapped block took, tagged with *step*."""

    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - started
        logger.bind(step=step, **context).info("Finished {step} in {elapsed:.3f}s", step=step, elapsed=elapsed)


__all__ = ["configure_logging", "get_logger", "log_timing", "recipe_scope"]
