"""Run log and history persistence under $BIOPIPE_HOME."""

from __future__ import annotations

import logging
import traceback
from datetime import datetime
from typing import Any

from .config import get_settings

logger = logging.getLogger("biopipe.runs")
logger.setLevel(logging.INFO)
# Run records go to the run log only
logger.propagate = False


def _file_handler() -> logging.Handler:
    settings = get_settings()
    settings.home.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(settings.log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s\t%(levelname)s\t%(message)s"))
    return handler


def _log(level: int, message: str) -> None:
    handler = _file_handler()
    logger.addHandler(handler)
    try:
        logger.log(level, message)
    finally:
        logger.removeHandler(handler)
        handler.close()


def log_ok(pipeline: Any) -> None:
    """Record a successful run."""
    _log(logging.INFO, f"OK\t{pipeline}")


def log_error(pipeline: Any, exc: BaseException) -> None:
    """Record a failed run with its traceback."""
    details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    _log(logging.ERROR, f"ERROR\t{pipeline}\t{exc}\n{details}")


def history_save(pipeline: Any) -> None:
    """Append the rendered pipeline to the history file."""
    settings = get_settings()
    settings.home.mkdir(parents=True, exist_ok=True)
    with open(settings.history_path, "a", encoding="utf-8") as f:
        f.write(f"{datetime.now().isoformat(timespec='seconds')}\t{pipeline}\n")


__all__ = ["history_save", "log_error", "log_ok"]
