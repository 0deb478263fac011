"""Per-command status bookkeeping and rendering."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Sequence

import click

Status = Dict[str, Any]

BASE_STATS = ("records_in", "records_out")


def status_init(status: Status, keys: Iterable[str] = BASE_STATS) -> Status:
    """Reset the given counters to zero."""
    for key in keys:
        status[key] = 0
    return status


def status_start(status: Status) -> None:
    status["status"] = "running"
    status["time_start"] = datetime.now()


def status_stop(status: Status) -> None:
    status["time_stop"] = datetime.now()
    status["time_elapsed"] = str(status["time_stop"] - status["time_start"])
    status["status"] = "done"


def format_status(statuses: Sequence[Status]) -> str:
    """Render statuses as an aligned table, one block per command."""
    blocks: List[str] = []
    for status in statuses:
        if not status:
            continue
        width = max(len(str(key)) for key in status)
        lines = [f"{str(key).ljust(width)}  {_fmt(value)}" for key, value in status.items()]
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _fmt(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


@contextmanager
def status_progress(statuses_fn, interval: float = 1.0) -> Iterator[None]:
    """Re-render statuses to stderr every ``interval`` seconds while active."""
    done = threading.Event()

    def _loop() -> None:
        while not done.wait(interval):
            click.echo("\033[2J\033[H" + format_status(statuses_fn()), err=True)

    thread = threading.Thread(target=_loop, name="biopipe-progress", daemon=True)
    thread.start()
    try:
        yield
    finally:
        done.set()
        thread.join()
        click.echo(format_status(statuses_fn()), err=True)


__all__ = [
    "BASE_STATS",
    "Status",
    "format_status",
    "status_init",
    "status_progress",
    "status_start",
    "status_stop",
]
