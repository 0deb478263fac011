"""External program helpers shared by the tool adapter commands.

Safe wrappers around subprocess: arguments are validated and never passed
through a shell.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence
from typing import Any, Iterable, Type

import click

from .config import get_settings
from .errors import AuxError, ToolError

logger = logging.getLogger(__name__)

CommandArg = str | int | float | os.PathLike[str]


def _normalize_command(cmd: Sequence[CommandArg]) -> list[str]:
    """Validate and normalize subprocess command arguments."""
    if not cmd:
        msg = "Command must include at least one argument"
        raise ValueError(msg)

    normalized: list[str] = []
    for arg in cmd:
        if isinstance(arg, os.PathLike):
            value = os.fspath(arg)
        elif isinstance(arg, (str, int, float)):
            value = str(arg)
        else:
            msg = "Command arguments must be strings, numbers or os.PathLike"
            raise TypeError(msg)

        if not value.strip():
            msg = "Command arguments cannot be empty or whitespace"
            raise ValueError(msg)

        normalized.append(value)

    return normalized


def aux_exist(*programs: str) -> None:
    """Raise AuxError unless every program is found on PATH."""
    for program in programs:
        if not shutil.which(program):
            raise AuxError(f"Auxiliary program not found in PATH: {program}")


def run_tool(
    cmd: Sequence[CommandArg],
    *,
    error: Type[ToolError] = ToolError,
    tolerate: Iterable[str] = (),
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run an external program to completion.

    Args:
        cmd: Program and arguments
        error: ToolError subclass raised on non-zero exit
        tolerate: stderr fragments that make a non-zero exit acceptable
        **kwargs: Passed to subprocess.run

    Returns:
        The completed process

    Raises:
        error: If the program exits non-zero and stderr matches none of
            the tolerated fragments
    """
    normalized = _normalize_command(cmd)
    if get_settings().verbose:
        click.echo(f"Running: {' '.join(normalized)}", err=True)
    logger.debug("running %s", normalized)

    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    result = subprocess.run(normalized, check=False, **kwargs)  # noqa: S603

    if result.returncode != 0:
        stderr = result.stderr or ""
        if any(fragment in stderr for fragment in tolerate):
            logger.info("%s: tolerated failure: %s", normalized[0], stderr.strip())
            return result
        raise error(normalized, result.returncode, stderr)

    return result


def popen_with_validation(
    cmd: Sequence[CommandArg], **kwargs: Any
) -> subprocess.Popen[Any]:
    """Run subprocess.Popen with validation to satisfy security lint checks."""
    normalized = _normalize_command(cmd)
    if get_settings().verbose:
        click.echo(f"Running: {' '.join(normalized)}", err=True)
    return subprocess.Popen(normalized, **kwargs)  # noqa: S603


__all__ = ["aux_exist", "popen_with_validation", "run_tool"]
