"""Pipeline composition and execution.

A Pipeline is an ordered list of Commands built with chained calls::

    from biopipe import BP

    BP().read_fasta(input="in.fna").grab(select="ATCG", keys="SEQ").write_fasta(output="out.fna").run()

``str(pipeline)`` renders the same expression back, including the ``run``
call once the pipeline has run.
"""

from __future__ import annotations

import copy
import logging
import sys
import traceback
from pprint import pformat
from typing import Any, Dict, List, Optional

import click

from . import mail
from .command import Command, render_value
from .commands import COMMANDS, get_command
from .config import get_settings
from .errors import PipelineError
from .executor import select_strategy
from .log import history_save, log_error, log_ok
from .options import (
    options_allowed,
    options_allowed_values,
    options_conflict,
    options_load_rc,
    options_tie,
)
from .status import Status, format_status, status_progress

logger = logging.getLogger(__name__)

RUN_OPTIONS = ("verbose", "email", "progress", "subject", "input", "output", "fork", "thread")

# Run options that are streams, not values worth rendering.
_UNRENDERED = ("input", "output")


class Pipeline:
    """Ordered Commands plus run semantics."""

    def __init__(self):
        self.commands: List[Command] = []
        self.options: Dict[str, Any] = {}
        self.complete = False

    def add(self, name: str, **options: Any) -> "Pipeline":
        """Append command ``name`` configured with ``options``.

        Options are validated here; a bad option raises OptionError before
        anything runs.
        """
        try:
            factory = get_command(name)
        except KeyError:
            raise PipelineError(f"No such command: {name}") from None

        options_orig = copy.deepcopy(options)
        options = options_load_rc(dict(options), name)
        command = factory(options)
        self.commands.append(Command(name, options, options_orig, command.lmb))
        return self

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in COMMANDS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

        def builder(**options: Any) -> "Pipeline":
            return self.add(name, **options)

        builder.__name__ = name
        return builder

    def size(self) -> int:
        return len(self.commands)

    def __len__(self) -> int:
        return self.size()

    def __lshift__(self, other: "Pipeline") -> "Pipeline":
        """Append the commands of ``other`` in place."""
        if not isinstance(other, Pipeline):
            return NotImplemented
        self.commands.extend(other.commands)
        return self

    def __add__(self, other: "Pipeline") -> "Pipeline":
        """Return a new Pipeline with the commands of self then ``other``."""
        if not isinstance(other, Pipeline):
            return NotImplemented
        pipeline = Pipeline()
        pipeline.commands = self.commands + other.commands
        return pipeline

    def pop(self) -> "Pipeline":
        """Remove the last Command and return it as a one-Command Pipeline."""
        pipeline = Pipeline()
        if self.commands:
            pipeline.commands.append(self.commands.pop())
        return pipeline

    @property
    def status(self) -> List[Status]:
        return [command.status for command in self.commands]

    def run(self, **options: Any) -> "Pipeline":
        """Run the pipeline.

        Options:
            input:    Iterable of records fed to the first command.
            output:   Stream writer receiving the records of the last command.
            fork:     Run each command after the first in a forked process.
            thread:   Run each command after the first in a thread.
            verbose:  Print the status of every command afterwards.
            progress: Show live status on stderr while running.
            email:    Send the rendered pipeline and status to this address.
            subject:  Mail subject (default: the rendered pipeline).

        Errors are re-raised in the test environment (BIOPIPE_ENV=test) and
        with BIOPIPE_DEBUG; otherwise they are reported, logged and end the
        process with exit code 2.
        """
        if not self.commands:
            raise PipelineError("No commands added to pipeline")
        self.check_run_options(options)

        settings = get_settings()
        self.options = options
        self.complete = True
        strategy = select_strategy(fork=bool(options.get("fork")), thread=bool(options.get("thread")))

        try:
            logger.debug("running %s with %s strategy", self, strategy.name)
            if options.get("progress"):
                with status_progress(lambda: self.status):
                    strategy.execute(self.commands, options.get("input"), options.get("output"))
            else:
                strategy.execute(self.commands, options.get("input"), options.get("output"))

            if options.get("verbose"):
                click.echo(pformat(self.status, sort_dicts=False), err=True)

            if options.get("email"):
                self.send_email(options["email"], options.get("subject"))

            log_ok(self)
        except Exception as exc:
            if settings.is_test or settings.debug:
                raise

            click.echo(f"Error in run: {exc}", err=True)
            if options.get("verbose"):
                click.echo(traceback.format_exc(), err=True)
            log_error(self, exc)
            sys.exit(2)
        finally:
            history_save(self)

        return self

    @staticmethod
    def check_run_options(options: Dict[str, Any]) -> None:
        options_allowed(options, *RUN_OPTIONS)
        options_allowed_values(options, {"fork": [True, False], "thread": [True, False]})
        options_conflict(options, {"fork": "thread"})
        options_tie(options, {"subject": "email"})

    def send_email(self, to: str, subject: Optional[str] = None) -> None:
        body = f"{self}\n\n{format_status(self.status)}\n"
        mail.send(to, subject or str(self), body)

    def __str__(self) -> str:
        text = "BP()" + "".join(str(command) for command in self.commands)
        if self.complete:
            options = ", ".join(
                f"{key}={render_value(value)}"
                for key, value in self.options.items()
                if key not in _UNRENDERED
            )
            text += f".run({options})"
        return text

    def __repr__(self) -> str:
        return f"<Pipeline {self}>"


BP = Pipeline

__all__ = ["BP", "Pipeline", "RUN_OPTIONS"]
