"""Pipeline execution strategies.

Three interchangeable ways to wire Commands together:

- EnumerateStrategy: a chain of lazy generators in the calling thread.
- ForkStrategy: one forked OS process per Command after the first,
  connected by OS pipes carrying serialized records.
- ThreadStrategy: one thread per Command after the first, connected by
  in-memory queue pipes.

Fork and Thread share their wiring in ChainedStrategy: walk the Commands
after the first in reverse, give each a fresh pipe as input and the
previously built stage (or the pipeline output) as output, run the first
Command in the caller feeding the head of the chain, then join every unit.
"""

from __future__ import annotations

import logging
import multiprocessing
import threading
import traceback
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .command import Command, Record
from .errors import ClosedStreamError, PipelineError
from .stream import Stream, close_if_closable

logger = logging.getLogger(__name__)


@dataclass
class Failure:
    """A failed Command and what went wrong."""

    command: Command
    message: str
    closed_stream: bool = False
    exception: Optional[BaseException] = None
    details: str = ""


class Strategy:
    """Drive a list of Commands from ``input`` to ``output``."""

    name = "strategy"

    def execute(
        self,
        commands: Sequence[Command],
        input: Optional[Iterable[Record]],
        output: Any,
    ) -> None:
        raise NotImplementedError


class EnumerateStrategy(Strategy):
    """Single-threaded pull chain.

    Draining the last generator drives the whole chain; each ``next`` pulls
    one record through every upstream stage on demand.
    """

    name = "enumerate"

    def execute(self, commands, input, output) -> None:
        chain: Optional[Iterable[Record]] = input
        generators = []
        for command in commands:
            chain = command.each(chain)
            generators.append(chain)

        try:
            for record in chain:
                if output is not None:
                    output.write(record)
        finally:
            for generator in reversed(generators):
                generator.close()
            close_if_closable(output)


class ChainedStrategy(Strategy):
    """Reverse wiring shared by the concurrent strategies.

    Subclasses supply the primitives:
        connect()  -> (reader, writer) pair between two stages
        spawn()    -> start a unit running ``command.run(reader, writer)``
        release()  -> drop the caller's handle on a stream end a unit owns
        join()     -> wait for a unit, returning its Failure or None
    """

    def connect(self) -> Tuple[Any, Any]:
        raise NotImplementedError

    def spawn(self, command: Command, reader: Any, writer: Any, foreign: List[Any]) -> Any:
        raise NotImplementedError

    def release(self, end: Any) -> None:
        raise NotImplementedError

    def join(self, unit: Any) -> Optional[Failure]:
        raise NotImplementedError

    def execute(self, commands, input, output) -> None:
        units = []
        downstream = output

        try:
            for command in reversed(commands[1:]):
                reader, writer = self.connect()
                units.append(self.spawn(command, reader, downstream, foreign=[writer]))
                self.release(reader)
                self.release(downstream)
                downstream = writer
                logger.debug("%s: started %s", self.name, command.name)
        except BaseException:
            close_if_closable(downstream)
            for unit in units:
                self.join(unit)
            raise

        failures: List[Failure] = []
        try:
            commands[0].run(input, downstream)
        except Exception as exc:
            failures.append(
                Failure(
                    command=commands[0],
                    message=f"{type(exc).__name__}: {exc}",
                    closed_stream=isinstance(exc, ClosedStreamError),
                    exception=exc,
                )
            )

        for unit in reversed(units):
            failure = self.join(unit)
            if failure:
                failures.append(failure)

        if failures:
            self._raise(failures)

    def _raise(self, failures: List[Failure]) -> None:
        # A stage dying closes its input, which makes upstream writers fail
        # with ClosedStreamError. Report the stage that failed first. Forked
        # stages send back only a message, so they are wrapped in PipelineError.
        root = next((f for f in failures if not f.closed_stream), failures[0])
        if root.exception is not None:
            raise root.exception
        if root.details:
            logger.error("%s failed:\n%s", root.command.name, root.details)
        raise PipelineError(f"{root.command.name} failed: {root.message}")


@dataclass
class _ForkUnit:
    command: Command
    process: Any
    conn: Any


class ForkStrategy(ChainedStrategy):
    """One forked process per stage.

    Each child reports back over a private one-way pipe: either its final
    status, which is merged into the parent's Command, or its error.
    """

    name = "fork"

    def __init__(self):
        self.context = multiprocessing.get_context("fork")

    def connect(self):
        return Stream.pipe()

    def spawn(self, command, reader, writer, foreign):
        recv_conn, send_conn = self.context.Pipe(duplex=False)

        def target() -> None:
            for end in foreign:
                close_if_closable(end)
            recv_conn.close()
            try:
                status = command.run(reader, writer)
                send_conn.send(("ok", status))
            except BaseException as exc:
                send_conn.send(
                    (
                        "error",
                        f"{type(exc).__name__}: {exc}",
                        isinstance(exc, ClosedStreamError),
                        traceback.format_exc(),
                    )
                )
                raise SystemExit(1)
            finally:
                send_conn.close()

        process = self.context.Process(target=target, name=f"biopipe-{command.name}")
        process.start()
        send_conn.close()
        return _ForkUnit(command=command, process=process, conn=recv_conn)

    def release(self, end):
        close_if_closable(end)

    def join(self, unit: _ForkUnit) -> Optional[Failure]:
        try:
            result = unit.conn.recv()
        except EOFError:
            result = ("error", "process exited without reporting status", False, "")
        finally:
            unit.conn.close()
        unit.process.join()

        if result[0] == "ok":
            unit.command.status.update(result[1])
            return None

        _, message, closed_stream, details = result
        return Failure(
            command=unit.command,
            message=message,
            closed_stream=closed_stream,
            details=details,
        )


@dataclass
class _ThreadUnit:
    command: Command
    thread: Optional[threading.Thread] = None
    error: Optional[BaseException] = None
    details: str = field(default="", repr=False)


class ThreadStrategy(ChainedStrategy):
    """One thread per stage, sharing the address space."""

    name = "thread"

    def connect(self):
        return Stream.queue_pipe()

    def spawn(self, command, reader, writer, foreign):
        # ``foreign`` ends are shared with the caller; nothing to close here.
        unit = _ThreadUnit(command=command)

        def target() -> None:
            try:
                command.run(reader, writer)
            except BaseException as exc:
                unit.error = exc
                unit.details = traceback.format_exc()

        unit.thread = threading.Thread(target=target, name=f"biopipe-{command.name}")
        unit.thread.start()
        return unit

    def release(self, end):
        pass

    def join(self, unit: _ThreadUnit) -> Optional[Failure]:
        unit.thread.join()
        if unit.error is None:
            return None
        return Failure(
            command=unit.command,
            message=f"{type(unit.error).__name__}: {unit.error}",
            closed_stream=isinstance(unit.error, ClosedStreamError),
            exception=unit.error,
            details=unit.details,
        )


def select_strategy(fork: bool = False, thread: bool = False) -> Strategy:
    if fork:
        return ForkStrategy()
    if thread:
        return ThreadStrategy()
    return EnumerateStrategy()


__all__ = [
    "ChainedStrategy",
    "EnumerateStrategy",
    "Failure",
    "ForkStrategy",
    "Strategy",
    "ThreadStrategy",
    "select_strategy",
]
