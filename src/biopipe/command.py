"""A configured, executable pipeline stage."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional

from .status import Status, status_start, status_stop
from .stream import close_if_closable

Record = Dict[str, Any]
Lambda = Callable[[Iterable[Record], Status], Iterator[Record]]


def render_value(value: Any) -> str:
    """Render an option value as Python source."""
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return repr(value)


class Command:
    """One pipeline stage.

    ``lmb`` is a generator function ``lmb(input, status)`` that consumes
    records from ``input`` and yields output records. Options were
    validated before the Command was built; ``options_orig`` keeps what
    the user typed, for rendering.
    """

    def __init__(
        self,
        name: str,
        options: Optional[Mapping[str, Any]],
        options_orig: Optional[Mapping[str, Any]],
        lmb: Lambda,
    ):
        self.name = name
        self.options = MappingProxyType(dict(options or {}))
        self.options_orig = dict(options_orig or {})
        self.lmb = lmb
        self.status: Status = {}

    def each(self, input: Optional[Iterable[Record]]) -> Iterator[Record]:
        """Lazily yield this command's output records."""
        records = self._start(input)
        try:
            yield from records
            status_stop(self.status)
        finally:
            records.close()
            close_if_closable(input)

    def run(self, input: Optional[Iterable[Record]], output: Any) -> Status:
        """Drive the command, writing every output record to ``output``.

        ``output`` may be None, in which case records are discarded. Input
        and output are closed on every exit path.
        """
        try:
            records = self._start(input)
            try:
                for record in records:
                    if output is not None:
                        output.write(record)
            finally:
                records.close()
            status_stop(self.status)
            return self.status
        finally:
            close_if_closable(input)
            close_if_closable(output)

    def _start(self, input: Optional[Iterable[Record]]) -> Iterator[Record]:
        self.status["name"] = self.name
        status_start(self.status)
        return self.lmb(input if input is not None else [], self.status)

    def __str__(self) -> str:
        if not self.options_orig:
            return f".{self.name}()"
        options = ", ".join(
            f"{key}={render_value(value)}" for key, value in self.options_orig.items()
        )
        return f".{self.name}({options})"

    def __repr__(self) -> str:
        return f"<Command{self}>"


__all__ = ["Command", "Lambda", "render_value"]
