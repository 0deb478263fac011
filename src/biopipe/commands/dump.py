"""Dump records in the stream to stdout.

Usage::

    dump([first=<uint>|last=<uint>])

Options:
    first: Only dump the first number of records.
    last:  Only dump the last number of records.

Every record is also passed downstream.
"""

from __future__ import annotations

import json
from collections import deque
from typing import Any, Deque, Dict, Iterable, Iterator

import click

from ..options import options_allowed, options_assert, options_unique
from ..status import Status, status_init

Record = Dict[str, Any]


def _echo(record: Record) -> None:
    click.echo(json.dumps(record, default=str))


class Dump:
    """Echo records to stdout and pass them on."""

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options, "first", "last")
        options_unique(options, "first", "last")
        options_assert(options, "first", ">", 0)
        options_assert(options, "last", ">", 0)
        self.first = options.get("first")
        self.last = options.get("last")

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status)

        if self.last:
            tail: Deque[Record] = deque(maxlen=self.last)
            for record in input:
                status["records_in"] += 1
                tail.append(record)
                status["records_out"] += 1
                yield record
            for record in tail:
                _echo(record)
            return

        for i, record in enumerate(input):
            status["records_in"] += 1
            if self.first is None or i < self.first:
                _echo(record)
            status["records_out"] += 1
            yield record
