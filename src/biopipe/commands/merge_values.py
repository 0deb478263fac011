"""Merge values of specified keys.

``merge_values`` joins the values of ``keys`` with ``delimiter`` and stores
the result under the first key. Records lacking any of the keys pass
unchanged.

Usage::

    merge_values(keys=<list>[, delimiter=<string>])

Example::

    merge_values(keys=["ID", "COUNT"], delimiter=":")
    {"ID": "FOO", "COUNT": 10} -> {"ID": "FOO:10", "COUNT": 10}
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator

from ..options import options_allowed, options_required, to_keys
from ..status import Status, status_init

Record = Dict[str, Any]


class MergeValues:
    """Join the values of several keys into the first one."""

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options, "keys", "delimiter")
        options_required(options, "keys")
        self.keys = to_keys(options["keys"])
        self.delimiter = str(options.get("delimiter", "_"))

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status)

        for record in input:
            status["records_in"] += 1

            if all(key in record for key in self.keys):
                values = [str(record[key]) for key in self.keys]
                record[self.keys[0]] = self.delimiter.join(values)

            status["records_out"] += 1
            yield record
