"""Sort records in the stream.

``sort`` orders records by the value of one key. Records are collected in
blocks of at most ``block_size`` bytes (estimated from each record's text
form); every block is sorted and spilled to a temporary file, and the
blocks are merged with a priority queue. Memory use is bounded by the
block size regardless of stream length.

Usage::

    sort(key=<key>[, reverse=<bool>, block_size=<int>])

Options:
    key:        Key to sort on.
    reverse:    Reverse the sort order.
    block_size: Bytes collected before a block is spilled (default 250000000).

Examples:
    sort(key="COUNT")
    sort(key="SEQ_NAME", reverse=True)

Records with equal keys from different blocks come out in no particular
order; the merge is not stable.
"""

from __future__ import annotations

import heapq
import logging
import os
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..errors import RecordError
from ..options import (
    options_allowed,
    options_allowed_values,
    options_assert,
    options_required,
)
from ..serializer import Serializer
from ..status import Status, status_init
from ..tmpdir import TmpDir

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

BLOCK_SIZE = 250_000_000


class _Entry:
    """Heap entry ordered by the sort value of its record only."""

    __slots__ = ("value", "record", "index", "reverse")

    def __init__(self, value: Any, record: Record, index: int, reverse: bool):
        self.value = value
        self.record = record
        self.index = index
        self.reverse = reverse

    def __lt__(self, other: "_Entry") -> bool:
        if self.reverse:
            return other.value < self.value
        return self.value < other.value


class Sort:
    """Sort records by a key, spilling sorted blocks to disk."""

    STATS = ("records_in", "records_out")

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options, "key", "reverse", "block_size")
        options_required(options, "key")
        options_allowed_values(options, {"reverse": [True, False]})
        options_assert(options, "block_size", ">", 0)

        self.key = str(options["key"]).lstrip(":")
        self.reverse = bool(options.get("reverse"))
        self.block_size = options.get("block_size") or BLOCK_SIZE
        self.value_type: Optional[type] = None

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, self.STATS)
        self.value_type = None

        with TmpDir.create() as (tmp_dir,):
            files: List[str] = []
            block: List[Record] = []
            size = 0

            for record in input:
                status["records_in"] += 1
                self._value(record)
                block.append(record)
                size += len(str(record))

                if size > self.block_size:
                    files.append(self.save_block(block, tmp_dir, len(files)))
                    block = []
                    size = 0

            if block:
                files.append(self.save_block(block, tmp_dir, len(files)))
            logger.debug("sort: %d records in %d blocks", status["records_in"], len(files))

            merged = self.merge(files)
            try:
                for record in merged:
                    status["records_out"] += 1
                    yield record
            finally:
                merged.close()

    def _value(self, record: Record) -> Any:
        if self.key not in record or record[self.key] is None:
            raise RecordError(f"Sort key {self.key} missing in record: {record!r}")

        value = record[self.key]
        # int and float compare fine with each other
        kind = float if isinstance(value, (int, float)) and not isinstance(value, bool) else type(value)
        if self.value_type is None:
            self.value_type = kind
        elif kind is not self.value_type:
            raise RecordError(
                f"Mixed value types for sort key {self.key}: "
                f"{self.value_type.__name__} and {type(value).__name__}"
            )
        return value

    def save_block(self, block: List[Record], tmp_dir: str, index: int) -> str:
        """Sort ``block`` and write it to a new spill file; return its path."""
        block.sort(key=lambda record: record[self.key], reverse=self.reverse)

        path = os.path.join(tmp_dir, f"block_{index}.dat")
        with open(path, "wb") as f, Serializer(f) as serializer:
            for record in block:
                serializer.write(record)
        return path

    def merge(self, files: List[str]) -> Iterator[Record]:
        """K-way merge of the sorted spill files."""
        handles = [open(path, "rb") for path in files]
        try:
            readers = [Serializer(handle) for handle in handles]
            queue: List[_Entry] = []

            for index, reader in enumerate(readers):
                record = reader.read()
                if record is not None:
                    queue.append(_Entry(record[self.key], record, index, self.reverse))
            heapq.heapify(queue)

            while queue:
                entry = queue[0]
                yield entry.record

                record = readers[entry.index].read()
                if record is None:
                    heapq.heappop(queue)
                else:
                    heapq.heapreplace(
                        queue, _Entry(record[self.key], record, entry.index, self.reverse)
                    )
        finally:
            for handle in handles:
                handle.close()


__all__ = ["BLOCK_SIZE", "Sort"]
