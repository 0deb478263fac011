"""Read FASTA entries from one or more files.

Usage::

    read_fasta(input=<glob>[, first=<uint>])

Options:
    input: Path, glob or list of paths to FASTA files (gzip is detected).
    first: Only read in the first number of entries.

Records already in the stream pass through first; every FASTA entry then
becomes a record::

    {"SEQ_NAME": "test1", "SEQ": "atcg", "SEQ_LEN": 4}
"""

from __future__ import annotations

import glob
import os
from typing import Any, Dict, Iterable, Iterator, List

from ..options import (
    options_allowed,
    options_assert,
    options_files_exist,
    options_required,
    to_list,
)
from ..seq.fasta import Fasta
from ..status import Status, status_init

Record = Dict[str, Any]

STATS = ("records_in", "records_out", "sequences_in", "sequences_out",
         "residues_in", "residues_out")


def expand_paths(value: Any) -> List[str]:
    """Expand a path, glob or list of either into sorted file paths."""
    paths: List[str] = []
    for pattern in to_list(value):
        paths.extend(sorted(glob.glob(os.path.expanduser(str(pattern)))))
    return paths


class ReadFasta:
    """Read FASTA files into sequence records."""

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options, "input", "first")
        options_required(options, "input")
        options_files_exist(options, "input")
        options_assert(options, "first", ">=", 0)
        self.input = options["input"]
        self.first = options.get("first")

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        for record in input:
            status["records_in"] += 1
            status["records_out"] += 1
            yield record

        count = 0
        for path in expand_paths(self.input):
            with Fasta.open(path) as reader:
                for entry in reader:
                    if self.first is not None and count >= self.first:
                        return
                    count += 1

                    status["sequences_in"] += 1
                    status["sequences_out"] += 1
                    status["residues_in"] += entry.length
                    status["residues_out"] += entry.length
                    status["records_out"] += 1
                    yield entry.to_record()
