"""Write sequences from the stream in FASTA format.

Usage::

    write_fasta([output=<file>[, force=<bool>, wrap=<uint>]])

Options:
    output: Output file; ``.gz`` suffix writes gzip. Default stdout.
    force:  Overwrite an existing output file.
    wrap:   Wrap sequence lines at this width.

Records with a ``SEQ`` key are written; all records pass through.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional

from ..options import (
    options_allowed,
    options_allowed_values,
    options_assert,
    options_files_exist_force,
)
from ..seq import Seq
from ..seq.fasta import Fasta, FastaWriter
from ..status import Status, status_init

Record = Dict[str, Any]

STATS = ("records_in", "records_out", "sequences_in", "sequences_out",
         "residues_in", "residues_out")


class WriteFasta:
    """Write sequence records as FASTA."""

    def __init__(self, options: Dict[str, Any]):
        options_allowed(options, "output", "force", "wrap")
        options_allowed_values(options, {"force": [True, False]})
        options_files_exist_force(options, "output")
        options_assert(options, "wrap", ">", 0)
        self.output: Optional[str] = options.get("output")
        self.wrap = options.get("wrap")

    @contextmanager
    def _writer(self) -> Iterator[FastaWriter]:
        if self.output:
            with Fasta.open(self.output, "w", wrap=self.wrap) as writer:
                yield writer
        else:
            yield FastaWriter(sys.stdout, wrap=self.wrap)

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        with self._writer() as writer:
            for i, record in enumerate(input):
                status["records_in"] += 1

                if record.get("SEQ") is not None:
                    entry = Seq.from_record(record)
                    if not entry.seq_name:
                        entry.seq_name = str(i)
                    writer.write(entry)

                    status["sequences_in"] += 1
                    status["sequences_out"] += 1
                    status["residues_in"] += entry.length
                    status["residues_out"] += entry.length

                status["records_out"] += 1
                yield record
