"""Shared plumbing for commands that wrap an external program.

A tool command streams its input, spools the records holding a ``SEQ`` to
a temporary FASTA file for the program, runs the program and turns its
output back into records.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from ..seq import Seq
from ..seq.fasta import Fasta
from ..status import Status

Record = Dict[str, Any]


def spool_fasta(
    input: Iterable[Record],
    path: str,
    status: Status,
    pass_all: bool = False,
    name: Optional[Callable[[Record, int], str]] = None,
) -> Iterator[Record]:
    """Write sequence records to ``path`` as FASTA, yielding pass-through records.

    Records without ``SEQ`` are always yielded. With ``pass_all`` the
    sequence records are yielded as well. ``name`` builds the FASTA header
    from the record and its index; the default is SEQ_NAME or the index.
    """
    with Fasta.open(path, "w") as writer:
        for i, record in enumerate(input):
            status["records_in"] += 1

            if record.get("SEQ") is not None:
                entry = Seq.from_record(record)
                entry.seq_name = name(record, i) if name else entry.seq_name or str(i)
                writer.write(entry)

                if "sequences_in" in status:
                    status["sequences_in"] += 1
                if "residues_in" in status:
                    status["residues_in"] += entry.length

                if not pass_all:
                    continue

            status["records_out"] += 1
            yield record


__all__ = ["spool_fasta"]
