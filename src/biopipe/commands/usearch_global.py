"""Run usearch_global on sequences in the stream.

``usearch_global`` searches every sequence in the stream against a
database with ``usearch -usearch_global``. All records pass through;
the hits follow as records tagged ``RECORD_TYPE: "usearch"`` with the
fields of the .uc format (TYPE, CLUSTER, SEQ_LEN, IDENT, STRAND, CIGAR,
Q_ID, S_ID).

Usage::

    usearch_global(database=<file>, identity=<float>
                   [, strand=<plus|both>, cpus=<uint>])

Options:
    database: Database FASTA file to search.
    identity: Minimum identity, 0 < identity <= 1.
    strand:   Strand to search (default plus).
    cpus:     Number of threads to use (default 1).
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterable, Iterator

from ..config import get_settings
from ..options import (
    options_allowed,
    options_allowed_values,
    options_assert,
    options_files_exist,
    options_required,
)
from ..process_utils import aux_exist
from ..seq import usearch
from ..status import Status, status_init
from ..tmpdir import TmpDir
from .tools import spool_fasta

Record = Dict[str, Any]

STATS = ("records_in", "records_out", "sequences_in", "hits_out")


class UsearchGlobal:
    """Global alignment search against a database."""

    search: Callable[..., None] = staticmethod(usearch.usearch_global)

    def __init__(self, options: Dict[str, Any]):
        options.setdefault("cpus", 1)
        self.options = options

        aux_exist(usearch.PROGRAM)
        options_allowed(options, "database", "identity", "strand", "cpus")
        options_required(options, "database", "identity")
        options_allowed_values(options, {"strand": ["plus", "both"]})
        options_files_exist(options, "database")
        options_assert(options, "identity", ">", 0.0)
        options_assert(options, "identity", "<=", 1.0)
        options_assert(options, "cpus", ">=", 1)
        options_assert(options, "cpus", "<=", get_settings().cores_max)

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        with TmpDir.create("in.fna", "out.uc") as (tmp_in, tmp_out, _):
            yield from spool_fasta(input, tmp_in, status, pass_all=True)

            if status["sequences_in"] == 0:
                return

            self.search(
                input=tmp_in,
                output=tmp_out,
                database=self.options["database"],
                identity=self.options["identity"],
                strand=self.options.get("strand"),
                cpus=self.options.get("cpus"),
            )

            # usearch writes nothing when it tolerated an empty input
            if not os.path.exists(tmp_out):
                return

            for record in usearch.read_uc(tmp_out):
                record["RECORD_TYPE"] = "usearch"
                status["hits_out"] += 1
                status["records_out"] += 1
                yield record
