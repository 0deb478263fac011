"""Cluster sequences into OTUs with usearch.

Sequence records must carry ``SEQ_COUNT`` (for example from
dereplication); the count is passed to usearch as ``;size=N``. Records
without a sequence pass through first, then the OTU sequences follow
with ``SEQ_COUNT`` read back from their size annotation.

Usage::

    cluster_otus()
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Iterable, Iterator

from ..errors import SeqError
from ..options import options_allowed
from ..process_utils import aux_exist
from ..seq import usearch
from ..seq.fasta import Fasta
from ..status import Status, status_init
from ..tmpdir import TmpDir
from .tools import spool_fasta

Record = Dict[str, Any]

STATS = ("records_in", "records_out", "sequences_in", "sequences_out")

_SIZE = re.compile(r";size=(\d+);?$")


def _sized_name(record: Record, i: int) -> str:
    if record.get("SEQ_COUNT") is None:
        raise SeqError(f"Missing SEQ_COUNT in record: {record!r}")
    name = record.get("SEQ_NAME") or str(i)
    return f"{name};size={record['SEQ_COUNT']}"


class ClusterOtus:
    """Cluster sequences into OTUs."""

    def __init__(self, options: Dict[str, Any]):
        aux_exist(usearch.PROGRAM)
        options_allowed(options)

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        with TmpDir.create("in.fna", "out.fna") as (tmp_in, tmp_out, _):
            yield from spool_fasta(input, tmp_in, status, name=_sized_name)

            if status["sequences_in"] == 0:
                return

            usearch.cluster_otus(input=tmp_in, output=tmp_out)
            if not os.path.exists(tmp_out):
                return

            with Fasta.open(tmp_out) as reader:
                for entry in reader:
                    match = _SIZE.search(entry.seq_name)
                    if not match:
                        raise SeqError(f"Missing size in SEQ_NAME: {entry.seq_name}")

                    record = entry.to_record()
                    record["SEQ_NAME"] = entry.seq_name[:match.start()]
                    record["SEQ_COUNT"] = int(match.group(1))

                    status["sequences_out"] += 1
                    status["records_out"] += 1
                    yield record
