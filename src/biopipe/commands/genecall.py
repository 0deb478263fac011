"""Genecall sequences in the stream with prodigal.

Records without a sequence pass through first. The sequences are
genecalled and every predicted gene follows as a protein record::

    {"RECORD_TYPE": "gene", "S_ID": "contig1", "S_BEG": 0, "S_END": 314,
     "S_LEN": 315, "STRAND": "+", "SEQ": "MKV...", "SEQ_LEN": 105}

Usage::

    genecall([procedure=<single|meta>, closed_ends=<bool>, masked=<bool>])

Options:
    procedure:   single genome or metagenome (default single).
    closed_ends: Do not allow genes to run off the sequence edges.
    masked:      Treat runs of N as masked sequence.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, Iterator, List

from ..config import get_settings
from ..errors import SeqError
from ..options import options_allowed, options_allowed_values
from ..process_utils import aux_exist, run_tool
from ..seq import Seq
from ..seq.fasta import Fasta
from ..status import Status, status_init
from ..tmpdir import TmpDir
from .tools import spool_fasta

Record = Dict[str, Any]

PROGRAM = "prodigal"

STATS = ("records_in", "records_out", "sequences_in", "sequences_out",
         "residues_in", "residues_out")


def parse_gene(entry: Seq) -> Record:
    """Turn a prodigal protein entry into a gene record.

    Headers look like ``contig1_1 # 1 # 315 # 1 # ID=1_1;...``; the first
    field is the contig name with a gene number appended.
    """
    fields = entry.seq_name.split(" # ")
    if len(fields) < 4:
        raise SeqError(f"Bad prodigal header: {entry.seq_name!r}")

    beg = int(fields[1]) - 1
    end = int(fields[2]) - 1
    return {
        "RECORD_TYPE": "gene",
        "S_ID": fields[0],
        "S_BEG": beg,
        "S_END": end,
        "S_LEN": end - beg + 1,
        "STRAND": "+" if fields[3] == "1" else "-",
        "SEQ": entry.seq,
        "SEQ_LEN": entry.length,
    }


class Genecall:
    """Predict genes with prodigal."""

    def __init__(self, options: Dict[str, Any]):
        options.setdefault("procedure", "single")
        self.options = options

        aux_exist(PROGRAM)
        options_allowed(options, "procedure", "closed_ends", "masked")
        options_allowed_values(options, {
            "procedure": ["single", "meta"],
            "closed_ends": [True, False],
            "masked": [True, False],
        })

    def command(self, tmp_fa: str, tmp_aa: str) -> List[Any]:
        cmd: List[Any] = [PROGRAM, "-f", "gff"]
        if self.options.get("closed_ends"):
            cmd.append("-c")
        if self.options.get("masked"):
            cmd.append("-m")
        cmd += ["-p", self.options["procedure"], "-i", tmp_fa, "-a", tmp_aa]
        if not get_settings().verbose:
            cmd.append("-q")
        return cmd

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        with TmpDir.create("in.fna", "out.faa") as (tmp_fa, tmp_aa, _):
            yield from spool_fasta(input, tmp_fa, status)

            if status["sequences_in"] == 0:
                return

            run_tool(self.command(tmp_fa, tmp_aa))
            if not os.path.exists(tmp_aa):
                return

            with Fasta.open(tmp_aa) as reader:
                for entry in reader:
                    status["sequences_out"] += 1
                    status["residues_out"] += entry.length
                    status["records_out"] += 1
                    yield parse_gene(entry)
