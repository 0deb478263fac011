"""Build a phylogenetic tree of the sequences in the stream.

Sequences (which should be aligned) are piped to ``FastTree`` and the
resulting Newick tree is written to ``output`` or stdout. All records
pass through.

Usage::

    write_tree([output=<file>[, force=<bool>]][, type=<dna|rna|protein>])

Options:
    output: Output file for the tree; default stdout.
    force:  Overwrite an existing output file.
    type:   Sequence type (default dna).
"""

from __future__ import annotations

import subprocess
import tempfile
from typing import Any, Dict, Iterable, Iterator, List

import click

from ..config import get_settings
from ..errors import ToolError
from ..options import (
    options_allowed,
    options_allowed_values,
    options_files_exist_force,
)
from ..process_utils import aux_exist, popen_with_validation
from ..seq import Seq
from ..status import Status, status_init

Record = Dict[str, Any]

PROGRAM = "FastTree"

STATS = ("records_in", "records_out", "sequences_in", "residues_in")


class WriteTree:
    """Pipe sequences to FastTree and write the tree."""

    def __init__(self, options: Dict[str, Any]):
        self.options = options

        options_allowed(options, "output", "force", "type")
        options_allowed_values(options, {
            "type": ["dna", "rna", "protein"],
            "force": [True, False],
        })
        options_files_exist_force(options, "output")
        aux_exist(PROGRAM)

    def command(self) -> List[str]:
        cmd = [PROGRAM]
        if self.options.get("type") != "protein":
            cmd.append("-nt")
        if not get_settings().verbose:
            cmd.append("-quiet")
        return cmd

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, STATS)

        # FastTree reads all of stdin before writing, so stdout and stderr
        # go to temp files rather than pipes that could fill up.
        with tempfile.TemporaryFile("w+") as out, tempfile.TemporaryFile("w+") as err:
            process = popen_with_validation(
                self.command(), stdin=subprocess.PIPE, stdout=out, stderr=err, text=True
            )
            try:
                for i, record in enumerate(input):
                    status["records_in"] += 1

                    if record.get("SEQ") is not None:
                        entry = Seq.from_record(record)
                        entry.seq_name = entry.seq_name or str(i)
                        process.stdin.write(entry.to_fasta())
                        status["sequences_in"] += 1
                        status["residues_in"] += entry.length

                    status["records_out"] += 1
                    yield record

                process.stdin.close()
                returncode = process.wait()
            finally:
                if process.poll() is None:
                    process.kill()
                    process.wait()

            if returncode != 0:
                err.seek(0)
                raise ToolError(self.command(), returncode, err.read())

            out.seek(0)
            self.write_tree(out.read().rstrip("\n"))

    def write_tree(self, tree: str) -> None:
        output = self.options.get("output")
        if output:
            with open(output, "w", encoding="utf-8") as f:
                f.write(tree + "\n")
        else:
            click.echo(tree)
