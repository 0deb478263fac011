"""Write an OTU table in BIOM format.

Records holding both ``OTU`` and ``TAXONOMY`` make up the table; it is
converted with ``biom convert`` into a JSON BIOM file. All records pass
through.

Usage::

    write_biom(output=<file>[, force=<bool>])

Options:
    output: Output BIOM file.
    force:  Overwrite an existing output file.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, Iterator, List

from ..options import (
    options_allowed,
    options_allowed_values,
    options_files_exist_force,
    options_required,
)
from ..process_utils import aux_exist, run_tool
from ..status import Status, status_init
from ..tmpdir import TmpDir

Record = Dict[str, Any]

PROGRAM = "biom"


class WriteBiom:
    """Convert OTU records to a BIOM table."""

    def __init__(self, options: Dict[str, Any]):
        self.options = options

        options_allowed(options, "output", "force")
        options_required(options, "output")
        options_allowed_values(options, {"force": [True, False]})
        options_files_exist_force(options, "output")
        aux_exist(PROGRAM)

    def command(self, table: str) -> List[str]:
        return [PROGRAM, "convert", "-i", table, "-o", self.options["output"],
                "--table-type", "OTU table", "--to-json"]

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status)

        with TmpDir.create("otu_table.txt") as (table, _):
            header = False
            with open(table, "w", encoding="utf-8") as f:
                for record in input:
                    status["records_in"] += 1

                    if record.get("OTU") is not None and record.get("TAXONOMY") is not None:
                        if not header:
                            f.write("#" + "\t".join(record.keys()) + "\n")
                            header = True
                        f.write("\t".join(str(v) for v in record.values()) + "\n")

                    status["records_out"] += 1
                    yield record

            if self.options.get("force") and os.path.exists(self.options["output"]):
                os.unlink(self.options["output"])

            run_tool(self.command(table))
