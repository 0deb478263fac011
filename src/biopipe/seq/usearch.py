"""usearch invocation and .uc result parsing."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from ..config import get_settings
from ..errors import SeqError, UsearchError
from ..process_utils import run_tool

PROGRAM = "usearch"

# Known benign failure when every input record lacked a sequence.
EMPTY_INPUT = "Empty input file"

# uc columns: type, cluster, size/length, %id, strand, qlo, tlo, cigar,
# query label, target label
UC_FIELDS = ("TYPE", "CLUSTER", "SEQ_LEN", "IDENT", "STRAND", "Q_BEG", "S_BEG",
             "CIGAR", "Q_ID", "S_ID")
UC_SKIP = {"Q_BEG", "S_BEG"}


def parse_uc_line(line: str) -> Optional[Dict[str, Any]]:
    """Parse one .uc line; ``*`` fields are left out of the record."""
    line = line.rstrip("\r\n")
    if not line or line.startswith("#"):
        return None

    fields = line.split("\t")
    if len(fields) != len(UC_FIELDS):
        raise SeqError(f"Bad uc line with {len(fields)} fields: {line!r}")

    record: Dict[str, Any] = {}
    for key, value in zip(UC_FIELDS, fields):
        if key in UC_SKIP or value == "*":
            continue
        if key in ("CLUSTER", "SEQ_LEN"):
            record[key] = int(value)
        elif key == "IDENT":
            record[key] = float(value)
        else:
            record[key] = value
    return record


def read_uc(path: str) -> Iterator[Dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        for line in f:
            record = parse_uc_line(line)
            if record is not None:
                yield record


def _common(argv: List[Any], cpus: Optional[int]) -> List[Any]:
    if cpus:
        argv += ["-threads", cpus]
    if not get_settings().verbose:
        argv.append("-quiet")
    return argv


def _search(mode: str, input: str, output: str, database: str, identity: float,
            strand: Optional[str] = None, cpus: Optional[int] = None) -> None:
    argv: List[Any] = [PROGRAM, f"-{mode}", input, "-db", database,
                       "-strand", strand or "plus", "-id", identity, "-uc", output]
    run_tool(_common(argv, cpus), error=UsearchError, tolerate=[EMPTY_INPUT])


def usearch_global(input: str, output: str, database: str, identity: float,
                   strand: Optional[str] = None, cpus: Optional[int] = None) -> None:
    _search("usearch_global", input, output, database, identity, strand, cpus)


def usearch_local(input: str, output: str, database: str, identity: float,
                  strand: Optional[str] = None, cpus: Optional[int] = None) -> None:
    _search("usearch_local", input, output, database, identity, strand, cpus)


def cluster_otus(input: str, output: str) -> None:
    argv: List[Any] = [PROGRAM, "-cluster_otus", input, "-otus", output, "-sizein", "-sizeout"]
    run_tool(_common(argv, None), error=UsearchError, tolerate=[EMPTY_INPUT])


__all__ = [
    "EMPTY_INPUT",
    "cluster_otus",
    "parse_uc_line",
    "read_uc",
    "usearch_global",
    "usearch_local",
]
