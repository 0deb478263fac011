"""Registry of pipeline commands.

Every command is a class built from its option mapping. Construction
validates the options (and checks for required external programs); the
``lmb(input, status)`` generator method is the command's logic.
"""

from __future__ import annotations

import sys
from typing import Dict, List, Tuple, Type

from .cluster_otus import ClusterOtus
from .collect_otus import CollectOtus
from .dump import Dump
from .genecall import Genecall
from .grab import Grab
from .merge_values import MergeValues
from .read_fasta import ReadFasta
from .sort import Sort
from .usearch_global import UsearchGlobal
from .usearch_local import UsearchLocal
from .write_biom import WriteBiom
from .write_fasta import WriteFasta
from .write_tree import WriteTree

COMMANDS: Dict[str, Type] = {
    "cluster_otus": ClusterOtus,
    "collect_otus": CollectOtus,
    "dump": Dump,
    "genecall": Genecall,
    "grab": Grab,
    "merge_values": MergeValues,
    "read_fasta": ReadFasta,
    "sort": Sort,
    "usearch_global": UsearchGlobal,
    "usearch_local": UsearchLocal,
    "write_biom": WriteBiom,
    "write_fasta": WriteFasta,
    "write_tree": WriteTree,
}


def get_command(name: str) -> Type:
    """Return the command class registered under ``name``.

    Raises:
        KeyError: If no such command exists
    """
    return COMMANDS[name]


def summary(name: str) -> str:
    """First line of the command module's documentation."""
    command = COMMANDS[name]
    doc = sys.modules[command.__module__].__doc__ or command.__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


def list_commands() -> List[Tuple[str, str]]:
    """Return (name, summary) for every command, sorted by name."""
    return [(name, summary(name)) for name in sorted(COMMANDS)]


__all__ = ["COMMANDS", "get_command", "list_commands", "summary"]
