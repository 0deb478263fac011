"""FASTA reading and writing."""

from __future__ import annotations

import gzip
import io
from contextlib import contextmanager
from typing import IO, Iterator, List, Optional

from ..errors import SeqError
from . import Seq

_GZIP_MAGIC = b"\x1f\x8b"


def _open_text(path: str, mode: str) -> IO[str]:
    if "r" in mode:
        with open(path, "rb") as handle:
            magic = handle.read(2)
        if magic == _GZIP_MAGIC:
            return io.TextIOWrapper(gzip.open(path, "rb"), encoding="utf-8")
        return open(path, "r", encoding="utf-8")
    if path.endswith(".gz"):
        return io.TextIOWrapper(gzip.open(path, "wb"), encoding="utf-8")
    return open(path, mode, encoding="utf-8")


class FastaReader:
    """Iterate Seq entries from a FASTA text stream.

    The full header line (without '>') is kept as the entry name.
    """

    def __init__(self, io: IO[str]):
        self.io = io

    def __iter__(self) -> Iterator[Seq]:
        name: Optional[str] = None
        chunks: List[str] = []

        for line in self.io:
            line = line.rstrip("\r\n")
            if not line:
                continue
            if line.startswith(">"):
                if name is not None:
                    yield self._entry(name, chunks)
                name = line[1:].strip()
                chunks = []
            elif name is None:
                raise SeqError(f"Bad FASTA format, sequence before header: {line!r}")
            else:
                chunks.append(line.strip())

        if name is not None:
            yield self._entry(name, chunks)

    @staticmethod
    def _entry(name: str, chunks: List[str]) -> Seq:
        if not name:
            raise SeqError("Bad FASTA format, missing seq_name")
        return Seq(seq_name=name, seq="".join(chunks))


class FastaWriter:
    def __init__(self, io: IO[str], wrap: Optional[int] = None):
        self.io = io
        self.wrap = wrap

    def write(self, entry: Seq) -> None:
        self.io.write(entry.to_fasta(self.wrap))


class Fasta:
    @staticmethod
    @contextmanager
    def open(path: str, mode: str = "r", wrap: Optional[int] = None):
        """Open a FASTA file for reading (gzip detected) or writing."""
        handle = _open_text(str(path), mode)
        try:
            if "r" in mode:
                yield FastaReader(handle)
            else:
                yield FastaWriter(handle, wrap=wrap)
        finally:
            handle.close()

    @staticmethod
    def read(path: str) -> List[Seq]:
        with Fasta.open(path) as reader:
            return list(reader)


__all__ = ["Fasta", "FastaReader", "FastaWriter"]
