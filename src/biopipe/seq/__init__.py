"""Sequence entries and their record form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..errors import SeqError


@dataclass
class Seq:
    """A named sequence with optional quality scores."""

    seq_name: Optional[str] = None
    seq: str = ""
    qual: Optional[str] = None

    def __post_init__(self):
        if self.qual is not None and len(self.qual) != len(self.seq):
            raise SeqError(
                f"Sequence length and score length mismatch: "
                f"{len(self.seq)} != {len(self.qual)}"
            )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Seq":
        """Build from a record with SEQ and optional SEQ_NAME/SCORES."""
        if record.get("SEQ") is None:
            raise SeqError(f"Missing SEQ in record: {record!r}")
        name = record.get("SEQ_NAME")
        return cls(
            seq_name=None if name is None else str(name),
            seq=str(record["SEQ"]),
            qual=record.get("SCORES"),
        )

    @property
    def length(self) -> int:
        return len(self.seq)

    def __len__(self) -> int:
        return self.length

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {}
        if self.seq_name is not None:
            record["SEQ_NAME"] = self.seq_name
        record["SEQ"] = self.seq
        record["SEQ_LEN"] = self.length
        if self.qual is not None:
            record["SCORES"] = self.qual
        return record

    def to_fasta(self, wrap: Optional[int] = None) -> str:
        if not self.seq_name:
            raise SeqError("Missing seq_name")
        if not self.seq:
            raise SeqError("Missing seq")

        if wrap:
            lines = [self.seq[i:i + wrap] for i in range(0, len(self.seq), wrap)]
            body = "\n".join(lines)
        else:
            body = self.seq
        return f">{self.seq_name}\n{body}\n"


__all__ = ["Seq"]
