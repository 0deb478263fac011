"""Binary record serialization.

Each record is stored as one frame: a 4-byte big-endian length followed by
the UTF-8 JSON encoding of the record. JSON keeps key order, and the length
prefix lets a reader pull exactly one record at a time, which the sort
merge and the process pipes depend on.
"""

from __future__ import annotations

import json
import struct
from typing import Any, BinaryIO, Dict, Iterator, Optional

from .errors import SerializerError

Record = Dict[str, Any]

_HEADER = struct.Struct(">I")


def dumps(record: Record) -> bytes:
    """Encode one record as a frame."""
    payload = json.dumps(record, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )
    return _HEADER.pack(len(payload)) + payload


class Serializer:
    """Read and write record frames on a binary file object.

    Usage:
        with open(path, "wb") as f, Serializer(f) as s:
            s.write(record)

        with open(path, "rb") as f:
            for record in Serializer(f):
                ...
    """

    def __init__(self, io: BinaryIO):
        self.io = io

    def __enter__(self) -> "Serializer":
        return self

    def __exit__(self, *exc: Any) -> None:
        if not self.io.closed and self.io.writable():
            self.io.flush()

    def write(self, record: Record) -> None:
        self.io.write(dumps(record))

    def read(self) -> Optional[Record]:
        """Return the next record, or None at end of file."""
        header = self._read_exactly(_HEADER.size)
        if header is None:
            return None

        (size,) = _HEADER.unpack(header)
        payload = self._read_exactly(size)
        if payload is None:
            raise SerializerError(f"Truncated record: expected {size} bytes")

        try:
            record = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerializerError(f"Malformed record: {e}") from e

        if not isinstance(record, dict):
            raise SerializerError(f"Not a record: {record!r}")
        return record

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.read()
            if record is None:
                return
            yield record

    def _read_exactly(self, size: int) -> Optional[bytes]:
        chunks = []
        remaining = size
        while remaining:
            chunk = self.io.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        data = b"".join(chunks)
        if not data and size:
            return None
        if len(data) < size:
            raise SerializerError(f"Truncated frame: expected {size} bytes, got {len(data)}")
        return data


__all__ = ["Record", "Serializer", "dumps"]
