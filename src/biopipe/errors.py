"""Exception hierarchy shared across biopipe layers."""

from __future__ import annotations

from typing import Sequence


class BiopipeError(Exception):
    """Base class for all biopipe errors."""


class OptionError(BiopipeError):
    """Invalid, missing or conflicting options."""


class AuxError(OptionError):
    """Required external program is not installed."""


class PipelineError(BiopipeError):
    """Structural misuse of a Pipeline or a failed pipeline stage."""


class StreamError(BiopipeError):
    """Error on a record stream."""


class ClosedStreamError(StreamError):
    """Write attempted on a closed stream."""


class SerializerError(BiopipeError):
    """Malformed serialized record data."""


class RecordError(BiopipeError):
    """Record content unusable by a command."""


class SeqError(BiopipeError):
    """Malformed sequence data."""


class ToolError(BiopipeError):
    """External program exited with non-zero status."""

    def __init__(
        self,
        cmd: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        message = f"{' '.join(self.cmd)} failed with exit code {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class UsearchError(ToolError):
    """usearch exited with non-zero status."""


__all__ = [
    "AuxError",
    "BiopipeError",
    "ClosedStreamError",
    "OptionError",
    "PipelineError",
    "RecordError",
    "SeqError",
    "SerializerError",
    "StreamError",
    "ToolError",
    "UsearchError",
]
