"""biopipe - record streaming pipelines for sequence data."""

from .errors import (
    AuxError,
    BiopipeError,
    ClosedStreamError,
    OptionError,
    PipelineError,
    RecordError,
    SeqError,
    SerializerError,
    StreamError,
    ToolError,
    UsearchError,
)
from .pipeline import BP, Pipeline
from .stream import Stream

__version__ = "0.1.0"

__all__ = [
    "AuxError",
    "BP",
    "BiopipeError",
    "ClosedStreamError",
    "OptionError",
    "Pipeline",
    "PipelineError",
    "RecordError",
    "SeqError",
    "SerializerError",
    "Stream",
    "StreamError",
    "ToolError",
    "UsearchError",
    "__version__",
]
