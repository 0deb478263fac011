"""Pipeline definitions loaded from JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field, ValidationError

from ..errors import OptionError


class Step(BaseModel):
    """One command with its options."""

    command: str
    options: Dict[str, Any] = Field(default_factory=dict)


class PipelineSpec(BaseModel):
    """A named list of steps, run in order."""

    name: str = "pipeline"
    steps: List[Step]

    def build(self):
        """Build a Pipeline; command options are validated here."""
        from ..pipeline import Pipeline

        pipeline = Pipeline()
        for step in self.steps:
            pipeline.add(step.command, **step.options)
        return pipeline


def load_pipeline(path: Union[str, Path]) -> PipelineSpec:
    """Read a pipeline definition file.

    Example file::

        {"name": "filter",
         "steps": [{"command": "read_fasta", "options": {"input": "in.fna"}},
                   {"command": "grab", "options": {"select": "ATCG", "keys": "SEQ"}},
                   {"command": "write_fasta", "options": {"output": "out.fna"}}]}
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise OptionError(f"Malformed pipeline file {path}: {e}") from e

    try:
        return PipelineSpec.model_validate(data)
    except ValidationError as e:
        raise OptionError(f"Invalid pipeline file {path}: {e}") from e


__all__ = ["PipelineSpec", "Step", "load_pipeline"]
