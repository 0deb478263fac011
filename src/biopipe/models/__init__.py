"""Pydantic models for pipeline definition files."""

from .pipeline import PipelineSpec, Step, load_pipeline

__all__ = ["PipelineSpec", "Step", "load_pipeline"]
