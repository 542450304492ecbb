"""Source discovery pipeline."""

from .driver import Notifier, PipelineOptions, PipelineOutcome, PipelineState, SourcePipeline

__all__ = ["Notifier", "PipelineOptions", "PipelineOutcome", "PipelineState", "SourcePipeline"]
