"""Batch execution: routing state machine and reader/writer processor."""

from geohash_record.engine.processor import BatchProcessor, FlowOutput, ProcessorResult
from geohash_record.engine.router import BatchRouter, BatchRoutingRun

__all__ = [
    "BatchProcessor",
    "BatchRouter",
    "BatchRoutingRun",
    "FlowOutput",
    "ProcessorResult",
]
