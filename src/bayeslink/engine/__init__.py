"""Linkage engine: processor, settings and result writers."""

from bayeslink.engine.config import ProcessorSettings, ProcessorStats
from bayeslink.engine.output import write_results_jsonl
from bayeslink.engine.processor import LinkageProcessor, RecordState

__all__ = [
    "LinkageProcessor",
    "ProcessorSettings",
    "ProcessorStats",
    "RecordState",
    "write_results_jsonl",
]
