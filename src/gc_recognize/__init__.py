"""Recognition and preprocessing of JVM garbage collection logs."""

from __future__ import annotations

__version__ = "1.0.0"

from gc_recognize.classifier import KIND_FACTS, Classifier, KindFacts  # noqa: E402
from gc_recognize.config import ParserSettings  # noqa: E402
from gc_recognize.models import (  # noqa: E402
    CpuTimes,
    EventKind,
    GcEvent,
    MemoryUsage,
    PreprocessedLine,
    Region,
    RunSummary,
    Trigger,
)
from gc_recognize.pipeline import GcRun, analyze_file, analyze_lines  # noqa: E402
from gc_recognize.units import DecodeError  # noqa: E402

__all__ = [
    "KIND_FACTS",
    "Classifier",
    "CpuTimes",
    "DecodeError",
    "EventKind",
    "GcEvent",
    "GcRun",
    "KindFacts",
    "MemoryUsage",
    "ParserSettings",
    "PreprocessedLine",
    "Region",
    "RunSummary",
    "Trigger",
    "__version__",
    "analyze_file",
    "analyze_lines",
]
