"""Collector-agnostic records from legacy logging.

``-verbose:gc`` output without details, safepoint timing from
``-XX:+PrintGCApplicationStoppedTime`` / ``PrintGCApplicationConcurrentTime``
and a couple of one-line JVM notices.
"""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind
from gc_recognize.recognizers._base import (
    DURATION,
    SECS,
    TIMES,
    TRIGGER,
    Recognizer,
    compile_all,
    sizes,
)
from gc_recognize.units import decode_seconds_to_micros


class VerboseGcYoungRecognizer(Recognizer):
    kind = EventKind.VERBOSE_GC_YOUNG
    guard = ("[GC",)
    grammars = compile_all(
        rf"\[GC(?: \((?P<trigger>{TRIGGER})\))?(?:--)? {{1,2}}{sizes('heap')}, {DURATION}\]{TIMES}?",
    )


class VerboseGcOldRecognizer(Recognizer):
    kind = EventKind.VERBOSE_GC_OLD
    guard = ("[Full GC",)
    grammars = compile_all(
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {{1,2}}{sizes('heap')}, {DURATION}\]{TIMES}?",
    )


class ApplicationConcurrentTimeRecognizer(Recognizer):
    """Time the application ran between safepoints; not a pause."""

    kind = EventKind.APPLICATION_CONCURRENT_TIME
    guard = ("Application time:",)
    grammars = compile_all(rf"Application time: (?P<application>{SECS}) seconds")

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"application_time_us": decode_seconds_to_micros(groups["application"])}


class ApplicationStoppedTimeRecognizer(Recognizer):
    kind = EventKind.APPLICATION_STOPPED_TIME
    guard = ("application threads were stopped",)
    grammars = compile_all(
        rf"Total time for which application threads were stopped: (?P<duration>{SECS}) seconds"
        rf"(?:, Stopping threads took: (?P<stopping>{SECS}) seconds)?",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        facts: dict[str, DetailValue] = {
            "time_threads_stopped_us": decode_seconds_to_micros(groups["duration"])
        }
        if groups.get("stopping"):
            facts["time_to_stop_threads_us"] = decode_seconds_to_micros(groups["stopping"])
        return facts


class GcLockerRecognizer(Recognizer):
    kind = EventKind.GC_LOCKER
    guard = ("GC locker",)
    grammars = compile_all(r"GC locker: Trying a full collection because scavenge failed")


class GcOverheadLimitRecognizer(Recognizer):
    kind = EventKind.GC_OVERHEAD_LIMIT
    guard = ("GCTimeLimit",)
    grammars = compile_all(
        r"\s*GC time (?P<state>would exceed|is exceeding) GCTimeLimit of (?P<limit>\d{1,3})%",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"limit_percent": int(groups["limit"]), "exceeded": groups["state"] == "is exceeding"}
