"""Informational records from unified logging.

Collector selection banners, safepoint timing, startup configuration and the
per-phase detail lines printed inside a collection. Only safepoint records
carry timing; the rest are recognized so they are not reported as unparsed.
"""

from __future__ import annotations

from typing import Any

from gc_recognize.models import CpuTimes, DetailValue, EventKind
from gc_recognize.recognizers._base import (
    CAUSE,
    CPU,
    SECS,
    SIZE,
    UNIFIED_INNER,
    Recognizer,
    compile_all,
)
from gc_recognize.units import decode_nanos_to_micros, decode_seconds_to_micros

# ============================================================
# COLLECTOR BANNERS
# ============================================================


class UsingRecognizer(Recognizer):
    """``Using <collector>`` banner printed once at startup."""

    unified_only = True
    guard = ("Using ",)


class UsingSerialRecognizer(UsingRecognizer):
    kind = EventKind.USING_SERIAL
    grammars = compile_all(r"Using Serial")


class UsingParallelRecognizer(UsingRecognizer):
    kind = EventKind.USING_PARALLEL
    grammars = compile_all(r"Using Parallel")


class UsingCmsRecognizer(UsingRecognizer):
    kind = EventKind.USING_CMS
    grammars = compile_all(r"Using Concurrent Mark Sweep")


class UsingG1Recognizer(UsingRecognizer):
    kind = EventKind.USING_G1
    grammars = compile_all(r"Using G1")


class UsingShenandoahRecognizer(UsingRecognizer):
    kind = EventKind.USING_SHENANDOAH
    grammars = compile_all(r"Using Shenandoah")


class UsingZRecognizer(UsingRecognizer):
    kind = EventKind.USING_Z
    grammars = compile_all(r"Using (?:The )?Z Garbage Collector")


# ============================================================
# SAFEPOINTS
# ============================================================


class UnifiedSafepointRecognizer(Recognizer):
    """Safepoint timing, JDK 11 (three joined lines) or JDK 17 (one line).

    ``time_to_stop_threads_us`` is the time taken to reach the safepoint and
    ``time_threads_stopped_us`` the time spent at it.
    """

    kind = EventKind.UNIFIED_SAFEPOINT
    guard = ("safepoint", "Safepoint", "application threads were stopped")
    unified_only = True
    grammars = compile_all(
        # JDK 11, joined by the preprocessor
        rf"Entering safepoint region: (?P<trigger>\w+){UNIFIED_INNER}Leaving safepoint region"
        rf"{UNIFIED_INNER}Total time for which application threads were stopped: "
        rf"(?P<duration>{SECS}) seconds, Stopping threads took: (?P<stopping>{SECS}) seconds",
        # JDK 17
        r"Safepoint \"(?P<trigger>[^\"]+)\", Time since last: \d+ ns, "
        r"Reaching safepoint: (?P<reaching_ns>\d+) ns, At safepoint: (?P<at_ns>\d+) ns, "
        r"Total: (?P<total_ns>\d+) ns",
        # JDK 11 total line logged without the region lines
        rf"Total time for which application threads were stopped: (?P<duration>{SECS}) seconds, "
        rf"Stopping threads took: (?P<stopping>{SECS}) seconds",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        facts: dict[str, DetailValue] = {}
        if groups.get("trigger"):
            facts["operation"] = groups["trigger"]
        if groups.get("total_ns") is not None:
            facts["time_to_stop_threads_us"] = decode_nanos_to_micros(groups["reaching_ns"])
            facts["time_threads_stopped_us"] = decode_nanos_to_micros(groups["at_ns"])
        else:
            facts["time_to_stop_threads_us"] = decode_seconds_to_micros(groups["stopping"])
            facts["time_threads_stopped_us"] = decode_seconds_to_micros(groups["duration"])
        return facts

    def _extract_duration(self, groups: dict[str, Any], cpu: CpuTimes | None) -> int | None:
        if groups.get("total_ns") is not None:
            return decode_nanos_to_micros(groups["total_ns"])
        return super()._extract_duration(groups, cpu)


# ============================================================
# STARTUP CONFIGURATION
# ============================================================

GC_INFO_KEYS = (
    r"Version|CPUs|Memory|Large Page Support|NUMA Support|NUMA Nodes|Compressed Oops|"
    r"Compressed Class Space Size|Heap Region Size|Heap (?:Min|Initial|Max) Capacity|"
    r"(?:Min|Initial|Max|Soft Max) Capacity|Pre-touch|Parallel Workers|Concurrent Workers|"
    r"Concurrent Refinement Workers|Periodic GC|Runtime Workers|GC Workers|"
    r"Address Space (?:Type|Size)|Medium Page Size|Uncommit(?: Delay)?|Heap Backing File(?:system)?|"
    r"Available space on backing filesystem|Mark Stack Max|Narrow klass base|"
    r"CDS archive\(s\) mapped at|Heap address|Heuristics|Mode|Regions|"
    r"Humongous object threshold|Max TLAB size|GC threads|Shenandoah heuristics|"
    r"Initialize Shenandoah heap|Safepointing mechanism|Alignments"
)


class GcInfoRecognizer(Recognizer):
    """Startup configuration printed by the collector under ``gc,init``."""

    kind = EventKind.GC_INFO
    unified_only = True
    grammars = compile_all(
        rf"(?P<name>{GC_INFO_KEYS}): (?P<value>.+)",
        r"(?P<name>Initializing The Z Garbage Collector|CDS archive\(s\) not mapped|"
        r"Min heap equals to max heap|Probing address space for the highest valid bit|"
        r"Heuristics ergonomically sets .+)",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        facts: dict[str, DetailValue] = {"name": groups["name"]}
        if groups.get("value"):
            facts["value"] = groups["value"].strip()
        return facts


# ============================================================
# DETAIL LINES
# ============================================================

GENERATION_NAMES = (
    r"DefNew|Tenured|ParNew|CMS|PSYoungGen|ParOldGen|PSOldGen|Metaspace|Class Space|NonClass Space"
)
Z_STATISTICS = (
    r"Capacity|Free|Used|Live|Allocated|Garbage|Reclaimed|Reserve|Compacted|Promoted|"
    r"Mark Stack Usage|Load|MMU|Mark|Relocation|NMethods|Metaspace|Soft|Weak|Final|Phantom|"
    r"Forwarding Usage|Age Table|Heap Statistics|Memory"
)
SHENANDOAH_INFO = (
    r"Free|Pacer for \w+|Collection Set|Good progress for [\w ]+|Bad progress for [\w ]+|"
    r"Failed to allocate \w+|Adaptive CSet Selection|Evacuation Reserve|Uncommitted|"
    r"Immediate Garbage|Concurrent marking triggered|Collectable Garbage|Average MMU|"
    r"Humongous Allocations"
)


class UnifiedGcDetailRecognizer(Recognizer):
    """Lines inside a unified collection that carry no event of their own.

    Tried last: several of these shapes are prefixes of real pause records.
    """

    kind = EventKind.UNIFIED_GC_DETAIL
    unified_only = True
    grammars = compile_all(
        r"Using \d+ workers of \d+ for [\w ]+",
        r"(?:Eden|Survivor|Old|Humongous|Archive) regions: \d+->\d+(?:\(\d+\))?",
        # Phase timings, e.g. "  Evacuate Collection Set: 1.9ms", "Phase 1: Mark live objects 1.024ms"
        r"\s*[A-Z][\w /&():,-]*?:? \d+[.,]\d+ ?ms",
        # Pause start line with no data yet
        rf"Pause (?:Young|Full|Mixed|Initial Mark|Remark|Cleanup)(?: {CAUSE})*",
        rf"(?:{GENERATION_NAMES}): {SIZE}(?:\({SIZE}\))?->{SIZE}\({SIZE}\)(?: .*)?",
        rf"User={CPU}s Sys={CPU}s Real={CPU}s",
        r"(?:Entering|Leaving) safepoint region(?:: \w+)?",
        r"To-space exhausted|Evacuation Failure",
        rf"\s*(?:{Z_STATISTICS}):? .*",
        r"\s+Mark Start\s+Mark End\s+Relocate Start\s+Relocate End\s+High\s+Low\s*",
        rf"(?:{SHENANDOAH_INFO}):? .*",
        r"Heap after GC invocations=\d+ \(full \d+\):|Heap before GC invocations=\d+ \(full \d+\):",
        r"\s+(?:garbage-first heap|region size|Metaspace|class space|def new generation|"
        r"tenured generation|eden space|from space|to space|the space|PSYoungGen|ParOldGen|"
        r"PSOldGen|par new generation|concurrent mark-sweep generation|object space|"
        r"ZHeap|Shenandoah Heap)\b.*",
    )


class UnifiedBlankLineRecognizer(Recognizer):
    """Decorator followed by nothing, logged between heap blocks."""

    kind = EventKind.UNIFIED_BLANK_LINE
    unified_only = True
    grammars = compile_all(r"")
