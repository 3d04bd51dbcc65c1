"""Pause and concurrent records from JDK 9+ unified logging.

A unified collection is logged over several lines sharing a ``GC(n)`` id:

    [0.118s][info][gc,start     ] GC(0) Pause Young (Allocation Failure)
    [0.121s][info][gc,heap      ] GC(0) DefNew: 1022K->127K(1152K)
    [0.121s][info][gc,heap      ] GC(0) Tenured: 0K->1012K(2516K)
    [0.121s][info][gc,metaspace ] GC(0) Metaspace: 1389K->1389K(1056768K)
    [0.121s][info][gc           ] GC(0) Pause Young (Allocation Failure) 1M->1M(3M) 3.124ms
    [0.121s][info][gc,cpu       ] GC(0) User=0.00s Sys=0.00s Real=0.00s

The preprocessor joins them into one line stamped at the pause start with a
CPU trailer. A summary line on its own is stamped at the pause end, so its
start is derived from the duration.
"""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind, Trigger
from gc_recognize.recognizers._base import (
    DURATION_MS,
    TRIGGER,
    UNIFIED_METASPACE,
    UNIFIED_TIMES,
    Recognizer,
    compile_all,
    sizes,
    trigger_alt,
    unified_generation,
)

G1_TRIGGER = trigger_alt(
    Trigger.G1_EVACUATION_PAUSE,
    Trigger.G1_HUMONGOUS_ALLOCATION,
    Trigger.G1_PREVENTIVE_COLLECTION,
    Trigger.G1_COMPACTION_PAUSE,
)
EVACUATION_FAILURE = (
    rf"(?: \((?P<trigger_after>{trigger_alt(Trigger.EVACUATION_FAILURE)})\))?"
)

# JDK 17 adds per-space details after the young generation sizes
SPACE_DETAILS = r"(?: Eden: \S+ From: \S+)?"
METASPACE = rf"(?: {UNIFIED_METASPACE})?"


def generation(prefix: str, name: str) -> str:
    return rf" {unified_generation(prefix, name)}{SPACE_DETAILS}"


def generations(young: str, old: str) -> str:
    return f"{generation('young', young)}{generation('old', old)}{METASPACE}"


def unified_pause(heads: tuple[str, ...], bodies: tuple[str, ...] = ("",)) -> tuple[str, ...]:
    """Grammars for every head/body pairing of a pause record.

    The first form needs the summary sizes and duration; the second is a
    joined record whose summary line went missing, timed by its CPU trailer.
    """
    grammars: list[str] = []
    for head in heads:
        for body in bodies:
            grammars.append(rf"{head}{body} {sizes('heap')} {DURATION_MS}{UNIFIED_TIMES}?")
            grammars.append(rf"{head}{body}(?: {sizes('heap')})?{UNIFIED_TIMES}")
    return tuple(grammars)


class UnifiedPauseRecognizer(Recognizer):
    unified_only = True
    end_stamped = True


# ============================================================
# GENERATIONAL COLLECTORS
# ============================================================


YOUNG_HEAD = rf"Pause Young \((?P<trigger>{TRIGGER})\)"
FULL_HEAD = rf"Pause Full \((?P<trigger>{TRIGGER})\)"


class UnifiedSerialNewRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_SERIAL_NEW
    guard = ("DefNew:",)
    grammars = compile_all(*unified_pause((YOUNG_HEAD,), (generations("DefNew", "Tenured"),)))


class UnifiedSerialOldRecognizer(UnifiedPauseRecognizer):
    """Serial full collection, also used by the parallel and CMS collectors on failure."""

    kind = EventKind.UNIFIED_SERIAL_OLD
    guard = ("Pause Full",)
    grammars = compile_all(
        *unified_pause(
            (FULL_HEAD,),
            (
                generations("DefNew", "Tenured"),
                generations("PSYoungGen", "PSOldGen"),
                generations("ParNew", "CMS"),
            ),
        )
    )


class UnifiedParNewRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_PAR_NEW
    guard = ("ParNew:",)
    grammars = compile_all(*unified_pause((YOUNG_HEAD,), (generations("ParNew", "CMS"),)))


class UnifiedCmsInitialMarkRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_CMS_INITIAL_MARK
    guard = ("Pause Initial Mark",)
    grammars = compile_all(*unified_pause((r"Pause Initial Mark",)))


class UnifiedParallelScavengeRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_PARALLEL_SCAVENGE
    guard = ("PSYoungGen:",)
    grammars = compile_all(
        *unified_pause(
            (YOUNG_HEAD,),
            (generations("PSYoungGen", "ParOldGen"), generations("PSYoungGen", "PSOldGen")),
        )
    )


class UnifiedParallelCompactingOldRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_PARALLEL_COMPACTING_OLD
    guard = ("ParOldGen:",)
    grammars = compile_all(*unified_pause((FULL_HEAD,), (generations("PSYoungGen", "ParOldGen"),)))


# ============================================================
# G1
# ============================================================


class UnifiedG1YoungInitialMarkRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_G1_YOUNG_INITIAL_MARK
    guard = ("Concurrent Start", "Initial Mark")
    grammars = compile_all(
        *unified_pause(
            (
                rf"Pause Young \((?:Concurrent Start|Initial Mark)\) \((?P<trigger>{TRIGGER})\)"
                rf"{EVACUATION_FAILURE}",
                # JDK 9
                rf"Pause Initial Mark \((?P<trigger>{TRIGGER})\){EVACUATION_FAILURE}",
            ),
            (METASPACE,),
        )
    )


class UnifiedG1MixedPauseRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_G1_MIXED_PAUSE
    guard = ("Mixed",)
    grammars = compile_all(
        *unified_pause(
            (
                rf"Pause Young \(Mixed\) \((?P<trigger>{TRIGGER})\){EVACUATION_FAILURE}",
                rf"Pause Mixed \((?P<trigger>{TRIGGER})\){EVACUATION_FAILURE}",
            ),
            (METASPACE,),
        )
    )


class UnifiedG1YoungPauseRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_G1_YOUNG_PAUSE
    guard = ("Pause Young",)
    grammars = compile_all(
        *unified_pause(
            (
                rf"Pause Young \((?P<phase>Normal|Concurrent End|Prepare Mixed)\) "
                rf"\((?P<trigger>{TRIGGER})\){EVACUATION_FAILURE}",
                rf"Pause Young \((?P<trigger>{G1_TRIGGER})\){EVACUATION_FAILURE}",
            ),
            (METASPACE,),
        )
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phase": groups["phase"]} if groups.get("phase") else {}


class UnifiedG1CleanupRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_G1_CLEANUP
    guard = ("Pause Cleanup",)
    grammars = compile_all(*unified_pause((r"Pause Cleanup",)))


class UnifiedG1FullGcRecognizer(UnifiedPauseRecognizer):
    """G1 full collection: a G1-only cause, or a joined record with only metaspace."""

    kind = EventKind.UNIFIED_G1_FULL_GC
    guard = ("Pause Full",)
    grammars = compile_all(
        *unified_pause((rf"Pause Full \((?P<trigger>{G1_TRIGGER})\)",), (METASPACE,)),
        rf"{FULL_HEAD} {UNIFIED_METASPACE} {sizes('heap')} {DURATION_MS}{UNIFIED_TIMES}",
    )


class UnifiedRemarkRecognizer(UnifiedPauseRecognizer):
    """Remark pause logged by both G1 and CMS."""

    kind = EventKind.UNIFIED_REMARK
    guard = ("Pause Remark",)
    grammars = compile_all(*unified_pause((r"Pause Remark",)))


# ============================================================
# GENERIC SUMMARIES
# ============================================================


class UnifiedYoungRecognizer(UnifiedPauseRecognizer):
    """Young summary line whose collector cannot be told from the line alone."""

    kind = EventKind.UNIFIED_YOUNG
    guard = ("Pause Young",)
    grammars = compile_all(rf"{YOUNG_HEAD} {sizes('heap')} {DURATION_MS}{UNIFIED_TIMES}?")


class UnifiedOldRecognizer(UnifiedPauseRecognizer):
    kind = EventKind.UNIFIED_OLD
    guard = ("Pause Full",)
    grammars = compile_all(rf"{FULL_HEAD} {sizes('heap')} {DURATION_MS}{UNIFIED_TIMES}?")


class UnifiedConcurrentRecognizer(Recognizer):
    """Concurrent phase start or end, e.g. ``Concurrent Mark (0.083s, 0.084s) 0.912ms``."""

    kind = EventKind.UNIFIED_CONCURRENT
    guard = ("Concurrent ",)
    unified_only = True
    end_stamped = True
    grammars = compile_all(
        rf"Concurrent (?P<phase>[A-Z][\w-]*(?: [\w-]+)*?)(?: \((?P<times>[\d.,s ]+)\))?"
        rf"(?: {DURATION_MS})?",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phase": groups["phase"]}
