"""Parallel collector records (PSYoungGen with PSOldGen or ParOldGen)."""

from __future__ import annotations

from gc_recognize.models import EventKind
from gc_recognize.recognizers._base import (
    DURATION,
    PERM_SPACE,
    TIMES,
    TRIGGER,
    Recognizer,
    compile_all,
    sizes,
)

YOUNG_CLAUSE = rf"\[PSYoungGen: {sizes('young')}\]"


def _full_gc_grammar(old_generation: str) -> str:
    return (
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {YOUNG_CLAUSE} "
        rf"\[{old_generation}: {sizes('old')}\] {sizes('heap')}(?:,? {PERM_SPACE})?, "
        rf"{DURATION}\]{TIMES}?"
    )


class ParallelScavengeRecognizer(Recognizer):
    kind = EventKind.PARALLEL_SCAVENGE
    guard = ("[PSYoungGen",)
    grammars = compile_all(
        rf"\[GC(?:--)?(?: \((?P<trigger>{TRIGGER})\))?(?:--)? {YOUNG_CLAUSE} {sizes('heap')}, "
        rf"{DURATION}\]{TIMES}?",
    )


class ParallelSerialOldRecognizer(Recognizer):
    """Full collection with the serial old collector (PSOldGen)."""

    kind = EventKind.PARALLEL_SERIAL_OLD
    guard = ("[PSOldGen",)
    grammars = compile_all(_full_gc_grammar("PSOldGen"))


class ParallelCompactingOldRecognizer(Recognizer):
    """Full collection with the parallel compacting old collector (ParOldGen)."""

    kind = EventKind.PARALLEL_COMPACTING_OLD
    guard = ("[ParOldGen",)
    grammars = compile_all(_full_gc_grammar("ParOldGen"))
