"""G1 collector records in legacy (JDK 8 and earlier) logging."""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind, Region
from gc_recognize.recognizers._base import (
    DURATION,
    G1_DETAILS,
    PERM_SPACE,
    SECS,
    SIZE,
    SIZE_MG,
    TIMES,
    TO_SPACE,
    TRIGGER,
    Recognizer,
    compile_all,
    sizes,
)


def _pause_grammars(qualifiers: str) -> tuple[str, ...]:
    """Standard, merged-details and size-less forms of a ``[GC pause`` record."""
    head = rf"\[GC pause (?:\((?P<trigger>{TRIGGER})\) )?{qualifiers}"
    exhausted = rf"(?: \((?P<trigger_after>{TO_SPACE})\))?(?:--)?"
    return (
        # 72.598: [GC pause (mixed) 643M->513M(724M), 0.1686650 secs]
        rf"{head}(?:--)? {sizes('heap')}, {DURATION}\]{TIMES}?",
        # [GC pause (young) (to-space exhausted), 1.02 secs][Eden: ...] [Times: ...]
        rf"{head}{exhausted}, {DURATION}\](?:{G1_DETAILS}{TIMES}?)?",
        # Header without a duration; the Times trailer supplies it
        rf"{head}{exhausted}{G1_DETAILS}{TIMES}",
    )


class G1YoungPauseRecognizer(Recognizer):
    kind = EventKind.G1_YOUNG_PAUSE
    guard = ("GC pause",)
    grammars = compile_all(*_pause_grammars(r"\(young\)"))
    zero_regions = (Region.COMBINED,)


class G1MixedPauseRecognizer(Recognizer):
    kind = EventKind.G1_MIXED_PAUSE
    guard = ("(mixed)",)
    grammars = compile_all(*_pause_grammars(r"\(mixed\)"))
    zero_regions = (Region.COMBINED,)


class G1YoungInitialMarkRecognizer(Recognizer):
    kind = EventKind.G1_YOUNG_INITIAL_MARK
    guard = ("(initial-mark)",)
    grammars = compile_all(*_pause_grammars(r"\(young\) \(initial-mark\)"))
    zero_regions = (Region.COMBINED,)


class G1RemarkRecognizer(Recognizer):
    """``[GC remark`` with or without the reference processing sub-phases."""

    kind = EventKind.G1_REMARK
    guard = ("GC remark",)
    grammars = compile_all(rf"\[GC remark(?P<phases> .+?)?, {DURATION}\]{TIMES}?")

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phases": bool(groups.get("phases"))}


class G1CleanupRecognizer(Recognizer):
    kind = EventKind.G1_CLEANUP
    guard = ("GC cleanup",)
    grammars = compile_all(rf"\[GC cleanup(?: {sizes('heap')})?, {DURATION}\]{TIMES}?")
    zero_regions = (Region.COMBINED,)


class G1FullGcRecognizer(Recognizer):
    """Serial full collection run by G1; sizes are logged in M or G."""

    kind = EventKind.G1_FULL_GC_SERIAL
    guard = ("Full GC",)
    grammars = compile_all(
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {{1,2}}(?P<heap_before>{SIZE_MG})->"
        rf"(?P<heap_after>{SIZE_MG})\((?P<heap_capacity>{SIZE_MG})\), {DURATION}\]{TIMES}?",
        # Merged with the details block that follows on the next lines
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {{1,2}}{SIZE}->{SIZE}\({SIZE}\), {DURATION}\]"
        rf"{G1_DETAILS}(?:, {PERM_SPACE})?{TIMES}?",
    )


class G1ConcurrentRecognizer(Recognizer):
    """Concurrent marking cycle phases; these do not pause the application."""

    kind = EventKind.G1_CONCURRENT
    guard = ("GC concurrent-",)
    grammars = compile_all(
        rf"\[GC concurrent-(?P<phase>[a-z-]+)(?:, (?:.*, )?(?P<duration>{SECS}) secs)?\]{TIMES}?"
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phase": groups["phase"]}
