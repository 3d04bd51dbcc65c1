"""Serial collector records (DefNew young, Tenured old)."""

from __future__ import annotations

from gc_recognize.models import EventKind, Trigger
from gc_recognize.recognizers._base import (
    DURATION,
    INNER,
    PERM_SPACE,
    SECS,
    TIMES,
    TRIGGER,
    Recognizer,
    compile_all,
    sizes,
    trigger_alt,
)

DEF_NEW_CLAUSE = (
    rf"\[DefNew(?: \((?P<trigger_young>{trigger_alt(Trigger.PROMOTION_FAILED)})\))?: "
    rf"{sizes('young')}, {SECS} secs\]"
)
TENURED_CLAUSE = rf"\[Tenured: {sizes('old')}, {SECS} secs\]"


class SerialNewRecognizer(Recognizer):
    """Young collection; old generation sizes are derived from the heap totals."""

    kind = EventKind.SERIAL_NEW
    guard = ("[DefNew",)
    trigger_groups = ("trigger_young", "trigger")
    grammars = compile_all(
        rf"\[GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{DEF_NEW_CLAUSE} {sizes('heap')}"
        rf"(?:, {PERM_SPACE})?, {DURATION}\]{TIMES}?",
    )


class SerialOldRecognizer(Recognizer):
    kind = EventKind.SERIAL_OLD
    guard = ("[Tenured",)
    trigger_groups = ("trigger_young", "trigger")
    grammars = compile_all(
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{TENURED_CLAUSE} {sizes('heap')}, "
        rf"{PERM_SPACE}, {DURATION}\]{TIMES}?",
        # Young collection that failed over to a full collection
        rf"\[GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{DEF_NEW_CLAUSE}{INNER}{TENURED_CLAUSE} "
        rf"{sizes('heap')}, {PERM_SPACE}, {DURATION}\]{TIMES}?",
    )
