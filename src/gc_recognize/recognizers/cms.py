"""Concurrent Mark Sweep (CMS) and ParNew records in legacy logging."""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind, Trigger
from gc_recognize.recognizers._base import (
    DURATION,
    INNER,
    PERM_SPACE,
    SECS,
    TIMES,
    TRIGGER,
    Recognizer,
    compile_all,
    occupancy,
    sizes,
    trigger_alt,
)

PROMOTION_FAILED = trigger_alt(Trigger.PROMOTION_FAILED)
CONCURRENT_MODE = trigger_alt(Trigger.CONCURRENT_MODE_FAILURE, Trigger.CONCURRENT_MODE_INTERRUPTED)

PAR_NEW_CLAUSE = (
    rf"\[ParNew(?: \((?P<trigger_young>{PROMOTION_FAILED})\))?: {sizes('young')}, {SECS} secs\]"
)
CMS_CLAUSE = (
    rf"\[CMS(?: \((?P<trigger_after>{CONCURRENT_MODE})\))?: {sizes('old')}, {SECS} secs\]"
)


class ParNewRecognizer(Recognizer):
    """Young collection by ParNew alongside CMS."""

    kind = EventKind.PAR_NEW
    guard = ("[ParNew",)
    trigger_groups = ("trigger_young", "trigger")
    grammars = compile_all(
        rf"\[GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{PAR_NEW_CLAUSE} {sizes('heap')}"
        rf"(?:, {PERM_SPACE})?, {DURATION}\]{TIMES}?",
    )


class CmsSerialOldRecognizer(Recognizer):
    """Serial (stop-the-world) old collection of a CMS heap.

    Logged either as a ``Full GC`` or as a ParNew collection whose promotion
    failed and fell back to a full collection of the CMS generation.
    """

    kind = EventKind.CMS_SERIAL_OLD
    guard = ("[CMS",)
    trigger_groups = ("trigger_after", "trigger_young", "trigger")
    grammars = compile_all(
        rf"\[Full GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{CMS_CLAUSE} {sizes('heap')}, "
        rf"{PERM_SPACE}, {DURATION}\]{TIMES}?",
        rf"\[GC(?: \((?P<trigger>{TRIGGER})\))? {INNER}{PAR_NEW_CLAUSE}{INNER}{CMS_CLAUSE} "
        rf"{sizes('heap')}, {PERM_SPACE}, {DURATION}\]{TIMES}?",
    )


class CmsInitialMarkRecognizer(Recognizer):
    kind = EventKind.CMS_INITIAL_MARK
    guard = ("CMS-initial-mark",)
    grammars = compile_all(
        rf"\[GC(?: \((?P<trigger>{trigger_alt(Trigger.CMS_INITIAL_MARK)})\))? "
        rf"\[1 CMS-initial-mark: {occupancy('old')}\] {occupancy('heap')}, {DURATION}\]{TIMES}?",
    )


class CmsRemarkRecognizer(Recognizer):
    """Final remark, including the rescan and reference processing sub-phases."""

    kind = EventKind.CMS_REMARK
    guard = ("CMS-remark",)
    grammars = compile_all(
        rf"\[GC(?: \((?P<trigger>{trigger_alt(Trigger.CMS_FINAL_REMARK)})\))? "
        rf"\[YG occupancy: \d+ K \(\d+ K\)\].*?\[1 CMS-remark: {occupancy('old')}\] "
        rf"{occupancy('heap')}, {DURATION}\]{TIMES}?",
    )


class CmsConcurrentRecognizer(Recognizer):
    kind = EventKind.CMS_CONCURRENT
    guard = ("CMS-concurrent-",)
    grammars = compile_all(
        rf"(?: CMS: abort preclean due to time {INNER})?\[CMS-concurrent-(?P<phase>[a-z-]+?)"
        rf"(?:-start|: (?P<cpu_secs>{SECS})/(?P<duration>{SECS}) secs)\]{TIMES}?",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phase": groups["phase"]}
