"""Priority-ordered dispatch of lines to recognizers, plus per-kind facts."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from gc_recognize.decorator import split_decorator
from gc_recognize.models import EventKind, GcEvent
from gc_recognize.recognizers import RECOGNIZERS, Recognizer
from gc_recognize.units import DecodeError

logger = logging.getLogger(__name__)

# ============================================================
# KIND FACTS
# ============================================================


class KindFacts(BaseModel):
    """Static properties of an event kind."""

    model_config = ConfigDict(frozen=True)

    # Stops application threads
    blocking: bool = False
    # Carries data of interest to an analysis layer
    reportable: bool = False
    # Recognized only to be ignored; never carries a useful timestamp
    throwaway: bool = False
    # Only ever produced by unified logging
    unified: bool = False


_BLOCKING_KINDS = frozenset(
    {
        EventKind.G1_YOUNG_PAUSE,
        EventKind.G1_MIXED_PAUSE,
        EventKind.G1_YOUNG_INITIAL_MARK,
        EventKind.G1_REMARK,
        EventKind.G1_CLEANUP,
        EventKind.G1_FULL_GC_SERIAL,
        EventKind.PAR_NEW,
        EventKind.CMS_SERIAL_OLD,
        EventKind.CMS_INITIAL_MARK,
        EventKind.CMS_REMARK,
        EventKind.SERIAL_NEW,
        EventKind.SERIAL_OLD,
        EventKind.PARALLEL_SCAVENGE,
        EventKind.PARALLEL_SERIAL_OLD,
        EventKind.PARALLEL_COMPACTING_OLD,
        EventKind.VERBOSE_GC_YOUNG,
        EventKind.VERBOSE_GC_OLD,
        EventKind.SHENANDOAH_INIT_MARK,
        EventKind.SHENANDOAH_FINAL_MARK,
        EventKind.SHENANDOAH_FINAL_EVAC,
        EventKind.SHENANDOAH_INIT_UPDATE,
        EventKind.SHENANDOAH_FINAL_UPDATE,
        EventKind.SHENANDOAH_DEGENERATED_GC,
        EventKind.SHENANDOAH_FULL_GC,
        EventKind.Z_MARK_START,
        EventKind.Z_MARK_END,
        EventKind.Z_RELOCATE_START,
        EventKind.UNIFIED_SERIAL_NEW,
        EventKind.UNIFIED_SERIAL_OLD,
        EventKind.UNIFIED_PAR_NEW,
        EventKind.UNIFIED_CMS_INITIAL_MARK,
        EventKind.UNIFIED_PARALLEL_SCAVENGE,
        EventKind.UNIFIED_PARALLEL_COMPACTING_OLD,
        EventKind.UNIFIED_G1_YOUNG_PAUSE,
        EventKind.UNIFIED_G1_MIXED_PAUSE,
        EventKind.UNIFIED_G1_YOUNG_INITIAL_MARK,
        EventKind.UNIFIED_G1_CLEANUP,
        EventKind.UNIFIED_G1_FULL_GC,
        EventKind.UNIFIED_REMARK,
        EventKind.UNIFIED_YOUNG,
        EventKind.UNIFIED_OLD,
    }
)

_REPORTABLE_KINDS = _BLOCKING_KINDS | {
    EventKind.G1_CONCURRENT,
    EventKind.CMS_CONCURRENT,
    EventKind.SHENANDOAH_CONCURRENT,
    EventKind.UNIFIED_CONCURRENT,
    EventKind.Z_GARBAGE_COLLECTION,
    EventKind.APPLICATION_STOPPED_TIME,
    EventKind.GC_LOCKER,
    EventKind.GC_OVERHEAD_LIMIT,
}

_THROWAWAY_KINDS = frozenset(
    {
        EventKind.HEADER_COMMAND_LINE_FLAGS,
        EventKind.HEADER_MEMORY,
        EventKind.HEADER_VERSION,
        EventKind.HEAP_AT_GC,
        EventKind.TENURING_DISTRIBUTION,
        EventKind.FLS_STATISTIC,
        EventKind.ADAPTIVE_SIZE_POLICY,
        EventKind.CLASS_UNLOADING,
        EventKind.SHENANDOAH_STATS,
        EventKind.SHENANDOAH_TRIGGER,
        EventKind.SHENANDOAH_CANCELLING_GC,
        EventKind.UNIFIED_GC_DETAIL,
        EventKind.GC_INFO,
        EventKind.UNIFIED_BLANK_LINE,
    }
)

_UNIFIED_KINDS = frozenset(
    {kind for kind in EventKind if kind.value.startswith(("UNIFIED_", "USING_", "Z_"))}
    | {EventKind.GC_INFO}
)

# Free-form statistics blocks the preprocessor drops entirely
STATISTICS_KINDS = frozenset({EventKind.SHENANDOAH_STATS, EventKind.FLS_STATISTIC})

KIND_FACTS: dict[EventKind, KindFacts] = {
    kind: KindFacts(
        blocking=kind in _BLOCKING_KINDS,
        reportable=kind in _REPORTABLE_KINDS,
        throwaway=kind in _THROWAWAY_KINDS,
        unified=kind in _UNIFIED_KINDS,
    )
    for kind in EventKind
}


def is_blocking(kind: EventKind) -> bool:
    return KIND_FACTS[kind].blocking


def is_reportable(kind: EventKind) -> bool:
    return KIND_FACTS[kind].reportable


def is_throwaway(kind: EventKind) -> bool:
    return KIND_FACTS[kind].throwaway


def is_unified(kind: EventKind) -> bool:
    return KIND_FACTS[kind].unified


def is_unified_run(kinds: Sequence[EventKind]) -> bool:
    """True when any kind in the run can only come from unified logging."""
    return any(is_unified(kind) for kind in kinds)


# ============================================================
# CLASSIFIER
# ============================================================


class Classifier:
    """Tries each recognizer once, in order, and returns the first match.

    Stateless once built; a single instance is shared by both passes.
    """

    def __init__(self, recognizers: Sequence[Recognizer] = RECOGNIZERS) -> None:
        self.recognizers = tuple(recognizers)

    def classify(
        self, line: str, *, start_stamped: bool = False
    ) -> tuple[EventKind, GcEvent | None]:
        """Return the kind of a raw or preprocessed line and its event, if any.

        Pass ``start_stamped`` for a preprocessed record whose decorator came
        from the line that opened the pause.
        """
        text = line.rstrip("\r\n")
        try:
            decorator, payload = split_decorator(text)
        except DecodeError as exc:
            logger.debug("Undecodable decorator in %r: %s", text, exc)
            return EventKind.UNKNOWN, None

        for recognizer in self.recognizers:
            event = recognizer.try_match(
                payload, decorator, text, start_stamped=start_stamped
            )
            if event is not None:
                return event.kind, event
        return EventKind.UNKNOWN, None

    def identify(self, line: str) -> EventKind:
        kind, _ = self.classify(line)
        return kind
