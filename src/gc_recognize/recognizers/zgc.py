"""Z Garbage Collector records (unified logging only)."""

from __future__ import annotations

from gc_recognize.models import EventKind
from gc_recognize.recognizers._base import DURATION_MS, SIZE, TRIGGER, Recognizer, compile_all

# Generational ZGC prefixes phases with the generation being collected
GENERATION = r"(?:[YO]: )?"


class _ZPauseRecognizer(Recognizer):
    unified_only = True
    end_stamped = True


class ZMarkStartRecognizer(_ZPauseRecognizer):
    kind = EventKind.Z_MARK_START
    guard = ("Pause Mark Start",)
    grammars = compile_all(rf"{GENERATION}Pause Mark Start(?: \((?:Major|Minor)\))? {DURATION_MS}")


class ZMarkEndRecognizer(_ZPauseRecognizer):
    kind = EventKind.Z_MARK_END
    guard = ("Pause Mark End",)
    grammars = compile_all(rf"{GENERATION}Pause Mark End {DURATION_MS}")


class ZRelocateStartRecognizer(_ZPauseRecognizer):
    kind = EventKind.Z_RELOCATE_START
    guard = ("Pause Relocate Start",)
    grammars = compile_all(rf"{GENERATION}Pause Relocate Start {DURATION_MS}")


class ZGarbageCollectionRecognizer(Recognizer):
    """Cycle summary with heap occupancy; ZGC logs no heap capacity here."""

    kind = EventKind.Z_GARBAGE_COLLECTION
    guard = ("Collection (",)
    unified_only = True
    grammars = compile_all(
        # [0.134s][info][gc] GC(0) Garbage Collection (Warmup) 14M(1%)->12M(1%)
        rf"(?:Garbage|Major|Minor) Collection \((?P<trigger>{TRIGGER})\) "
        rf"(?P<heap_before>{SIZE})\(\d{{1,3}}%\)->(?P<heap_after>{SIZE})\(\d{{1,3}}%\)"
        rf"(?: {DURATION_MS})?",
    )
