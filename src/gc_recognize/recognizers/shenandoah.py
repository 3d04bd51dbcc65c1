"""Shenandoah collector records, in JDK 8 legacy and unified logging."""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind
from gc_recognize.recognizers._base import (
    DURATION_MS,
    PERM_SPACE,
    UNIFIED_METASPACE,
    Recognizer,
    compile_all,
    sizes,
)

CONCURRENT_PHASE = (
    r"(?:reset|marking(?: \((?:process weakrefs|unload classes|update refs)\))*|precleaning|"
    r"evacuation|update references|update thread roots|cleanup|uncommit|class unloading|"
    r"weak roots|strong roots|thread roots|weak references|mark roots|roots)"
)
QUALIFIERS = r"(?P<qualifiers>(?: \([A-Za-z ]+\))*)"

# Statistics block row prefixes, e.g. "S:" (scan roots) or "UR:" (update roots)
ROOT_STAGES = r"CMR|CSR|CTR|CU|CWR|CWRF|DU|E|FA|FS|FU|S|U|UR|WR"
BLOCK_PHASES = (
    r"Accumulate Stats|Exception Caches|Finish (?:Mark|Queues|Work)|Make Parsable|Manage GCLABs|"
    r"Purge Unlinked|(?:Code )?Roots|Rendezvous|System (?:Purge|Dictionary)|Unlink Stale|"
    r"Update Region States|Weak (?:Class Links|References|Roots)|(?:Scan|Update) Roots|"
    r"(?:Choose|Trash) Collection Set|Rebuild Free Set|Degen Update Roots|CLDG|"
    r"Deallocate Metadata|Enqueue|Parallel Cleanup|Unload Classes|"
    r"(?:Initial|Prepare)(?: Evacuation)?|(?:Resize|Retire|Sync|Trash) (?:CSet|GCLABs|Pinned|TLABs)|"
    r"Adjust Pointers|Calculate Addresses|Copy Objects|(?:Post|Pre) Heap Dump|"
    r"(?:Humongous|Regular) Objects|Rebuild Region Sets|Reset Complete Bitmap"
)


def _pause_grammars(name: str) -> tuple[str, ...]:
    return (
        # [0.448s][info][gc] GC(0) Pause Init Mark (process weakrefs) 0.583ms
        rf"Pause {name}{QUALIFIERS}(?: {sizes('heap')})?(?:, {UNIFIED_METASPACE})? {DURATION_MS}",
        # 0.427: [Pause Init Mark (process weakrefs), 0.221 ms]
        rf"\[Pause {name}{QUALIFIERS}(?: {sizes('heap')})?, {DURATION_MS}\](?:, {PERM_SPACE})?",
    )


class ShenandoahPauseRecognizer(Recognizer):
    """Base for the stop-the-world phases of a Shenandoah cycle."""

    end_stamped = True

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        qualifiers = (groups.get("qualifiers") or "").strip()
        return {"qualifiers": qualifiers} if qualifiers else {}


class ShenandoahInitMarkRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_INIT_MARK
    guard = ("Pause Init Mark",)
    grammars = compile_all(*_pause_grammars("Init Mark"))


class ShenandoahFinalMarkRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_FINAL_MARK
    guard = ("Pause Final Mark",)
    grammars = compile_all(*_pause_grammars("Final Mark"))


class ShenandoahFinalEvacRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_FINAL_EVAC
    guard = ("Pause Final Evac",)
    grammars = compile_all(*_pause_grammars("Final Evac"))


class ShenandoahInitUpdateRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_INIT_UPDATE
    guard = ("Pause Init Update Refs",)
    grammars = compile_all(*_pause_grammars("Init Update Refs"))


class ShenandoahFinalUpdateRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_FINAL_UPDATE
    guard = ("Pause Final Update Refs",)
    grammars = compile_all(*_pause_grammars("Final Update Refs"))


class ShenandoahDegeneratedGcRecognizer(ShenandoahPauseRecognizer):
    kind = EventKind.SHENANDOAH_DEGENERATED_GC
    guard = ("Pause Degenerated GC",)
    grammars = compile_all(*_pause_grammars("Degenerated GC"))


class ShenandoahFullGcRecognizer(ShenandoahPauseRecognizer):
    """Shenandoah full collection; logged without a parenthesized cause."""

    kind = EventKind.SHENANDOAH_FULL_GC
    guard = ("Pause Full",)
    grammars = compile_all(
        rf"Pause Full {sizes('heap')}(?:, {UNIFIED_METASPACE})? {DURATION_MS}",
        rf"\[Pause Full {sizes('heap')}, {DURATION_MS}\](?:, {PERM_SPACE})?",
    )


class ShenandoahConcurrentRecognizer(Recognizer):
    """Concurrent phases; logged sizes feed heap occupancy, never pause time."""

    kind = EventKind.SHENANDOAH_CONCURRENT
    guard = ("Concurrent ",)
    end_stamped = True
    grammars = compile_all(
        # [0.437s][info][gc] GC(0) Concurrent reset 15M->16M(64M) 4.701ms
        rf"Concurrent (?P<phase>{CONCURRENT_PHASE})(?: {sizes('heap')})?(?: {DURATION_MS})?",
        # 0.373: [Concurrent reset 16991K->17152K(17408K), 0.435 ms]
        rf"\[Concurrent (?P<phase>{CONCURRENT_PHASE})(?: {sizes('heap')})?(?:, start|, {DURATION_MS})\]"
        rf"(?:, {PERM_SPACE})?",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"phase": groups["phase"]}


class ShenandoahTriggerRecognizer(Recognizer):
    """Heuristic decision explaining why a cycle starts."""

    kind = EventKind.SHENANDOAH_TRIGGER
    guard = ("Trigger:",)
    grammars = compile_all(r"\s*Trigger: (?P<reason>.+)")

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"reason": groups["reason"]}


class ShenandoahCancellingGcRecognizer(Recognizer):
    kind = EventKind.SHENANDOAH_CANCELLING_GC
    guard = ("Cancelling GC:",)
    grammars = compile_all(r"Cancelling GC: (?P<reason>.+)")

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"reason": groups["reason"]}


class ShenandoahStatsRecognizer(Recognizer):
    """Exit-time statistics tables; recognized only so they can be dropped."""

    kind = EventKind.SHENANDOAH_STATS
    grammars = compile_all(
        r"All times are wall-clock times, except per-root-class counters, that are sum over",
        r"all workers\. Dividing the <total> over the root stage time estimates parallelism\.",
        r"GC STATISTICS:",
        r"\s*\"\([GN]\)\" \((?:gross|net)\) pauses include .+",
        r"\s*(?:Allocation pacing accrued|Pacer delays|Under allocation pressure.*|"
        r"\d+ successful concurrent GCs|\d+ invoked (?:explicitly|implicitly)|"
        r"\d+ of \d+ (?:Degenerated|Full) GCs.*|\d+ (?:Degenerated|Full) GCs|"
        r"\d+ upgraded to Full GC|\d+ caused by .+|\d+ of \d+ at .+):?",
        r"\s*\d+ of\s+\d+ ms \(\s*\d+[.,]\d%\): .+",
        # Timing rows: the phase name is followed by at least two spaces
        r"\s*(?:Pause|Concurrent|Total) [A-Z][\w ()]*?\S {2,}=.*",
        r"\s{1,8}(?:[A-Z]{1,2}: )?[A-Z][\w ()/<>-]*?\S {2,}=.*",
        # Block format: "  Update Region States   789 us", "    S: <total>   69130 us, ..."
        r"\s*(?:[A-Z]{1,4}: )?[A-Z<][\w ()<>/-]*?\S {2,}\d+ us(?:,.*)?",
        rf"\s{{2,6}}(?:{ROOT_STAGES}): (?:<total>|Code Cache|Weak References|[\w ]+ Roots)\b.*",
        rf"\s{{2,6}}(?:{BLOCK_PHASES})\b.*",
        r"\s*Pacing.*",
    )
