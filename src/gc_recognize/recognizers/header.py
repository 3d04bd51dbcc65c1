"""Log headers and informational blocks printed by legacy logging.

None of these carry pause data. The header kinds are kept for their facts
(JVM version, command line, physical memory); the rest are recognized so
they are not reported as unparsed input.
"""

from __future__ import annotations

from typing import Any

from gc_recognize.models import DetailValue, EventKind
from gc_recognize.recognizers._base import Recognizer, compile_all


class HeaderCommandLineFlagsRecognizer(Recognizer):
    kind = EventKind.HEADER_COMMAND_LINE_FLAGS
    guard = ("CommandLine flags:",)
    grammars = compile_all(r"CommandLine flags: (?P<flags>.+)")

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"flags": groups["flags"].strip()}


class HeaderMemoryRecognizer(Recognizer):
    kind = EventKind.HEADER_MEMORY
    guard = ("Memory:",)
    grammars = compile_all(
        r"Memory: (?P<page>\d+)k page, physical (?P<physical>\d+)k\((?P<free>\d+)k free\)"
        r"(?:, swap (?P<swap>\d+)k\((?P<swap_free>\d+)k free\))?",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        facts: dict[str, DetailValue] = {
            "page_kb": int(groups["page"]),
            "physical_kb": int(groups["physical"]),
            "physical_free_kb": int(groups["free"]),
        }
        if groups.get("swap") is not None:
            facts["swap_kb"] = int(groups["swap"])
            facts["swap_free_kb"] = int(groups["swap_free"])
        return facts


class HeaderVersionRecognizer(Recognizer):
    kind = EventKind.HEADER_VERSION
    guard = ("VM (",)
    grammars = compile_all(
        r"(?:Java HotSpot\(TM\)|OpenJDK) .+? VM \((?P<vm>[^)]+)\) for (?P<platform>\S+) "
        r"JRE \((?P<jre>[^)]+)\).*",
    )

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        return {"vm_version": groups["vm"], "jre_version": groups["jre"], "platform": groups["platform"]}


class HeapAtGcRecognizer(Recognizer):
    """Heap dump blocks from -XX:+PrintHeapAtGC and the exit heap summary."""

    kind = EventKind.HEAP_AT_GC
    grammars = compile_all(
        r"\{?Heap (?:before|after) (?:GC|gc) invocations=\d+ \(full \d+\):",
        r"Heap",
        r"\}",
        r"\s+(?:par new generation|def new generation|concurrent mark-sweep generation|"
        r"tenured generation|PSYoungGen|ParOldGen|PSOldGen|PSPermGen|garbage-first heap|"
        r"shenandoah|ZHeap|Metaspace|class space|compacting perm gen|"
        r"concurrent-mark-sweep perm gen)\s+(?:total|used|max).*",
        r"\s+(?:eden|from|to|object|the|ro|rw) space .*",
        r"\s+region size \d+K, .*",
        r"\s+\d+ x \d+ K regions.*",
        r"\s+No shared spaces configured\.",
    )


class TenuringDistributionRecognizer(Recognizer):
    kind = EventKind.TENURING_DISTRIBUTION
    grammars = compile_all(
        r"Desired survivor size \d+ bytes, new threshold \d+ \(max(?: threshold)? \d+\)",
        r"- age +\d+: +\d+ bytes, +\d+ total",
    )


class FlsStatisticRecognizer(Recognizer):
    """Free list space statistics from -XX:PrintFLSStatistics."""

    kind = EventKind.FLS_STATISTIC
    grammars = compile_all(
        r"Statistics for (?:BinaryTreeDictionary|IndexedFreeLists):",
        r"-{20,}",
        r"Total Free Space: -?\d+",
        r"Max\s+Chunk Size: -?\d+",
        r"Number of Blocks: \d+",
        r"Av\.\s+Block\s+Size: \d+",
        r"Tree\s+Height: \d+",
        r"(?:Before|After) GC:",
    )


class AdaptiveSizePolicyRecognizer(Recognizer):
    """Sizing decisions from -XX:+PrintAdaptiveSizePolicy and G1 ergonomics."""

    kind = EventKind.ADAPTIVE_SIZE_POLICY
    grammars = compile_all(
        r"\s*(?:AdaptiveSize(?:Start|Stop)|(?:PS)?AdaptiveSizePolicy::|PSYoungGen::|"
        r"ParallelScavengeHeap::|avg_(?:survived|promoted|young_live|old_live|pretenured)\w*|"
        r"\[G1Ergonomics\b|\s+(?:eden|from|to): \[).*",
    )


class ClassUnloadingRecognizer(Recognizer):
    kind = EventKind.CLASS_UNLOADING
    guard = ("Unloading class",)
    grammars = compile_all(r"\[Unloading class \S+?(?: 0x[0-9a-fA-F]+)?\]")
