"""Shared grammar fragments and the recognizer base class."""

from __future__ import annotations

import re
from typing import Any, ClassVar

from gc_recognize.decorator import DATESTAMP, UPTIME, Decorator
from gc_recognize.models import CpuTimes, DetailValue, EventKind, GcEvent, MemoryUsage, Region, Trigger
from gc_recognize.units import (
    DecodeError,
    decode_cpu_centis,
    decode_millis_to_micros,
    decode_seconds_to_micros,
    decode_size_token,
    micros_to_millis,
)

# ============================================================
# GRAMMAR FRAGMENTS
# ============================================================

SIZE = r"\d{1,12}(?:[.,]\d{1,3})?[BKMG]"
SIZE_MG = r"\d{1,12}(?:[.,]\d{1,3})?[MG]"
SECS = r"\d{1,7}[.,]\d{3,9}"
MILLIS = r"\d{1,7}[.,]\d{1,6}"
CPU = r"\d{1,6}[.,]\d{2}"

# Legacy decorator repeated inside a payload, e.g. "[GC 7.798: [DefNew: ..."
INNER = rf"(?:{DATESTAMP}: )?(?:{UPTIME}: )?"

# One or more unified decorators embedded in a merged line
UNIFIED_INNER = r"(?:\[[^\[\]]*\])+ ?"

# Parenthesized cause; "(System.gc())" nests one empty pair
CAUSE = r"\((?:[^()]|\(\))+\)"

DURATION = rf"(?P<duration>{SECS}) secs"
DURATION_MS = rf"(?P<duration_ms>{MILLIS}) ?ms"

TIMES = (
    rf"(?: ?\[Times: user=(?P<user>{CPU}) sys=(?P<sys>{CPU}), real=(?P<real>{CPU}) secs\])"
)
UNIFIED_TIMES = rf"(?: User=(?P<user>{CPU})s Sys=(?P<sys>{CPU})s Real=(?P<real>{CPU})s)"

# Region groups are named <prefix>_before / <prefix>_after / <prefix>_capacity
REGION_PREFIXES: dict[str, Region] = {
    "young": Region.YOUNG,
    "old": Region.OLD,
    "heap": Region.COMBINED,
    "perm": Region.METASPACE,
    "eden": Region.EDEN,
}


# Causes logged in parentheses after a collection keyword
COLLECTION_TRIGGERS: tuple[Trigger, ...] = (
    Trigger.ALLOCATION_FAILURE,
    Trigger.METADATA_GC_THRESHOLD,
    Trigger.SYSTEM_GC,
    Trigger.ERGONOMICS,
    Trigger.GCLOCKER_INITIATED_GC,
    Trigger.G1_EVACUATION_PAUSE,
    Trigger.G1_HUMONGOUS_ALLOCATION,
    Trigger.G1_PREVENTIVE_COLLECTION,
    Trigger.G1_COMPACTION_PAUSE,
    Trigger.LAST_DITCH_COLLECTION,
    Trigger.HEAP_INSPECTION_INITIATED_GC,
    Trigger.HEAP_DUMP_INITIATED_GC,
    Trigger.JVMTI_FORCE_GC,
    Trigger.DIAGNOSTIC_COMMAND,
    Trigger.UPDATE_ALLOCATION_CONTEXT_STATS,
    Trigger.ALLOCATION_RATE,
    Trigger.ALLOCATION_STALL,
    Trigger.PROACTIVE,
    Trigger.WARMUP,
    Trigger.TIMER,
    Trigger.HIGH_USAGE,
)


def trigger_alt(*triggers: Trigger) -> str:
    """Regex alternation over trigger texts, all collection causes by default."""
    return "|".join(re.escape(trigger.value) for trigger in triggers or COLLECTION_TRIGGERS)


TRIGGER = trigger_alt()
TO_SPACE = trigger_alt(Trigger.TO_SPACE_EXHAUSTED, Trigger.TO_SPACE_OVERFLOW)


def sizes(prefix: str) -> str:
    """before->after(capacity)"""
    return (
        rf"(?P<{prefix}_before>{SIZE})->(?P<{prefix}_after>{SIZE})"
        rf"\((?P<{prefix}_capacity>{SIZE})\)"
    )


def g1_sizes(prefix: str) -> str:
    """before(capacity)->after(capacity), keeping the capacity after collection."""
    return (
        rf"(?P<{prefix}_before>{SIZE})\({SIZE}\)->(?P<{prefix}_after>{SIZE})"
        rf"\((?P<{prefix}_capacity>{SIZE})\)"
    )


def occupancy(prefix: str) -> str:
    """used(capacity), a single measurement point."""
    return rf"(?P<{prefix}_after>{SIZE})\((?P<{prefix}_capacity>{SIZE})\)"


def unified_generation(prefix: str, name: str) -> str:
    """'DefNew: 1022K->0K(1152K)' or the JDK 17 'DefNew: 1022K(1152K)->0K(1152K)'."""
    return (
        rf"{name}: (?P<{prefix}_before>{SIZE})(?:\({SIZE}\))?->(?P<{prefix}_after>{SIZE})"
        rf"\((?P<{prefix}_capacity>{SIZE})\)"
    )


PERM_SPACE = rf"\[(?:CMS Perm |Perm |PSPermGen|Metaspace): {sizes('perm')}\]"
UNIFIED_METASPACE = (
    rf"{unified_generation('perm', 'Metaspace')}(?: NonClass: \S+ Class: \S+)?"
)
G1_DETAILS = (
    rf"\[Eden: {g1_sizes('eden')} Survivors: {SIZE}->{SIZE} Heap: {g1_sizes('heap')}\]"
)


def compile_all(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern) for pattern in patterns)


# ============================================================
# RECOGNIZER BASE
# ============================================================


class Recognizer:
    """Matches one event kind against a line payload.

    Subclasses declare ``grammars`` in priority order; the first that fully
    matches builds the event. ``guard`` substrings are checked before any
    regex runs. A mandatory field that fails to decode yields no match.
    """

    kind: ClassVar[EventKind]
    grammars: ClassVar[tuple[re.Pattern[str], ...]] = ()
    guard: ClassVar[tuple[str, ...]] = ()
    trigger_groups: ClassVar[tuple[str, ...]] = ("trigger_after", "trigger")
    zero_regions: ClassVar[tuple[Region, ...]] = ()
    unified_only: ClassVar[bool] = False
    # Unified records logged when the pause ends; the start is derived
    end_stamped: ClassVar[bool] = False

    def try_match(
        self,
        payload: str,
        decorator: Decorator | None,
        log_entry: str | None = None,
        *,
        start_stamped: bool = False,
    ) -> GcEvent | None:
        """Return an event when the payload matches one of the grammars.

        ``start_stamped`` marks a record whose decorator was taken from the
        line logged when the pause began.
        """
        if self.unified_only and (decorator is None or not decorator.is_unified):
            return None
        text = payload.rstrip()
        if self.guard and not any(token in text for token in self.guard):
            return None
        if log_entry is None:
            log_entry = payload

        for grammar in self.grammars:
            if match := grammar.fullmatch(text):
                try:
                    return self.build(match, decorator, log_entry, start_stamped)
                except DecodeError:
                    return None
        return None

    def matches(self, payload: str, decorator: Decorator | None) -> bool:
        return self.try_match(payload, decorator) is not None

    def build(
        self,
        match: re.Match[str],
        decorator: Decorator | None,
        log_entry: str,
        start_stamped: bool = False,
    ) -> GcEvent:
        groups = match.groupdict()
        cpu = self._extract_cpu(groups)
        duration_us = self._extract_duration(groups, cpu)

        timestamp_ms = decorator.timestamp_ms if decorator is not None else None
        if (
            self.end_stamped
            and not start_stamped
            and decorator is not None
            and decorator.is_unified
            and timestamp_ms is not None
            and cpu is None
            and duration_us is not None
        ):
            timestamp_ms -= micros_to_millis(duration_us)

        return GcEvent(
            kind=self.kind,
            timestamp_ms=timestamp_ms,
            duration_us=duration_us,
            trigger=self.extract_trigger(groups),
            regions=self._extract_regions(groups),
            cpu=cpu,
            sequence_number=decorator.sequence_number if decorator is not None else None,
            details=self.details(groups),
            log_entry=log_entry.rstrip("\r\n"),
        )

    # Hooks ------------------------------------------------------------

    def details(self, groups: dict[str, Any]) -> dict[str, DetailValue]:
        """Kind-specific facts; none by default."""
        return {}

    def extract_trigger(self, groups: dict[str, Any]) -> Trigger | None:
        for name in self.trigger_groups:
            if trigger := Trigger.from_text(groups.get(name)):
                return trigger
        return None

    # Extraction -------------------------------------------------------

    def _extract_cpu(self, groups: dict[str, Any]) -> CpuTimes | None:
        if groups.get("real") is None:
            return None
        return CpuTimes(
            user_centis=decode_cpu_centis(groups["user"]),
            sys_centis=decode_cpu_centis(groups["sys"]),
            real_centis=decode_cpu_centis(groups["real"]),
        )

    def _extract_duration(self, groups: dict[str, Any], cpu: CpuTimes | None) -> int | None:
        if groups.get("duration") is not None:
            return decode_seconds_to_micros(groups["duration"])
        if groups.get("duration_ms") is not None:
            return decode_millis_to_micros(groups["duration_ms"])
        if cpu is not None:
            return cpu.real_centis * 10_000
        return None

    def _extract_regions(self, groups: dict[str, Any]) -> tuple[MemoryUsage, ...]:
        measured: dict[Region, tuple[int, int, int]] = {}
        for prefix, region in REGION_PREFIXES.items():
            after = groups.get(f"{prefix}_after")
            if after is None:
                continue
            after_bytes = decode_size_token(after)
            before = groups.get(f"{prefix}_before")
            capacity = groups.get(f"{prefix}_capacity")
            measured[region] = (
                decode_size_token(before) if before is not None else after_bytes,
                after_bytes,
                decode_size_token(capacity) if capacity is not None else 0,
            )

        young = measured.get(Region.YOUNG)
        old = measured.get(Region.OLD)
        combined = measured.get(Region.COMBINED)
        if combined is not None and young is not None and old is None:
            measured[Region.OLD] = _difference(combined, young)
        elif combined is not None and old is not None and young is None:
            measured[Region.YOUNG] = _difference(combined, old)

        if not measured:
            for region in self.zero_regions:
                measured[region] = (0, 0, 0)

        usages: list[MemoryUsage] = []
        for region in Region:
            if region in measured:
                before_bytes, after_bytes, capacity_bytes = measured[region]
                usages.append(
                    MemoryUsage(
                        region=region,
                        before_bytes=before_bytes,
                        after_bytes=after_bytes,
                        capacity_bytes=capacity_bytes,
                    )
                )
        return tuple(usages)


def _difference(total: tuple[int, int, int], part: tuple[int, int, int]) -> tuple[int, int, int]:
    """Per-point subtraction; negative results from logging artifacts are kept."""
    return (total[0] - part[0], total[1] - part[1], total[2] - part[2])
