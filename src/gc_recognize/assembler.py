"""Running aggregates over the ordered event sequence."""

from __future__ import annotations

from collections import Counter

from gc_recognize.classifier import is_blocking, is_throwaway
from gc_recognize.config import ParserSettings
from gc_recognize.models import EventKind, GcEvent, Region, RunSummary


class RunAssembler:
    """Consumes events once, in input order, and freezes a ``RunSummary``.

    Events are neither reordered nor deduplicated.
    """

    def __init__(self, settings: ParserSettings | None = None) -> None:
        self.settings = settings or ParserSettings()
        self.events: list[GcEvent] = []
        self._kind_counts: Counter[EventKind] = Counter()
        self._min_timestamp_ms: int | None = None
        self._max_timestamp_ms: int | None = None
        self._blocking_event_count = 0
        self._total_pause_us = 0
        self._max_pause_us = 0
        self._total_user_centis = 0
        self._total_sys_centis = 0
        self._total_real_centis = 0
        self._max_occupancy: dict[Region, int] = {}
        self._max_capacity: dict[Region, int] = {}
        self._unknown_line_count = 0
        self._unknown_samples: list[str] = []
        self._discarded_fragment_count = 0
        self._dropped_statistics_lines = 0

    def add(self, event: GcEvent) -> None:
        self.events.append(event)
        self._kind_counts[event.kind] += 1

        if event.timestamp_ms is not None and not is_throwaway(event.kind):
            if self._min_timestamp_ms is None or event.timestamp_ms < self._min_timestamp_ms:
                self._min_timestamp_ms = event.timestamp_ms
            if self._max_timestamp_ms is None or event.timestamp_ms > self._max_timestamp_ms:
                self._max_timestamp_ms = event.timestamp_ms

        if is_blocking(event.kind):
            self._blocking_event_count += 1
            if event.duration_us is not None:
                self._total_pause_us += event.duration_us
                self._max_pause_us = max(self._max_pause_us, event.duration_us)

        if event.cpu is not None:
            self._total_user_centis += event.cpu.user_centis
            self._total_sys_centis += event.cpu.sys_centis
            self._total_real_centis += event.cpu.real_centis

        for region in Region:
            usage = event.region(region)
            if usage is None:
                continue
            self._max_occupancy[region] = max(
                self._max_occupancy.get(region, usage.peak_bytes), usage.peak_bytes
            )
            self._max_capacity[region] = max(
                self._max_capacity.get(region, usage.capacity_bytes), usage.capacity_bytes
            )

    def note_unknown(self, line: str) -> None:
        """Count an unrecognized line, keeping the first few verbatim."""
        self._unknown_line_count += 1
        if len(self._unknown_samples) < self.settings.unknown_sample_limit:
            self._unknown_samples.append(line)

    def note_discarded(self, count: int = 1) -> None:
        self._discarded_fragment_count += count

    def note_dropped_statistics(self, count: int) -> None:
        self._dropped_statistics_lines += count

    def finish(self) -> RunSummary:
        return RunSummary(
            event_count=len(self.events),
            min_timestamp_ms=self._min_timestamp_ms,
            max_timestamp_ms=self._max_timestamp_ms,
            kind_counts=dict(self._kind_counts),
            blocking_event_count=self._blocking_event_count,
            total_pause_us=self._total_pause_us,
            max_pause_us=self._max_pause_us,
            total_user_centis=self._total_user_centis,
            total_sys_centis=self._total_sys_centis,
            total_real_centis=self._total_real_centis,
            max_occupancy_bytes=dict(self._max_occupancy),
            max_capacity_bytes=dict(self._max_capacity),
            unknown_line_count=self._unknown_line_count,
            unknown_samples=tuple(self._unknown_samples),
            discarded_fragment_count=self._discarded_fragment_count,
            dropped_statistics_lines=self._dropped_statistics_lines,
        )
