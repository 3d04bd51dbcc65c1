"""End-to-end tests for analyze_lines / analyze_file."""

from __future__ import annotations

from gc_recognize import analyze_file, analyze_lines
from gc_recognize.config import ParserSettings
from gc_recognize.models import EventKind, Region, Trigger

UNIFIED_LOG = [
    "[0.003s][info][gc] Using Serial",
    "[0.118s][info][gc,start     ] GC(0) Pause Young (Allocation Failure)",
    "[0.121s][info][gc,heap      ] GC(0) DefNew: 1022K->127K(1152K)",
    "[0.121s][info][gc,heap      ] GC(0) Tenured: 0K->1012K(2516K)",
    "[0.121s][info][gc,metaspace ] GC(0) Metaspace: 1389K->1389K(1056768K)",
    "[0.121s][info][gc           ] GC(0) Pause Young (Allocation Failure) 1M->1M(3M) 3.124ms",
    "[0.121s][info][gc,cpu       ] GC(0) User=0.00s Sys=0.00s Real=0.00s",
    "not a gc line",
    "[0.500s][info][gc] GC(1) Pause Full (Ergonomics) 5M->3M(8M) 20.000ms",
]

LEGACY_LOG = [
    "OpenJDK 64-Bit Server VM (25.242-b08) for linux-amd64 JRE (1.8.0_242-b08), "
    'built on Jan 28 2020 14:28:22 by "root" with gcc 4.4.7',
    "CommandLine flags: -XX:+PrintGCDetails -XX:+UseG1GC",
    "1.000: [GC pause (G1 Evacuation Pause) (young), 0.0100000 secs]",
    "   [Parallel Time: 9.0 ms, GC Workers: 4]",
    "   [Eden: 24.0M(24.0M)->0.0B(23.0M) Survivors: 0.0B->3072.0K Heap: 24.0M(256.0M)->3.5M(256.0M)]",
    " [Times: user=0.03 sys=0.00, real=0.01 secs]",
    "2.000: [GC concurrent-mark-end, 0.0282160 secs]",
    "3.000: [GC pause (G1 Evacuation Pause) (mixed) 30M->10M(256M), 0.0200000 secs]",
]


class TestAnalyzeLines:
    def test_unified_run(self) -> None:
        run = analyze_lines(UNIFIED_LOG)
        assert [event.kind for event in run.events] == [
            EventKind.USING_SERIAL,
            EventKind.UNIFIED_SERIAL_NEW,
            EventKind.UNIFIED_OLD,
        ]
        assert run.unknown_lines == ("not a gc line",)

        summary = run.summary
        assert summary.event_count == 3
        assert summary.blocking_event_count == 2
        assert summary.total_pause_us == 23124
        assert summary.max_pause_us == 20000
        assert (summary.min_timestamp_ms, summary.max_timestamp_ms) == (3, 480)
        assert summary.unknown_line_count == 1
        assert summary.unknown_samples == ("not a gc line",)

    def test_legacy_run(self) -> None:
        run = analyze_lines(LEGACY_LOG)
        assert [event.kind for event in run.events] == [
            EventKind.HEADER_VERSION,
            EventKind.HEADER_COMMAND_LINE_FLAGS,
            EventKind.G1_YOUNG_PAUSE,
            EventKind.G1_CONCURRENT,
            EventKind.G1_MIXED_PAUSE,
        ]
        summary = run.summary
        assert summary.unknown_line_count == 0
        assert summary.discarded_fragment_count == 0
        assert summary.total_pause_us == 30000
        assert (summary.min_timestamp_ms, summary.max_timestamp_ms) == (1000, 3000)
        assert summary.max_occupancy_bytes[Region.COMBINED] == 30 * 1024 * 1024
        assert summary.max_capacity_bytes[Region.COMBINED] == 256 * 1024 * 1024

    def test_system_gc_full_pause(self) -> None:
        run = analyze_lines(
            [
                "[0.118s][info][gc,start     ] GC(0) Pause Full (System.gc())",
                "[0.118s][info][gc,phases,start] GC(0) Phase 1: Mark live objects",
                "[0.121s][info][gc,heap      ] GC(0) DefNew: 1022K->0K(1152K)",
                "[0.121s][info][gc,heap      ] GC(0) Tenured: 1012K->1400K(2516K)",
                "[0.121s][info][gc,metaspace ] GC(0) Metaspace: 1389K->1389K(1056768K)",
                "[0.121s][info][gc           ] GC(0) Pause Full (System.gc()) 1M->1M(3M) 3.124ms",
                "[0.121s][info][gc,cpu       ] GC(0) User=0.00s Sys=0.00s Real=0.00s",
            ]
        )
        assert [event.kind for event in run.events] == [EventKind.UNIFIED_SERIAL_OLD]
        assert run.unknown_lines == ()
        event = run.events[0]
        assert event.trigger is Trigger.SYSTEM_GC
        assert (event.timestamp_ms, event.duration_us) == (118, 3124)
        assert event.cpu is not None

    def test_joined_pause_without_cpu_line_keeps_start_time(self) -> None:
        run = analyze_lines(UNIFIED_LOG[1:6])
        assert [event.kind for event in run.events] == [EventKind.UNIFIED_SERIAL_NEW]
        assert run.events[0].cpu is None
        assert run.events[0].timestamp_ms == 118

    def test_lone_summary_is_stamped_at_its_start(self) -> None:
        run = analyze_lines(UNIFIED_LOG[5:6])
        assert run.events[0].timestamp_ms == 118

    def test_empty_input(self) -> None:
        run = analyze_lines([])
        assert run.events == ()
        assert run.summary.event_count == 0

    def test_discarded_fragments_are_counted(self) -> None:
        run = analyze_lines(["2.345: [GC (Allocation Failure) 2.345: [ParNew"])
        assert run.events == ()
        assert run.summary.discarded_fragment_count == 1

    def test_settings_are_honored(self) -> None:
        lines = ["junk 1", "junk 2", "junk 3"]
        run = analyze_lines(lines, ParserSettings(unknown_sample_limit=1))
        assert run.summary.unknown_line_count == 3
        assert run.summary.unknown_samples == ("junk 1",)
        assert run.unknown_lines == tuple(lines)


class TestAnalyzeFile:
    def test_reads_from_disk(self, write_log) -> None:
        path = write_log(LEGACY_LOG)
        run = analyze_file(path)
        assert run.summary.event_count == 5
        assert run.events[2].log_entry.startswith("1.000: [GC pause")

    def test_accepts_str_path(self, write_log) -> None:
        path = write_log(UNIFIED_LOG)
        assert analyze_file(str(path)).summary.event_count == 3
