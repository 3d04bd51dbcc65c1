"""Tests for the unified logging recognizers (JDK 9+)."""

from __future__ import annotations

import pytest
from conftest import cpu, kb

from gc_recognize.classifier import is_blocking, is_reportable, is_unified
from gc_recognize.models import EventKind, Region, Trigger

JDK11_SAFEPOINT = (
    "[2021-09-14T11:40:53.379-0500][144.035s][info][safepoint     ] Entering safepoint region: "
    "CollectForMetadataAllocation[2021-09-14T11:40:53.379-0500][144.036s][info][safepoint     ] "
    "Leaving safepoint region[2021-09-14T11:40:53.379-0500][144.036s][info][safepoint     ] Total time "
    "for which application threads were stopped: 0.0004546 seconds, Stopping threads took: 0.0002048 "
    "seconds"
)


class TestUnifiedSafepoint:
    def test_jdk11_joined(self, recognize) -> None:
        event = recognize(JDK11_SAFEPOINT, EventKind.UNIFIED_SAFEPOINT)
        assert event.trigger is Trigger.COLLECT_FOR_METADATA_ALLOCATION
        assert event.timestamp_ms == 144035
        assert event.details["time_to_stop_threads_us"] == 204
        assert event.details["time_threads_stopped_us"] == 454
        assert event.duration_us == 454

    def test_jdk11_datestamp_only(self, recognize) -> None:
        event = recognize(
            "[2021-09-14T11:40:53.379-0500][info][safepoint     ] Entering safepoint region: "
            "CollectForMetadataAllocation[2021-09-14T11:40:53.379-0500][info][safepoint     ] "
            "Leaving safepoint region[2021-09-14T11:40:53.379-0500][info][safepoint     ] Total time for which "
            "application threads were stopped: 0.0004546 seconds, Stopping threads took: 0.0002048 seconds",
            EventKind.UNIFIED_SAFEPOINT,
        )
        assert event.timestamp_ms == 684934853379

    @pytest.mark.parametrize(
        "line",
        [
            "[2021-09-14T11:40:53.379-0500][144035ms][info][safepoint     ] Entering safepoint region: "
            "CollectForMetadataAllocation[2021-09-14T11:40:53.379-0500][144036ms][info][safepoint     ] "
            "Leaving safepoint region[2021-09-14T11:40:53.379-0500][144036ms][info][safepoint     ] Total time "
            "for which application threads were stopped: 0.0004546 seconds, Stopping threads took: 0.0002048 "
            "seconds",
            "[144.035s][info][safepoint     ] Entering safepoint region: CollectForMetadataAllocation"
            "[144.036s][info][safepoint     ] Leaving safepoint region[144.036s][info][safepoint     ] Total "
            "time for which application threads were stopped: 0.0004546 seconds, Stopping threads took: "
            "0.0002048 seconds",
            "[144035ms][info][safepoint     ] Entering safepoint region: CollectForMetadataAllocation"
            "[144036ms][info][safepoint     ] Leaving safepoint region[144036ms][info][safepoint     ] Total "
            "time for which application threads were stopped: 0.0004546 seconds, Stopping threads took: "
            "0.0002048 seconds",
            JDK11_SAFEPOINT + "   ",
        ],
    )
    def test_jdk11_uptime_variants(self, recognize, line: str) -> None:
        event = recognize(line, EventKind.UNIFIED_SAFEPOINT)
        assert event.timestamp_ms == 144035
        assert event.details["time_to_stop_threads_us"] == 204

    @pytest.mark.parametrize(
        ("line", "trigger", "timestamp", "reaching", "at"),
        [
            (
                '[0.192s][info][safepoint   ] Safepoint "CleanClassLoaderDataMetaspaces", Time since last: '
                "1223019 ns, Reaching safepoint: 138450 ns, At safepoint: 73766 ns, Total: 212216 ns",
                Trigger.CLEAN_CLASSLOADER_DATA_METASPACES,
                192,
                138,
                73,
            ),
            (
                '[0.064s][info][safepoint   ] Safepoint "G1Concurrent", Time since last: 1666947 ns, '
                "Reaching safepoint: 79150 ns, At safepoint: 349999 ns, Total: 429149 ns",
                Trigger.G1_CONCURRENT,
                64,
                79,
                349,
            ),
            (
                '[0.061s][info][safepoint   ] Safepoint "GenCollectForAllocation", Time since last: '
                "24548411 ns, Reaching safepoint: 69521 ns, At safepoint: 779732 ns, Total: 849253 ns",
                Trigger.GEN_COLLECT_FOR_ALLOCATION,
                61,
                69,
                779,
            ),
            (
                '[0.129s] Safepoint "ZMarkEnd", Time since last: 4051145 ns, Reaching safepoint: 79105 ns, '
                "At safepoint: 16082 ns, Total: 95187 ns",
                Trigger.Z_MARK_END,
                129,
                79,
                16,
            ),
            (
                '[0.124s][info][safepoint   ] Safepoint "ZMarkStart", Time since last: 103609844 ns, '
                "Reaching safepoint: 99888 ns, At safepoint: 30677 ns, Total: 130565 ns",
                Trigger.Z_MARK_START,
                124,
                99,
                30,
            ),
            (
                '[0.132s] Safepoint "ZRelocateStart", Time since last: 1366138 ns, Reaching safepoint: '
                "138018 ns, At safepoint: 15653 ns, Total: 153671 ns",
                Trigger.Z_RELOCATE_START,
                132,
                138,
                15,
            ),
        ],
    )
    def test_jdk17(self, recognize, line, trigger, timestamp, reaching, at) -> None:
        event = recognize(line, EventKind.UNIFIED_SAFEPOINT)
        assert event.trigger is trigger
        assert event.timestamp_ms == timestamp
        assert event.details["time_to_stop_threads_us"] == reaching
        assert event.details["time_threads_stopped_us"] == at

    def test_jdk17_total_duration(self, recognize) -> None:
        event = recognize(
            '[0.192s][info][safepoint   ] Safepoint "CleanClassLoaderDataMetaspaces", Time since last: '
            "1223019 ns, Reaching safepoint: 138450 ns, At safepoint: 73766 ns, Total: 212216 ns",
            EventKind.UNIFIED_SAFEPOINT,
        )
        assert event.duration_us == 212

    def test_facts(self) -> None:
        assert not is_blocking(EventKind.UNIFIED_SAFEPOINT)
        assert not is_reportable(EventKind.UNIFIED_SAFEPOINT)
        assert is_unified(EventKind.UNIFIED_SAFEPOINT)


class TestUnifiedPauses:
    def test_joined_serial_young(self, recognize) -> None:
        event = recognize(
            "[0.118s][info][gc,start     ] GC(0) Pause Young (Allocation Failure) "
            "DefNew: 1022K->127K(1152K) Tenured: 0K->1012K(2516K) Metaspace: 1389K->1389K(1056768K) "
            "1M->1M(3M) 3.124ms User=0.00s Sys=0.00s Real=0.00s",
            EventKind.UNIFIED_SERIAL_NEW,
        )
        assert event.timestamp_ms == 118
        assert event.sequence_number == 0
        assert event.trigger is Trigger.ALLOCATION_FAILURE
        assert kb(event, Region.YOUNG) == (1022, 127, 1152)
        assert kb(event, Region.OLD) == (0, 1012, 2516)
        assert kb(event, Region.METASPACE) == (1389, 1389, 1056768)
        assert kb(event, Region.COMBINED) == (1024, 1024, 3072)
        assert event.duration_us == 3124
        assert event.parallelism == 100

    def test_summary_alone_is_stamped_at_pause_start(self, recognize) -> None:
        event = recognize(
            "[0.121s][info][gc           ] GC(0) Pause Young (Allocation Failure) 1M->1M(3M) 3.124ms",
            EventKind.UNIFIED_YOUNG,
        )
        assert event.timestamp_ms == 118
        assert event.duration_us == 3124

    def test_joined_parallel_scavenge(self, recognize) -> None:
        event = recognize(
            "[0.031s][info][gc,start     ] GC(0) Pause Young (Allocation Failure) "
            "PSYoungGen: 512K->464K(1024K) ParOldGen: 0K->8K(512K) Metaspace: 120K->120K(1056768K) "
            "0M->0M(1M) 1.195ms User=0.01s Sys=0.01s Real=0.00s",
            EventKind.UNIFIED_PARALLEL_SCAVENGE,
        )
        assert cpu(event) == (1, 1, 0)
        assert event.parallelism is None
        assert event.timestamp_ms == 31

    def test_jdk17_generation_capacity_before(self, recognize) -> None:
        event = recognize(
            "[0.075s][info][gc,start    ] GC(2) Pause Young (Allocation Failure) "
            "DefNew: 1024K(1152K)->127K(1152K) Eden: 1024K(1024K)->0K(1024K) From: 0K(128K)->127K(128K) "
            "Tenured: 1000K(2048K)->1100K(2048K) Metaspace: 300K(512K)->300K(512K) "
            "2M->1M(3M) 0.950ms User=0.00s Sys=0.00s Real=0.01s",
            EventKind.UNIFIED_SERIAL_NEW,
        )
        assert kb(event, Region.YOUNG) == (1024, 127, 1152)
        assert kb(event, Region.OLD) == (1000, 1100, 2048)

    def test_serial_full(self, recognize) -> None:
        event = recognize(
            "[0.500s][info][gc,start     ] GC(3) Pause Full (Allocation Failure) "
            "DefNew: 1152K->0K(1152K) Tenured: 2000K->1500K(2516K) Metaspace: 1389K->1389K(1056768K) "
            "3M->1M(3M) 12.000ms User=0.01s Sys=0.00s Real=0.01s",
            EventKind.UNIFIED_SERIAL_OLD,
        )
        assert event.duration_us == 12000

    def test_g1_young(self, recognize) -> None:
        event = recognize(
            "[0.101s][info][gc] GC(0) Pause Young (Normal) (G1 Evacuation Pause) 25M->4M(256M) 3.318ms",
            EventKind.UNIFIED_G1_YOUNG_PAUSE,
        )
        assert event.trigger is Trigger.G1_EVACUATION_PAUSE
        assert event.details == {"phase": "Normal"}
        assert event.timestamp_ms == 98
        assert kb(event, Region.COMBINED) == (25 * 1024, 4 * 1024, 256 * 1024)

    def test_g1_young_joined_with_metaspace(self, recognize) -> None:
        event = recognize(
            "[0.100s][info][gc,start     ] GC(0) Pause Young (Normal) (G1 Evacuation Pause) "
            "Metaspace: 3801K->3801K(1056768K) 0M->0M(2M) 1.371ms User=0.01s Sys=0.00s Real=0.00s",
            EventKind.UNIFIED_G1_YOUNG_PAUSE,
        )
        assert event.timestamp_ms == 100
        assert kb(event, Region.METASPACE) == (3801, 3801, 1056768)

    def test_g1_evacuation_failure(self, recognize) -> None:
        event = recognize(
            "[2.000s][info][gc] GC(7) Pause Young (Normal) (G1 Evacuation Pause) (Evacuation Failure) "
            "1000M->1000M(1024M) 10.000ms",
            EventKind.UNIFIED_G1_YOUNG_PAUSE,
        )
        assert event.trigger is Trigger.EVACUATION_FAILURE

    def test_g1_concurrent_start(self, recognize) -> None:
        event = recognize(
            "[16.601s][info][gc] GC(1032) Pause Young (Concurrent Start) (G1 Humongous Allocation) "
            "881M->853M(1023M) 2.427ms",
            EventKind.UNIFIED_G1_YOUNG_INITIAL_MARK,
        )
        assert event.trigger is Trigger.G1_HUMONGOUS_ALLOCATION
        assert event.sequence_number == 1032

    def test_g1_mixed(self, recognize) -> None:
        recognize(
            "[16.629s][info][gc] GC(1033) Pause Young (Mixed) (G1 Evacuation Pause) 860M->830M(1023M) 1.936ms",
            EventKind.UNIFIED_G1_MIXED_PAUSE,
        )

    def test_remark_and_cleanup(self, recognize) -> None:
        recognize(
            "[16.053s][info][gc] GC(969) Pause Remark 29M->29M(46M) 2.328ms", EventKind.UNIFIED_REMARK
        )
        recognize(
            "[16.082s][info][gc] GC(969) Pause Cleanup 28M->28M(46M) 0.064ms",
            EventKind.UNIFIED_G1_CLEANUP,
        )

    def test_g1_full(self, recognize) -> None:
        event = recognize(
            "[1.306s][info][gc] GC(10) Pause Full (G1 Compaction Pause) 1023M->976M(1024M) 21.574ms",
            EventKind.UNIFIED_G1_FULL_GC,
        )
        assert event.timestamp_ms == 1306 - 22

    def test_generic_full(self, recognize) -> None:
        event = recognize(
            "[0.500s][info][gc] GC(3) Pause Full (Ergonomics) 5M->3M(8M) 20.000ms", EventKind.UNIFIED_OLD
        )
        assert event.trigger is Trigger.ERGONOMICS
        assert event.timestamp_ms == 480

    def test_concurrent_cycle(self, recognize) -> None:
        event = recognize(
            "[16.082s][info][gc] GC(969) Concurrent Cycle 45.472ms", EventKind.UNIFIED_CONCURRENT
        )
        assert event.details == {"phase": "Cycle"}
        assert event.timestamp_ms == 16082 - 45

    def test_concurrent_start_line(self, recognize) -> None:
        event = recognize(
            "[16.601s][info][gc] GC(1033) Concurrent Mark Cycle", EventKind.UNIFIED_CONCURRENT
        )
        assert event.duration_us is None
        assert event.timestamp_ms == 16601

    def test_unified_kinds_need_a_unified_decorator(self, classifier) -> None:
        assert (
            classifier.identify("Pause Young (Allocation Failure) 1M->1M(3M) 3.124ms")
            is EventKind.UNKNOWN
        )


class TestUnifiedInformational:
    @pytest.mark.parametrize(
        ("line", "kind"),
        [
            ("[0.003s][info][gc] Using Serial", EventKind.USING_SERIAL),
            ("[0.003s][info][gc] Using Parallel", EventKind.USING_PARALLEL),
            ("[0.003s][info][gc] Using Concurrent Mark Sweep", EventKind.USING_CMS),
            ("[0.003s][info][gc] Using G1", EventKind.USING_G1),
            ("[0.003s][info][gc] Using Shenandoah", EventKind.USING_SHENANDOAH),
            ("[0.003s][info][gc,init] Using The Z Garbage Collector", EventKind.USING_Z),
            ("[0.006s][info][gc,init] Version: 17.0.1+12-LTS (release)", EventKind.GC_INFO),
            ("[0.006s][info][gc,init] Heap Region Size: 1M", EventKind.GC_INFO),
            (
                "[0.101s][info][gc,phases    ] GC(0)   Pre Evacuate Collection Set: 0.0ms",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            (
                "[0.101s][info][gc,task      ] GC(0) Using 2 workers of 4 for evacuation",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            (
                "[0.101s][info][gc,heap      ] GC(0) Eden regions: 1->0(1)",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            (
                "[0.100s][info][gc,start     ] GC(0) Pause Young (Normal) (G1 Evacuation Pause)",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            (
                "[0.118s][info][gc,start     ] GC(0) Pause Full (System.gc())",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            (
                "[0.101s][info][gc,cpu       ] GC(0) User=0.01s Sys=0.00s Real=0.00s",
                EventKind.UNIFIED_GC_DETAIL,
            ),
            ("[0.101s][info][gc,heap,exit ]", EventKind.UNIFIED_BLANK_LINE),
        ],
    )
    def test_kinds(self, classifier, line: str, kind: EventKind) -> None:
        assert classifier.identify(line) is kind

    def test_gc_info_details(self, recognize) -> None:
        event = recognize("[0.006s][info][gc,init] Heap Region Size: 1M", EventKind.GC_INFO)
        assert event.details == {"name": "Heap Region Size", "value": "1M"}
