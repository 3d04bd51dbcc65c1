"""Tests for classifier dispatch and the per-kind fact table."""

from __future__ import annotations

import pytest

from gc_recognize.classifier import (
    KIND_FACTS,
    Classifier,
    is_blocking,
    is_reportable,
    is_throwaway,
    is_unified,
    is_unified_run,
)
from gc_recognize.models import EventKind
from gc_recognize.recognizers import RECOGNIZERS


class TestRecognizerTable:
    def test_one_recognizer_per_kind(self) -> None:
        kinds = [recognizer.kind for recognizer in RECOGNIZERS]
        assert len(kinds) == len(set(kinds))
        assert set(kinds) == set(EventKind) - {EventKind.UNKNOWN}

    def test_catch_all_detail_is_last(self) -> None:
        assert RECOGNIZERS[-1].kind is EventKind.UNIFIED_GC_DETAIL


class TestClassify:
    def test_returns_kind_and_event(self, classifier: Classifier) -> None:
        kind, event = classifier.classify("72.598: [GC pause (mixed) 643M->513M(724M), 0.1686650 secs]\n")
        assert kind is EventKind.G1_MIXED_PAUSE
        assert event is not None
        assert event.log_entry == "72.598: [GC pause (mixed) 643M->513M(724M), 0.1686650 secs]"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   ",
            "hello world",
            "72.598: [GC pause (mixed) 643M->513M(724M)",
            "[0.121s][info][gc] GC(0) Pause Young (Allocation Failure) 1M->1M(3M)",
        ],
    )
    def test_unknown(self, classifier: Classifier, line: str) -> None:
        kind, event = classifier.classify(line)
        assert kind is EventKind.UNKNOWN
        assert event is None

    def test_malformed_datestamp_is_unknown(self, classifier: Classifier) -> None:
        assert (
            classifier.identify("[2021-02-31T11:40:53.379-0500][info][gc] Using G1")
            is EventKind.UNKNOWN
        )

    def test_unified_record_wins_over_generic_summary(self, classifier: Classifier) -> None:
        assert (
            classifier.identify(
                "[0.101s][info][gc] GC(0) Pause Young (Normal) (G1 Evacuation Pause) 25M->4M(256M) 3.318ms"
            )
            is EventKind.UNIFIED_G1_YOUNG_PAUSE
        )

    def test_full_collection_wins_over_young(self, classifier: Classifier) -> None:
        assert (
            classifier.identify(
                "3.000: [GC (Allocation Failure) 3.000: [ParNew: 1000K->1000K(2000K), 0.0100000 secs]"
                "3.010: [CMS (concurrent mode failure): 5000K->4000K(6000K), 0.5000000 secs] "
                "6000K->4000K(8000K), [Metaspace: 3000K->3000K(1056768K)], 0.5100000 secs]"
            )
            is EventKind.CMS_SERIAL_OLD
        )

    def test_custom_recognizer_order(self) -> None:
        classifier = Classifier(recognizers=[r for r in RECOGNIZERS if r.kind is not EventKind.USING_G1])
        assert classifier.identify("[0.003s][info][gc] Using G1") is EventKind.UNKNOWN


class TestKindFacts:
    def test_every_kind_has_facts(self) -> None:
        assert set(KIND_FACTS) == set(EventKind)

    def test_blocking_kinds_are_reportable(self) -> None:
        for kind in EventKind:
            if is_blocking(kind):
                assert is_reportable(kind), kind

    def test_throwaway_kinds_are_not_reportable(self) -> None:
        for kind in EventKind:
            if is_throwaway(kind):
                assert not is_reportable(kind), kind

    @pytest.mark.parametrize(
        ("kind", "blocking", "reportable"),
        [
            (EventKind.G1_YOUNG_PAUSE, True, True),
            (EventKind.G1_CONCURRENT, False, True),
            (EventKind.APPLICATION_STOPPED_TIME, False, True),
            (EventKind.APPLICATION_CONCURRENT_TIME, False, False),
            (EventKind.UNIFIED_REMARK, True, True),
            (EventKind.Z_GARBAGE_COLLECTION, False, True),
            (EventKind.UNKNOWN, False, False),
        ],
    )
    def test_sample_facts(self, kind: EventKind, blocking: bool, reportable: bool) -> None:
        assert is_blocking(kind) is blocking
        assert is_reportable(kind) is reportable

    def test_unified_kinds(self) -> None:
        assert is_unified(EventKind.UNIFIED_SERIAL_NEW)
        assert is_unified(EventKind.USING_G1)
        assert is_unified(EventKind.Z_MARK_START)
        assert not is_unified(EventKind.SHENANDOAH_INIT_MARK)
        assert not is_unified(EventKind.G1_YOUNG_PAUSE)

    def test_is_unified_run(self) -> None:
        assert is_unified_run([EventKind.HEADER_VERSION, EventKind.USING_G1])
        assert not is_unified_run([EventKind.G1_YOUNG_PAUSE, EventKind.APPLICATION_STOPPED_TIME])
        assert not is_unified_run([])
