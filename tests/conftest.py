"""Shared test fixtures for gc_recognize."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from gc_recognize.classifier import Classifier
from gc_recognize.config import ParserSettings
from gc_recognize.models import EventKind, GcEvent, Region
from gc_recognize.preprocessor import Preprocessor


@pytest.fixture(scope="session")
def classifier() -> Classifier:
    return Classifier()


@pytest.fixture
def recognize(classifier: Classifier) -> Callable[[str, EventKind], GcEvent]:
    """Classify a line, asserting its kind, and return the event."""

    def _recognize(line: str, kind: EventKind) -> GcEvent:
        found, event = classifier.classify(line)
        assert found is kind, f"{line!r} classified as {found}"
        assert event is not None
        return event

    return _recognize


@pytest.fixture
def preprocess(classifier: Classifier) -> Callable[..., list[str]]:
    """Run the preprocessor and return the text of the logical lines."""

    def _preprocess(lines: list[str], **settings: object) -> list[str]:
        result = Preprocessor(classifier, ParserSettings(**settings)).run(lines)
        return [line.text for line in result.lines]

    return _preprocess


@pytest.fixture
def write_log(tmp_path: Path) -> Callable[[list[str]], Path]:
    def _write_log(lines: list[str]) -> Path:
        path = tmp_path / "gc.log"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write_log


def kb(event: GcEvent, region: Region) -> tuple[int, int, int]:
    """(before, after, capacity) in KB for one region of an event."""
    usage = event.region(region)
    assert usage is not None, f"{event.kind} has no {region.value} region"
    return usage.before_kb, usage.after_kb, usage.capacity_kb


def cpu(event: GcEvent) -> tuple[int, int, int]:
    assert event.cpu is not None
    return event.cpu.user_centis, event.cpu.sys_centis, event.cpu.real_centis
