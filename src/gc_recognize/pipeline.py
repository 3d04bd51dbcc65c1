"""Preprocess, classify and assemble a GC log in three strict stages."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from gc_recognize.assembler import RunAssembler
from gc_recognize.classifier import Classifier
from gc_recognize.config import ParserSettings
from gc_recognize.models import EventKind, GcEvent, RunSummary
from gc_recognize.preprocessor import Preprocessor

logger = logging.getLogger(__name__)


class GcRun(BaseModel):
    """Recognized events of one log in input order, with their summary."""

    model_config = ConfigDict(frozen=True)

    events: tuple[GcEvent, ...] = ()
    summary: RunSummary = Field(default_factory=RunSummary)
    unknown_lines: tuple[str, ...] = ()


def analyze_lines(lines: Iterable[str], settings: ParserSettings | None = None) -> GcRun:
    """Run the whole pipeline over an in-memory sequence of log lines."""
    settings = settings or ParserSettings()
    classifier = Classifier()

    preprocessed = Preprocessor(classifier, settings).run(lines)
    logger.debug("Preprocessing produced %d lines", len(preprocessed.lines))

    assembler = RunAssembler(settings)
    assembler.note_discarded(preprocessed.discarded_fragments)
    assembler.note_dropped_statistics(preprocessed.dropped_statistics)

    unknown_lines: list[str] = []
    for line in preprocessed.lines:
        kind, event = classifier.classify(line.text, start_stamped=line.start_stamped)
        if kind is EventKind.UNKNOWN or event is None:
            assembler.note_unknown(line.text)
            unknown_lines.append(line.text)
            logger.debug("Unrecognized line %d: %s", line.line_number, line.text)
            continue
        assembler.add(event)

    summary = assembler.finish()
    logger.debug(
        "Recognized %d events, %d unknown lines", summary.event_count, summary.unknown_line_count
    )
    return GcRun(
        events=tuple(assembler.events), summary=summary, unknown_lines=tuple(unknown_lines)
    )


def analyze_file(path: Path | str, settings: ParserSettings | None = None) -> GcRun:
    """Read a GC log from disk and analyze it."""
    with Path(path).open(encoding="utf-8", errors="replace") as handle:
        lines = handle.readlines()
    logger.debug("Read %d lines from %s", len(lines), path)
    return analyze_lines(lines, settings)
