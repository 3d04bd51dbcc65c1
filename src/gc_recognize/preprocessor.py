"""First pass: rebuild records the JVM split across several physical lines.

Collectors interleave detail output with the record they describe. Legacy G1
prints the pause header, an indented phase breakdown, the ``[Eden: ...]``
sizes and the ``[Times: ...]`` trailer on separate lines; unified logging
spreads one pause over a start line, generation lines, a summary and a CPU
line sharing a ``GC(n)`` id. The preprocessor joins each such group into a
single line the recognizers can match whole.

At most one fragment is open at a time, apart from a bracketing safepoint
fragment held around it. Each fragment family decides, line by line,
whether a line continues its fragment, is dropped inside it, passes through
untouched, or ends it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from gc_recognize.classifier import STATISTICS_KINDS, Classifier, is_blocking, is_throwaway
from gc_recognize.config import ParserSettings
from gc_recognize.decorator import Decorator, split_decorator
from gc_recognize.models import EventKind, PreprocessedLine
from gc_recognize.recognizers._base import CAUSE, CPU, INNER, MILLIS, SIZE
from gc_recognize.units import DecodeError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """What a fragment family does with the next physical line."""

    APPEND = "append"  # add to the fragment, keep it open
    COMPLETE = "complete"  # add to the fragment and emit it
    ABSORB = "absorb"  # drop the line, keep the fragment open
    PASS = "pass"  # emit the line on its own, keep the fragment open
    CLOSE = "close"  # the fragment ended before this line


class Fragment:
    """A record being accumulated."""

    def __init__(
        self,
        family: FragmentFamily,
        text: str,
        decorator: Decorator | None,
        *,
        gc_id: int | None = None,
        summary_seen: bool = False,
        start_stamped: bool = False,
    ) -> None:
        self.family = family
        self.text = text
        self.decorator = decorator
        self.gc_id = gc_id
        self.summary_seen = summary_seen
        self.start_stamped = start_stamped
        self.line_number = 0
        self.line_count = 1
        self.fragment_count = 1
        self.complete = False
        # Lines split off the opening line, emitted ahead of the fragment
        self.spill: list[str] = []

    def add(self, piece: str) -> None:
        self.text += piece
        self.fragment_count += 1


# ============================================================
# FRAGMENT FAMILIES
# ============================================================


class FragmentFamily:
    """Opening and continuation rules for one kind of split record."""

    name: ClassVar[str] = "fragment"
    # A bracketing fragment stays held while another fragment opens inside it
    brackets: ClassVar[bool] = False

    def __init__(self, classifier: Classifier) -> None:
        self.classifier = classifier

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        raise NotImplementedError

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        raise NotImplementedError


class LegacyG1DetailsFamily(FragmentFamily):
    """``[GC pause ...]`` header followed by the -XX:+PrintGCDetails block.

        1.234: [GC pause (G1 Evacuation Pause) (young), 0.0123 secs]
           [Parallel Time: 10.2 ms, GC Workers: 8]
           ...
           [Eden: 24.0M(24.0M)->0.0B(23.0M) Survivors: 0.0B->3072.0K Heap: ...]
         [Times: user=0.03 sys=0.00, real=0.01 secs]
    """

    name = "G1 details"

    HEADER_PATTERN: re.Pattern[str] = re.compile(
        r"\[(?:GC pause|GC remark|GC cleanup|Full GC)\b.*\]"
    )

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or decorator.is_unified:
            return None
        text = payload.rstrip()
        if "[Times:" in text or not self.HEADER_PATTERN.fullmatch(text):
            return None
        return Fragment(self, line.rstrip(), decorator)

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        if decorator is not None:
            return Action.CLOSE, ""
        stripped = line.strip()
        if stripped.startswith("[Eden:"):
            return Action.APPEND, stripped
        if stripped.startswith("[Times:"):
            return Action.COMPLETE, " " + stripped
        if line[:1].isspace() and stripped.startswith("["):
            return Action.ABSORB, ""
        return Action.CLOSE, ""


class LegacySplitHeaderFamily(FragmentFamily):
    """Young collection header cut off by tenuring or adaptive sizing output.

        1.234: [GC (Allocation Failure) 1.234: [ParNew
        Desired survivor size 1234 bytes, new threshold 1 (max 6)
        - age   1:     123 bytes,     123 total
        : 1234K->123K(4567K), 0.0123 secs] 5678K->1234K(9999K), 0.0124 secs]
    """

    name = "split header"

    HEADER_PATTERN: re.Pattern[str] = re.compile(
        rf"(?P<head>\[(?:Full )?GC(?: {CAUSE})?"
        rf"(?: {INNER}\[(?:ParNew|DefNew|ASParNew)(?: \(promotion failed\))?)?)"
        r"(?P<adaptive> AdaptiveSizeStart: .*)?"
    )
    PASS_THROUGH_KINDS = frozenset(
        {EventKind.TENURING_DISTRIBUTION, EventKind.ADAPTIVE_SIZE_POLICY}
    )

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or decorator.is_unified:
            return None
        match = self.HEADER_PATTERN.fullmatch(payload.rstrip())
        if not match:
            return None
        prefix = line[: len(line) - len(payload)]
        return Fragment(self, prefix + match.group("head"), decorator)

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        text = line.rstrip()
        if decorator is None and text.startswith(":"):
            return Action.COMPLETE, text
        if decorator is None and text.startswith("[PSYoungGen"):
            return Action.COMPLETE, " " + text
        if self.classifier.identify(line) in self.PASS_THROUGH_KINDS:
            return Action.PASS, ""
        return Action.CLOSE, ""


class CmsConcurrentInterruptionFamily(FragmentFamily):
    """CMS old collection interrupted mid-line by a concurrent phase ending.

        2.345: [GC ... [ParNew: ...]2.356: [CMS2.400: [CMS-concurrent-mark: 0.1/0.2 secs]
         (concurrent mode failure): 1234K->1234K(5678K), 1.234 secs] ...

    The concurrent clause is emitted as its own line.
    """

    name = "CMS concurrent interruption"

    SPLIT_PATTERN: re.Pattern[str] = re.compile(
        rf"(?P<head>.*\[CMS)(?P<concurrent>{INNER}\[CMS-concurrent-.*)"
    )

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or decorator.is_unified:
            return None
        match = self.SPLIT_PATTERN.fullmatch(payload.rstrip())
        if not match:
            return None
        prefix = line[: len(line) - len(payload)]
        fragment = Fragment(self, prefix + match.group("head"), decorator)
        fragment.spill.append(match.group("concurrent"))
        return fragment

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        text = line.rstrip()
        if decorator is None and (text.startswith(" (concurrent mode") or text.startswith(":")):
            return Action.COMPLETE, text
        return Action.CLOSE, ""


class FlsStatisticsInterruptionFamily(FragmentFamily):
    """CMS record broken up by -XX:PrintFLSStatistics output.

        1.234: [GC (Allocation Failure) Before GC:
        Statistics for BinaryTreeDictionary:
        ------------------------------------
        Total Free Space: 536870912
        ...
        1.234: [ParNew: 8192K->1024K(9216K), 0.0024 secs] 8192K->2272K(29696K)After GC:
        Statistics for BinaryTreeDictionary:
        ...
        , 0.0024153 secs] [Times: user=0.01 sys=0.00, real=0.00 secs]

    The ``Before GC:`` and ``After GC:`` markers are cut off. Statistics lines
    pass through and are dropped like any others.
    """

    name = "FLS statistics interruption"

    HEADER_PATTERN: re.Pattern[str] = re.compile(
        r"(?P<head>\[(?:Full )?GC.*?) ?(?:Before|After) GC:"
    )
    MARKER_PATTERN: re.Pattern[str] = re.compile(r"(?P<head>.+?) ?(?:Before|After) GC:")

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or decorator.is_unified:
            return None
        match = self.HEADER_PATTERN.fullmatch(payload.rstrip())
        if not match:
            return None
        prefix = line[: len(line) - len(payload)]
        return Fragment(self, prefix + match.group("head"), decorator)

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        text = line.rstrip()
        if decorator is None and text.startswith(","):
            return Action.COMPLETE, text
        if self.classifier.identify(line) is EventKind.FLS_STATISTIC:
            return Action.PASS, ""
        if decorator is None or not decorator.is_unified:
            if match := self.MARKER_PATTERN.fullmatch(text):
                return Action.APPEND, " " + match.group("head")
        return Action.CLOSE, ""


class UnifiedPauseFamily(FragmentFamily):
    """Lines of one unified pause, tied together by their ``GC(n)`` id."""

    name = "unified pause"

    START_PATTERN: re.Pattern[str] = re.compile(
        rf"Pause (?:Young|Full|Mixed|Initial Mark)(?: {CAUSE})+|"
        r"Pause (?:Remark|Cleanup|Initial Mark)"
    )
    GENERATION_PATTERN: re.Pattern[str] = re.compile(
        rf"(?:DefNew|Tenured|ParNew|CMS|PSYoungGen|ParOldGen|PSOldGen|Metaspace): {SIZE}.*"
    )
    SUMMARY_PATTERN: re.Pattern[str] = re.compile(
        rf"Pause .+? (?P<tail>{SIZE}->{SIZE}\({SIZE}\) {MILLIS}ms)"
    )
    CPU_PATTERN: re.Pattern[str] = re.compile(rf"User={CPU}s Sys={CPU}s Real={CPU}s")

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or not decorator.is_unified or decorator.sequence_number is None:
            return None
        text = payload.rstrip()
        if self.START_PATTERN.fullmatch(text):
            return Fragment(
                self,
                line.rstrip(),
                decorator,
                gc_id=decorator.sequence_number,
                start_stamped=True,
            )
        if text.startswith("Pause "):
            # Summary logged without a start line; a CPU line may still follow
            kind, event = self.classifier.classify(line)
            if is_blocking(kind) and event is not None and event.cpu is None:
                return Fragment(
                    self,
                    line.rstrip(),
                    decorator,
                    gc_id=decorator.sequence_number,
                    summary_seen=True,
                )
        return None

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        if decorator is None or not decorator.is_unified:
            return Action.CLOSE, ""
        if decorator.sequence_number != fragment.gc_id:
            return (Action.CLOSE if fragment.summary_seen else Action.PASS), ""

        text = payload.rstrip()
        if self.CPU_PATTERN.fullmatch(text):
            return Action.COMPLETE, " " + text
        if fragment.summary_seen:
            return Action.CLOSE, ""
        if self.GENERATION_PATTERN.fullmatch(text):
            return Action.APPEND, " " + text
        if match := self.SUMMARY_PATTERN.fullmatch(text):
            fragment.summary_seen = True
            return Action.APPEND, " " + match.group("tail")
        if text.startswith("Concurrent "):
            return Action.PASS, ""
        return Action.ABSORB, ""


class UnifiedSafepointFamily(FragmentFamily):
    """JDK 11 safepoint: ``Entering``, ``Leaving`` and ``Total time`` lines.

    The collection that ran inside the safepoint is logged between
    ``Entering`` and ``Leaving`` and passes through untouched.
    """

    name = "unified safepoint"
    brackets = True

    ENTERING_PATTERN: re.Pattern[str] = re.compile(r"Entering safepoint region: \w+")

    def open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        if decorator is None or not decorator.is_unified:
            return None
        if not self.ENTERING_PATTERN.fullmatch(payload.rstrip()):
            return None
        return Fragment(self, line.rstrip(), decorator)

    def feed(
        self, fragment: Fragment, line: str, decorator: Decorator | None, payload: str
    ) -> tuple[Action, str]:
        if decorator is None or not decorator.is_unified:
            return Action.CLOSE, ""
        text = payload.rstrip()
        if text == "Leaving safepoint region" and "Leaving" not in fragment.text:
            return Action.APPEND, line.rstrip()
        if text.startswith("Total time for which application threads were stopped"):
            return Action.COMPLETE, line.rstrip()
        if self.ENTERING_PATTERN.fullmatch(text):
            return Action.CLOSE, ""
        return Action.PASS, ""


# ============================================================
# PREPROCESSOR
# ============================================================


class PreprocessResult(BaseModel):
    """Normalized lines plus the data-quality counters of the pass."""

    model_config = ConfigDict(frozen=True)

    lines: tuple[PreprocessedLine, ...] = ()
    discarded_fragments: int = Field(default=0, ge=0)
    dropped_statistics: int = Field(default=0, ge=0)


class Preprocessor:
    """Single forward pass joining split records.

    Lines that belong to no fragment pass through unchanged. Running the pass
    again over its own output joins nothing further.
    """

    def __init__(self, classifier: Classifier, settings: ParserSettings | None = None) -> None:
        self.classifier = classifier
        self.settings = settings or ParserSettings()
        self.families: tuple[FragmentFamily, ...] = (
            UnifiedSafepointFamily(classifier),
            UnifiedPauseFamily(classifier),
            CmsConcurrentInterruptionFamily(classifier),
            FlsStatisticsInterruptionFamily(classifier),
            LegacySplitHeaderFamily(classifier),
            LegacyG1DetailsFamily(classifier),
        )

    def run(self, lines: Iterable[str]) -> PreprocessResult:
        output: list[PreprocessedLine] = []
        discarded = 0
        dropped = 0
        fragment: Fragment | None = None
        held: Fragment | None = None

        def flush(current: Fragment) -> None:
            nonlocal discarded
            if current.complete or self._salvageable(current.text):
                output.append(self._emit(current))
                return
            discarded += 1
            logger.warning(
                "Discarded incomplete %s record opened at line %d (%d lines)",
                current.family.name,
                current.line_number,
                current.line_count,
            )

        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            decorator, payload = self._split(line)

            handled = False
            while fragment is not None:
                action, piece = fragment.family.feed(fragment, line, decorator, payload)
                if action is Action.CLOSE:
                    # The held fragment, if any, gets to see the same line
                    flush(fragment)
                    fragment, held = held, None
                    continue

                fragment.line_count += 1
                if action in (Action.APPEND, Action.COMPLETE):
                    fragment.add(piece)
                handled = action is not Action.PASS
                if action is Action.COMPLETE:
                    fragment.complete = True
                    flush(fragment)
                    fragment, held = held, None
                elif fragment.line_count > self.settings.max_fragment_lines:
                    discarded += 1
                    logger.warning(
                        "Discarded %s record opened at line %d: exceeded %d lines",
                        fragment.family.name,
                        fragment.line_number,
                        self.settings.max_fragment_lines,
                    )
                    fragment, held = held, None
                break

            if handled:
                continue

            # Line is outside any fragment (or passed through one)
            opened = self._open(line, decorator, payload)
            if opened is not None:
                if fragment is not None:
                    if fragment.family.brackets and held is None:
                        held = fragment
                    else:
                        flush(fragment)
                opened.line_number = line_number
                for spilled in opened.spill:
                    output.append(self._standalone(spilled, line_number))
                fragment = opened
                continue

            if self.settings.drop_statistics and self._is_statistics(line):
                dropped += 1
                continue
            output.append(
                PreprocessedLine(text=line, decorator=decorator, line_number=line_number)
            )

        for leftover in (fragment, held):
            if leftover is not None:
                flush(leftover)

        if discarded:
            logger.info("Discarded %d incomplete multi-line records", discarded)
        return PreprocessResult(
            lines=tuple(output), discarded_fragments=discarded, dropped_statistics=dropped
        )

    # Helpers ----------------------------------------------------------

    def _open(self, line: str, decorator: Decorator | None, payload: str) -> Fragment | None:
        for family in self.families:
            if (opened := family.open(line, decorator, payload)) is not None:
                return opened
        return None

    def _salvageable(self, text: str) -> bool:
        """An unterminated fragment is kept when it still reads as a real event."""
        kind = self.classifier.identify(text)
        return kind is not EventKind.UNKNOWN and not is_throwaway(kind)

    def _is_statistics(self, line: str) -> bool:
        return self.classifier.identify(line) in STATISTICS_KINDS

    @staticmethod
    def _split(line: str) -> tuple[Decorator | None, str]:
        try:
            return split_decorator(line)
        except DecodeError:
            return None, line

    def _emit(self, fragment: Fragment) -> PreprocessedLine:
        return PreprocessedLine(
            text=fragment.text,
            decorator=fragment.decorator,
            line_number=fragment.line_number,
            fragment_count=fragment.fragment_count,
            start_stamped=fragment.start_stamped,
        )

    def _standalone(self, text: str, line_number: int) -> PreprocessedLine:
        decorator, _ = self._split(text)
        return PreprocessedLine(text=text, decorator=decorator, line_number=line_number)
