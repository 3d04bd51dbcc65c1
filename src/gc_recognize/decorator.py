"""Line decorator grammar.

Every GC log line starts with a prefix carrying its timestamp:

* legacy: ``2016-02-09T23:27:04.149-0500: 3082.652: `` (either part optional)
* unified: ``[2021-09-14T11:40:53.379-0500][144.035s][info][gc] GC(7) ``
* none: continuation and header lines

``split_decorator`` separates that prefix from the payload the recognizers
match against.
"""

from __future__ import annotations

import re
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, model_validator

from gc_recognize.units import (
    decode_datestamp,
    decode_uptime_millis,
    decode_uptime_nanos,
    decode_uptime_seconds,
)

DecoratorStyle: TypeAlias = Literal["legacy", "unified"]

DATESTAMP = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[.,]\d{3}(?:[-+]\d{2}:?\d{2}|Z)?"
UPTIME = r"\d{1,12}[.,]\d{3}"

LEGACY_DECORATOR_PATTERN: re.Pattern[str] = re.compile(
    rf"^(?:(?P<datestamp>{DATESTAMP}): ?)?(?:(?P<uptime>{UPTIME}): ?)?"
)

# Time decorators come first in unified output; level, tags, pid and tid follow.
UNIFIED_DECORATOR_PATTERN: re.Pattern[str] = re.compile(
    rf"^(?P<stamps>(?:\[(?:{DATESTAMP}|\d{{1,12}}[.,]\d{{3,9}}s|\d{{1,15}}ms|\d{{1,20}}ns)\])+)"
    r"(?P<fields>(?:\[[^\[\]]*\])*) ?(?:GC\((?P<gc_id>\d+)\) )?"
)

UNIFIED_STAMP_PATTERN: re.Pattern[str] = re.compile(r"\[([^\[\]]*)\]")


class Decorator(BaseModel):
    """Resolved line prefix."""

    model_config = ConfigDict(frozen=True)

    style: DecoratorStyle
    datestamp_ms: int | None = None
    uptime_ms: int | None = None
    sequence_number: int | None = None
    tags: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _require_timestamp(self) -> Decorator:
        if self.datestamp_ms is None and self.uptime_ms is None:
            raise ValueError("decorator carries neither datestamp nor uptime")
        return self

    @property
    def timestamp_ms(self) -> int:
        """Uptime when logged, otherwise the datestamp."""
        if self.uptime_ms is not None:
            return self.uptime_ms
        return self.datestamp_ms  # type: ignore[return-value]

    @property
    def is_unified(self) -> bool:
        return self.style == "unified"


def _decode_unified_stamps(stamps: str) -> tuple[int | None, int | None]:
    datestamp_ms: int | None = None
    uptime_ms: int | None = None
    for token in UNIFIED_STAMP_PATTERN.findall(stamps):
        if "T" in token:
            datestamp_ms = decode_datestamp(token)
        elif token.endswith("ms"):
            uptime_ms = decode_uptime_millis(token[:-2])
        elif token.endswith("ns"):
            uptime_ms = decode_uptime_nanos(token[:-2])
        else:
            uptime_ms = decode_uptime_seconds(token[:-1])
    return datestamp_ms, uptime_ms


def split_decorator(line: str) -> tuple[Decorator | None, str]:
    """Split a raw line into its decorator and the remaining payload.

    Only the single separator space is consumed, so indentation inside the
    payload survives. Raises ``DecodeError`` when a timestamp is malformed.
    """
    if line.startswith("[") and (match := UNIFIED_DECORATOR_PATTERN.match(line)):
        datestamp_ms, uptime_ms = _decode_unified_stamps(match.group("stamps"))
        gc_id = match.group("gc_id")
        decorator = Decorator(
            style="unified",
            datestamp_ms=datestamp_ms,
            uptime_ms=uptime_ms,
            sequence_number=int(gc_id) if gc_id is not None else None,
            tags=tuple(
                field.strip() for field in UNIFIED_STAMP_PATTERN.findall(match.group("fields"))
            ),
        )
        return decorator, line[match.end() :]

    match = LEGACY_DECORATOR_PATTERN.match(line)
    if match and (match.group("datestamp") or match.group("uptime")):
        decorator = Decorator(
            style="legacy",
            datestamp_ms=(
                decode_datestamp(match.group("datestamp")) if match.group("datestamp") else None
            ),
            uptime_ms=(
                decode_uptime_seconds(match.group("uptime")) if match.group("uptime") else None
            ),
        )
        return decorator, line[match.end() :]

    return None, line
