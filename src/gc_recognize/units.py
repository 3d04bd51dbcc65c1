"""Primitive decoders for GC log fields.

Every value found in a GC log is text: sizes with a unit suffix, durations in
seconds or milliseconds, absolute datestamps, uptimes and CPU times. These
helpers convert them to integers on a single basis (bytes, microseconds,
milliseconds, centiseconds) so callers never compare mixed units.

Malformed text raises ``DecodeError``. Recognizers treat that as "no match".
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Literal, TypeAlias

# ============================================================
# TYPE ALIASES
# ============================================================

SizeUnit: TypeAlias = Literal["B", "K", "M", "G"]
BytesValue: TypeAlias = int
MicrosValue: TypeAlias = int
MillisValue: TypeAlias = int
CentisValue: TypeAlias = int

SIZE_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "K": 1024,
    "M": 1024 * 1024,
    "G": 1024 * 1024 * 1024,
}

# Datestamps are measured from midnight 2000-01-01 in the -05:00 zone, the
# basis every absolute timestamp in a run is converted to.
DATESTAMP_EPOCH = datetime(2000, 1, 1, tzinfo=timezone(timedelta(hours=-5)))

DATESTAMP_PATTERN: re.Pattern[str] = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})T"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})[.,](?P<millis>\d{3})"
    r"(?:(?P<sign>[-+])(?P<off_hours>\d{2}):?(?P<off_minutes>\d{2})|Z)?"
)

SIZE_TOKEN_PATTERN: re.Pattern[str] = re.compile(r"(?P<value>\d+(?:[.,]\d+)?)(?P<unit>[BKMGbkmg])")


class DecodeError(ValueError):
    """Raised when a mandatory field cannot be decoded."""


def _to_decimal(text: str) -> Decimal:
    """Parse a number that may use ',' or '.' as decimal separator."""
    try:
        value = Decimal(text.strip().replace(",", "."))
    except InvalidOperation as exc:
        raise DecodeError(f"Unrecognized number: {text!r}") from exc
    if not value.is_finite():
        raise DecodeError(f"Unrecognized number: {text!r}")
    return value


# ============================================================
# SIZES
# ============================================================


def decode_size(value: str, unit: str) -> BytesValue:
    """Decode a numeric size and its unit into bytes (half-even rounding)."""
    multiplier = SIZE_MULTIPLIERS.get(unit.upper())
    if multiplier is None:
        raise DecodeError(f"Unsupported size unit: {unit!r}")
    number = _to_decimal(value) * multiplier
    return int(number.to_integral_value(rounding=ROUND_HALF_EVEN))


def decode_size_token(token: str) -> BytesValue:
    """Decode a size token like '22.9G', '4096K' or '1,5M' into bytes."""
    match = SIZE_TOKEN_PATTERN.fullmatch(token.strip())
    if not match:
        raise DecodeError(f"Unrecognized size token: {token!r}")
    return decode_size(match.group("value"), match.group("unit"))


def encode_size(size_bytes: BytesValue, unit: SizeUnit, precision: int = 1) -> str:
    """Re-encode a byte count in the given unit, e.g. 1572864 -> '1.5M'."""
    multiplier = SIZE_MULTIPLIERS[unit]
    quantum = Decimal(1).scaleb(-precision) if precision > 0 else Decimal(1)
    value = (Decimal(size_bytes) / multiplier).quantize(quantum, rounding=ROUND_HALF_EVEN)
    return f"{value}{unit}"


def bytes_to_kb(size_bytes: BytesValue) -> int:
    """Convert bytes to whole kilobytes, rounding half-even."""
    return int((Decimal(size_bytes) / 1024).to_integral_value(rounding=ROUND_HALF_EVEN))


# ============================================================
# DURATIONS
# ============================================================


def decode_seconds_to_micros(text: str) -> MicrosValue:
    """Decode fractional seconds ('0.0566840') into microseconds.

    Digits beyond microsecond precision are dropped, so '0.0890849' is 89084.
    """
    return int((_to_decimal(text) * 1_000_000).to_integral_value(rounding=ROUND_DOWN))


def decode_millis_to_micros(text: str) -> MicrosValue:
    """Decode fractional milliseconds ('1.493') into microseconds."""
    return int((_to_decimal(text) * 1000).to_integral_value(rounding=ROUND_DOWN))


def decode_nanos_to_micros(text: str) -> MicrosValue:
    """Decode integer nanoseconds into microseconds, truncating."""
    return int(_to_decimal(text)) // 1000


def micros_to_millis(micros: MicrosValue) -> MillisValue:
    """Convert microseconds to milliseconds, rounding half-even."""
    return int((Decimal(micros) / 1000).to_integral_value(rounding=ROUND_HALF_EVEN))


# ============================================================
# TIMESTAMPS
# ============================================================


def decode_datestamp(text: str) -> MillisValue:
    """Decode an absolute datestamp into milliseconds since the 2000-01-01 epoch.

    ``2021-09-14T11:40:53.379-0500`` decodes to 684934853379. A datestamp
    without an offset is read in the epoch's own zone.
    """
    match = DATESTAMP_PATTERN.fullmatch(text.strip())
    if not match:
        raise DecodeError(f"Unrecognized datestamp: {text!r}")

    if match.group("sign"):
        offset = timedelta(
            hours=int(match.group("off_hours")), minutes=int(match.group("off_minutes"))
        )
        if match.group("sign") == "-":
            offset = -offset
        tz = timezone(offset)
    elif text.strip().endswith("Z"):
        tz = timezone.utc
    else:
        tz = DATESTAMP_EPOCH.tzinfo

    try:
        stamp = datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(match.group("millis")) * 1000,
            tzinfo=tz,
        )
    except ValueError as exc:
        raise DecodeError(f"Invalid datestamp: {text!r}") from exc

    delta = stamp - DATESTAMP_EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def decode_uptime_seconds(text: str) -> MillisValue:
    """Decode a fractional-seconds uptime ('1244.357') into milliseconds."""
    return int((_to_decimal(text) * 1000).to_integral_value(rounding=ROUND_HALF_EVEN))


def decode_uptime_millis(text: str) -> MillisValue:
    """Decode an integer-millisecond uptime ('144035'), verbatim."""
    if not text.strip().isdigit():
        raise DecodeError(f"Unrecognized millisecond uptime: {text!r}")
    return int(text)


def decode_uptime_nanos(text: str) -> MillisValue:
    if not text.strip().isdigit():
        raise DecodeError(f"Unrecognized nanosecond uptime: {text!r}")
    return int(text) // 1_000_000


# ============================================================
# CPU TIMES
# ============================================================


def decode_cpu_centis(text: str) -> CentisValue:
    """Decode a CPU time in fractional seconds ('34.39') into centiseconds."""
    return int((_to_decimal(text) * 100).to_integral_value(rounding=ROUND_HALF_EVEN))


def parallelism(user_centis: int, sys_centis: int, real_centis: int) -> int | None:
    """Percentage of (user + sys) over real time, rounded up.

    No CPU time at all counts as fully serial (100). CPU time with zero real
    time cannot be expressed and yields None.
    """
    cpu = user_centis + sys_centis
    if real_centis == 0:
        return 100 if cpu == 0 else None
    return -(-cpu * 100 // real_centis)
