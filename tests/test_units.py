"""Tests for gc_recognize.units."""

from __future__ import annotations

import pytest

from gc_recognize.units import (
    DecodeError,
    bytes_to_kb,
    decode_cpu_centis,
    decode_datestamp,
    decode_millis_to_micros,
    decode_nanos_to_micros,
    decode_seconds_to_micros,
    decode_size,
    decode_size_token,
    decode_uptime_millis,
    decode_uptime_nanos,
    decode_uptime_seconds,
    encode_size,
    micros_to_millis,
    parallelism,
)


class TestSizes:
    """decode_size / decode_size_token / encode_size / bytes_to_kb."""

    def test_units(self) -> None:
        assert decode_size("512", "B") == 512
        assert decode_size("4096", "K") == 4096 * 1024
        assert decode_size("1", "M") == 1024 * 1024
        assert decode_size("2", "G") == 2 * 1024 * 1024 * 1024

    def test_comma_and_dot_separators_agree(self) -> None:
        assert decode_size("1,5", "M") == decode_size("1.5", "M") == 1572864

    def test_lowercase_unit(self) -> None:
        assert decode_size_token("16k") == 16384

    def test_fractional_gigabytes_round_half_even(self) -> None:
        size_bytes = decode_size_token("27.7G")
        assert size_bytes == 29742648525
        assert bytes_to_kb(size_bytes) == 29045555

    def test_zero(self) -> None:
        assert decode_size_token("0.0B") == 0
        assert decode_size_token("0K") == 0

    def test_unsupported_unit(self) -> None:
        with pytest.raises(DecodeError):
            decode_size("1", "T")

    def test_malformed_token(self) -> None:
        with pytest.raises(DecodeError):
            decode_size_token("12XB")

    def test_encode(self) -> None:
        assert encode_size(1572864, "M") == "1.5M"
        assert encode_size(2048, "K", precision=0) == "2K"

    @pytest.mark.parametrize("separator", [".", ","])
    @pytest.mark.parametrize(
        ("size_bytes", "unit", "precision"),
        [
            (512, "B", 0),
            (1536, "K", 1),
            (4096 * 1024, "K", 0),
            (1572864, "M", 1),
            (112 * 1024 * 1024, "M", 1),
            (2684354560, "G", 1),
            (30 * 1024 * 1024 * 1024, "G", 0),
        ],
    )
    def test_encode_then_decode(
        self, size_bytes: int, unit: str, precision: int, separator: str
    ) -> None:
        token = encode_size(size_bytes, unit, precision=precision).replace(".", separator)
        assert decode_size_token(token) == size_bytes

    def test_bytes_to_kb_half_even(self) -> None:
        assert bytes_to_kb(512) == 0
        assert bytes_to_kb(1536) == 2
        assert bytes_to_kb(1024 * 1024) == 1024


class TestDurations:
    def test_seconds_truncate_to_micros(self) -> None:
        assert decode_seconds_to_micros("0.0890849") == 89084
        assert decode_seconds_to_micros("8.6429024") == 8642902
        assert decode_seconds_to_micros("0.0566840") == 56684

    def test_seconds_with_comma(self) -> None:
        assert decode_seconds_to_micros("0,0566840") == 56684

    def test_millis(self) -> None:
        assert decode_millis_to_micros("1.493") == 1493
        assert decode_millis_to_micros("3,124") == 3124
        assert decode_millis_to_micros("0.0005") == 0

    def test_nanos(self) -> None:
        assert decode_nanos_to_micros("212216") == 212
        assert decode_nanos_to_micros("999") == 0

    def test_micros_to_millis_half_even(self) -> None:
        assert micros_to_millis(3124) == 3
        assert micros_to_millis(2500) == 2
        assert micros_to_millis(3500) == 4

    def test_garbage(self) -> None:
        with pytest.raises(DecodeError):
            decode_seconds_to_micros("abc")


class TestTimestamps:
    def test_datestamp_with_offset(self) -> None:
        assert decode_datestamp("2021-09-14T11:40:53.379-0500") == 684934853379

    def test_datestamp_offset_is_applied(self) -> None:
        assert decode_datestamp("2018-03-02T07:08:35.683+0000") == 573271715683
        assert decode_datestamp("2021-10-26T09:58:12.086-0400") == 688553892086

    def test_datestamp_offset_with_colon(self) -> None:
        assert decode_datestamp("2021-09-14T11:40:53.379-05:00") == 684934853379

    def test_datestamp_utc_designator(self) -> None:
        assert decode_datestamp("2018-03-02T07:08:35.683Z") == 573271715683

    def test_datestamp_without_offset_uses_epoch_zone(self) -> None:
        assert decode_datestamp("2021-09-14T11:40:53.379") == 684934853379

    def test_datestamp_comma_millis(self) -> None:
        assert decode_datestamp("2016-02-09T06:12:45,414-0500") == 508313565414

    def test_invalid_calendar_date(self) -> None:
        with pytest.raises(DecodeError):
            decode_datestamp("2021-13-40T11:40:53.379-0500")

    def test_not_a_datestamp(self) -> None:
        with pytest.raises(DecodeError):
            decode_datestamp("yesterday")

    def test_uptimes(self) -> None:
        assert decode_uptime_seconds("1244.357") == 1244357
        assert decode_uptime_seconds("0,192") == 192
        assert decode_uptime_millis("144035") == 144035
        assert decode_uptime_nanos("1500000000") == 1500

    def test_malformed_uptime(self) -> None:
        with pytest.raises(DecodeError):
            decode_uptime_millis("12.5")


class TestCpu:
    def test_centis(self) -> None:
        assert decode_cpu_centis("34.39") == 3439
        assert decode_cpu_centis("0,02") == 2

    def test_parallelism_rounds_up(self) -> None:
        assert parallelism(18, 2, 6) == 334
        assert parallelism(303, 2, 102) == 300
        assert parallelism(109, 0, 27) == 404

    def test_parallelism_all_zero_is_serial(self) -> None:
        assert parallelism(0, 0, 0) == 100

    def test_parallelism_cpu_without_real_time(self) -> None:
        assert parallelism(5, 0, 0) is None
