"""
Data Type Tests: Date/Time Types

Tests for DATE, TIME, TIMETZ, TIMESTAMP, TIMESTAMPTZ and INTERVAL
"""

import os
import sys
from datetime import date, datetime, time, timedelta, timezone

import pytest

# Import project modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.setup.generate_test_data import encode_timetz, encode_value  # noqa: E402
from vnparser.codecs import CODECS, render_value  # noqa: E402
from vnparser.codecs.data_decoder import format_utc_offset  # noqa: E402
from vnparser.config import RenderOptions  # noqa: E402
from vnparser.errors import ConfigError, DecodeError  # noqa: E402
from vnparser.row import Row  # noqa: E402
from vnparser.types import (  # noqa: E402
    ColumnMeta, DATE, INTERVAL, TIME, TIMESTAMP, TIMESTAMPTZ, TIMETZ,
)


def _meta(vn_type):
    return ColumnMeta(index=0, vn_type=vn_type, elem_size=8)


def _roundtrip(vn_type, value, options=None):
    """Encode a Python value, decode it back and render it."""
    meta = _meta(vn_type)
    decoded = CODECS[vn_type].decode(encode_value(meta, 8, value), meta)
    return decoded, render_value(decoded, meta, options)


def _raw_i64(n):
    return n.to_bytes(8, "little", signed=True)


@pytest.mark.datatypes
class TestDateTimeTypes:
    """Date/time codecs use the 2000-01-01 epoch."""

    @pytest.mark.parametrize("text", ["2001-01-01", "2006-08-23", "1990-05-01", "2000-01-01"])
    def test_date_handling(self, text):
        value = date.fromisoformat(text)
        decoded, rendered = _roundtrip(DATE, value)
        assert decoded == value
        assert rendered == text

    def test_date_epoch_offset(self):
        meta = _meta(DATE)
        assert CODECS[DATE].decode(_raw_i64(-1), meta) == date(1999, 12, 31)
        assert CODECS[DATE].decode(_raw_i64(366), meta) == date(2001, 1, 1)

    def test_date_out_of_range(self):
        with pytest.raises(DecodeError):
            CODECS[DATE].decode(_raw_i64(10**8), _meta(DATE))

    @pytest.mark.parametrize(
        "value,text",
        [
            (datetime(2001, 1, 1), "2001-01-01 00:00:00"),
            (datetime(1980, 12, 25, 1, 23, 34), "1980-12-25 01:23:34"),
            (datetime(1492, 4, 5, 12, 12, 12), "1492-04-05 12:12:12"),
            (datetime(2024, 2, 29, 12, 0, 0, 1), "2024-02-29 12:00:00.000001"),
        ],
    )
    def test_timestamp_handling(self, value, text):
        decoded, rendered = _roundtrip(TIMESTAMP, value)
        assert decoded == value
        assert decoded.tzinfo is None
        assert rendered == text

    def test_timestamp_out_of_range(self):
        with pytest.raises(DecodeError):
            CODECS[TIMESTAMP].decode(_raw_i64(2**62), _meta(TIMESTAMP))

    def test_timestamptz_default_offset(self):
        value = datetime(2001, 1, 1, tzinfo=timezone.utc)
        decoded, rendered = _roundtrip(TIMESTAMPTZ, value)

        assert decoded == value
        assert decoded.utcoffset() == timedelta(0)
        assert rendered == "2001-01-01 00:00:00+00"

    @pytest.mark.parametrize(
        "offset,text",
        [(9, "2001-01-01 09:00:00+09"), (-5, "2000-12-31 19:00:00-05"), (0, "2001-01-01 00:00:00+00")],
    )
    def test_timestamptz_offset_override(self, offset, text):
        value = datetime(2001, 1, 1, tzinfo=timezone.utc)
        decoded, rendered = _roundtrip(TIMESTAMPTZ, value, RenderOptions(tz_offset=offset))

        # the decoded instant itself never changes
        assert decoded == value
        assert rendered == text

    def test_timestamptz_override_out_of_range_reports_position(self):
        """Shifting the last representable hour past year 9999 fails with column and row."""
        meta = ColumnMeta(index=2, vn_type=TIMESTAMPTZ, elem_size=8)
        value = datetime(9999, 12, 31, 23, tzinfo=timezone.utc)
        row = Row(ordinal=4, values=(None, None, value), columns=(_meta(DATE), _meta(TIME), meta))

        assert row.render()[2] == "9999-12-31 23:00:00+00"
        with pytest.raises(DecodeError) as excinfo:
            row.render(RenderOptions(tz_offset=5))

        assert excinfo.value.column == 2
        assert excinfo.value.row == 4

    @pytest.mark.parametrize(
        "value,text",
        [
            (time(5, 30, 15), "05:30:15"),
            (time(0, 0, 0), "00:00:00"),
            (time(23, 59, 59, 999999), "23:59:59.999999"),
        ],
    )
    def test_time_handling(self, value, text):
        decoded, rendered = _roundtrip(TIME, value)
        assert decoded == value
        assert rendered == text

    def test_time_out_of_range(self):
        with pytest.raises(DecodeError):
            CODECS[TIME].decode(_raw_i64(86_400_000_000), _meta(TIME))
        with pytest.raises(DecodeError):
            CODECS[TIME].decode(_raw_i64(-1), _meta(TIME))

    def test_timetz_embedded_offset(self):
        value = time(15, 12, 34, tzinfo=timezone(timedelta(hours=-5)))
        decoded, rendered = _roundtrip(TIMETZ, value)

        assert decoded.replace(tzinfo=None) == time(15, 12, 34)
        assert decoded.utcoffset() == timedelta(hours=-5)
        assert rendered == "15:12:34-05"

    def test_timetz_layout(self):
        """Upper 40 bits: UTC micros since midnight; lower 24 bits: 86400 - offset seconds."""
        raw = encode_timetz(time(10, 0, tzinfo=timezone(timedelta(hours=2))))
        word = int.from_bytes(raw, "little")

        assert word >> 24 == 8 * 3600 * 1_000_000
        assert word & 0xFFFFFF == 86_400 - 7_200

    def test_timetz_half_hour_offset(self):
        value = time(9, 0, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        _, rendered = _roundtrip(TIMETZ, value)
        assert rendered == "09:00:00+05:30"

    def test_timetz_wraps_past_midnight(self):
        value = time(1, 0, 0, tzinfo=timezone(timedelta(hours=3)))
        decoded, rendered = _roundtrip(TIMETZ, value)
        assert decoded.hour == 1
        assert rendered == "01:00:00+03"

    def test_timetz_override_only_for_zero_offset(self):
        utc_value = time(1, 0, 0, tzinfo=timezone.utc)
        decoded, rendered = _roundtrip(TIMETZ, utc_value, RenderOptions(tz_offset=9))
        assert rendered == "10:00:00+09"
        assert decoded.replace(tzinfo=None) == time(1, 0, 0)

        offset_value = time(1, 0, 0, tzinfo=timezone(timedelta(hours=-2)))
        _, rendered = _roundtrip(TIMETZ, offset_value, RenderOptions(tz_offset=9))
        assert rendered == "01:00:00-02"

    @pytest.mark.parametrize(
        "value,text",
        [
            (timedelta(hours=5, minutes=30, seconds=15), "05:30:15"),
            (timedelta(hours=100), "100:00:00"),
            (timedelta(seconds=-90), "-00:01:30"),
            (timedelta(seconds=1, microseconds=500000), "00:00:01.500000"),
            (timedelta(0), "00:00:00"),
        ],
    )
    def test_interval_handling(self, value, text):
        decoded, rendered = _roundtrip(INTERVAL, value)
        assert decoded == value
        assert rendered == text

    def test_format_utc_offset(self):
        assert format_utc_offset(0) == "+00"
        assert format_utc_offset(-18000) == "-05"
        assert format_utc_offset(19800) == "+05:30"
        assert format_utc_offset(-(3600 + 1800 + 15)) == "-01:30:15"

    def test_render_options_validation(self):
        with pytest.raises(ConfigError):
            RenderOptions(tz_offset=24)
        assert RenderOptions(tz_offset=-23).tz_offset == -23

        print("✓ Date/time tests passed")
