"""Tests for measurement value parsing and conversion."""

from datetime import datetime, timedelta, timezone

import pytest

from speedtracker.measurements.models import (
    MeasurementResult,
    format_timestamp,
    parse_reading,
    parse_timestamp,
    to_utc_naive,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("150.2", 150.2),
        ("  12.4 ", 12.4),
        ("93.7 Mbps", 93.7),
        ("-3", -3.0),
        (".5", 0.5),
        ("1e3", 1000.0),
        (18, 18.0),
        (0, 0.0),
        ("---", None),
        ("", None),
        (None, None),
        ("Mbps", None),
        (float("nan"), None),
        (float("inf"), None),
        (True, None),
    ],
)
def test_parse_reading(raw, expected):
    assert parse_reading(raw) == expected


class TestTimestamps:
    def test_format_utc(self):
        moment = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-03-05T14:07:09.123Z"

    def test_format_converts_offsets(self):
        moment = datetime(2024, 3, 5, 16, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-03-05T14:00:00.000Z"

    def test_to_utc_naive_converts_offset(self):
        assert to_utc_naive("2024-01-01T10:00:00+05:00") == datetime(2024, 1, 1, 5, 0)

    def test_format_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_parse_z_suffix(self):
        assert parse_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestMeasurementResult:
    def test_from_dict_legacy_entry(self):
        row = MeasurementResult.from_dict(
            {"timestamp": "2024-01-01T00:00:00.000Z", "download": 150.2, "upload": 12.4, "ping": 18, "jitter": 2.1}
        )
        assert row.sinr4g is None
        assert row.ping == 18.0

    def test_from_dict_requires_speeds(self):
        with pytest.raises(ValueError):
            MeasurementResult.from_dict({"timestamp": "2024-01-01T00:00:00Z", "download": None, "upload": 3})

    def test_from_dict_requires_timestamp(self):
        with pytest.raises(ValueError):
            MeasurementResult.from_dict({"download": 1, "upload": 2})

    def test_is_valid(self):
        assert MeasurementResult("2024-01-01T00:00:00Z", 1.0, 2.0, None, None).is_valid
        assert not MeasurementResult("2024-01-01T00:00:00Z", float("nan"), 2.0, None, None).is_valid

    def test_unparseable_timestamp_is_invalid(self):
        assert not MeasurementResult("t", 1.0, 2.0, None, None).is_valid

    def test_from_dict_rejects_bad_timestamp(self):
        with pytest.raises(ValueError):
            MeasurementResult.from_dict({"timestamp": "last tuesday", "download": 1, "upload": 2})

    def test_to_dict_keys(self):
        data = MeasurementResult("t", 1.0, 2.0, 3.0, 4.0).to_dict()
        assert set(data) == {"timestamp", "download", "upload", "ping", "jitter", "sinr4g", "sinr5g"}
