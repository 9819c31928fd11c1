"""Tests for common.datetime module."""

from datetime import datetime, timezone

from common.datetime import parse_datetime, parse_loose_datetime


class TestParseDatetime:
    def test_none_returns_current_utc(self) -> None:
        before = datetime.now(timezone.utc)
        result = parse_datetime(None)
        after = datetime.now(timezone.utc)
        assert before <= result <= after
        assert result.tzinfo is not None

    def test_datetime_passthrough(self) -> None:
        dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert parse_datetime(dt) is dt

    def test_naive_datetime_assumed_utc(self) -> None:
        result = parse_datetime(datetime(2024, 1, 1, 12, 0, 0))
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_iso_string_parsing(self) -> None:
        result = parse_datetime("2024-01-01T12:00:00+00:00")
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_iso_string_with_z_suffix(self) -> None:
        result = parse_datetime("2024-01-01T12:00:00Z")
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestParseLooseDatetime:
    def test_rfc_2822_with_offset(self) -> None:
        result = parse_loose_datetime("Mon, 01 Jan 2024 12:00:00 +0100")
        assert result == datetime(2024, 1, 1, 11, 0, 0, tzinfo=timezone.utc)

    def test_timezone_abbreviation(self) -> None:
        result = parse_loose_datetime("Mon, 01 Jan 2024 07:00:00 EST")
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_naive_string_assumed_utc(self) -> None:
        result = parse_loose_datetime("2024-01-01 12:00:00")
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_unparseable_returns_none(self) -> None:
        assert parse_loose_datetime("not a date") is None

    def test_empty_returns_none(self) -> None:
        assert parse_loose_datetime("") is None
        assert parse_loose_datetime(None) is None
