"""Tests for RFC 3339 and Go duration parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from kubecel.kernel.formats import parse_duration_nanos, parse_rfc3339, split_nanos

SECOND = 1_000_000_000


class TestParseRfc3339:
    """Tests for parse_rfc3339."""

    def test_utc_zulu(self):
        assert parse_rfc3339("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_offset(self):
        parsed = parse_rfc3339("2024-01-02T03:04:05+02:30")
        assert parsed.utcoffset() == timedelta(hours=2, minutes=30)
        assert parsed == datetime(2024, 1, 2, 0, 34, 5, tzinfo=timezone.utc)

    def test_negative_offset(self):
        parsed = parse_rfc3339("2024-01-02T03:04:05-05:00")
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_fraction_truncated_to_microseconds(self):
        parsed = parse_rfc3339("2024-01-02T03:04:05.123456789Z")
        assert parsed.microsecond == 123456

    def test_short_fraction(self):
        assert parse_rfc3339("2024-01-02T03:04:05.5Z").microsecond == 500000

    def test_lowercase_separators(self):
        assert parse_rfc3339("2024-01-02t03:04:05z").tzinfo == timezone.utc

    @pytest.mark.parametrize("text", [
        "",
        "2024-01-02",
        "2024-01-02T03:04:05",  # no offset
        "2024-01-02 03:04:05Z",
        "2024-13-02T03:04:05Z",  # month 13
        "2024-01-02T24:00:00Z",
        "2024-01-02T03:04:60Z",
        "2024-01-02T03:04:05+25:00",
        "not a date",
    ])
    def test_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            parse_rfc3339(text)


class TestParseDuration:
    """Tests for parse_duration_nanos (Go time.ParseDuration syntax)."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("-0", 0),
        ("5s", 5 * SECOND),
        ("+5s", 5 * SECOND),
        ("-5s", -5 * SECOND),
        ("1h30m", 5400 * SECOND),
        ("2.5h", 9000 * SECOND),
        ("1m0.5s", 60 * SECOND + SECOND // 2),
        ("300ms", 300_000_000),
        ("10us", 10_000),
        ("10µs", 10_000),
        ("10μs", 10_000),
        ("7ns", 7),
        (".5s", SECOND // 2),
        ("1.s", SECOND),
        ("1h1m1s1ms1us1ns", 3661 * SECOND + 1_001_001),
    ])
    def test_valid(self, text, expected):
        assert parse_duration_nanos(text) == expected

    @pytest.mark.parametrize("text", [
        "",
        "-",
        "5",
        "abc",
        "1d",
        "1hm",
        ".s",
        "1h 30m",
        "1.5.5s",
        "s",
    ])
    def test_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            parse_duration_nanos(text)

    def test_overflow_rejected(self):
        with pytest.raises(ValueError):
            parse_duration_nanos("3000000h")

    def test_fraction_truncates_toward_zero(self):
        # 1/3 ns cannot be represented
        assert parse_duration_nanos("0.3333333333s") == 333_333_333


def test_split_nanos_keeps_nanos_non_negative():
    assert split_nanos(5 * SECOND + 7) == (5, 7)
    assert split_nanos(-(SECOND + SECOND // 2)) == (-2, SECOND // 2)
