"""Parsers for the string formats the value bridge understands.

Rules:
- date-time: RFC 3339 (``2024-01-02T03:04:05.123Z``, ``...+02:00``). Date-only
  and offset-less forms are rejected.
- duration: Go ``time.ParseDuration`` syntax: optional sign, then one or more
  ``<number><unit>`` segments, units ns, us, µs, μs, ms, s, m, h. A segment may
  carry a fraction (``2.5h``). A bare ``0`` is allowed.

Both parsers raise ValueError on malformed input; the caller decides how to
degrade.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Tuple

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)

_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}

# Go durations are an int64 count of nanoseconds.
_MAX_DURATION_NANOS = (1 << 63) - 1

_SEGMENT = re.compile(r"(\d*)(?:\.(\d*))?([a-zµμ]+)")


def parse_rfc3339(text: str) -> datetime:
    """Parse an RFC 3339 timestamp into a timezone-aware datetime.

    Fractional seconds beyond microsecond precision are truncated.

    Raises:
        ValueError: If the text is not an RFC 3339 date-time
    """
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 date-time: {text!r}")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction = match.group(7)
    microsecond = int((fraction[1:] + "000000")[:6]) if fraction else 0

    offset = match.group(8)
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid UTC offset: {offset!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    # datetime() rejects out-of-range fields (month 13, second 60, ...)
    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)


def parse_duration_nanos(text: str) -> int:
    """Parse a Go-style duration string into a signed nanosecond count.

    Raises:
        ValueError: If the text is not a valid duration or overflows int64
    """
    original = text
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return 0
    if not text:
        raise ValueError(f"invalid duration: {original!r}")

    total = 0
    pos = 0
    while pos < len(text):
        match = _SEGMENT.match(text, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"invalid duration: {original!r}")
        whole, frac, unit = match.groups()
        if not whole and not frac:
            # "." alone or a unit with no number
            raise ValueError(f"invalid duration: {original!r}")
        scale = _NANOS_PER_UNIT.get(unit)
        if scale is None:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")

        nanos = int(whole or "0") * scale
        if frac:
            # Truncate toward zero like Go does.
            nanos += int(frac) * scale // (10 ** len(frac))
        total += nanos
        if total > _MAX_DURATION_NANOS + (1 if negative else 0):
            raise ValueError(f"duration out of range: {original!r}")
        pos = match.end()

    return -total if negative else total


def split_nanos(nanos: int) -> Tuple[int, int]:
    """Split signed nanoseconds into (seconds, nanos) with 0 <= nanos < 1e9."""
    return divmod(nanos, 1_000_000_000)
