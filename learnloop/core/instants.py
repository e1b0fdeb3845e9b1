"""Instants — ISO-8601 parsing, day arithmetic and half-up rounding.

Invariants:
    - All functions are PURE: "now" is always an argument, never read here
    - Naive timestamps are interpreted as UTC
    - to_iso emits millisecond precision with a trailing "Z" (the persisted form)
    - round_half_up rounds .5 toward +infinity (Python's round() is banker's rounding)
"""

import math
from datetime import datetime, timedelta, timezone


def parse_instant(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string (or pass a datetime through) as an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format as e.g. 2026-01-01T00:00:00.000Z."""
    dt = parse_instant(value)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def add_days(value: datetime | str, days: int) -> str:
    return to_iso(parse_instant(value) + timedelta(days=days))


def millis_between(start: datetime | str, end: datetime | str) -> float:
    """end - start in milliseconds (negative when end precedes start)."""
    delta = parse_instant(end) - parse_instant(start)
    return delta.total_seconds() * 1000


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def utc_now() -> datetime:
    """Current wall-clock time. Only shell code and id/timestamp stamping may call this."""
    return datetime.now(timezone.utc)
