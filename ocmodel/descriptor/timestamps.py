"""Time values that encode as RFC 3339 strings in JSON."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo as _tzinfo

_ZERO = datetime(1, 1, 1, tzinfo=timezone.utc)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]+))?(Z|[+-][0-9]{2}:[0-9]{2})\Z"
)


def _parse_rfc3339(text: str) -> datetime:
    m = _RFC3339.match(text)
    if m is None:
        raise ValueError(f"cannot parse {text!r} as RFC 3339 time")
    year, month, day, hour, minute, second = (int(g) for g in m.groups()[:6])
    micro = int(((m.group(7) or "") + "000000")[:6])
    zone = m.group(8)
    if zone == "Z":
        tz: _tzinfo = timezone.utc
    else:
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours >= 24 or minutes >= 60:
            raise ValueError(f"cannot parse {text!r} as RFC 3339 time: time zone offset out of range")
        offset = timedelta(hours=hours, minutes=minutes)
        tz = timezone(offset if zone[0] == "+" else -offset)
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    except ValueError as exc:
        raise ValueError(f"cannot parse {text!r} as RFC 3339 time: {exc}") from exc


def _format_rfc3339(value: datetime) -> str:
    base = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    offset = value.utcoffset() or timedelta(0)
    total = int(offset.total_seconds())
    if total == 0:
        return base + "Z"
    sign = "+" if total > 0 else "-"
    minutes = abs(total) // 60
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Time:
    """An aware point in time; the default is the zero time."""

    value: datetime = field(default=_ZERO)

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            object.__setattr__(self, "value", self.value.astimezone())

    def __str__(self) -> str:
        return self.value.isoformat()

    def is_zero(self) -> bool:
        """Return True for the zero time."""
        return self.value == _ZERO

    def before(self, other: Time | None) -> bool:
        """Return True if this instant lies before ``other``."""
        if other is None:
            return False
        return self.value < other.value

    def equal(self, other: Time | None) -> bool:
        """Return True if both denote the same instant."""
        if other is None:
            return False
        return self.value == other.value

    def rfc3339_copy(self) -> Time:
        """Return a copy at second precision."""
        return Time(_parse_rfc3339(_format_rfc3339(self.value)))

    def to_json(self) -> bytes:
        """Encode as a UTC RFC 3339 string, or null for the zero time."""
        if self.is_zero():
            return b"null"
        return f'"{_format_rfc3339(self.value.astimezone(timezone.utc))}"'.encode("ascii")

    @classmethod
    def from_json(cls, data: bytes | str) -> Time:
        """Decode null or an RFC 3339 string; the result is in local time."""
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        if text == "null":
            return cls()
        value = json.loads(text)
        if not isinstance(value, str):
            raise ValueError(f"cannot decode {type(value).__name__} into a time")
        return cls(_parse_rfc3339(value).astimezone())


def new_time(value: datetime) -> Time:
    """Wrap a datetime."""
    return Time(value)


def date(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    tzinfo: _tzinfo | None,
) -> Time:
    """Build a time from its parts; out-of-range parts carry over. No zone means local."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    wall = datetime(year, month, 1) + timedelta(
        days=day - 1, hours=hour, minutes=minute, seconds=second, microseconds=microsecond
    )
    if tzinfo is None:
        return Time(wall.astimezone())
    return Time(wall.replace(tzinfo=tzinfo))


def now() -> Time:
    """Return the current local time."""
    return Time(datetime.now().astimezone())


def unix(sec: int, nsec: int) -> Time:
    """Return the local time for seconds and nanoseconds since the Unix epoch."""
    return Time((_EPOCH + timedelta(seconds=sec, microseconds=nsec // 1000)).astimezone())