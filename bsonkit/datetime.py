"""UTC datetimes with millisecond precision, as stored in BSON."""

from __future__ import annotations

import datetime as _datetime
import math
import time
from dataclasses import dataclass
from decimal import Decimal

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_MILLIS_PER_DAY = 86_400_000
_UTC = _datetime.timezone.utc
_EPOCH = _datetime.datetime(1970, 1, 1, tzinfo=_UTC)
_ONE_MILLI = _datetime.timedelta(milliseconds=1)


def _days_from_civil(year: int, month: int, day: int) -> int:
    year -= month <= 2
    era = year // 400
    yoe = year - era * 400
    doy = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _civil_from_days(days: int) -> tuple[int, int, int]:
    days += 719468
    era = days // 146097
    doe = days - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    return yoe + era * 400 + (month <= 2), month, day


# The calendar range that can be rendered as a date: years -262144 to 262143.
_CALENDAR_MIN_MILLIS = _days_from_civil(-262144, 1, 1) * _MILLIS_PER_DAY
_CALENDAR_MAX_MILLIS = (_days_from_civil(262143, 12, 31) + 1) * _MILLIS_PER_DAY - 1


def _format_year(year: int) -> str:
    return f"{year:04d}" if 0 <= year <= 9999 else f"{year:+05d}"


def _split(millis: int) -> tuple[str, str, int]:
    """Return the date part, the time part without fraction, and the milliseconds."""
    days, rest = divmod(millis, _MILLIS_PER_DAY)
    year, month, day = _civil_from_days(days)
    seconds, ms = divmod(rest, 1000)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    date_part = f"{_format_year(year)}-{month:02d}-{day:02d}"
    time_part = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return date_part, time_part, ms


def _fraction(ms: int) -> str:
    return f".{ms:03d}" if ms else ""


@dataclass(frozen=True, order=True)
class DateTime:
    """A point in time as signed 64-bit milliseconds since the Unix epoch, UTC."""

    millis: int

    def __post_init__(self) -> None:
        if isinstance(self.millis, bool) or not isinstance(self.millis, int):
            raise TypeError("DateTime millis must be an int")
        if not _I64_MIN <= self.millis <= _I64_MAX:
            raise OverflowError(f"{self.millis} does not fit in a BSON datetime")

    @classmethod
    def from_millis(cls, millis: int) -> DateTime:
        """Build from milliseconds since the Unix epoch."""
        return cls(millis)

    @classmethod
    def now(cls) -> DateTime:
        """The current time, truncated to milliseconds."""
        return cls(time.time_ns() // 1_000_000)

    @classmethod
    def from_datetime(cls, dt: _datetime.datetime) -> DateTime:
        """Convert a datetime, truncating to milliseconds; naive values are taken as UTC."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=_UTC)
        return cls((dt - _EPOCH) // _ONE_MILLI)

    def to_datetime(self) -> _datetime.datetime:
        """Convert to an aware UTC datetime, clamped to the range datetime supports."""
        try:
            return _EPOCH + _datetime.timedelta(milliseconds=self.millis)
        except OverflowError:
            if self.millis < 0:
                return _datetime.datetime.min.replace(tzinfo=_UTC)
            return _datetime.datetime.max.replace(tzinfo=_UTC)

    @classmethod
    def from_timestamp(cls, seconds: int | float) -> DateTime:
        """Convert POSIX seconds, truncating toward zero and clamping to MIN and MAX."""
        if isinstance(seconds, float):
            if math.isnan(seconds):
                raise ValueError("cannot convert NaN to a DateTime")
            if math.isinf(seconds):
                return DateTime.MAX if seconds > 0 else DateTime.MIN
            millis = int(Decimal(repr(seconds)) * 1000)
        else:
            millis = int(seconds) * 1000
        if millis > _I64_MAX:
            return DateTime.MAX
        if millis < _I64_MIN:
            return DateTime.MIN
        return cls(millis)

    def to_timestamp(self) -> float:
        """POSIX seconds as a float."""
        return self.millis / 1000

    def to_rfc3339(self) -> str:
        """RFC 3339 text in UTC with a 'Z' suffix and fractional seconds only when present."""
        if self.millis > _CALENDAR_MAX_MILLIS:
            date_part, time_part, _ = _split(_CALENDAR_MAX_MILLIS)
            return f"{date_part}T{time_part}.999999999Z"
        millis = max(self.millis, _CALENDAR_MIN_MILLIS)
        date_part, time_part, ms = _split(millis)
        return f"{date_part}T{time_part}{_fraction(ms)}Z"

    def _in_calendar(self) -> bool:
        return _CALENDAR_MIN_MILLIS <= self.millis <= _CALENDAR_MAX_MILLIS

    def __str__(self) -> str:
        if not self._in_calendar():
            return str(self.millis)
        date_part, time_part, ms = _split(self.millis)
        return f"{date_part} {time_part}{_fraction(ms)} UTC"

    def __repr__(self) -> str:
        if not self._in_calendar():
            return f"DateTime({self.millis})"
        return f"DateTime({self.to_rfc3339()})"


DateTime.MAX = DateTime(_I64_MAX)
DateTime.MIN = DateTime(_I64_MIN)