"""
Calendar primitives for billing schedules.

Date only (no timezone, no time of day): every value is a plain
datetime.date, so results never depend on the host's local zone.

Day-of-month is a tagged type: Day(n) for an explicit day or END_OF_MONTH.
On the wire it is an int (1..31) or the string "EOM".
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Union

WEEKEND_NONE = "none"
WEEKEND_NEXT_BUSINESS = "next_business"
WEEKEND_PREV_BUSINESS = "prev_business"
VALID_WEEKEND_ADJUST = frozenset({WEEKEND_NONE, WEEKEND_NEXT_BUSINESS, WEEKEND_PREV_BUSINESS})

EOM_MARKER = "EOM"
MID_MONTH_DAY = 15

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class Day:
    value: int  # 1..31, may exceed the month length


@dataclass(frozen=True)
class EndOfMonth:
    pass


END_OF_MONTH = EndOfMonth()

DayOfMonth = Union[Day, EndOfMonth]


@dataclass(frozen=True, order=True)
class YearMonth:
    year: int
    month: int  # 1..12

    @staticmethod
    def of(d: date) -> "YearMonth":
        return YearMonth(d.year, d.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def day_of_month(raw) -> DayOfMonth:
    """Convert a wire value (int or "EOM") into a DayOfMonth."""
    if isinstance(raw, (Day, EndOfMonth)):
        return raw
    if isinstance(raw, str) and raw.strip().upper() == EOM_MARKER:
        return END_OF_MONTH
    return Day(int(raw))


def day_of_month_to_raw(value: DayOfMonth) -> Union[int, str]:
    if isinstance(value, EndOfMonth):
        return EOM_MARKER
    return value.value


def parse_date(s) -> date | None:
    """
    Strict YYYY-MM-DD parser.

    Returns None for malformed strings and for calendar-invalid dates
    (2024-02-30, 2024-13-01).
    """
    if not isinstance(s, str):
        return None
    m = _YMD_RE.match(s.strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def format_date(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def month_end_day(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(ym: YearMonth, delta: int) -> YearMonth:
    month = ym.month - 1 + delta
    return YearMonth(ym.year + month // 12, month % 12 + 1)


def resolve_day(year: int, month: int, day: DayOfMonth, clamp: bool) -> int:
    """
    Resolve a DayOfMonth against a concrete month.

    END_OF_MONTH -> last day. A literal day past the end -> last day when
    clamp is set, otherwise returned unchanged (use make_date to build a
    real date from it).
    """
    end = month_end_day(year, month)
    if isinstance(day, EndOfMonth):
        return end
    if day.value <= end:
        return day.value
    return end if clamp else day.value


def make_date(year: int, month: int, day: int) -> date:
    """Build a date, capping the day at the month end."""
    return date(year, month, min(day, month_end_day(year, month)))


def mid_month(ym: YearMonth) -> date:
    return make_date(ym.year, ym.month, MID_MONTH_DAY)


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def adjust_for_weekend(d: date, mode: str) -> date:
    """Move a weekend date to the next/previous weekday, one day at a time."""
    if mode == WEEKEND_NEXT_BUSINESS:
        step = timedelta(days=1)
    elif mode == WEEKEND_PREV_BUSINESS:
        step = timedelta(days=-1)
    else:
        return d
    while is_weekend(d):
        d += step
    return d
