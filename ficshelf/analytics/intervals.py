#!/usr/bin/env python3
"""
intervals.py
-------------------
Reading ranges and calendar-month arithmetic.

Reading logs store each read as an interval string in mathematical
notation, as a daterange column would render it::

    [2025-06-01,2025-06-05)     read June 1 through June 4
    [2025-06-01,2025-06-05]     read June 1 through June 5

Parsing works at calendar-day granularity: a read starts at 00:00:00 of
its first day and ends at 23:59:59 of its last day. An exclusive ``)`` end
boundary moves the last day back by one.

All date stepping is done on real calendar dates (``date + 1 day``), never
by adding fixed second offsets to datetimes.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

# --- Local imports ---
from ficshelf.core.exceptions import RangeParseError

RANGE_PATTERN = re.compile(r"^([\[\(])(.+),(.+)([\]\)])$")
EXCLUSIVE_END = ")"
DAY_END = time(23, 59, 59)


@dataclass(frozen=True)
class ReadingInterval:
    """
    One read of one fic, normalized to day boundaries.

    Attributes:
        start: First day of the read at 00:00:00
        end: Last day of the read at 23:59:59
        fic_id: Fic the read belongs to, when known
    """

    start: datetime
    end: datetime
    fic_id: Optional[int] = None

    @property
    def first_day(self) -> date:
        return self.start.date()

    @property
    def last_day(self) -> date:
        return self.end.date()


@dataclass(frozen=True)
class MonthWindow:
    """
    One calendar month.

    Attributes:
        first_day: The 1st of the month
        last_day: The last calendar day of the month
    """

    first_day: date
    last_day: date

    @property
    def start(self) -> datetime:
        """First instant of the month."""
        return datetime.combine(self.first_day, time.min)

    @property
    def end(self) -> datetime:
        """Last instant of the month: one microsecond before the next month."""
        return datetime.combine(self.last_day + timedelta(days=1), time.min) - timedelta(
            microseconds=1
        )

    @property
    def day_count(self) -> int:
        return self.last_day.day

    @property
    def label(self) -> str:
        """Month name and year, e.g. 'June 2025'."""
        return self.first_day.strftime("%B %Y")

    def days(self) -> List[date]:
        """Every calendar day of the month, in order."""
        return [self.first_day + timedelta(days=offset) for offset in range(self.day_count)]


# ----- Parsing -----


def parse_range_strict(range_str: str, fic_id: Optional[int] = None) -> ReadingInterval:
    """
    Parse a reading range, raising on bad input.

    Args:
        range_str: Interval string such as ``[2025-06-01,2025-06-05)``
        fic_id: Fic the range belongs to

    Returns:
        The normalized ReadingInterval

    Raises:
        RangeParseError: If the string does not match the interval
            notation, a date is invalid, or the range ends before it starts
    """
    match = RANGE_PATTERN.match(range_str.strip()) if isinstance(range_str, str) else None
    if match is None:
        raise RangeParseError(f"Malformed reading range: {range_str!r}")

    _, start_text, end_text, end_boundary = match.groups()
    try:
        start_day = date.fromisoformat(start_text.strip())
        end_day = date.fromisoformat(end_text.strip())
    except ValueError as e:
        raise RangeParseError(f"Invalid date in reading range: {range_str!r}") from e

    if end_boundary == EXCLUSIVE_END:
        end_day -= timedelta(days=1)

    if end_day < start_day:
        raise RangeParseError(f"Reading range ends before it starts: {range_str!r}")

    return ReadingInterval(
        start=datetime.combine(start_day, time.min),
        end=datetime.combine(end_day, DAY_END),
        fic_id=fic_id,
    )


def parse_range(range_str: str, fic_id: Optional[int] = None) -> Optional[ReadingInterval]:
    """
    Parse a reading range, returning None for anything unparseable.

    Aggregation uses this form: a corrupt stored range is skipped rather
    than failing the whole report.

    Examples:
        >>> parse_range("[2025-06-01,2025-06-05)").end
        datetime.datetime(2025, 6, 4, 23, 59, 59)
        >>> parse_range("2025-06-01") is None
        True
    """
    try:
        return parse_range_strict(range_str, fic_id)
    except RangeParseError:
        return None


def parse_ranges(range_strs: Iterable[str], fic_id: Optional[int] = None) -> List[ReadingInterval]:
    """Parse many ranges, silently dropping malformed ones."""
    intervals = []
    for range_str in range_strs or []:
        interval = parse_range(range_str, fic_id)
        if interval is not None:
            intervals.append(interval)
    return intervals


def format_range(start: date, end: date) -> str:
    """
    Render an inclusive day span in canonical half-open form.

    Examples:
        >>> format_range(date(2025, 6, 1), date(2025, 6, 4))
        '[2025-06-01,2025-06-05)'
    """
    return f"[{start.isoformat()},{(end + timedelta(days=1)).isoformat()})"


# ----- Month windows -----


def month_window(month_offset: int = 0, today: Optional[date] = None) -> MonthWindow:
    """
    The calendar month ``month_offset`` months before the current one.

    Args:
        month_offset: 0 for the current month, 1 for last month, ...
        today: Reference date (defaults to today)

    Returns:
        MonthWindow for the target month
    """
    today = today or date.today()
    year, month_index = divmod(today.year * 12 + (today.month - 1) - month_offset, 12)
    first_day = date(year, month_index + 1, 1)

    next_year, next_index = divmod(year * 12 + month_index + 1, 12)
    last_day = date(next_year, next_index + 1, 1) - timedelta(days=1)
    return MonthWindow(first_day=first_day, last_day=last_day)


# ----- Aggregation -----


def overlaps(interval: ReadingInterval, window: MonthWindow) -> bool:
    return interval.start <= window.end and interval.end >= window.start


def reading_heatmap(intervals: Iterable[ReadingInterval], window: MonthWindow) -> List[bool]:
    """
    Mark each day of the month on which at least one read was active.

    Args:
        intervals: Reading intervals (any months)
        window: Target month

    Returns:
        One flag per day of the month; index 0 is the 1st
    """
    heatmap = [False] * window.day_count
    for interval in intervals:
        if not overlaps(interval, window):
            continue
        day = max(interval.first_day, window.first_day)
        last = min(interval.last_day, window.last_day)
        while day <= last:
            heatmap[day.day - 1] = True
            day += timedelta(days=1)
    return heatmap


def finished_in_month(
    intervals: Iterable[ReadingInterval], window: MonthWindow
) -> List[ReadingInterval]:
    """Intervals whose end falls inside the month."""
    return [
        interval
        for interval in intervals
        if window.start <= interval.end <= window.end
    ]


def completed_fic_ids(
    intervals: Iterable[ReadingInterval], window: MonthWindow
) -> List[int]:
    """
    Distinct fics finished in the month, in first-seen order.

    A fic reread twice in one month counts once.
    """
    seen: List[int] = []
    for interval in finished_in_month(intervals, window):
        if interval.fic_id is not None and interval.fic_id not in seen:
            seen.append(interval.fic_id)
    return seen
