"""Month grid construction with Monday-first week alignment.

Months are zero-based (0=January .. 11=December) throughout the domain layer.
The weekday arithmetic is done on plain integers so any calendar year works,
not just the range ``datetime.date`` supports.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

DAYS_PER_WEEK = 7

# Monday-first column indexes of Saturday and Sunday.
WEEKEND_COLUMNS = frozenset({5, 6})

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Sakamoto's month offsets for the Sunday-based weekday formula.
_SAKAMOTO_OFFSETS = (0, 3, 2, 5, 0, 3, 5, 1, 4, 6, 2, 4)


@dataclass(frozen=True)
class DayCell:
    """One slot of the month grid.

    Leading placeholder cells have ``day_number`` set to None.
    """

    index: int
    day_number: Optional[int] = None
    is_weekend: bool = False
    is_today: bool = False

    @property
    def column(self) -> int:
        """Monday-first column index (0=Monday .. 6=Sunday)."""
        return self.index % DAYS_PER_WEEK

    @property
    def row(self) -> int:
        return self.index // DAYS_PER_WEEK

    @property
    def is_empty(self) -> bool:
        return self.day_number is None


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a zero-based month, leap-year aware for February."""
    if month == 1 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month]


def _sunday_based_weekday(year: int, month: int, day: int) -> int:
    """Weekday of a date with 0=Sunday .. 6=Saturday (proleptic Gregorian)."""
    if month < 2:
        year -= 1
    return (
        year + year // 4 - year // 100 + year // 400 + _SAKAMOTO_OFFSETS[month] + day
    ) % DAYS_PER_WEEK


def first_weekday_offset(year: int, month: int) -> int:
    """Number of empty cells before day 1 in a Monday-first layout.

    Sunday (native index 0) maps to the last column, so the result is 0 when the
    month starts on a Monday and 6 when it starts on a Sunday.
    """
    return (_sunday_based_weekday(year, month, 1) + 6) % DAYS_PER_WEEK


def week_count(year: int, month: int) -> int:
    """Number of grid rows needed to show the month."""
    cells = first_weekday_offset(year, month) + days_in_month(year, month)
    return -(-cells // DAYS_PER_WEEK)


def build_grid(
    year: int, month: int, today: Optional[datetime.date] = None
) -> tuple[DayCell, ...]:
    """Compute the ordered cell sequence for a month.

    Produces the leading empty cells followed by one populated cell per day.
    The grid may end mid-row; renderers lay cells out seven per row.

    Args:
        year: Calendar year
        month: Zero-based month, already normalized into 0..11
        today: Viewer's current date; the matching cell gets ``is_today``.
            When None no cell is marked.

    Returns:
        Tuple of DayCell, equal for equal arguments
    """
    offset = first_weekday_offset(year, month)
    today_day = None
    if today is not None and today.year == year and today.month == month + 1:
        today_day = today.day

    cells = [
        DayCell(index=i, is_weekend=i % DAYS_PER_WEEK in WEEKEND_COLUMNS) for i in range(offset)
    ]
    for day in range(1, days_in_month(year, month) + 1):
        index = offset + day - 1
        cells.append(
            DayCell(
                index=index,
                day_number=day,
                is_weekend=index % DAYS_PER_WEEK in WEEKEND_COLUMNS,
                is_today=day == today_day,
            )
        )
    return tuple(cells)
