"""Month navigation over zero-based ``(year, month)`` pairs.

The transitions are pure functions. ``MonthNavigationState`` is a small holder
for hosts that want to keep the current pair and be told when it changes; the
calendar engine itself never owns navigation state.
"""

import datetime
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

YearMonth = Tuple[int, int]


def normalize_month(year: int, month: int) -> YearMonth:
    """Carry an out-of-range month into ``year`` so that month is in 0..11."""
    carry, month = divmod(month, 12)
    return year + carry, month


def prev_month(year: int, month: int) -> YearMonth:
    """Return the month before ``(year, month)``."""
    if month == 0:
        return year - 1, 11
    return year, month - 1


def next_month(year: int, month: int) -> YearMonth:
    """Return the month after ``(year, month)``."""
    if month == 11:
        return year + 1, 0
    return year, month + 1


def is_current_month(year: int, month: int, today: datetime.date) -> bool:
    """Check whether ``(year, month)`` is the month containing ``today``."""
    return year == today.year and month == today.month - 1


def jump_to_today(today: Optional[datetime.date] = None) -> YearMonth:
    """Return today's ``(year, month)`` regardless of the current position."""
    today = today or datetime.date.today()
    return today.year, today.month - 1


class MonthNavigationState:
    """Holds the displayed month for a host page."""

    def __init__(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today_provider: Optional[Callable[[], datetime.date]] = None,
    ):
        """Initialize navigation state.

        Args:
            year: Initial year, defaults to the current year
            month: Initial zero-based month, defaults to the current month;
                out-of-range values are normalized
            today_provider: Callable returning the viewer's current date
        """
        self._today_provider = today_provider or datetime.date.today
        current_year, current_month = jump_to_today(self._today_provider())
        self._year, self._month = normalize_month(
            current_year if year is None else year,
            current_month if month is None else month,
        )
        self._change_callbacks: List[Callable[[int, int], None]] = []

        logger.debug("Month navigation initialized at %d-%02d", self._year, self._month + 1)

    @property
    def year(self) -> int:
        return self._year

    @property
    def month(self) -> int:
        return self._month

    @property
    def position(self) -> YearMonth:
        """Current ``(year, month)`` pair."""
        return self._year, self._month

    @property
    def today(self) -> datetime.date:
        return self._today_provider()

    def is_current_month(self) -> bool:
        """Check if the displayed month contains today."""
        return is_current_month(self._year, self._month, self.today)

    def navigate_backward(self) -> YearMonth:
        """Move to the previous month.

        Returns:
            New ``(year, month)``
        """
        return self._move_to(*prev_month(self._year, self._month), reason="backward")

    def navigate_forward(self) -> YearMonth:
        """Move to the next month.

        Returns:
            New ``(year, month)``
        """
        return self._move_to(*next_month(self._year, self._month), reason="forward")

    def jump_to_today(self) -> YearMonth:
        """Jump to the month containing today.

        Returns:
            Today's ``(year, month)``
        """
        return self._move_to(*jump_to_today(self.today), reason="today")

    def jump_to(self, year: int, month: int) -> YearMonth:
        """Jump to a specific month; out-of-range months are normalized."""
        return self._move_to(*normalize_month(year, month), reason="jump")

    def add_change_callback(self, callback: Callable[[int, int], None]) -> None:
        """Add a callback called with ``(year, month)`` after every change."""
        self._change_callbacks.append(callback)

    def remove_change_callback(self, callback: Callable[[int, int], None]) -> None:
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    def _move_to(self, year: int, month: int, reason: str) -> YearMonth:
        old = self.position
        self._year, self._month = year, month
        logger.debug(
            "Navigated %s: %d-%02d -> %d-%02d", reason, old[0], old[1] + 1, year, month + 1
        )
        self._notify_change()
        return self.position

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback(self._year, self._month)
            except Exception:
                logger.exception("Error in month change callback")

    def __repr__(self) -> str:
        return f"MonthNavigationState(year={self._year!r}, month={self._month!r})"
