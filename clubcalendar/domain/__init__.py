"""Month-grid calendar engine: pure functions over ``(year, month, events)``."""

from .bucketing import bucket_events
from .grid import DayCell, build_grid, days_in_month, first_weekday_offset
from .navigation import (
    MonthNavigationState,
    is_current_month,
    jump_to_today,
    next_month,
    normalize_month,
    prev_month,
)
from .overflow import DEFAULT_OVERFLOW_CAP, OverflowResult, apply_overflow
from .view_model import CalendarLabels, DayView, EventView, MonthViewModel, build_month_view

__all__ = [
    "DEFAULT_OVERFLOW_CAP",
    "CalendarLabels",
    "DayCell",
    "DayView",
    "EventView",
    "MonthNavigationState",
    "MonthViewModel",
    "OverflowResult",
    "apply_overflow",
    "bucket_events",
    "build_grid",
    "build_month_view",
    "days_in_month",
    "first_weekday_offset",
    "is_current_month",
    "jump_to_today",
    "next_month",
    "normalize_month",
    "prev_month",
]
