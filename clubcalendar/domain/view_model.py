"""Month view model shared by the HTML renderer and the JSON API.

Composes the grid, the day buckets, and the overflow policy into plain
dataclasses. Presentation strings come from an injected ``CalendarLabels`` so
the engine itself stays locale-agnostic.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import EventKind
from ..sources import count_by_kind
from ..timezone_utils import TimezoneLike, localize, resolve_timezone, today_in_timezone
from .bucketing import bucket_events
from .grid import WEEKEND_COLUMNS, build_grid
from .navigation import is_current_month
from .overflow import DEFAULT_OVERFLOW_CAP, apply_overflow

logger = logging.getLogger(__name__)

DEFAULT_WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
DEFAULT_KIND_LABELS = {EventKind.TRAINING.value: "Training", EventKind.MATCH.value: "Match"}


@dataclass(frozen=True)
class CalendarLabels:
    """Lookup tables for every user-visible string in the month view.

    Weekday names are Monday-first. ``more_template`` is formatted with
    ``count``.
    """

    weekday_names: tuple[str, ...] = DEFAULT_WEEKDAY_NAMES
    month_names: tuple[str, ...] = DEFAULT_MONTH_NAMES
    today_label: str = "Today"
    more_template: str = "+{count} more"
    prev_label: str = "Previous month"
    next_label: str = "Next month"
    kind_labels: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_KIND_LABELS))

    def __post_init__(self) -> None:
        if len(self.weekday_names) != 7:
            raise ValueError(f"weekday_names needs 7 entries, got {len(self.weekday_names)}")
        if len(self.month_names) != 12:
            raise ValueError(f"month_names needs 12 entries, got {len(self.month_names)}")

    def month_title(self, year: int, month: int) -> str:
        return f"{self.month_names[month]} {year}"

    def kind_label(self, kind: str) -> str:
        return self.kind_labels.get(kind, kind.replace("_", " ").title())

    def more_label(self, count: int) -> str:
        return self.more_template.format(count=count)


@dataclass(frozen=True)
class EventView:
    """An event as drawn inside a day cell."""

    id: str
    kind: str
    title: str
    group: str
    time_label: str
    start: datetime.datetime
    end: datetime.datetime

    @property
    def tooltip(self) -> str:
        return f"{self.title} - {self.group} ({self.time_label})"

    @classmethod
    def from_event(cls, event: Any, tz: datetime.tzinfo) -> EventView:
        start = localize(event.start, tz)
        return cls(
            id=str(event.id),
            kind=event.kind,
            title=event.title,
            group=event.group,
            time_label=start.strftime("%H:%M"),
            start=start,
            end=localize(event.end, tz),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "title": self.title,
            "group": self.group,
            "time_label": self.time_label,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


@dataclass(frozen=True)
class DayView:
    """A grid cell with its visible events."""

    index: int
    day_number: Optional[int]
    is_weekend: bool
    is_today: bool
    events: tuple[EventView, ...] = ()
    hidden_count: int = 0
    kinds: tuple[str, ...] = ()
    more_label: str = ""

    @property
    def is_empty(self) -> bool:
        return self.day_number is None

    @property
    def has_events(self) -> bool:
        return bool(self.events) or self.hidden_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "day": self.day_number,
            "is_weekend": self.is_weekend,
            "is_today": self.is_today,
            "events": [e.to_dict() for e in self.events],
            "hidden_count": self.hidden_count,
            "kinds": list(self.kinds),
            "more_label": self.more_label,
        }


@dataclass(frozen=True)
class MonthViewModel:
    """Everything a renderer needs to draw one month."""

    year: int
    month: int
    title: str
    weekday_headers: tuple[tuple[str, bool], ...]
    cells: tuple[DayView, ...]
    is_current_month: bool
    today_label: str
    legend: tuple[tuple[str, str], ...]
    kind_counts: Mapping[str, int]
    timezone: str

    @property
    def show_today_button(self) -> bool:
        """The jump-to-today control is only offered away from the current month."""
        return not self.is_current_month

    @property
    def weeks(self) -> list[tuple[DayView, ...]]:
        """Cells split into rows of seven; the last row may be short."""
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]

    def day(self, day_number: int) -> Optional[DayView]:
        for cell in self.cells:
            if cell.day_number == day_number:
                return cell
        return None

    def has_events(self) -> bool:
        return any(cell.has_events for cell in self.cells)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "title": self.title,
            "timezone": self.timezone,
            "is_current_month": self.is_current_month,
            "show_today_button": self.show_today_button,
            "today_label": self.today_label,
            "weekdays": [
                {"label": label, "is_weekend": weekend} for label, weekend in self.weekday_headers
            ],
            "legend": [{"kind": kind, "label": label} for kind, label in self.legend],
            "kind_counts": dict(self.kind_counts),
            "cells": [cell.to_dict() for cell in self.cells],
        }


def order_kinds(kinds: Iterable[str]) -> tuple[str, ...]:
    """Known kinds first in enum order, then any others alphabetically."""
    present = set(kinds)
    known = [k.value for k in EventKind if k.value in present]
    extra = sorted(present - set(known))
    return tuple(known + extra)


def build_month_view(
    year: int,
    month: int,
    events: Iterable[Any],
    *,
    today: Optional[datetime.date] = None,
    tz: TimezoneLike = None,
    cap: int = DEFAULT_OVERFLOW_CAP,
    labels: Optional[CalendarLabels] = None,
) -> MonthViewModel:
    """Build the view model for a zero-based ``(year, month)``.

    Args:
        year: Calendar year
        month: Zero-based month, already normalized
        events: CalendarEvent instances; not modified
        today: Viewer's current date, defaults to today in ``tz``
        tz: Viewer timezone
        cap: Maximum events drawn per day
        labels: Display strings, English by default

    Returns:
        MonthViewModel instance
    """
    zone = resolve_timezone(tz)
    labels = labels or CalendarLabels()
    today = today or today_in_timezone(zone)

    events = list(events)
    buckets = bucket_events(events, year, month, zone)
    cells = []
    # Totals cover every loaded event, not just the visible month
    kind_counts = count_by_kind(events)

    for cell in build_grid(year, month, today):
        if cell.day_number is None:
            cells.append(
                DayView(
                    index=cell.index,
                    day_number=None,
                    is_weekend=cell.is_weekend,
                    is_today=False,
                )
            )
            continue

        day_events = buckets.get(cell.day_number, [])
        overflow = apply_overflow(day_events, cap)
        cells.append(
            DayView(
                index=cell.index,
                day_number=cell.day_number,
                is_weekend=cell.is_weekend,
                is_today=cell.is_today,
                events=tuple(EventView.from_event(e, zone) for e in overflow.shown),
                hidden_count=overflow.hidden_count,
                kinds=order_kinds(e.kind for e in day_events),
                more_label=labels.more_label(overflow.hidden_count) if overflow.has_more else "",
            )
        )

    legend_kinds = order_kinds(list(labels.kind_labels) + list(kind_counts))
    view = MonthViewModel(
        year=year,
        month=month,
        title=labels.month_title(year, month),
        weekday_headers=tuple(
            (name, column in WEEKEND_COLUMNS) for column, name in enumerate(labels.weekday_names)
        ),
        cells=tuple(cells),
        is_current_month=is_current_month(year, month, today),
        today_label=labels.today_label,
        legend=tuple((kind, labels.kind_label(kind)) for kind in legend_kinds),
        kind_counts={kind: kind_counts.get(kind, 0) for kind in legend_kinds},
        timezone=str(zone),
    )
    logger.debug(
        "Built month view %s with %d cells and %d bucketed events",
        view.title,
        len(view.cells),
        sum(len(day) for day in buckets.values()),
    )
    return view
