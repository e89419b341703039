"""Assign events to the calendar days of one visible month."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from ..timezone_utils import TimezoneLike, localize, parse_instant, resolve_timezone

logger = logging.getLogger(__name__)


def _raw_start(event: Any) -> Any:
    if isinstance(event, Mapping):
        return event.get("start", event.get("startTime"))
    return getattr(event, "start", None)


def resolve_local_start(event: Any, tz: datetime.tzinfo) -> Optional[datetime.datetime]:
    """Return the event start in the viewer timezone, or None if it is unusable.

    Accepts model instances and plain mappings. A missing, mistyped, or
    unparseable start yields None rather than an exception so one bad event
    cannot break the month.
    """
    raw = _raw_start(event)
    if raw is None:
        return None
    try:
        return localize(parse_instant(raw), tz)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug("Dropping event with unusable start %r: %s", raw, e)
        return None


def bucket_events(
    events: Iterable[Any], year: int, month: int, tz: TimezoneLike = None
) -> dict[int, list[Any]]:
    """Group events by day number for a zero-based ``(year, month)``.

    Events whose localized start falls outside the month are left out. Each
    day's list is ordered by start instant using a stable sort, so events with
    identical starts keep their input order.

    Args:
        events: CalendarEvent instances or mappings with a ``start`` value
        year: Calendar year
        month: Zero-based month
        tz: Viewer timezone; defaults to the configured timezone

    Returns:
        Mapping of day number to that day's events. Days without events are absent.
    """
    zone = resolve_timezone(tz)
    keyed: dict[int, list[tuple[float, Any]]] = {}
    dropped = 0

    for event in events:
        local_start = resolve_local_start(event, zone)
        if local_start is None:
            dropped += 1
            continue
        if local_start.year != year or local_start.month != month + 1:
            continue
        # Order by instant; same-zone datetimes compare by wall clock across DST folds
        keyed.setdefault(local_start.day, []).append((local_start.timestamp(), event))

    if dropped:
        logger.debug("bucket_events dropped %d event(s) with unusable start times", dropped)

    return {
        day: [event for _, event in sorted(keyed[day], key=lambda pair: pair[0])]
        for day in sorted(keyed)
    }
