"""Event sources: turn club training and match records into calendar events.

The club REST API serves trainings and matches separately. This module maps
both into ``CalendarEvent`` instances, merges them into one list, and resolves
where a clicked event should lead.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .exceptions import EventSourceError
from .models import CalendarEvent, EventKind

logger = logging.getLogger(__name__)

DEFAULT_TRAINING_TITLE = "Training"

DEFAULT_DETAIL_PATHS = {
    EventKind.TRAINING.value: "/trainings/{id}",
    EventKind.MATCH.value: "/matches/{id}",
}


class GroupRef(BaseModel):
    """Team/group reference embedded in training and match payloads."""

    id: str
    name: str


class _ScheduledRecord(BaseModel):
    id: str
    start_time: str = Field(..., validation_alias=AliasChoices("startTime", "start_time"))
    end_time: str = Field(..., validation_alias=AliasChoices("endTime", "end_time"))
    group: GroupRef

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TrainingRecord(_ScheduledRecord):
    """Training session as returned by the trainings endpoint."""

    topic: Optional[str] = None


class MatchRecord(_ScheduledRecord):
    """Match as returned by the matches endpoint."""

    opponent: str
    is_home: bool = Field(default=True, validation_alias=AliasChoices("isHome", "is_home"))


def training_to_event(training: TrainingRecord) -> CalendarEvent:
    """Map a training to a calendar event titled by its topic."""
    return CalendarEvent(
        id=training.id,
        kind=EventKind.TRAINING.value,
        title=(training.topic or "").strip() or DEFAULT_TRAINING_TITLE,
        start=training.start_time,
        end=training.end_time,
        group=training.group.name,
        group_id=training.group.id,
    )


def match_to_event(match: MatchRecord) -> CalendarEvent:
    """Map a match to a calendar event titled ``vs X`` at home and ``@ X`` away."""
    prefix = "vs" if match.is_home else "@"
    return CalendarEvent(
        id=match.id,
        kind=EventKind.MATCH.value,
        title=f"{prefix} {match.opponent}",
        start=match.start_time,
        end=match.end_time,
        group=match.group.name,
        group_id=match.group.id,
    )


def _convert_records(raw: Iterable[Any], model: type[BaseModel], mapper: Any) -> list[CalendarEvent]:
    events = []
    for item in raw:
        try:
            record = item if isinstance(item, model) else model.model_validate(item)
            events.append(mapper(record))
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Skipping malformed %s record: %s", model.__name__, e)
    return events


def merge_events(
    trainings: Iterable[Any],
    matches: Iterable[Any],
    group_id: Optional[str] = None,
) -> list[CalendarEvent]:
    """Merge trainings and matches into one event list.

    Trainings come first, then matches, each in input order. Records may be
    models or raw mappings; malformed ones are logged and skipped.

    Args:
        trainings: Training records
        matches: Match records
        group_id: Only keep events of this group when set
    """
    events = _convert_records(trainings, TrainingRecord, training_to_event)
    events.extend(_convert_records(matches, MatchRecord, match_to_event))
    return filter_by_group(events, group_id)


def filter_by_group(events: Iterable[CalendarEvent], group_id: Optional[str]) -> list[CalendarEvent]:
    """Keep events belonging to ``group_id``; an empty id keeps everything."""
    if not group_id:
        return list(events)
    return [e for e in events if e.group_id == group_id]


def list_groups(events: Iterable[CalendarEvent]) -> list[tuple[str, str]]:
    """Distinct ``(group_id, group label)`` pairs in first-seen order."""
    seen: dict[str, str] = {}
    for event in events:
        if event.group_id and event.group_id not in seen:
            seen[event.group_id] = event.group
    return list(seen.items())


def count_by_kind(events: Iterable[Any]) -> dict[str, int]:
    """Count events per kind."""
    counts: dict[str, int] = {}
    for event in events:
        counts[event.kind] = counts.get(event.kind, 0) + 1
    return counts


def coerce_events(raw: Iterable[Any]) -> list[CalendarEvent]:
    """Build CalendarEvent models from mappings, dropping malformed entries."""
    events = []
    for item in raw:
        if isinstance(item, CalendarEvent):
            events.append(item)
            continue
        try:
            events.append(CalendarEvent.model_validate(item))
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("Skipping malformed event %r: %s", _describe(item), e)
    return events


def _describe(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("id", "<no id>")
    return type(item).__name__


def event_detail_path(event: Any, templates: Optional[Mapping[str, str]] = None) -> str:
    """Resolve the details page for a clicked event.

    Args:
        event: Event with ``id`` and ``kind``
        templates: Per-kind path templates with an ``{id}`` placeholder

    Returns:
        Detail path, e.g. ``/trainings/abc``

    Raises:
        KeyError: If no template is registered for the event kind
    """
    templates = templates or DEFAULT_DETAIL_PATHS
    return templates[event.kind].format(id=event.id)


class JsonEventSource:
    """Reads trainings, matches, and ready-made events from a JSON file.

    The file holds a mapping with optional ``trainings``, ``matches``, and
    ``events`` lists. A missing file means no events.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None

    def _read(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            logger.debug("Events file %s not found; serving no events", self.path)
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise EventSourceError(f"Failed to read events from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise EventSourceError(f"Events file {self.path} must contain a JSON object")
        return data

    def load(self, group_id: Optional[str] = None) -> list[CalendarEvent]:
        """Load all events, optionally restricted to one group.

        Raises:
            EventSourceError: If the file exists but cannot be read
        """
        data = self._read()
        events = merge_events(data.get("trainings", []), data.get("matches", []))
        events.extend(coerce_events(data.get("events", [])))
        events = filter_by_group(events, group_id)
        logger.debug("Loaded %d events from %s (group=%s)", len(events), self.path, group_id)
        return events
