"""Data models for calendar events shown in the month view."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from .timezone_utils import parse_instant


class EventKind(str, Enum):
    """Known event categories.

    ``CalendarEvent.kind`` is a plain string so new categories can be added by
    event sources without touching this enum; these are the ones the default
    renderer styles and the legend lists.
    """

    TRAINING = "training"
    MATCH = "match"


class CalendarEvent(BaseModel):
    """A single event placed on the month grid.

    Immutable for the lifetime of a render. Field names follow the Python side;
    the camelCase names used by the club REST API (``type``, ``startTime``,
    ``endTime``) are accepted on input.
    """

    id: str = Field(..., description="Opaque unique event identifier")
    kind: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("kind", "type"),
        description="Event category, e.g. training or match",
    )
    title: str = Field(..., min_length=1, description="Display label")
    start: AwareDatetime = Field(
        ..., validation_alias=AliasChoices("start", "startTime"), description="Start instant"
    )
    end: AwareDatetime = Field(
        ..., validation_alias=AliasChoices("end", "endTime"), description="End instant"
    )
    group: str = Field(default="", description="Owning team/group display label")
    group_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("group_id", "groupId"),
        description="Owning team/group identifier, used for filtering",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, EventKind):
            return value.value
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_instant(value)
        return value

    @property
    def is_training(self) -> bool:
        """Check if the event is a training session."""
        return self.kind == EventKind.TRAINING.value

    @property
    def is_match(self) -> bool:
        """Check if the event is a match."""
        return self.kind == EventKind.MATCH.value

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return self.model_dump(mode="json")
