from __future__ import annotations

import json
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any, Callable

import pytest

from clubcalendar.models import CalendarEvent

CLUBCALENDAR_ENV_VARS = (
    "CLUBCALENDAR_TEST_TIME",
    "CLUBCALENDAR_DEFAULT_TIMEZONE",
    "CLUBCALENDAR_DEBUG",
    "CLUBCALENDAR_LOG_LEVEL",
    "CLUBCALENDAR_WEB_HOST",
    "CLUBCALENDAR_SERVER_BIND",
    "CLUBCALENDAR_WEB_PORT",
    "CLUBCALENDAR_SERVER_PORT",
    "CLUBCALENDAR_OVERFLOW_CAP",
    "CLUBCALENDAR_EVENTS_FILE",
)


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear CLUBCALENDAR_* variables so host settings never leak into tests."""
    for name in CLUBCALENDAR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # Values written straight to os.environ (e.g. by .env loading) bypass monkeypatch
    for name in CLUBCALENDAR_ENV_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def test_timezone() -> str:
    """Return a deterministic viewer timezone with a non-zero UTC offset."""
    return "Europe/Berlin"


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """
    Return a factory for CalendarEvent instances.

    Only ``id`` and ``start`` are required; the end defaults to the start and
    the kind to training.
    """

    def factory(
        event_id: str,
        start: str,
        end: str | None = None,
        kind: str = "training",
        title: str | None = None,
        group: str = "U12",
        group_id: str | None = "g-u12",
    ) -> CalendarEvent:
        return CalendarEvent(
            id=event_id,
            kind=kind,
            title=title or f"Event {event_id}",
            start=start,
            end=end or start,
            group=group,
            group_id=group_id,
        )

    return factory


# ==================== Event Source Payload Fixtures ====================


@pytest.fixture
def training_payloads() -> list[dict[str, Any]]:
    """
    Return trainings as served by the club REST API.

    - t1: Passing drills, U12, 2024-01-15 17:00-18:30 UTC
    - t2: no topic, U14, 2024-01-20 09:00-10:30 UTC
    """
    return [
        {
            "id": "t1",
            "startTime": "2024-01-15T17:00:00Z",
            "endTime": "2024-01-15T18:30:00Z",
            "group": {"id": "g-u12", "name": "U12"},
            "topic": "Passing drills",
        },
        {
            "id": "t2",
            "startTime": "2024-01-20T09:00:00Z",
            "endTime": "2024-01-20T10:30:00Z",
            "group": {"id": "g-u14", "name": "U14"},
            "topic": None,
        },
    ]


@pytest.fixture
def match_payloads() -> list[dict[str, Any]]:
    """
    Return matches as served by the club REST API.

    - m1: home game vs FC Example, U12, 2024-01-15 10:00 UTC
    - m2: away game at SV Sample, U14, 2024-02-03 14:00 UTC
    """
    return [
        {
            "id": "m1",
            "startTime": "2024-01-15T10:00:00Z",
            "endTime": "2024-01-15T11:30:00Z",
            "group": {"id": "g-u12", "name": "U12"},
            "opponent": "FC Example",
            "isHome": True,
        },
        {
            "id": "m2",
            "startTime": "2024-02-03T14:00:00Z",
            "endTime": "2024-02-03T15:30:00Z",
            "group": {"id": "g-u14", "name": "U14"},
            "opponent": "SV Sample",
            "isHome": False,
        },
    ]


@pytest.fixture
def events_file(
    tmp_path: Path, training_payloads: list[dict[str, Any]], match_payloads: list[dict[str, Any]]
) -> Path:
    """Write trainings and matches to a JSON events file and return its path."""
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps({"trainings": training_payloads, "matches": match_payloads}), encoding="utf-8"
    )
    return path
