"""Per-day display cap with a hidden-event count."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

DEFAULT_OVERFLOW_CAP = 2


@dataclass(frozen=True)
class OverflowResult:
    """Events to draw in a day cell and how many were left out."""

    shown: tuple[Any, ...]
    hidden_count: int

    @property
    def has_more(self) -> bool:
        return self.hidden_count > 0


def apply_overflow(day_events: Sequence[Any], cap: int = DEFAULT_OVERFLOW_CAP) -> OverflowResult:
    """Truncate a day's sorted events to ``cap`` entries.

    The earliest events (by the bucketed order) stay visible. ``day_events`` is
    not modified, so running again with a larger cap gives a result consistent
    with the full list.

    Raises:
        ValueError: If cap is negative
    """
    if cap < 0:
        raise ValueError(f"cap must be >= 0, got {cap}")

    if len(day_events) <= cap:
        return OverflowResult(shown=tuple(day_events), hidden_count=0)
    return OverflowResult(shown=tuple(day_events[:cap]), hidden_count=len(day_events) - cap)
