"""View binding between the month engine and a host page.

The host persists ``(year, month)`` and decides what a click does; this class
recomputes the month on every render and routes user actions to the host's
callbacks.
"""

import datetime
import logging
from typing import Any, Callable, Iterable, Optional

from ..domain.overflow import DEFAULT_OVERFLOW_CAP
from ..domain.view_model import CalendarLabels, MonthViewModel, build_month_view
from ..exceptions import CalendarRequestError
from ..timezone_utils import TimezoneLike
from .html_renderer import MonthHTMLRenderer, NavigationLinks

logger = logging.getLogger(__name__)

NAVIGATION_ACTIONS = ("prev", "next", "today", "event")


class CalendarView:
    """Renders a ``(year, month, events)`` triple and dispatches user actions.

    Nothing is cached between renders; each call to ``build`` or ``render``
    runs the engine again on the inputs it is given.
    """

    def __init__(
        self,
        on_event_click: Callable[[Any], Any],
        on_prev_month: Callable[[], Any],
        on_next_month: Callable[[], Any],
        on_today: Callable[[], Any],
        *,
        tz: TimezoneLike = None,
        cap: int = DEFAULT_OVERFLOW_CAP,
        labels: Optional[CalendarLabels] = None,
        renderer: Optional[MonthHTMLRenderer] = None,
    ):
        """Initialize the view.

        Args:
            on_event_click: Called with the clicked event
            on_prev_month: Called for the previous-month control
            on_next_month: Called for the next-month control
            on_today: Called for the jump-to-today control
            tz: Viewer timezone
            cap: Maximum events drawn per day
            labels: Display strings
            renderer: HTML renderer, a default one is created when omitted
        """
        self.on_event_click = on_event_click
        self.on_prev_month = on_prev_month
        self.on_next_month = on_next_month
        self.on_today = on_today
        self.tz = tz
        self.cap = cap
        self.labels = labels or CalendarLabels()
        self.renderer = renderer or MonthHTMLRenderer()

    def build(
        self,
        year: int,
        month: int,
        events: Iterable[Any],
        today: Optional[datetime.date] = None,
    ) -> MonthViewModel:
        """Compute the month view model for the given triple."""
        return build_month_view(
            year, month, events, today=today, tz=self.tz, cap=self.cap, labels=self.labels
        )

    def render(
        self,
        year: int,
        month: int,
        events: Iterable[Any],
        links: NavigationLinks,
        today: Optional[datetime.date] = None,
    ) -> str:
        """Render the month to HTML."""
        return self.renderer.render(self.build(year, month, events, today), links)

    def handle_action(self, action: str, event: Any = None) -> Any:
        """Route a user action to the matching callback.

        Args:
            action: One of ``prev``, ``next``, ``today`` or ``event``
            event: The clicked event, required for ``event``

        Returns:
            Whatever the callback returns

        Raises:
            CalendarRequestError: If the action is unknown or an event click
                carries no event
        """
        logger.debug("Calendar action: %s", action)
        if action == "prev":
            return self.on_prev_month()
        if action == "next":
            return self.on_next_month()
        if action == "today":
            return self.on_today()
        if action == "event":
            if event is None:
                raise CalendarRequestError("Event click without an event")
            return self.on_event_click(event)

        logger.warning("Unknown navigation action: %s", action)
        raise CalendarRequestError(f"Unknown navigation action: {action!r}")
