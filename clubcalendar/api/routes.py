"""Calendar page and JSON routes for clubcalendar."""

from __future__ import annotations

import asyncio
import datetime
import inspect
import logging
from typing import Any, Callable
from urllib.parse import urlencode

from ..config_loader import Config
from ..domain.navigation import MonthNavigationState, next_month, normalize_month, prev_month
from ..domain.view_model import build_month_view
from ..exceptions import CalendarRequestError, EventSourceError
from ..sources import event_detail_path, list_groups
from ..ui.html_renderer import MonthHTMLRenderer, NavigationLinks
from ..ui.view import CalendarView

logger = logging.getLogger(__name__)

PAGE_ACTIONS = ("prev", "next", "today")


def parse_month_query(query: Any, today: datetime.date) -> tuple[int, int]:
    """Read ``year`` and zero-based ``month`` from a query mapping.

    Missing values default to ``today``; out-of-range months are normalized.

    Raises:
        CalendarRequestError: If a value is present but not an integer
    """

    def _int_param(name: str, default: int) -> int:
        raw = query.get(name)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            raise CalendarRequestError(f"{name} must be an integer, got {raw!r}") from None

    return normalize_month(_int_param("year", today.year), _int_param("month", today.month - 1))


async def load_events(event_source: Any, group_id: str | None) -> list[Any]:
    """Load events from a sync or async source.

    Synchronous sources run in the default executor so file reads do not
    block the event loop.
    """
    if inspect.iscoroutinefunction(event_source.load):
        result = await event_source.load(group_id)
    else:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, event_source.load, group_id)
    if asyncio.iscoroutine(result):
        result = await result
    return list(result)


def calendar_url(path: str, year: int, month: int, group: str | None = None) -> str:
    params: dict[str, Any] = {"year": year, "month": month}
    if group:
        params["group"] = group
    return f"{path}?{urlencode(params)}"


def navigation_links(year: int, month: int, group: str | None = None) -> NavigationLinks:
    return NavigationLinks(
        prev=calendar_url("/calendar/prev", year, month, group),
        next=calendar_url("/calendar/next", year, month, group),
        today=calendar_url("/calendar/today", year, month, group),
    )


def register_calendar_routes(
    app: Any,
    config: Config,
    event_source: Any,
    renderer: MonthHTMLRenderer,
    today_provider: Callable[[], datetime.date],
) -> None:
    """Register the HTML month view and its navigation routes.

    Args:
        app: aiohttp web application
        config: Application configuration
        event_source: Object with ``load(group_id)`` returning events
            (may be a coroutine function)
        renderer: HTML renderer shared by all requests
        today_provider: Callable returning the viewer's current date
    """
    from aiohttp import web

    def _make_view(state: MonthNavigationState) -> CalendarView:
        return CalendarView(
            on_event_click=lambda event: event_detail_path(event, config.detail_paths),
            on_prev_month=state.navigate_backward,
            on_next_month=state.navigate_forward,
            on_today=state.jump_to_today,
            tz=config.timezone,
            cap=config.overflow_cap,
            renderer=renderer,
        )

    async def index(_request: Any) -> Any:
        raise web.HTTPFound("/calendar")

    async def calendar_page(request: Any) -> Any:
        """Serve the month grid as HTML."""
        today = today_provider()
        group = request.query.get("group") or None
        try:
            year, month = parse_month_query(request.query, today)
        except CalendarRequestError as e:
            return web.json_response({"error": str(e)}, status=400)

        try:
            events = await load_events(event_source, group)
        except EventSourceError as e:
            logger.error("Failed to load events: %s", e)
            return web.Response(
                text=renderer.render_error(str(e)), content_type="text/html", status=502
            )

        state = MonthNavigationState(year, month, today_provider=today_provider)
        html = _make_view(state).render(
            year, month, events, navigation_links(year, month, group), today=today
        )
        return web.Response(text=html, content_type="text/html")

    async def navigate(request: Any) -> Any:
        """Apply prev/next/today to the month in the query and redirect."""
        action = request.match_info["action"]
        group = request.query.get("group") or None
        try:
            if action not in PAGE_ACTIONS:
                raise CalendarRequestError(f"Unknown navigation action: {action!r}")
            year, month = parse_month_query(request.query, today_provider())
        except CalendarRequestError as e:
            return web.json_response({"error": str(e)}, status=400)

        state = MonthNavigationState(year, month, today_provider=today_provider)
        new_year, new_month = _make_view(state).handle_action(action)
        raise web.HTTPFound(calendar_url("/calendar", new_year, new_month, group))

    async def event_click(request: Any) -> Any:
        """Redirect a clicked event to its details page."""
        kind = request.match_info["kind"].lower()
        event_id = request.match_info["event_id"]
        try:
            events = await load_events(event_source, None)
        except EventSourceError as e:
            logger.error("Failed to load events: %s", e)
            return web.json_response({"error": str(e)}, status=502)

        event = next((e for e in events if e.id == event_id and e.kind == kind), None)
        if event is None:
            return web.json_response({"error": f"No {kind} with id {event_id!r}"}, status=404)

        state = MonthNavigationState(today_provider=today_provider)
        try:
            target = _make_view(state).handle_action("event", event)
        except KeyError:
            return web.json_response({"error": f"No detail page for kind {kind!r}"}, status=404)

        logger.debug("Event %s/%s -> %s", kind, event_id, target)
        raise web.HTTPFound(target)

    app.router.add_get("/", index)
    app.router.add_get("/calendar", calendar_page)
    app.router.add_get("/calendar/{action}", navigate)
    app.router.add_get("/events/{kind}/{event_id}", event_click)

    logger.debug("Calendar routes registered")


def register_api_routes(
    app: Any,
    config: Config,
    event_source: Any,
    today_provider: Callable[[], datetime.date],
    now_provider: Callable[[], datetime.datetime],
    version: str,
) -> None:
    """Register JSON API routes.

    Args:
        app: aiohttp web application
        config: Application configuration
        event_source: Object with ``load(group_id)`` returning events
        today_provider: Callable returning the viewer's current date
        now_provider: Callable returning the current time
        version: Package version reported by the health check
    """
    from aiohttp import web

    async def calendar_json(request: Any) -> Any:
        """Month view model as JSON."""
        today = today_provider()
        group = request.query.get("group") or None
        try:
            year, month = parse_month_query(request.query, today)
        except CalendarRequestError as e:
            return web.json_response({"error": str(e)}, status=400)

        try:
            events = await load_events(event_source, group)
        except EventSourceError as e:
            logger.error("Failed to load events: %s", e)
            return web.json_response({"error": str(e)}, status=502)

        view = build_month_view(
            year,
            month,
            events,
            today=today,
            tz=config.timezone,
            cap=config.overflow_cap,
        )

        payload = view.to_dict()
        prev_year, prev_mon = prev_month(year, month)
        next_year, next_mon = next_month(year, month)
        payload["navigation"] = {
            "prev": {"year": prev_year, "month": prev_mon},
            "next": {"year": next_year, "month": next_mon},
            "today": {"year": today.year, "month": today.month - 1},
        }
        payload["groups"] = [{"id": gid, "name": name} for gid, name in list_groups(events)]
        return web.json_response(payload)

    async def health_check(_request: Any) -> Any:
        """Liveness endpoint."""
        return web.json_response(
            {
                "status": "ok",
                "server_time_iso": now_provider().isoformat(),
                "timezone": config.timezone,
                "version": version,
            }
        )

    app.router.add_get("/api/calendar", calendar_json)
    app.router.add_get("/api/health", health_check)

    logger.debug("API routes registered")
