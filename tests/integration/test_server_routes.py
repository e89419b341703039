"""Integration tests for the clubcalendar aiohttp routes.

Each test drives the full application built by ``create_app`` against a
JSON events file, with "today" pinned to 2024-01-20.
"""

import datetime
import threading
from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient, TestServer

from clubcalendar import __version__
from clubcalendar.api.routes import load_events
from clubcalendar.api.server import create_app
from clubcalendar.config_loader import Config
from clubcalendar.exceptions import ConfigError, EventSourceError

TODAY = datetime.date(2024, 1, 20)


@pytest.fixture
async def client(events_file: Path):
    """Test client for an app reading the shared events file."""
    app = create_app(Config(events_file=str(events_file)), today_provider=lambda: TODAY)
    async with TestClient(TestServer(app)) as test_client:
        yield test_client


@pytest.mark.integration
class TestCalendarPage:
    """HTML month view and navigation."""

    async def test_index_redirects_to_calendar(self, client: TestClient) -> None:
        response = await client.get("/", allow_redirects=False)

        assert response.status == 302
        assert response.headers["Location"] == "/calendar"

    async def test_calendar_defaults_to_current_month(self, client: TestClient) -> None:
        response = await client.get("/calendar")

        assert response.status == 200
        assert response.content_type == "text/html"
        html = await response.text()
        assert "January 2024" in html
        assert "/events/training/t1" in html
        assert "/events/match/m1" in html
        assert "nav-today" not in html

    async def test_calendar_other_month_shows_today_link(self, client: TestClient) -> None:
        html = await (await client.get("/calendar?year=2024&month=1")).text()

        assert "February 2024" in html
        assert "/events/match/m2" in html
        assert 'class="nav-today"' in html

    async def test_calendar_group_filter(self, client: TestClient) -> None:
        html = await (await client.get("/calendar?year=2024&month=0&group=g-u14")).text()

        assert "/events/training/t2" in html
        assert "/events/training/t1" not in html

    async def test_calendar_bad_year_returns_400(self, client: TestClient) -> None:
        response = await client.get("/calendar?year=abc")

        assert response.status == 400
        assert "year must be an integer" in (await response.json())["error"]

    @pytest.mark.parametrize(
        ("action", "location"),
        [
            ("prev", "/calendar?year=2023&month=11"),
            ("next", "/calendar?year=2024&month=1"),
            ("today", "/calendar?year=2024&month=0"),
        ],
    )
    async def test_navigation_redirects(self, client: TestClient, action: str, location: str) -> None:
        query = "?year=2024&month=0" if action != "today" else "?year=2022&month=5"

        response = await client.get(f"/calendar/{action}{query}", allow_redirects=False)

        assert response.status == 302
        assert response.headers["Location"] == location

    async def test_navigation_keeps_group(self, client: TestClient) -> None:
        response = await client.get(
            "/calendar/next?year=2024&month=11&group=g-u12", allow_redirects=False
        )

        assert response.headers["Location"] == "/calendar?year=2025&month=0&group=g-u12"

    async def test_navigation_unknown_action_returns_400(self, client: TestClient) -> None:
        response = await client.get("/calendar/sideways", allow_redirects=False)

        assert response.status == 400


@pytest.mark.integration
class TestEventClick:
    """Event click redirects."""

    async def test_event_redirects_to_detail_page(self, client: TestClient) -> None:
        response = await client.get("/events/match/m1", allow_redirects=False)

        assert response.status == 302
        assert response.headers["Location"] == "/matches/m1"

    async def test_training_redirects_to_detail_page(self, client: TestClient) -> None:
        response = await client.get("/events/training/t2", allow_redirects=False)

        assert response.headers["Location"] == "/trainings/t2"

    async def test_unknown_event_returns_404(self, client: TestClient) -> None:
        response = await client.get("/events/match/t1", allow_redirects=False)

        assert response.status == 404


@pytest.mark.integration
class TestApiRoutes:
    """JSON API."""

    async def test_calendar_json_has_view_navigation_and_groups(self, client: TestClient) -> None:
        response = await client.get("/api/calendar?year=2024&month=0")

        assert response.status == 200
        data = await response.json()
        assert data["title"] == "January 2024"
        assert data["is_current_month"] is True
        assert data["kind_counts"] == {"training": 2, "match": 2}
        assert len(data["cells"]) == 35
        assert data["navigation"] == {
            "prev": {"year": 2023, "month": 11},
            "next": {"year": 2024, "month": 1},
            "today": {"year": 2024, "month": 0},
        }
        assert data["groups"] == [{"id": "g-u12", "name": "U12"}, {"id": "g-u14", "name": "U14"}]

        day_15 = next(cell for cell in data["cells"] if cell["day"] == 15)
        assert [e["id"] for e in day_15["events"]] == ["m1", "t1"]

    async def test_calendar_json_group_filter_scopes_totals(self, client: TestClient) -> None:
        data = await (await client.get("/api/calendar?year=2024&month=0&group=g-u14")).json()

        assert data["kind_counts"] == {"training": 1, "match": 1}
        assert data["groups"] == [{"id": "g-u14", "name": "U14"}]

    async def test_calendar_json_bad_month_returns_400(self, client: TestClient) -> None:
        response = await client.get("/api/calendar?month=x")

        assert response.status == 400

    async def test_health(self, client: TestClient) -> None:
        data = await (await client.get("/api/health")).json()

        assert data["status"] == "ok"
        assert data["timezone"] == "UTC"
        assert data["version"] == __version__
        assert "server_time_iso" in data


class _FailingSource:
    def load(self, group_id=None):
        raise EventSourceError("upstream unavailable")


@pytest.mark.integration
class TestSourceFailures:
    """Event source errors surface as 502."""

    async def test_broken_source_returns_502(self) -> None:
        app = create_app(Config(), event_source=_FailingSource(), today_provider=lambda: TODAY)
        async with TestClient(TestServer(app)) as client:
            page = await client.get("/calendar")
            api = await client.get("/api/calendar")
            click = await client.get("/events/match/m1", allow_redirects=False)

            assert page.status == 502
            assert "Could not load the calendar" in await page.text()
            assert api.status == 502
            assert (await api.json())["error"] == "upstream unavailable"
            assert click.status == 502

    async def test_corrupt_events_file_returns_502(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        path.write_text("{not json", encoding="utf-8")
        app = create_app({"events_file": str(path)}, today_provider=lambda: TODAY)

        async with TestClient(TestServer(app)) as client:
            response = await client.get("/api/calendar")

        assert response.status == 502

    async def test_async_source_is_awaited(self, make_event) -> None:
        class _AsyncSource:
            async def load(self, group_id=None):
                return [make_event("a1", "2024-01-03T12:00Z")]

        app = create_app(Config(), event_source=_AsyncSource(), today_provider=lambda: TODAY)
        async with TestClient(TestServer(app)) as client:
            data = await (await client.get("/api/calendar?year=2024&month=0")).json()

        assert data["kind_counts"]["training"] == 1


@pytest.mark.integration
def test_create_app_when_unknown_timezone_then_config_error() -> None:
    with pytest.raises(ConfigError):
        create_app(Config(timezone="Mars/Olympus"))


@pytest.mark.integration
class TestLoadEvents:
    """load_events keeps blocking sources off the event loop thread."""

    async def test_sync_source_runs_in_executor(self, make_event) -> None:
        calls = []

        class _BlockingSource:
            def load(self, group_id=None):
                calls.append((threading.get_ident(), group_id))
                return (e for e in [make_event("s1", "2024-01-03T12:00Z")])

        events = await load_events(_BlockingSource(), "g-u12")

        assert [e.id for e in events] == ["s1"]
        assert calls[0][0] != threading.get_ident()
        assert calls[0][1] == "g-u12"

    async def test_sync_source_error_propagates(self) -> None:
        with pytest.raises(EventSourceError, match="upstream unavailable"):
            await load_events(_FailingSource(), None)
