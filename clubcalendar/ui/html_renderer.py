"""HTML renderer for the month grid."""

import html
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from ..domain.view_model import DayView, EventView, MonthViewModel

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TEMPLATE = "/events/{kind}/{id}"

# Colors mirror the legend: blue for trainings, green for matches
_STYLESHEET = """
body { font-family: system-ui, sans-serif; margin: 0; padding: 1rem; background: #fafafa; }
.calendar-header { display: flex; align-items: center; justify-content: space-between; }
.calendar-title { margin: 0; font-size: 1.5rem; }
.calendar-nav a { margin-left: 0.5rem; text-decoration: none; }
.legend { display: flex; gap: 1rem; margin: 0.5rem 0; font-size: 0.85rem; }
.legend-dot, .kind-dot { display: inline-block; width: 0.6rem; height: 0.6rem; border-radius: 50%; background: #999; }
.calendar-grid { display: grid; grid-template-columns: repeat(7, 1fr); gap: 1px; background: #ddd; }
.weekday, .day { background: #fff; padding: 0.25rem; min-height: 1.5rem; }
.weekday { font-weight: 600; text-align: center; }
.day { min-height: 5rem; }
.day.empty { background: #f3f3f3; }
.weekend { background: #f7f9fc; }
.day.today { outline: 2px solid #1976d2; }
.day-number { font-size: 0.8rem; color: #555; }
.event { display: block; font-size: 0.75rem; margin-top: 2px; padding: 1px 3px; border-radius: 3px; color: #fff; background: #777; text-decoration: none; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
.event-training, .dot-training { background: #1976d2; }
.event-match, .dot-match { background: #388e3c; }
.more { font-size: 0.7rem; color: #666; }
.totals { margin-top: 0.75rem; font-size: 0.85rem; color: #444; }
.error-section { color: #b00020; }
"""


@dataclass(frozen=True)
class NavigationLinks:
    """URLs the rendered page links to."""

    prev: str
    next: str
    today: str
    event_template: str = DEFAULT_EVENT_TEMPLATE

    def event(self, event: EventView) -> str:
        return self.event_template.format(
            kind=quote(event.kind, safe=""), id=quote(event.id, safe="")
        )


class MonthHTMLRenderer:
    """Renders a MonthViewModel to a self-contained HTML page."""

    def __init__(self, page_title: str = "Club Calendar") -> None:
        self.page_title = page_title

    def render(self, view: MonthViewModel, links: NavigationLinks) -> str:
        """Render the month page.

        Args:
            view: Month to draw
            links: Navigation and event click targets

        Returns:
            Complete HTML document
        """
        logger.debug("Rendering HTML for %s", view.title)

        today_link = ""
        if view.show_today_button:
            today_link = (
                f'<a class="nav-today" href="{self._escape_html(links.today)}">'
                f"{self._escape_html(view.today_label)}</a>"
            )

        header = f"""
    <header class="calendar-header">
        <h1 class="calendar-title">{self._escape_html(view.title)}</h1>
        <nav class="calendar-nav">
            {today_link}
            <a class="nav-prev" href="{self._escape_html(links.prev)}" title="Previous month">&#8592;</a>
            <a class="nav-next" href="{self._escape_html(links.next)}" title="Next month">&#8594;</a>
        </nav>
    </header>"""

        weekday_cells = "".join(
            f'<div class="weekday{" weekend" if weekend else ""}">{self._escape_html(label)}</div>'
            for label, weekend in view.weekday_headers
        )
        day_cells = "\n".join(self._render_day(cell, links) for cell in view.cells)

        return self._build_page(
            view.title,
            f"""{header}
    <main class="calendar-content">
        {self._render_legend(view)}
        <div class="calendar-grid">
            {weekday_cells}
{day_cells}
        </div>
        {self._render_totals(view)}
    </main>""",
        )

    def render_error(self, error_message: str) -> str:
        """Render an error page.

        Args:
            error_message: Message to display

        Returns:
            HTML document
        """
        return self._build_page(
            "Error",
            f"""
    <main class="calendar-content">
        <section class="error-section">
            <h2 class="error-title">Could not load the calendar</h2>
            <p class="error-message">{self._escape_html(error_message)}</p>
        </section>
    </main>""",
        )

    def _render_legend(self, view: MonthViewModel) -> str:
        items = "".join(
            f'<span class="legend-item"><span class="legend-dot dot-{self._css_token(kind)}"></span> '
            f"{self._escape_html(label)}</span>"
            for kind, label in view.legend
        )
        return f'<div class="legend">{items}</div>'

    def _render_totals(self, view: MonthViewModel) -> str:
        parts = [
            f'<span class="total-{self._css_token(kind)}">{self._escape_html(label)}: '
            f"{view.kind_counts.get(kind, 0)}</span>"
            for kind, label in view.legend
        ]
        return f'<div class="totals">{" &middot; ".join(parts)}</div>'

    def _render_day(self, cell: DayView, links: NavigationLinks) -> str:
        classes = ["day"]
        if cell.is_empty:
            classes.append("empty")
        if cell.is_weekend:
            classes.append("weekend")
        if cell.is_today:
            classes.append("today")

        if cell.is_empty:
            return f'            <div class="{" ".join(classes)}"></div>'

        dots = "".join(
            f'<span class="kind-dot dot-{self._css_token(kind)}"></span>' for kind in cell.kinds
        )
        events = "".join(self._render_event(event, links) for event in cell.events)
        more = ""
        if cell.hidden_count:
            more = f'<div class="more">{self._escape_html(cell.more_label)}</div>'

        return (
            f'            <div class="{" ".join(classes)}" data-day="{cell.day_number}">'
            f'<div class="day-number">{cell.day_number} {dots}</div>{events}{more}</div>'
        )

    def _render_event(self, event: EventView, links: NavigationLinks) -> str:
        return (
            f'<a class="event event-{self._css_token(event.kind)}" '
            f'href="{self._escape_html(links.event(event))}" '
            f'title="{self._escape_html(event.tooltip)}">'
            f"{self._escape_html(event.time_label)} {self._escape_html(event.title)}</a>"
        )

    def _build_page(self, subtitle: str, body: str) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{self._escape_html(self.page_title)} - {self._escape_html(subtitle)}</title>
    <style>{_STYLESHEET}</style>
</head>
<body>{body}
</body>
</html>"""

    @staticmethod
    def _css_token(kind: str) -> str:
        """Reduce a kind to characters safe inside a class attribute."""
        token = "".join(ch if ch.isalnum() or ch in "-_" else "-" for ch in kind.lower())
        return token or "other"

    @staticmethod
    def _escape_html(text: Optional[str]) -> str:
        """Escape HTML special characters.

        Args:
            text: Text to escape

        Returns:
            HTML-escaped text
        """
        if not text:
            return ""
        return html.escape(text, quote=True)
