"""Presentation layer: HTML rendering and the view binding."""

from .html_renderer import MonthHTMLRenderer, NavigationLinks
from .view import NAVIGATION_ACTIONS, CalendarView

__all__ = ["NAVIGATION_ACTIONS", "CalendarView", "MonthHTMLRenderer", "NavigationLinks"]
