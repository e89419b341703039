"""Command-line entry for clubcalendar."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

from . import _init_logging, build_config, run_server
from .exceptions import ClubCalendarError

logger = logging.getLogger(__name__)


def _year_month(value: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into a zero-based ``(year, month)``."""
    try:
        year_str, month_str = value.split("-", 1)
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}") from None
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"month must be 01-12, got {month_str!r}")
    return year, month - 1


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for clubcalendar CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="clubcalendar",
        description="Club Calendar - month view of trainings and matches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m clubcalendar                              # Serve on default port (8080)
  python -m clubcalendar --port 3000                  # Serve on port 3000
  python -m clubcalendar --events events.json --render 2024-01 > jan.html
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 8080, or from CLUBCALENDAR_WEB_PORT env var)",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Address to bind the web server to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML or JSON config file (default: ./clubcalendar/config.yaml)",
    )
    parser.add_argument(
        "--events",
        metavar="PATH",
        help="JSON file with trainings, matches, and events",
    )
    parser.add_argument(
        "--group",
        metavar="GROUP_ID",
        help="Only show events of this group (with --render)",
    )
    parser.add_argument(
        "--render",
        type=_year_month,
        metavar="YYYY-MM",
        help="Print the HTML for one month to stdout instead of serving",
    )

    return parser


def render_month(args: argparse.Namespace) -> str:
    """Render the month named by ``args.render`` to HTML."""
    from .api.routes import navigation_links
    from .domain.view_model import build_month_view
    from .sources import JsonEventSource
    from .ui.html_renderer import MonthHTMLRenderer

    cfg = build_config(args)
    year, month = args.render
    source = JsonEventSource(Path(cfg.events_file) if cfg.events_file else None)
    view = build_month_view(
        year,
        month,
        source.load(args.group),
        tz=cfg.timezone,
        cap=cfg.overflow_cap,
    )
    return MonthHTMLRenderer().render(view, navigation_links(year, month, args.group))


def main() -> NoReturn:
    """Run the clubcalendar CLI."""
    parser = _create_parser()
    args = parser.parse_args()

    if args.render is not None:
        _init_logging(os.environ.get("CLUBCALENDAR_LOG_LEVEL", "WARNING"))
        try:
            sys.stdout.write(render_month(args))
        except ClubCalendarError as exc:
            logger.error("Failed to render %s: %s", args.render, exc)
            sys.exit(1)
        sys.exit(0)

    try:
        run_server(args)
    except ClubCalendarError as exc:
        print(f"clubcalendar: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
