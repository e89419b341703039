"""HTTP binding for clubcalendar."""

from .server import create_app, start_server

__all__ = ["create_app", "start_server"]
