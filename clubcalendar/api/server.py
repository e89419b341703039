"""aiohttp server for clubcalendar."""

from __future__ import annotations

import asyncio
import contextlib
import datetime
import logging
import signal
from pathlib import Path
from typing import Any, Callable

from aiohttp import web

from .. import __version__
from ..config_loader import Config
from ..logging_config import configure_logging
from ..sources import JsonEventSource
from ..timezone_utils import now_in_timezone, resolve_timezone, today_in_timezone
from ..ui.html_renderer import MonthHTMLRenderer
from .routes import register_api_routes, register_calendar_routes

logger = logging.getLogger(__name__)

MAX_PORT_ATTEMPTS = 10


def create_app(
    config: Config | dict[str, Any] | None = None,
    event_source: Any = None,
    today_provider: Callable[[], datetime.date] | None = None,
) -> web.Application:
    """Create the aiohttp application with all routes registered.

    Args:
        config: Config instance or plain mapping
        event_source: Object with ``load(group_id)``; defaults to a
            JsonEventSource reading ``config.events_file``
        today_provider: Callable returning the viewer's current date

    Raises:
        ConfigError: If the configured timezone is unknown
    """
    if not isinstance(config, Config):
        config = Config.from_dict(config)

    # Fail at startup rather than on the first request
    resolve_timezone(config.timezone)

    if event_source is None:
        event_source = JsonEventSource(Path(config.events_file) if config.events_file else None)
    if today_provider is None:
        today_provider = lambda: today_in_timezone(config.timezone)  # noqa: E731

    app = web.Application()
    renderer = MonthHTMLRenderer()

    register_calendar_routes(
        app=app,
        config=config,
        event_source=event_source,
        renderer=renderer,
        today_provider=today_provider,
    )
    register_api_routes(
        app=app,
        config=config,
        event_source=event_source,
        today_provider=today_provider,
        now_provider=lambda: now_in_timezone(config.timezone),
        version=__version__,
    )

    async def _shutdown(_app: web.Application) -> None:
        logger.info("Application shutdown requested")

    app.on_shutdown.append(_shutdown)
    logger.debug(
        "Web application created (timezone=%s, overflow_cap=%d)",
        config.timezone,
        config.overflow_cap,
    )
    return app


async def _serve(
    config: Config,
    event_source: Any = None,
    external_stop_event: asyncio.Event | None = None,
) -> None:
    """Run the HTTP server until signalled to stop.

    Args:
        config: Server configuration
        event_source: Optional event source override
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()
    app = create_app(config, event_source)

    runner = web.AppRunner(app)
    await runner.setup()

    host = config.server_bind
    configured_port = config.server_port

    # Try configured port first, then increment if in use
    actual_port = configured_port
    for port_offset in range(MAX_PORT_ATTEMPTS):
        actual_port = configured_port + port_offset
        site = web.TCPSite(runner, host=host, port=actual_port)
        try:
            await site.start()
            break
        except OSError as e:
            if "address already in use" not in str(e).lower():
                logger.exception("Failed to start server on %s:%d", host, actual_port)
                await runner.cleanup()
                raise
            logger.debug("Port %d in use, trying next port", actual_port)
    else:
        await runner.cleanup()
        raise RuntimeError(
            f"No available port found in range {configured_port}-{configured_port + MAX_PORT_ATTEMPTS - 1}"
        )

    if actual_port != configured_port:
        logger.warning(
            "Configured port %d was in use, using port %d instead", configured_port, actual_port
        )
    logger.info("Server started successfully on %s:%d", host, actual_port)

    if external_stop_event is None:
        loop = asyncio.get_running_loop()

        def _on_signal() -> None:
            logger.info("Shutdown signal received")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _on_signal)
    else:
        logger.debug("Using external stop event - skipping signal handler registration")

    await stop_event.wait()
    logger.info("Stop event received, shutting down")
    await runner.cleanup()
    logger.info("Server shutdown complete")


def start_server(config: Config, event_source: Any = None) -> None:
    """Start the asyncio event loop and HTTP server.

    Blocks the calling thread until SIGINT/SIGTERM is received.

    Args:
        config: Server configuration (bind address, port, timezone,
            overflow cap, events file, detail paths)
        event_source: Optional event source override
    """
    configure_logging(debug_mode=config.log_level == "DEBUG", log_level=config.log_level)

    try:
        logger.debug("Running asyncio event loop for server")
        asyncio.run(_serve(config, event_source))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception:
        logger.exception("Server terminated unexpectedly")
        raise
