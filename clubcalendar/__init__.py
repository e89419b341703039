"""clubcalendar - month-grid calendar of club trainings and matches.

The engine in :mod:`clubcalendar.domain` is pure and framework-free; the
aiohttp binding in :mod:`clubcalendar.api` is imported lazily by
``run_server`` so the package can be used without starting a server.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors the CLUBCALENDAR_DEBUG environment variable (truthy values: "1",
    "true", "yes", "on"), which forces DEBUG verbosity.
    """
    import logging
    import os
    import sys

    debug_env = os.environ.get("CLUBCALENDAR_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        try:
            from colorlog import ColoredFormatter

            # HH:MM:SS  LEVEL   logger.name: message, only the level colorized
            fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
            log_colors = {
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            }
            formatter = ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors)
        except ImportError:
            fmt = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
            formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")

        handler.setFormatter(formatter)
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def build_config(args: Optional[object] = None):  # type: ignore[no-untyped-def]
    """Resolve configuration from file, environment, and command line.

    Precedence, lowest first: config file, ``.env``/environment
    (``CLUBCALENDAR_*``), then command line arguments.
    """
    import dataclasses
    import logging

    from .config_loader import Config, load_config
    from .config_manager import ConfigManager

    logger = logging.getLogger(__name__)

    cfg = load_config(getattr(args, "config", None))
    merged = dataclasses.asdict(cfg)
    merged.update(ConfigManager().load_full_config())

    if args is not None:
        for attr, key in (("port", "server_port"), ("host", "server_bind"), ("events", "events_file")):
            value = getattr(args, attr, None)
            if value is not None:
                merged[key] = value
                logger.debug("Applied command line override %s=%r", key, value)

    return Config.from_dict(merged)


def run_server(args: Optional[object] = None) -> None:
    """Start the clubcalendar server.

    Initializes console logging from CLUBCALENDAR_LOG_LEVEL, resolves the
    configuration, applies its log level, and delegates to
    ``clubcalendar.api.server.start_server``.

    Args:
        args: Optional command line namespace with --port, --host, --config
            and --events
    """
    import logging
    import os

    _init_logging(os.environ.get("CLUBCALENDAR_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    cfg = build_config(args)
    logger.info("Applying configured log_level=%s", cfg.log_level)
    logging.getLogger().setLevel(getattr(logging, cfg.log_level, logging.INFO))
    logger.debug(
        "Resolved configuration (diagnostic): %s",
        {k: getattr(cfg, k) for k in ("server_bind", "server_port", "timezone", "events_file")},
    )

    from .api.server import start_server

    start_server(cfg)
