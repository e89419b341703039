"""
Central logging configuration for clubcalendar.

Keeps package loggers at INFO (or DEBUG on request) while quieting the access
and server chatter from aiohttp.
"""

import logging
import os
from typing import Dict, Optional

PACKAGE_LOGGERS = [
    "clubcalendar",
    "clubcalendar.api",
    "clubcalendar.domain",
    "clubcalendar.sources",
    "clubcalendar.ui",
]

THIRD_PARTY_LEVELS: Dict[str, int] = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "aiohttp.web": logging.INFO,
    "aiohttp.web_log": logging.WARNING,
    "asyncio": logging.WARNING,
}


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for clubcalendar and its third-party libraries.

    Args:
        debug_mode: Whether to enable debug logging for clubcalendar modules
        force_debug: Override debug mode setting (None to use env var detection)
        log_level: Configured root level name; takes precedence over
            CLUBCALENDAR_LOG_LEVEL

    Environment Variables:
        CLUBCALENDAR_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CLUBCALENDAR_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("CLUBCALENDAR_DEBUG", "").lower() in ("1", "true", "yes")
    requested_level = (log_level or os.getenv("CLUBCALENDAR_LOG_LEVEL", "")).upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if requested_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, requested_level)

    # No force=True: keep the colorized handler installed by _init_logging
    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s"))
        root_logger.addHandler(handler)

    logger_config = dict(THIRD_PARTY_LEVELS)
    # Package loggers never let through more than the root level allows
    package_level = logging.DEBUG if final_debug else max(logging.INFO, root_level)
    for module in PACKAGE_LOGGERS:
        logger_config[module] = package_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for clubcalendar modules")
    else:
        root_logger.info("Production logging configuration applied")


def get_logging_status() -> Dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}

    for logger_name in ["clubcalendar", "aiohttp.access", "aiohttp.server", "asyncio"]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)

    return status
