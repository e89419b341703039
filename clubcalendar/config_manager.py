"""Configuration management for the clubcalendar server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .timezone_utils import get_default_timezone

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager", "get_default_timezone"]


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []

        try:
            content = self.env_file_path.read_text(encoding="utf-8")
        except OSError:
            logger.debug(
                "Failed to read .env file for defaults (continuing): %s",
                str(self.env_file_path),
                exc_info=True,
            )
            return []

        for raw_line in content.splitlines():
            line = raw_line.strip()

            if not line or line.startswith("#") or "=" not in line:
                continue

            key, val = line.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")

            if key and key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - CLUBCALENDAR_WEB_HOST or CLUBCALENDAR_SERVER_BIND -> 'server_bind'
        - CLUBCALENDAR_WEB_PORT or CLUBCALENDAR_SERVER_PORT -> 'server_port' (int)
        - CLUBCALENDAR_LOG_LEVEL -> 'log_level'
        - CLUBCALENDAR_DEFAULT_TIMEZONE -> 'timezone' (validated)
        - CLUBCALENDAR_OVERFLOW_CAP -> 'overflow_cap' (int)
        - CLUBCALENDAR_EVENTS_FILE -> 'events_file'

        Returns:
            Configuration dictionary suitable for Config.from_dict
        """
        cfg: dict[str, Any] = {}

        host = os.environ.get("CLUBCALENDAR_WEB_HOST") or os.environ.get("CLUBCALENDAR_SERVER_BIND")
        if host:
            cfg["server_bind"] = host

        port = os.environ.get("CLUBCALENDAR_WEB_PORT") or os.environ.get("CLUBCALENDAR_SERVER_PORT")
        if port:
            try:
                cfg["server_port"] = int(port)
            except ValueError:
                logger.warning("Invalid CLUBCALENDAR_WEB_PORT=%r; ignoring", port)

        log_level = os.environ.get("CLUBCALENDAR_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level

        if os.environ.get("CLUBCALENDAR_DEFAULT_TIMEZONE"):
            cfg["timezone"] = get_default_timezone()

        cap = os.environ.get("CLUBCALENDAR_OVERFLOW_CAP")
        if cap:
            try:
                cfg["overflow_cap"] = int(cap)
            except ValueError:
                logger.warning("Invalid CLUBCALENDAR_OVERFLOW_CAP=%r; ignoring", cap)

        events_file = os.environ.get("CLUBCALENDAR_EVENTS_FILE")
        if events_file:
            cfg["events_file"] = events_file

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()
