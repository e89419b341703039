"""clubcalendar.config_loader

Config loader for clubcalendar.

- Reads YAML (PyYAML) or JSON.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .domain.overflow import DEFAULT_OVERFLOW_CAP
from .exceptions import ConfigError
from .sources import DEFAULT_DETAIL_PATHS
from .timezone_utils import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

MAX_OVERFLOW_CAP = 20


@dataclass
class Config:
    """Typed configuration for clubcalendar.

    Fields:
        server_bind: host to bind the HTTP server to
        server_port: port for the HTTP server
        log_level: logging level name
        timezone: IANA name of the viewer timezone used to lay out the grid
        overflow_cap: events drawn per day before "+N more" (0..20)
        events_file: optional JSON file with trainings, matches, and events
        detail_paths: per-kind detail page templates with an ``{id}`` placeholder
    """

    server_bind: str = "0.0.0.0"  # nosec: B104 - intentional default for local/dev; can be overridden via config/env
    server_port: int = 8080
    log_level: str = "INFO"
    timezone: str = DEFAULT_TIMEZONE
    overflow_cap: int = DEFAULT_OVERFLOW_CAP
    events_file: str | None = None
    detail_paths: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DETAIL_PATHS))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int, ``overflow_cap`` is clamped to
        0..20, and user ``detail_paths`` are merged over the defaults. Coercions
        are logged as warnings.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        server_port = _coerce_int("server_port", 8080)

        overflow_cap = _coerce_int("overflow_cap", DEFAULT_OVERFLOW_CAP)
        if overflow_cap < 0:
            logger.warning("overflow_cap %d below minimum; coercing to 0", overflow_cap)
            overflow_cap = 0
        elif overflow_cap > MAX_OVERFLOW_CAP:
            logger.warning(
                "overflow_cap %d above maximum; coercing to %d", overflow_cap, MAX_OVERFLOW_CAP
            )
            overflow_cap = MAX_OVERFLOW_CAP

        server_bind = data.get("server_bind", "0.0.0.0")  # nosec: B104 - default used for local development; configurable via env/config
        server_bind = str(server_bind) if server_bind is not None else "0.0.0.0"  # nosec: B104 - fallback literal for empty/missing config

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        timezone = data.get("timezone") or data.get("default_timezone") or DEFAULT_TIMEZONE

        events_file = data.get("events_file")
        if events_file is not None:
            events_file = str(events_file)

        detail_paths = dict(DEFAULT_DETAIL_PATHS)
        raw_paths = data.get("detail_paths") or {}
        if isinstance(raw_paths, dict):
            for kind, template in raw_paths.items():
                if "{id}" not in str(template):
                    logger.warning("Detail path for %r lacks an {id} placeholder; ignoring", kind)
                    continue
                detail_paths[str(kind).lower()] = str(template)
        else:
            logger.warning("Config `detail_paths` is not a mapping; using defaults")

        return cls(
            server_bind=server_bind,
            server_port=server_port,
            log_level=log_level,
            timezone=str(timezone),
            overflow_cap=overflow_cap,
            events_file=events_file,
            detail_paths=detail_paths,
        )


def _load_yaml_or_json(path: Path) -> Any:
    """Load a mapping from a YAML or JSON file, picked by extension."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to
              ./clubcalendar/config.yaml (relative to current working dir).

    Returns:
        Config dataclass instance with values from file (or defaults).

    Raises:
        ConfigError: If the file exists but cannot be parsed or its top level
            is not a mapping.
    """
    p = Path(path) if path else Path.cwd() / "clubcalendar" / "config.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config()

    raw = _load_yaml_or_json(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ConfigError("Config file must contain a mapping at top level")
    cfg = Config.from_dict(raw)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
