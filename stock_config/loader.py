"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Reads a YAML file and parses it into the frozen dataclasses of
``stock_config.schema``.  Callers go through
``stock_config.get_active_config()``; this module is the tooling behind it.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or ill-typed values  -> ``ConfigValidationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    MovementConfig,
    ServerConfig,
    StockConfig,
)

_VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigValidationError(ValueError):
    """A configuration value is missing or has the wrong shape.

    Attributes:
        key: Dotted path of the offending key (e.g. ``database.url``).
        reason: What was wrong with it.
    """

    code: str = "CONFIG_INVALID"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration '{key}': {reason}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigValidationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigValidationError("<root>", "top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(name, "must be a mapping")
    return section


def _non_negative_int(section: dict[str, Any], key: str, prefix: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigValidationError(f"{prefix}.{key}", f"expected a non-negative integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any], url_override: str | None = None) -> DatabaseConfig:
    section = _section(data, "database")
    url = url_override or section.get("url")
    if not isinstance(url, str) or not url:
        raise ConfigValidationError("database.url", "required")
    return DatabaseConfig(
        url=url,
        echo=bool(section.get("echo", False)),
        pool_size=_non_negative_int(section, "pool_size", "database", 10),
        max_overflow=_non_negative_int(section, "max_overflow", "database", 10),
        pool_timeout=_non_negative_int(section, "pool_timeout", "database", 30),
        pool_recycle=_non_negative_int(section, "pool_recycle", "database", 3600),
    )


def parse_server(data: dict[str, Any]) -> ServerConfig:
    section = _section(data, "server")
    port = _non_negative_int(section, "port", "server", 8000)
    if not 0 < port < 65536:
        raise ConfigValidationError("server.port", f"out of range: {port}")
    return ServerConfig(host=str(section.get("host", "127.0.0.1")), port=port)


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    section = _section(data, "logging")
    level = str(section.get("level", "INFO")).upper()
    if level not in _VALID_LEVELS:
        raise ConfigValidationError("logging.level", f"unknown level {level!r}")
    return LoggingConfig(level=level)


def parse_movements(data: dict[str, Any]) -> MovementConfig:
    section = _section(data, "movements")
    defaults = MovementConfig()
    return MovementConfig(
        default_entry_note=str(section.get("default_entry_note", defaults.default_entry_note)),
        default_exit_note=str(section.get("default_exit_note", defaults.default_exit_note)),
    )


def parse_config(
    data: dict[str, Any],
    database_url: str | None = None,
    source: str | None = None,
) -> StockConfig:
    """Build a StockConfig from an already-loaded mapping."""
    return StockConfig(
        database=parse_database(data, database_url),
        server=parse_server(data),
        logging=parse_logging(data),
        movements=parse_movements(data),
        source=source,
    )

