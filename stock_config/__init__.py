"""
stock_config -- single public entrypoint for service configuration.

Responsibility:
    ``get_active_config()`` is the only way the service obtains its
    settings.  Scripts and the HTTP app call it once at startup and pass
    the pieces they need down; the kernel never reads configuration.

Resolution order:
    1. ``path`` argument, else the ``STOCK_CONFIG`` environment variable,
       else ``stock_config/defaults/stock.yaml``.
    2. ``DATABASE_URL`` environment variable overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ConfigValidationError`` -- a value is missing or malformed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from stock_config.loader import ConfigValidationError, load_yaml_file, parse_config
from stock_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    MovementConfig,
    ServerConfig,
    StockConfig,
)

_logger = logging.getLogger("stock_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "stock.yaml"


def get_active_config(path: Path | str | None = None) -> StockConfig:
    """Load, validate and return the active StockConfig."""
    resolved = Path(path or os.environ.get("STOCK_CONFIG") or DEFAULT_CONFIG_PATH)
    data = load_yaml_file(resolved)
    config = parse_config(
        data,
        database_url=os.environ.get("DATABASE_URL"),
        source=str(resolved),
    )
    _logger.info(
        "config_loaded",
        extra={
            "config_source": config.source,
            "database_dialect": config.database.url.split(":", 1)[0],
            "log_level": config.logging.level,
        },
    )
    return config


__all__ = [
    "ConfigValidationError",
    "DEFAULT_CONFIG_PATH",
    "DatabaseConfig",
    "LoggingConfig",
    "MovementConfig",
    "ServerConfig",
    "StockConfig",
    "get_active_config",
]
