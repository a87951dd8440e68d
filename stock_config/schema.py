"""
Configuration schema (``stock_config.schema``).

Frozen dataclasses describing everything the service reads at startup.
Instances are produced only by ``stock_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class MovementConfig:
    """Notes stored on ledger rows recorded over HTTP without a note."""

    default_entry_note: str = "Entry via system"
    default_exit_note: str = "Exit via system"


@dataclass(frozen=True)
class StockConfig:
    """Root configuration object returned by ``get_active_config``."""

    database: DatabaseConfig
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    movements: MovementConfig = field(default_factory=MovementConfig)
    source: str | None = None
