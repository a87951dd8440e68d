"""
Pytest fixtures for the stock ledger test suite.

Provides:
- A database engine and schema for the whole session
- Per-test sessions plus row cleanup after every test
- Clocks, product/category factories, a MovementCoordinator and an HTTP client
- Captured structured logs

Environment Variables:
- DATABASE_URL: connection URL for the test database.  Defaults to an
  in-memory SQLite database.  Point it at PostgreSQL to also run the tests
  marked ``postgres`` (real concurrent transactions, trigger checks).
"""

import json
import logging
import os
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import Session

from stock_api.app import create_app
from stock_kernel.db.base import Base
from stock_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    is_postgres,
    reset_engine,
    session_scope,
)
from stock_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_kernel.services.catalog_service import CategoryService, ProductService
from stock_services.inventory_service import InventoryService
from stock_services.movement_coordinator import MovementCoordinator

DEFAULT_TEST_URL = "sqlite://"


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_TEST_URL)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "postgres: mark test as requiring PostgreSQL"
    )


def pytest_collection_modifyitems(config, items):
    if get_database_url().startswith("postgresql"):
        return
    skip_pg = pytest.mark.skip(reason="needs DATABASE_URL pointing at PostgreSQL")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_pg)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, coordinator):
            coordinator.record_entry(...)
            logs = captured_logs()
            assert any(r["message"] == "movement_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(
        get_database_url(), echo=False,
        pool_size=20, max_overflow=10, pool_timeout=10,
    )
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session, drop once at end.

    Immutability listeners are registered once and remain active.
    """
    drop_tables()
    create_tables()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    drop_tables()


def _clear_all_tables(engine) -> None:
    """Remove every row.  PostgreSQL uses TRUNCATE, which row-level
    immutability triggers do not fire on."""
    tables = [t for t in reversed(Base.metadata.sorted_tables)]
    with engine.begin() as conn:
        if is_postgres():
            conn.execute(text(
                "TRUNCATE " + ", ".join(t.name for t in tables) + " RESTART IDENTITY CASCADE"
            ))
        else:
            for table in tables:
                conn.execute(table.delete())


@pytest.fixture(autouse=True)
def _clean_tables(request):
    """Tests commit for real; wipe the rows afterwards."""
    yield
    if "db_tables" in request.fixturenames:
        _clear_all_tables(request.getfixturevalue("db_engine"))


@pytest.fixture(scope="function")
def session(db_tables) -> Generator[Session, None, None]:
    """A session from the application factory.

    Kernel services only flush, so a test that never commits leaves nothing
    behind; one that does is cleaned up by ``_clean_tables``.
    """
    sess = get_session_factory()()
    yield sess
    try:
        sess.rollback()
    finally:
        sess.close()


@pytest.fixture
def session_factory(db_tables):
    return get_session_factory()


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing (2024-01-01 12:00 UTC)."""
    return DeterministicClock()


# =============================================================================
# Data factories (committed in their own transaction)
# =============================================================================


@pytest.fixture
def create_product(db_tables):
    """Factory committing a product and returning its ProductInfo."""

    def _create(
        name: str = "Widget",
        quantity: int = 10,
        min_quantity: int = 5,
        max_quantity: int = 100,
        unit: str = "pcs",
        price: Decimal = Decimal("2.50"),
        category: str = "General",
    ):
        with session_scope() as s:
            return ProductService(s).create_product(
                name=name,
                unit=unit,
                price=price,
                min_quantity=min_quantity,
                max_quantity=max_quantity,
                category=category,
                quantity=quantity,
            )

    return _create


@pytest.fixture
def create_category(db_tables):
    """Factory committing a category and returning its CategoryInfo."""

    def _create(name: str = "Beverages", size: str = "medium", packaging: str = "bottle"):
        with session_scope() as s:
            return CategoryService(s).create_category(name=name, size=size, packaging=packaging)

    return _create


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def coordinator(session_factory, deterministic_clock) -> MovementCoordinator:
    return MovementCoordinator(session_factory=session_factory, clock=deterministic_clock)


@pytest.fixture
def inventory(session_factory, deterministic_clock) -> InventoryService:
    return InventoryService(session_factory=session_factory, clock=deterministic_clock)


@pytest.fixture
def client(inventory) -> TestClient:
    app = create_app(inventory=inventory)
    return TestClient(app)
