#!/usr/bin/env python3
"""
Operator commands for the stock service.

Usage:
    python3 scripts/manage.py init-db [--drop]
    python3 scripts/manage.py seed
    python3 scripts/manage.py serve [--host HOST] [--port PORT]

All commands read the active configuration (``STOCK_CONFIG`` /
``DATABASE_URL`` override the defaults) via ``stock_config.get_active_config``.
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from stock_config import StockConfig, get_active_config  # noqa: E402
from stock_kernel.db.engine import create_tables, drop_tables, init_engine_from_url  # noqa: E402
from stock_kernel.db.immutability import register_immutability_listeners  # noqa: E402
from stock_kernel.logging_config import configure_logging  # noqa: E402

SEED_CATEGORIES = [
    {"name": "Beverages", "size": "medium", "packaging": "bottle"},
    {"name": "Cleaning", "size": "large", "packaging": "box"},
    {"name": "Snacks", "size": "small", "packaging": "bag"},
]

SEED_PRODUCTS = [
    {"name": "Mineral water 500ml", "unit": "bottle", "price": Decimal("1.50"),
     "min_quantity": 20, "max_quantity": 400, "category": "Beverages"},
    {"name": "Orange juice 1L", "unit": "carton", "price": Decimal("4.20"),
     "min_quantity": 10, "max_quantity": 120, "category": "Beverages"},
    {"name": "Detergent 2L", "unit": "bottle", "price": Decimal("9.90"),
     "min_quantity": 5, "max_quantity": 60, "category": "Cleaning"},
    {"name": "Potato chips 150g", "unit": "bag", "price": Decimal("3.10"),
     "min_quantity": 15, "max_quantity": 200, "category": "Snacks"},
]

# (product index, movement type, quantity, note)
SEED_MOVEMENTS = [
    (0, "Entry", 240, "Opening delivery"),
    (1, "Entry", 60, "Opening delivery"),
    (2, "Entry", 25, "Opening delivery"),
    (3, "Entry", 90, "Opening delivery"),
    (0, "Exit", 35, "Store transfer"),
    (2, "Exit", 22, "Store transfer"),
]


def _init_engine(config: StockConfig) -> None:
    db = config.database
    init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )


def cmd_init_db(config: StockConfig, args: argparse.Namespace) -> int:
    _init_engine(config)
    if args.drop:
        drop_tables()
    create_tables()
    print(f"Tables ready on {config.database.url.split('@')[-1]}")
    return 0


def cmd_seed(config: StockConfig, args: argparse.Namespace) -> int:
    from stock_services.inventory_service import InventoryService

    _init_engine(config)
    create_tables()
    register_immutability_listeners()

    inventory = InventoryService()
    for category in SEED_CATEGORIES:
        inventory.create_category(**category)
    product_ids = [inventory.create_product(**product).id for product in SEED_PRODUCTS]

    failures = 0
    for index, movement_type, quantity, note in SEED_MOVEMENTS:
        result = inventory.movements.record_movement(
            product_ids[index], movement_type, quantity, note
        )
        if result.is_success:
            print(f"  {movement_type:<5} {quantity:>4}  {result.product.name}: {result.signal.message}")
        else:
            failures += 1
            print(f"  FAILED {movement_type} {quantity} on {product_ids[index]}: {result.message}")

    print(f"Seeded {len(SEED_CATEGORIES)} categories, {len(product_ids)} products, "
          f"{len(SEED_MOVEMENTS) - failures} movements")
    return 1 if failures else 0


def cmd_serve(config: StockConfig, args: argparse.Namespace) -> int:
    import uvicorn

    from stock_api.app import create_app

    app = create_app(config=config)
    uvicorn.run(
        app,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_level=config.logging.level.lower(),
    )
    return 0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stock service operator commands")
    p.add_argument("--config", help="Path to a YAML configuration file")
    sub = p.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create tables and immutability triggers")
    init_db.add_argument("--drop", action="store_true", help="Drop existing tables first")
    init_db.set_defaults(handler=cmd_init_db)

    seed = sub.add_parser("seed", help="Load sample categories, products and movements")
    seed.set_defaults(handler=cmd_seed)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(handler=cmd_serve)

    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_active_config(args.config)
    configure_logging(level=config.logging.level)
    return args.handler(config, args)


if __name__ == "__main__":
    sys.exit(main())
