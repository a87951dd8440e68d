"""Kernel services: flush-only writers that run inside a caller-owned transaction."""

from stock_kernel.services.base import BaseService
from stock_kernel.services.catalog_service import CategoryService, ProductService
from stock_kernel.services.stock_ledger_service import (
    StockChange,
    StockLedgerService,
    parse_movement_type,
)

__all__ = [
    "BaseService",
    "CategoryService",
    "ProductService",
    "StockChange",
    "StockLedgerService",
    "parse_movement_type",
]
