"""
SQLAlchemy ORM models for the stock kernel.

Importing this package registers every table on ``Base.metadata``.
"""

from stock_kernel.models.category import Category
from stock_kernel.models.movement import MovementRecord, MovementType
from stock_kernel.models.product import Product

__all__ = [
    "Category",
    "MovementRecord",
    "MovementType",
    "Product",
]
