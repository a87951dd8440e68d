"""Read-only query selectors for the stock kernel."""

from stock_kernel.selectors.base import BaseSelector
from stock_kernel.selectors.category_selector import CategorySelector
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.product_selector import ProductSelector

__all__ = [
    "BaseSelector",
    "CategorySelector",
    "MovementSelector",
    "ProductSelector",
]
