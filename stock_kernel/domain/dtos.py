"""
Data Transfer Objects for the stock kernel.

Services and selectors return these frozen dataclasses instead of ORM
instances, so nothing outside the kernel holds a live session-bound object.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from stock_kernel.models.category import Category
from stock_kernel.models.movement import MovementRecord, MovementType
from stock_kernel.models.product import Product


@dataclass(frozen=True)
class ProductInfo:
    """Immutable snapshot of a product row."""

    id: int
    name: str
    unit: str
    quantity: int
    price: Decimal
    min_quantity: int
    max_quantity: int
    category: str

    @classmethod
    def from_model(cls, product: Product) -> "ProductInfo":
        return cls(
            id=product.id,
            name=product.name,
            unit=product.unit,
            quantity=product.quantity,
            price=Decimal(product.price),
            min_quantity=product.min_quantity,
            max_quantity=product.max_quantity,
            category=product.category,
        )


@dataclass(frozen=True)
class CategoryInfo:
    """Immutable snapshot of a category row."""

    id: int
    name: str
    size: str
    packaging: str

    @classmethod
    def from_model(cls, category: Category) -> "CategoryInfo":
        return cls(
            id=category.id,
            name=category.name,
            size=category.size,
            packaging=category.packaging,
        )


@dataclass(frozen=True)
class MovementRecordDTO:
    """Immutable snapshot of one ledger row."""

    id: int
    product_id: int
    movement_type: MovementType
    quantity: int
    note: str | None
    movement_date: date

    @classmethod
    def from_model(cls, record: MovementRecord) -> "MovementRecordDTO":
        return cls(
            id=record.id,
            product_id=record.product_id,
            movement_type=MovementType(record.movement_type),
            quantity=record.quantity,
            note=record.note,
            movement_date=record.movement_date,
        )
