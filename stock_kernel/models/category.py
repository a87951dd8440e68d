"""
Module: stock_kernel.models.category
Responsibility: ORM persistence for product categories.
Architecture position: Kernel > Models.  May import from db/base.py only.

Categories are independent records.  Products refer to a category by name
(free text); renaming or deleting a category does not touch any product.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase


class Category(TrackedBase):
    """A product grouping with its packaging attributes."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Size class (e.g., "small", "large")
    size: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
    )

    # Packaging material (e.g., "plastic", "cardboard")
    packaging: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
    )

    def __repr__(self) -> str:
        return f"<Category {self.id}: {self.name}>"
