"""
Module: stock_kernel.models.product
Responsibility: ORM persistence for stocked products.  A Product row holds
    the on-hand quantity that the stock ledger adjusts, plus the descriptive
    fields edited through the catalog.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - quantity >= 0 (ck_product_quantity_non_negative).  The ledger also
      guards this with a conditional decrement, so the constraint is only
      reached by code that bypasses the ledger.
    - quantity changes only through the movement protocol; catalog edits
      never touch it.

Failure modes:
    - IntegrityError when a write would drive quantity negative.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase

# Largest value the INTEGER quantity columns hold on every supported store
QUANTITY_LIMIT = 2**31 - 1


class Product(TrackedBase):
    """
    A stocked item.

    Contract:
        ``min_quantity`` and ``max_quantity`` are informational bounds.  The
        on-hand quantity may legally fall outside them; crossing a bound
        produces a threshold signal, never a rejection.

        ``category`` is a free-text reference to a Category name.  It is not
        a foreign key and no referential integrity is enforced.
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        Index("idx_product_name", "name"),
        Index("idx_product_category", "category"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Unit of measure (e.g., "un", "kg", "box")
    unit: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    min_quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    max_quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1000,
    )

    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="",
    )

    def __repr__(self) -> str:
        return f"<Product {self.id}: {self.name} qty={self.quantity}>"
