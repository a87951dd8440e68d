"""
Module: stock_kernel.models.movement
Responsibility: ORM persistence for the stock movement ledger.  Every change
    to a product's on-hand quantity is recorded as one MovementRecord row in
    the same transaction as the quantity update.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Append-only: rows are never updated or deleted (ORM listeners in
      db/immutability.py, PostgreSQL triggers in db/sql/).
    - quantity > 0 (ck_movement_quantity_positive); direction is carried by
      movement_type, never by the sign of quantity.
    - movement_type in {Entry, Exit} (ck_movement_type).
    - For each product, on-hand quantity equals its initial quantity plus
      the sum of Entry quantities minus the sum of Exit quantities.

Failure modes:
    - IntegrityError on a non-positive quantity or unknown type.
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.

Audit relevance:
    The ledger is the audit trail for stock.  product_id is deliberately not
    a foreign key: deleting a product from the catalog keeps its history.
"""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Date, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


class MovementType(str, Enum):
    """Direction of a stock movement."""

    ENTRY = "Entry"
    EXIT = "Exit"


class MovementRecord(Base):
    """
    One immutable entry in the stock movement ledger.

    Contract:
        Created exactly once, by the stock ledger, in the same transaction
        that adjusts the product's quantity.  Display order is
        (movement_date DESC, id DESC).
    """

    __tablename__ = "movement_records"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_movement_quantity_positive"),
        CheckConstraint(
            "movement_type IN ('Entry', 'Exit')",
            name="ck_movement_type",
        ),
        Index("idx_movement_product_date", "product_id", "movement_date"),
        Index("idx_movement_date", "movement_date"),
    )

    product_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    movement_type: Mapped[MovementType] = mapped_column(
        String(10),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    note: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    movement_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<MovementRecord {self.id}: {self.movement_type} "
            f"{self.quantity} of product {self.product_id} on {self.movement_date}>"
        )
