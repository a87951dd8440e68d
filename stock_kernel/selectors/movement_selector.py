"""
Module: stock_kernel.selectors.movement_selector
Responsibility: Read-only access to the stock movement ledger.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Ordering: every listing is (movement_date DESC, id DESC), so the most
      recent movement comes first and same-day movements keep insertion
      order reversed.
    - Full materialization: listings return complete lists (no pagination).

Failure modes:
    - Returns an empty list when no movements match (never raises on
      absence of data).
"""

from sqlalchemy import func, select

from stock_kernel.domain.dtos import MovementRecordDTO
from stock_kernel.models.movement import MovementRecord, MovementType
from stock_kernel.selectors.base import BaseSelector


class MovementSelector(BaseSelector[MovementRecord]):
    """
    Selector for ledger queries.

    Non-goals:
        - Does NOT aggregate or report; ``net_quantity`` exists only to
          check the ledger invariant against a product's on-hand quantity.
    """

    def _ordered(self):
        return select(MovementRecord).order_by(
            MovementRecord.movement_date.desc(),
            MovementRecord.id.desc(),
        )

    def list_movements(self, product_id: int | None = None) -> list[MovementRecordDTO]:
        """
        The full ledger, or the movements of one product.

        Args:
            product_id: Restrict to this product when given.

        Returns:
            MovementRecordDTOs ordered by date descending, then id descending.
        """
        stmt = self._ordered()
        if product_id is not None:
            stmt = stmt.where(MovementRecord.product_id == product_id)
        records = self.session.execute(stmt).scalars().all()
        return [MovementRecordDTO.from_model(r) for r in records]

    def get(self, movement_id: int) -> MovementRecordDTO | None:
        """Return one ledger row by id, or None."""
        record = self.session.get(MovementRecord, movement_id)
        return MovementRecordDTO.from_model(record) if record else None

    def count_for_product(self, product_id: int) -> int:
        """Number of ledger rows recorded for ``product_id``."""
        return self.session.execute(
            select(func.count(MovementRecord.id)).where(
                MovementRecord.product_id == product_id
            )
        ).scalar_one()

    def net_quantity(self, product_id: int) -> int:
        """Sum of Entry quantities minus sum of Exit quantities for a product."""
        rows = self.session.execute(
            select(MovementRecord.movement_type, func.sum(MovementRecord.quantity))
            .where(MovementRecord.product_id == product_id)
            .group_by(MovementRecord.movement_type)
        ).all()
        totals = {MovementType(kind): int(total or 0) for kind, total in rows}
        return totals.get(MovementType.ENTRY, 0) - totals.get(MovementType.EXIT, 0)
