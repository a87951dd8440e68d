"""
StockLedgerService -- applies stock movements to products.

Responsibility:
    Adjusts exactly one product's on-hand quantity and appends the matching
    MovementRecord, as one unit of work inside the caller's transaction.
    After the change, classifies the resulting quantity against the
    product's min/max and returns the advisory ThresholdSignal.

Architecture position:
    Kernel > Services -- imperative shell.  Called by MovementCoordinator,
    which owns the transaction boundary.

Invariants enforced:
    - Non-negative stock: the exit decrement is a conditional UPDATE
      (``WHERE id = :id AND quantity >= :q``).  The affected-row count is the
      authority; the pre-transaction read only rejects obvious cases early.
      Two concurrent exits cannot both pass on a stale read.
    - Atomicity: the quantity UPDATE and the ledger INSERT are flushed in
      the same transaction.  Any exception leaves the caller to roll back
      both.
    - Ledger invariant: a ledger row is written only together with its
      quantity change, never alone.

Failure modes:
    - InvalidQuantityError: quantity is not a positive int (bool rejected).
    - InvalidMovementTypeError: record_movement() with an unknown type.
    - ProductNotFoundError: no product row matched the update.
    - InsufficientStockError: exit exceeds on-hand stock, either at the
      pre-check or at the conditional decrement.
    - SQLAlchemyError: propagated unchanged; the caller rolls back.
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import update

from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.dtos import MovementRecordDTO, ProductInfo
from stock_kernel.domain.thresholds import ThresholdSignal, ThresholdStatus, classify_quantity
from stock_kernel.exceptions import (
    InsufficientStockError,
    InvalidMovementTypeError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from stock_kernel.logging_config import get_logger
from stock_kernel.models.movement import MovementRecord, MovementType
from stock_kernel.models.product import QUANTITY_LIMIT, Product
from stock_kernel.selectors.product_selector import ProductSelector
from stock_kernel.services.base import BaseService

logger = get_logger("services.stock_ledger")


@dataclass(frozen=True)
class StockChange:
    """Outcome of one applied movement: the ledger row, the product after
    the change, and the threshold classification of its new quantity."""

    movement: MovementRecordDTO
    product: ProductInfo
    signal: ThresholdSignal


def _validate_quantity(quantity: object) -> int:
    # bool is an int subclass; True must not count as one unit
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity)
    if quantity > QUANTITY_LIMIT:
        raise InvalidQuantityError(quantity, f"must not exceed {QUANTITY_LIMIT}")
    return quantity


def parse_movement_type(value: MovementType | str) -> MovementType:
    """Accept a MovementType or its wire value ("Entry"/"Exit")."""
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(value)
    except ValueError:
        raise InvalidMovementTypeError(value) from None


class StockLedgerService(BaseService[Product]):
    """
    Records entry and exit movements.

    Contract:
        Every public method either flushes exactly one quantity UPDATE plus
        one MovementRecord INSERT, or raises before/after a partial flush
        that the caller must roll back.  Never commits.

    Usage:
        with session_scope() as session:
            ledger = StockLedgerService(session, clock)
            change = ledger.record_exit(product_id=7, quantity=4, note="sale")
    """

    def __init__(self, session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._products = ProductSelector(session)

    def record_entry(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> StockChange:
        """
        Increase a product's quantity and append an Entry record.

        Args:
            product_id: Product to restock.
            quantity: Positive number of units received.
            note: Optional free text stored on the ledger row.
            movement_date: Ledger date; defaults to the clock's date at
                the start of the operation.

        Raises:
            InvalidQuantityError, ProductNotFoundError.
        """
        quantity = _validate_quantity(quantity)
        movement_date = movement_date or self._clock.today()

        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity <= QUANTITY_LIMIT - quantity)
            .values(quantity=Product.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = self._products.find(product_id)
            if current is None:
                raise ProductNotFoundError(product_id)
            raise InvalidQuantityError(
                quantity, f"would take stock of {current.quantity} past {QUANTITY_LIMIT}"
            )

        record = self._append(product_id, MovementType.ENTRY, quantity, note, movement_date)
        return self._finish(record)

    def record_exit(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> StockChange:
        """
        Decrease a product's quantity and append an Exit record.

        The pre-check read rejects missing products and obvious shortfalls
        without issuing any write.  The conditional decrement then re-checks
        stock atomically against the current row.

        Raises:
            InvalidQuantityError, ProductNotFoundError, InsufficientStockError.
        """
        quantity = _validate_quantity(quantity)

        product = self._products.find(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.quantity < quantity:
            raise InsufficientStockError(product_id, quantity, product.quantity)

        movement_date = movement_date or self._clock.today()

        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Stock changed between the pre-check and the decrement
            current = self._products.find(product_id)
            if current is None:
                raise ProductNotFoundError(product_id)
            logger.warning(
                "exit_lost_race",
                extra={
                    "product_id": product_id,
                    "requested": quantity,
                    "checked_quantity": product.quantity,
                    "current_quantity": current.quantity,
                },
            )
            raise InsufficientStockError(product_id, quantity, current.quantity)

        record = self._append(product_id, MovementType.EXIT, quantity, note, movement_date)
        return self._finish(record)

    def record_movement(
        self,
        product_id: int,
        movement_type: MovementType | str,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> StockChange:
        """Dispatch to record_entry or record_exit by ``movement_type``."""
        kind = parse_movement_type(movement_type)
        if kind == MovementType.ENTRY:
            return self.record_entry(product_id, quantity, note, movement_date)
        return self.record_exit(product_id, quantity, note, movement_date)

    def _append(
        self,
        product_id: int,
        movement_type: MovementType,
        quantity: int,
        note: str | None,
        movement_date: date,
    ) -> MovementRecord:
        record = MovementRecord(
            product_id=product_id,
            movement_type=movement_type.value,
            quantity=quantity,
            note=note,
            movement_date=movement_date,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def _finish(self, record: MovementRecord) -> StockChange:
        product = self._products.get(record.product_id)
        signal = classify_quantity(
            product.name,
            product.quantity,
            product.min_quantity,
            product.max_quantity,
        )

        logger.info(
            "movement_recorded",
            extra={
                "movement_id": record.id,
                "product_id": record.product_id,
                "movement_type": record.movement_type,
                "quantity": record.quantity,
                "quantity_after": product.quantity,
                "movement_date": record.movement_date,
            },
        )
        _log_signal(product.id, signal)

        return StockChange(
            movement=MovementRecordDTO.from_model(record),
            product=product,
            signal=signal,
        )


def _log_signal(product_id: int, signal: ThresholdSignal) -> None:
    extra = {
        "product_id": product_id,
        "quantity": signal.quantity,
        "limit": signal.limit,
        "detail": signal.message,
    }
    if signal.status == ThresholdStatus.BELOW_MINIMUM:
        logger.warning("stock_threshold_below_minimum", extra=extra)
    elif signal.status == ThresholdStatus.ABOVE_MAXIMUM:
        logger.warning("stock_threshold_above_maximum", extra=extra)
    else:
        logger.info("stock_within_range", extra=extra)
