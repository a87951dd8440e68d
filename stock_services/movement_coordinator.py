"""
stock_services.movement_coordinator -- one transaction per stock movement.

Responsibility:
    Opens a scoped session for each entry/exit, runs StockLedgerService
    inside it, and turns the outcome into an explicit MovementResult.
    Commit happens only after both the quantity change and the ledger
    append have been flushed; any exception rolls both back.

Architecture position:
    Services -- sits above the kernel and owns the transaction boundary,
    which kernel services never touch.

Invariants enforced:
    - Atomicity: ``session_scope`` commits on success and rolls back on
      every exception, so a failed ledger append undoes the quantity change.
    - No silent failure: a store error becomes FAILED with code
      STORE_FAILURE, never a success.  There is no automatic retry.
    - Connection hygiene: the session is closed on every exit path.

Failure modes (reported in the result, not raised):
    - REJECTED: a StockKernelError (not found, insufficient stock,
      invalid quantity or type).
    - FAILED: SQLAlchemyError from the store, wrapped as StoreFailureError.

Usage:
    coordinator = MovementCoordinator(clock=SystemClock())
    result = coordinator.record_exit(product_id=7, quantity=4, note="sale")
    if result.is_success:
        print(result.signal.message)
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stock_kernel.db.engine import session_scope
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.dtos import MovementRecordDTO, ProductInfo
from stock_kernel.domain.thresholds import ThresholdSignal
from stock_kernel.exceptions import StockKernelError, StoreFailureError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.movement import MovementType
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.services.stock_ledger_service import (
    StockChange,
    StockLedgerService,
    parse_movement_type,
)

logger = get_logger("services.movement_coordinator")


class MovementStatus(str, Enum):
    """Status of a movement operation."""

    RECORDED = "recorded"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class MovementResult:
    """Result of a movement operation."""

    status: MovementStatus
    product_id: int
    movement_type: MovementType | None = None
    quantity: object = None
    movement: MovementRecordDTO | None = None
    product: ProductInfo | None = None
    signal: ThresholdSignal | None = None
    error_code: str | None = None
    message: str | None = None
    error: StockKernelError | None = field(default=None, compare=False, repr=False)

    @property
    def is_success(self) -> bool:
        """True only when both writes were committed."""
        return self.status == MovementStatus.RECORDED

    def raise_for_error(self) -> None:
        """Re-raise the typed error behind a REJECTED or FAILED result."""
        if self.error is not None:
            raise self.error


class MovementCoordinator:
    """
    Runs stock movements, each in its own transaction.

    Args:
        session_factory: Session factory to open scopes with.  Defaults to
            the factory bound by ``init_engine_from_url``.
        clock: Supplies the default movement date.  Defaults to SystemClock.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    def record_entry(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> MovementResult:
        return self._run(
            product_id,
            MovementType.ENTRY,
            quantity,
            lambda ledger: ledger.record_entry(product_id, quantity, note, movement_date),
        )

    def record_exit(
        self,
        product_id: int,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> MovementResult:
        return self._run(
            product_id,
            MovementType.EXIT,
            quantity,
            lambda ledger: ledger.record_exit(product_id, quantity, note, movement_date),
        )

    def record_movement(
        self,
        product_id: int,
        movement_type: MovementType | str,
        quantity: int,
        note: str | None = None,
        movement_date: date | None = None,
    ) -> MovementResult:
        """Entry or exit chosen by ``movement_type`` ("Entry" / "Exit")."""
        try:
            kind = parse_movement_type(movement_type)
        except StockKernelError as exc:
            return self._rejected(product_id, None, quantity, exc)
        if kind == MovementType.ENTRY:
            return self.record_entry(product_id, quantity, note, movement_date)
        return self.record_exit(product_id, quantity, note, movement_date)

    def list_movements(self, product_id: int | None = None) -> list[MovementRecordDTO]:
        """
        The ledger, or one product's part of it, newest first.

        Raises:
            StoreFailureError: If the store query fails.
        """
        try:
            with session_scope(self._session_factory) as session:
                return MovementSelector(session).list_movements(product_id)
        except SQLAlchemyError as exc:
            raise StoreFailureError("list_movements", str(exc)) from exc

    def _run(
        self,
        product_id: int,
        movement_type: MovementType,
        quantity: object,
        operation: Callable[[StockLedgerService], StockChange],
    ) -> MovementResult:
        with LogContext.bind(product_id=product_id):
            try:
                with session_scope(self._session_factory) as session:
                    change = operation(StockLedgerService(session, self._clock))
            except StockKernelError as exc:
                return self._rejected(product_id, movement_type, quantity, exc)
            except SQLAlchemyError as exc:
                error = StoreFailureError(f"record_{movement_type.value.lower()}", str(exc))
                logger.error(
                    "movement_store_failure",
                    extra={
                        "product_id": product_id,
                        "movement_type": movement_type.value,
                        "quantity": quantity,
                    },
                    exc_info=True,
                )
                return MovementResult(
                    status=MovementStatus.FAILED,
                    product_id=product_id,
                    movement_type=movement_type,
                    quantity=quantity,
                    error_code=error.code,
                    message=str(error),
                    error=error,
                )

            with LogContext.bind(movement_id=change.movement.id):
                logger.info(
                    "movement_committed",
                    extra={
                        "movement_type": movement_type.value,
                        "quantity": quantity,
                        "quantity_after": change.product.quantity,
                    },
                )

        return MovementResult(
            status=MovementStatus.RECORDED,
            product_id=product_id,
            movement_type=movement_type,
            quantity=quantity,
            movement=change.movement,
            product=change.product,
            signal=change.signal,
            message=change.signal.message,
        )

    def _rejected(
        self,
        product_id: int,
        movement_type: MovementType | None,
        quantity: object,
        exc: StockKernelError,
    ) -> MovementResult:
        logger.info(
            "movement_rejected",
            extra={
                "product_id": product_id,
                "movement_type": movement_type.value if movement_type else None,
                "quantity": quantity,
                "error_code": exc.code,
            },
        )
        return MovementResult(
            status=MovementStatus.REJECTED,
            product_id=product_id,
            movement_type=movement_type,
            quantity=quantity,
            error_code=exc.code,
            message=str(exc),
            error=exc,
        )
