"""
Tests for StockLedgerService.

Covers:
- Entry increases quantity and appends one Entry record
- Exit decreases quantity, rejects overdraws without writing
- Unknown products and invalid quantities
- Type dispatch through record_movement
- Threshold signals and their log lines
- Ledger invariant: quantity == initial + entries - exits
"""

from datetime import date
from decimal import Decimal

import pytest

from stock_kernel.domain.thresholds import ThresholdStatus
from stock_kernel.exceptions import (
    InsufficientStockError,
    InvalidMovementTypeError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from stock_kernel.models.movement import MovementType
from stock_kernel.models.product import QUANTITY_LIMIT, Product
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.product_selector import ProductSelector
from stock_kernel.services.stock_ledger_service import StockLedgerService


@pytest.fixture
def product_7(session):
    """Product P: id=7, quantity=10, min=5, max=100."""
    product = Product(
        id=7,
        name="P",
        unit="pcs",
        quantity=10,
        price=Decimal("1.00"),
        min_quantity=5,
        max_quantity=100,
        category="General",
    )
    session.add(product)
    session.flush()
    return product.id


@pytest.fixture
def ledger(session, deterministic_clock):
    return StockLedgerService(session, deterministic_clock)


def _quantity(session, product_id):
    return ProductSelector(session).get(product_id).quantity


def _rows(session, product_id):
    return MovementSelector(session).list_movements(product_id)


class TestRecordEntry:
    """Tests for record_entry()."""

    def test_entry_increases_quantity(self, session, ledger, product_7):
        change = ledger.record_entry(product_7, 5, "delivery")

        assert _quantity(session, product_7) == 15
        assert change.product.quantity == 15

    def test_entry_appends_one_record(self, session, ledger, product_7):
        change = ledger.record_entry(product_7, 5, "delivery")

        rows = _rows(session, product_7)
        assert len(rows) == 1
        assert rows[0] == change.movement
        assert rows[0].movement_type == MovementType.ENTRY
        assert rows[0].quantity == 5
        assert rows[0].note == "delivery"

    def test_default_date_comes_from_clock(self, ledger, product_7, deterministic_clock):
        deterministic_clock.advance_days(4)

        change = ledger.record_entry(product_7, 1)

        assert change.movement.movement_date == date(2024, 1, 5)

    def test_explicit_date_is_kept(self, ledger, product_7):
        change = ledger.record_entry(product_7, 1, movement_date=date(2023, 12, 24))
        assert change.movement.movement_date == date(2023, 12, 24)

    def test_note_is_optional(self, ledger, product_7):
        assert ledger.record_entry(product_7, 1).movement.note is None

    def test_unknown_product_fails_without_writes(self, session, ledger, product_7):
        with pytest.raises(ProductNotFoundError) as exc_info:
            ledger.record_entry(999, 5)

        assert exc_info.value.product_id == 999
        assert MovementSelector(session).list_movements() == []
        assert _quantity(session, product_7) == 10

    @pytest.mark.parametrize("quantity", [0, -3, True, 1.5, "3", None, 2**31, 10**20])
    def test_invalid_quantity_rejected(self, session, ledger, product_7, quantity):
        with pytest.raises(InvalidQuantityError):
            ledger.record_entry(product_7, quantity)

        assert _rows(session, product_7) == []
        assert _quantity(session, product_7) == 10

    def test_entry_past_storable_stock_rejected(self, session, ledger):
        product = Product(name="Bulk", quantity=QUANTITY_LIMIT - 5)
        session.add(product)
        session.flush()

        with pytest.raises(InvalidQuantityError) as exc_info:
            ledger.record_entry(product.id, 10)

        assert exc_info.value.quantity == 10
        assert _quantity(session, product.id) == QUANTITY_LIMIT - 5
        assert _rows(session, product.id) == []

    def test_entry_up_to_storable_stock_accepted(self, session, ledger):
        product = Product(name="Bulk", quantity=QUANTITY_LIMIT - 5)
        session.add(product)
        session.flush()

        ledger.record_entry(product.id, 5)

        assert _quantity(session, product.id) == QUANTITY_LIMIT


class TestRecordExit:
    """Tests for record_exit()."""

    def test_exit_decreases_quantity(self, session, ledger, product_7):
        change = ledger.record_exit(product_7, 4, "sale")

        assert _quantity(session, product_7) == 6
        assert change.movement.movement_type == MovementType.EXIT
        assert change.movement.quantity == 4

    def test_exit_of_entire_stock(self, session, ledger, product_7):
        ledger.record_exit(product_7, 10)
        assert _quantity(session, product_7) == 0

    def test_overdraw_rejected_without_writes(self, session, ledger, product_7):
        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.record_exit(product_7, 11)

        assert exc_info.value.requested == 11
        assert exc_info.value.available == 10
        assert _quantity(session, product_7) == 10
        assert _rows(session, product_7) == []

    def test_unknown_product(self, session, ledger):
        with pytest.raises(ProductNotFoundError):
            ledger.record_exit(12345, 1)
        assert MovementSelector(session).list_movements() == []

    def test_invalid_quantity_checked_before_product(self, ledger):
        with pytest.raises(InvalidQuantityError):
            ledger.record_exit(12345, 0)

    def test_oversized_quantity_rejected(self, session, ledger, product_7):
        with pytest.raises(InvalidQuantityError):
            ledger.record_exit(product_7, 10**20)
        assert _quantity(session, product_7) == 10


class TestConcreteScenarios:
    """Product P (id=7, quantity=10, min=5, max=100)."""

    def test_sale_then_oversized_sale(self, session, ledger, product_7):
        first = ledger.record_exit(7, 4, "sale")

        assert first.product.quantity == 6
        assert first.signal.status == ThresholdStatus.WITHIN_RANGE
        assert len(_rows(session, 7)) == 1

        with pytest.raises(InsufficientStockError):
            ledger.record_exit(7, 10, "sale2")

        assert _quantity(session, 7) == 6
        rows = _rows(session, 7)
        assert len(rows) == 1
        assert rows[0].note == "sale"

    def test_restock_stays_within_range(self, session, ledger, product_7):
        ledger.record_exit(7, 4, "sale")

        change = ledger.record_entry(7, 2, "restock")

        assert change.product.quantity == 8
        assert change.signal.status == ThresholdStatus.WITHIN_RANGE

    def test_failed_then_corrected_exit_has_one_effect(self, session, ledger, product_7):
        with pytest.raises(InsufficientStockError):
            ledger.record_exit(7, 20)

        ledger.record_exit(7, 2)

        rows = _rows(session, 7)
        assert len(rows) == 1
        assert rows[0].quantity == 2
        assert _quantity(session, 7) == 8


class TestRecordMovement:
    """Tests for record_movement() type dispatch."""

    @pytest.mark.parametrize(
        "movement_type, expected",
        [("Entry", 13), ("Exit", 7), (MovementType.ENTRY, 13), (MovementType.EXIT, 7)],
    )
    def test_dispatch(self, session, ledger, product_7, movement_type, expected):
        change = ledger.record_movement(product_7, movement_type, 3, "manual")

        assert change.product.quantity == expected
        assert change.movement.movement_type == MovementType(movement_type)

    @pytest.mark.parametrize("movement_type", ["Transfer", "entry", ""])
    def test_unknown_type_writes_nothing(self, session, ledger, product_7, movement_type):
        with pytest.raises(InvalidMovementTypeError) as exc_info:
            ledger.record_movement(product_7, movement_type, 3)

        assert exc_info.value.movement_type == movement_type
        assert _rows(session, product_7) == []
        assert _quantity(session, product_7) == 10


class TestThresholdSignal:
    """Advisory signals never block the movement."""

    def test_exit_below_minimum(self, ledger, product_7, captured_logs):
        change = ledger.record_exit(product_7, 6)

        assert change.product.quantity == 4
        assert change.signal.status == ThresholdStatus.BELOW_MINIMUM
        assert change.signal.limit == 5
        assert change.signal.product_name == "P"

        warnings = [r for r in captured_logs() if r["message"] == "stock_threshold_below_minimum"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"
        assert "too low" in warnings[0]["detail"]

    def test_entry_above_maximum(self, ledger, product_7, captured_logs):
        change = ledger.record_entry(product_7, 91)

        assert change.signal.status == ThresholdStatus.ABOVE_MAXIMUM
        assert change.signal.limit == 100
        assert any(
            r["message"] == "stock_threshold_above_maximum" and r["level"] == "WARNING"
            for r in captured_logs()
        )

    def test_within_range_logged_at_info(self, ledger, product_7, captured_logs):
        ledger.record_entry(product_7, 1)

        records = {r["message"]: r for r in captured_logs()}
        assert records["stock_within_range"]["level"] == "INFO"
        assert records["movement_recorded"]["quantity_after"] == 11


class TestLedgerInvariant:

    def test_quantity_matches_ledger(self, session, ledger, product_7):
        for kind, qty in [("Entry", 5), ("Exit", 3), ("Exit", 7), ("Entry", 20), ("Exit", 1)]:
            ledger.record_movement(product_7, kind, qty)

        with pytest.raises(InsufficientStockError):
            ledger.record_exit(product_7, 1000)

        net = MovementSelector(session).net_quantity(product_7)
        assert net == 14
        assert _quantity(session, product_7) == 10 + net
