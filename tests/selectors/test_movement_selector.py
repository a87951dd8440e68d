"""
Tests for MovementSelector ordering and aggregates.
"""

from datetime import date

import pytest

from stock_kernel.models.movement import MovementRecord, MovementType
from stock_kernel.selectors.movement_selector import MovementSelector

D1 = date(2024, 2, 1)
D2 = date(2024, 2, 9)


def _add(session, product_id, movement_type, quantity, movement_date, note=None):
    record = MovementRecord(
        product_id=product_id,
        movement_type=movement_type.value,
        quantity=quantity,
        note=note,
        movement_date=movement_date,
    )
    session.add(record)
    session.flush()
    return record.id


@pytest.fixture
def selector(session):
    return MovementSelector(session)


class TestListMovements:

    def test_later_date_first(self, session, selector):
        older = _add(session, 7, MovementType.ENTRY, 5, D1)
        newer = _add(session, 7, MovementType.EXIT, 2, D2)

        assert [m.id for m in selector.list_movements(7)] == [newer, older]

    def test_later_date_first_regardless_of_insert_order(self, session, selector):
        newer = _add(session, 7, MovementType.EXIT, 2, D2)
        older = _add(session, 7, MovementType.ENTRY, 5, D1)

        assert [m.id for m in selector.list_movements(7)] == [newer, older]

    def test_same_day_highest_id_first(self, session, selector):
        first = _add(session, 7, MovementType.ENTRY, 1, D1)
        second = _add(session, 7, MovementType.ENTRY, 1, D1)

        assert [m.id for m in selector.list_movements(7)] == [second, first]

    def test_filter_by_product(self, session, selector):
        _add(session, 7, MovementType.ENTRY, 1, D1)
        other = _add(session, 8, MovementType.ENTRY, 1, D1)

        assert [m.id for m in selector.list_movements(8)] == [other]
        assert len(selector.list_movements()) == 2

    def test_empty(self, selector):
        assert selector.list_movements(7) == []

    def test_dto_fields(self, session, selector):
        movement_id = _add(session, 7, MovementType.EXIT, 4, D1, note="sale")

        dto = selector.get(movement_id)

        assert dto.product_id == 7
        assert dto.movement_type == MovementType.EXIT
        assert dto.quantity == 4
        assert dto.note == "sale"
        assert dto.movement_date == D1

    def test_get_missing(self, selector):
        assert selector.get(12345) is None


class TestAggregates:

    def test_count_and_net(self, session, selector):
        _add(session, 7, MovementType.ENTRY, 10, D1)
        _add(session, 7, MovementType.EXIT, 4, D1)
        _add(session, 7, MovementType.EXIT, 1, D2)

        assert selector.count_for_product(7) == 3
        assert selector.net_quantity(7) == 5

    def test_net_without_movements(self, selector):
        assert selector.net_quantity(7) == 0
