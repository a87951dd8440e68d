"""
Tests for ProductService and CategoryService.

Covers:
- Creation with defaults and validation
- Field-level updates; quantity is not editable
- Deletion keeps the product's ledger history
"""

from decimal import Decimal

import pytest

from stock_kernel.exceptions import (
    CategoryNotFoundError,
    InvalidCategoryError,
    InvalidProductError,
    ProductNotFoundError,
)
from stock_kernel.selectors.category_selector import CategorySelector
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.product_selector import ProductSelector
from stock_kernel.services.catalog_service import CategoryService, ProductService
from stock_kernel.services.stock_ledger_service import StockLedgerService


@pytest.fixture
def products(session):
    return ProductService(session)


@pytest.fixture
def categories(session):
    return CategoryService(session)


class TestCreateProduct:

    def test_defaults(self, products):
        info = products.create_product(name="Rice 5kg")

        assert info.id is not None
        assert info.quantity == 0
        assert info.min_quantity == 0
        assert info.max_quantity == 1000
        assert info.price == Decimal("0.00")
        assert info.unit == ""
        assert info.category == ""

    def test_all_fields(self, products):
        info = products.create_product(
            name="Rice 5kg",
            unit="bag",
            price="12.5",
            min_quantity=2,
            max_quantity=40,
            category="Groceries",
            quantity=8,
        )

        assert info.price == Decimal("12.50")
        assert (info.min_quantity, info.max_quantity, info.quantity) == (2, 40, 8)
        assert info.category == "Groceries"

    def test_name_is_trimmed(self, products):
        assert products.create_product(name="  Rice  ").name == "Rice"

    def test_creation_logged(self, products, captured_logs):
        info = products.create_product(name="Rice 5kg", quantity=8)

        created = [r for r in captured_logs() if r["message"] == "product_created"]
        assert len(created) == 1
        assert created[0]["product_id"] == info.id
        assert created[0]["product_name"] == "Rice 5kg"
        assert created[0]["quantity"] == 8

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"name": ""}, "name"),
            ({"name": "   "}, "name"),
            ({"name": "x", "quantity": -1}, "quantity"),
            ({"name": "x", "quantity": 2**31}, "quantity"),
            ({"name": "x", "max_quantity": 10**20}, "max_quantity"),
            ({"name": "x", "min_quantity": -1}, "min_quantity"),
            ({"name": "x", "min_quantity": 10, "max_quantity": 5}, "min_quantity"),
            ({"name": "x", "price": "-0.01"}, "price"),
            ({"name": "x", "price": "cheap"}, "price"),
        ],
    )
    def test_invalid_fields(self, products, kwargs, field):
        with pytest.raises(InvalidProductError) as exc_info:
            products.create_product(**kwargs)
        assert exc_info.value.field == field


class TestUpdateProduct:

    def test_update_fields(self, session, products):
        created = products.create_product(name="Soap", price="1.00", category="Cleaning")

        updated = products.update_product(created.id, name="Soap bar", price="1.25", unit="pcs")

        assert updated.name == "Soap bar"
        assert updated.price == Decimal("1.25")
        assert updated.unit == "pcs"
        assert updated.category == "Cleaning"
        assert ProductSelector(session).get(created.id) == updated

    def test_none_leaves_field_unchanged(self, products):
        created = products.create_product(name="Soap", unit="pcs")
        assert products.update_product(created.id, unit=None).unit == "pcs"

    def test_quantity_not_editable(self, products):
        created = products.create_product(name="Soap", quantity=3)

        with pytest.raises(InvalidProductError) as exc_info:
            products.update_product(created.id, quantity=50)

        assert exc_info.value.field == "quantity"

    def test_bounds_checked_against_current_values(self, products):
        created = products.create_product(name="Soap", min_quantity=5, max_quantity=50)

        with pytest.raises(InvalidProductError):
            products.update_product(created.id, max_quantity=4)

    def test_unknown_field(self, products):
        created = products.create_product(name="Soap")
        with pytest.raises(InvalidProductError):
            products.update_product(created.id, colour="blue")

    def test_unknown_product(self, products):
        with pytest.raises(ProductNotFoundError):
            products.update_product(404, name="Ghost")


class TestDeleteProduct:

    def test_delete(self, session, products):
        created = products.create_product(name="Soap")

        products.delete_product(created.id)

        assert ProductSelector(session).find(created.id) is None

    def test_delete_keeps_ledger(self, session, products, deterministic_clock):
        created = products.create_product(name="Soap", quantity=5)
        StockLedgerService(session, deterministic_clock).record_exit(created.id, 2)

        products.delete_product(created.id)

        history = MovementSelector(session).list_movements(created.id)
        assert len(history) == 1
        assert history[0].quantity == 2

    def test_delete_unknown(self, products):
        with pytest.raises(ProductNotFoundError):
            products.delete_product(404)


class TestCategoryService:

    def test_create_and_list(self, session, categories):
        categories.create_category(name="Snacks", size="small", packaging="bag")
        categories.create_category(name="Beverages", size="medium", packaging="bottle")

        names = [c.name for c in CategorySelector(session).list_all()]
        assert names == ["Beverages", "Snacks"]

    def test_create_requires_name(self, categories):
        with pytest.raises(InvalidCategoryError):
            categories.create_category(name="")

    def test_creation_logged(self, categories, captured_logs):
        info = categories.create_category(name="Snacks")

        created = [r for r in captured_logs() if r["message"] == "category_created"]
        assert len(created) == 1
        assert created[0]["category_id"] == info.id
        assert created[0]["category_name"] == "Snacks"

    def test_update(self, categories):
        created = categories.create_category(name="Snacks", size="small", packaging="bag")

        updated = categories.update_category(created.id, packaging="box")

        assert updated.packaging == "box"
        assert updated.size == "small"

    def test_update_unknown(self, categories):
        with pytest.raises(CategoryNotFoundError):
            categories.update_category(404, name="x")

    def test_delete(self, session, categories):
        created = categories.create_category(name="Snacks")

        categories.delete_category(created.id)

        with pytest.raises(CategoryNotFoundError):
            CategorySelector(session).get(created.id)

    def test_delete_unknown(self, categories):
        with pytest.raises(CategoryNotFoundError):
            categories.delete_category(404)
