"""
Catalog services -- create, edit and delete products and categories.

Responsibility:
    Field-level maintenance of the product catalog and the category list.
    Quantity is deliberately absent from ``update_product``: on-hand stock
    changes only through StockLedgerService so the ledger stays consistent
    with it.

Architecture position:
    Kernel > Services.  Flush-only; the caller owns the transaction.

Failure modes:
    - InvalidProductError / InvalidCategoryError on rejected field values.
    - ProductNotFoundError / CategoryNotFoundError on unknown ids.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from stock_kernel.domain.dtos import CategoryInfo, ProductInfo
from stock_kernel.exceptions import (
    CategoryNotFoundError,
    InvalidCategoryError,
    InvalidProductError,
    ProductNotFoundError,
)
from stock_kernel.logging_config import get_logger
from stock_kernel.models.category import Category
from stock_kernel.models.product import QUANTITY_LIMIT, Product
from stock_kernel.services.base import BaseService

logger = get_logger("services.catalog")

_EDITABLE_PRODUCT_FIELDS = frozenset(
    {"name", "unit", "price", "min_quantity", "max_quantity", "category"}
)
_EDITABLE_CATEGORY_FIELDS = frozenset({"name", "size", "packaging"})


def _require_text(value: Any, field: str, error_cls) -> str:
    if not isinstance(value, str) or not value.strip():
        raise error_cls(field, "must be a non-empty string")
    return value.strip()


def _non_negative_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidProductError(field, f"must be a non-negative integer, got {value!r}")
    if value > QUANTITY_LIMIT:
        raise InvalidProductError(field, f"must not exceed {QUANTITY_LIMIT}, got {value!r}")
    return value


def _price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidProductError("price", f"not a decimal amount: {value!r}") from None
    if not price.is_finite() or price < 0:
        raise InvalidProductError("price", f"must be a non-negative amount, got {value!r}")
    return price.quantize(Decimal("0.01"))


def _check_bounds(min_quantity: int, max_quantity: int) -> None:
    if min_quantity > max_quantity:
        raise InvalidProductError(
            "min_quantity",
            f"minimum {min_quantity} exceeds maximum {max_quantity}",
        )


class ProductService(BaseService[Product]):
    """Write operations on the product catalog."""

    def create_product(
        self,
        name: str,
        unit: str = "",
        price: Decimal | int | str = Decimal("0.00"),
        min_quantity: int = 0,
        max_quantity: int = 1000,
        category: str = "",
        quantity: int = 0,
    ) -> ProductInfo:
        """
        Add a product to the catalog.

        ``quantity`` is the opening stock.  Later changes go through the
        movement ledger.
        """
        name = _require_text(name, "name", InvalidProductError)
        min_quantity = _non_negative_int(min_quantity, "min_quantity")
        max_quantity = _non_negative_int(max_quantity, "max_quantity")
        _check_bounds(min_quantity, max_quantity)

        product = Product(
            name=name,
            unit=unit or "",
            price=_price(price),
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            category=category or "",
            quantity=_non_negative_int(quantity, "quantity"),
        )
        self.session.add(product)
        self.session.flush()

        logger.info(
            "product_created",
            extra={"product_id": product.id, "product_name": product.name, "quantity": product.quantity},
        )
        return ProductInfo.from_model(product)

    def update_product(self, product_id: int, **fields: Any) -> ProductInfo:
        """
        Edit catalog fields of an existing product.

        Accepts any of name, unit, price, min_quantity, max_quantity and
        category.  Fields passed as None are left unchanged.

        Raises:
            ProductNotFoundError: Unknown ``product_id``.
            InvalidProductError: Quantity passed, unknown field, or an
                invalid value.
        """
        if "quantity" in fields:
            raise InvalidProductError(
                "quantity", "changes only through stock entries and exits"
            )
        unknown = set(fields) - _EDITABLE_PRODUCT_FIELDS
        if unknown:
            raise InvalidProductError(sorted(unknown)[0], "not an editable field")

        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        changes = {k: v for k, v in fields.items() if v is not None}
        if "name" in changes:
            product.name = _require_text(changes["name"], "name", InvalidProductError)
        if "unit" in changes:
            product.unit = changes["unit"]
        if "price" in changes:
            product.price = _price(changes["price"])
        if "category" in changes:
            product.category = changes["category"]

        min_quantity = _non_negative_int(
            changes.get("min_quantity", product.min_quantity), "min_quantity"
        )
        max_quantity = _non_negative_int(
            changes.get("max_quantity", product.max_quantity), "max_quantity"
        )
        _check_bounds(min_quantity, max_quantity)
        product.min_quantity = min_quantity
        product.max_quantity = max_quantity

        self.session.flush()
        logger.info(
            "product_updated",
            extra={"product_id": product_id, "fields": sorted(changes)},
        )
        return ProductInfo.from_model(product)

    def delete_product(self, product_id: int) -> None:
        """
        Remove a product from the catalog.

        Its movement records stay in the ledger.
        """
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        self.session.delete(product)
        self.session.flush()
        logger.info("product_deleted", extra={"product_id": product_id})


class CategoryService(BaseService[Category]):
    """Write operations on the category list."""

    def create_category(self, name: str, size: str = "", packaging: str = "") -> CategoryInfo:
        category = Category(
            name=_require_text(name, "name", InvalidCategoryError),
            size=size or "",
            packaging=packaging or "",
        )
        self.session.add(category)
        self.session.flush()
        logger.info("category_created", extra={"category_id": category.id, "category_name": category.name})
        return CategoryInfo.from_model(category)

    def update_category(self, category_id: int, **fields: Any) -> CategoryInfo:
        unknown = set(fields) - _EDITABLE_CATEGORY_FIELDS
        if unknown:
            raise InvalidCategoryError(sorted(unknown)[0], "not an editable field")

        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)

        changes = {k: v for k, v in fields.items() if v is not None}
        if "name" in changes:
            category.name = _require_text(changes["name"], "name", InvalidCategoryError)
        if "size" in changes:
            category.size = changes["size"]
        if "packaging" in changes:
            category.packaging = changes["packaging"]

        self.session.flush()
        logger.info(
            "category_updated",
            extra={"category_id": category_id, "fields": sorted(changes)},
        )
        return CategoryInfo.from_model(category)

    def delete_category(self, category_id: int) -> None:
        """Remove a category.  Products naming it keep their category text."""
        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        self.session.delete(category)
        self.session.flush()
        logger.info("category_deleted", extra={"category_id": category_id})
