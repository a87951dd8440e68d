"""
Module: stock_kernel.selectors.product_selector
Responsibility: Read-only queries over the product catalog.
Architecture position: Kernel > Selectors.

All filters are bound parameters; name searches use LIKE with the fragment
wrapped in wildcards on the Python side.

Failure modes:
    - ``get`` raises ProductNotFoundError; every other method returns None or
      an empty list on absence of data.
"""

from sqlalchemy import func, select

from stock_kernel.domain.dtos import ProductInfo
from stock_kernel.exceptions import ProductNotFoundError
from stock_kernel.models.product import Product
from stock_kernel.selectors.base import BaseSelector


class ProductSelector(BaseSelector[Product]):
    """Selector for product lookups and searches."""

    def find(self, product_id: int) -> ProductInfo | None:
        """Return the product with ``product_id`` or None."""
        product = self.session.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return ProductInfo.from_model(product) if product else None

    def get(self, product_id: int) -> ProductInfo:
        """
        Return the product with ``product_id``.

        Raises:
            ProductNotFoundError: If no such product exists.
        """
        info = self.find(product_id)
        if info is None:
            raise ProductNotFoundError(product_id)
        return info

    def find_by_name(self, name: str) -> ProductInfo | None:
        """Return the first product whose name matches ``name`` exactly."""
        product = self.session.execute(
            select(Product).where(Product.name == name).order_by(Product.id).limit(1)
        ).scalar_one_or_none()
        return ProductInfo.from_model(product) if product else None

    def get_by_name(self, name: str) -> ProductInfo:
        """
        Return the first product named exactly ``name``.

        Raises:
            ProductNotFoundError: If no product has that name.
        """
        info = self.find_by_name(name)
        if info is None:
            raise ProductNotFoundError(name)
        return info

    def list_all(self) -> list[ProductInfo]:
        """All products ordered by id."""
        products = self.session.execute(
            select(Product).order_by(Product.id)
        ).scalars().all()
        return [ProductInfo.from_model(p) for p in products]

    def search(
        self,
        name_fragment: str | None = None,
        category: str | None = None,
    ) -> list[ProductInfo]:
        """
        Products whose name contains ``name_fragment`` and/or whose category
        equals ``category``.  With neither filter this is ``list_all()``.

        ``%`` and ``_`` in the fragment match literally.
        """
        stmt = select(Product)
        if name_fragment:
            stmt = stmt.where(Product.name.contains(name_fragment, autoescape=True))
        if category:
            stmt = stmt.where(Product.category == category)
        products = self.session.execute(stmt.order_by(Product.id)).scalars().all()
        return [ProductInfo.from_model(p) for p in products]

    def distinct_categories(self) -> list[str]:
        """Sorted distinct category names referenced by products."""
        rows = self.session.execute(
            select(Product.category).distinct().order_by(Product.category)
        ).scalars().all()
        return list(rows)

    def max_id(self) -> int:
        """Highest product id in use, or 0 for an empty catalog."""
        return self.session.execute(select(func.max(Product.id))).scalar() or 0
