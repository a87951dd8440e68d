"""
Module: stock_kernel.selectors.category_selector
Responsibility: Read-only queries over product categories.
"""

from sqlalchemy import select

from stock_kernel.domain.dtos import CategoryInfo
from stock_kernel.exceptions import CategoryNotFoundError
from stock_kernel.models.category import Category
from stock_kernel.selectors.base import BaseSelector


class CategorySelector(BaseSelector[Category]):
    """Selector for category lookups."""

    def get(self, category_id: int) -> CategoryInfo:
        """
        Return the category with ``category_id``.

        Raises:
            CategoryNotFoundError: If no such category exists.
        """
        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return CategoryInfo.from_model(category)

    def list_all(self) -> list[CategoryInfo]:
        """All categories ordered by name, then id."""
        categories = self.session.execute(
            select(Category).order_by(Category.name, Category.id)
        ).scalars().all()
        return [CategoryInfo.from_model(c) for c in categories]
