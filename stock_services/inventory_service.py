"""
stock_services.inventory_service -- the remote-facing inventory facade.

Each catalog call opens its own scoped transaction, so no connection is
shared between calls or held between them.  Store errors surface as
StoreFailureError; kernel errors propagate unchanged.  Movements are
delegated to MovementCoordinator.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stock_kernel.db.engine import session_scope
from stock_kernel.domain.clock import Clock
from stock_kernel.domain.dtos import CategoryInfo, ProductInfo
from stock_kernel.exceptions import StoreFailureError
from stock_kernel.logging_config import get_logger
from stock_kernel.selectors.category_selector import CategorySelector
from stock_kernel.selectors.product_selector import ProductSelector
from stock_kernel.services.catalog_service import CategoryService, ProductService
from stock_services.movement_coordinator import MovementCoordinator

logger = get_logger("services.inventory")

T = TypeVar("T")


class InventoryService:
    """Catalog maintenance plus stock movements, one transaction per call."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self.movements = MovementCoordinator(session_factory, clock)

    @contextmanager
    def _scope(self, operation: str) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("store_failure", extra={"operation": operation}, exc_info=True)
            raise StoreFailureError(operation, str(exc)) from exc

    def _call(self, operation: str, fn: Callable[[Session], T]) -> T:
        with self._scope(operation) as session:
            return fn(session)

    # -- products --------------------------------------------------------

    def create_product(self, **fields: Any) -> ProductInfo:
        return self._call(
            "create_product", lambda s: ProductService(s).create_product(**fields)
        )

    def update_product(self, product_id: int, **fields: Any) -> ProductInfo:
        return self._call(
            "update_product",
            lambda s: ProductService(s).update_product(product_id, **fields),
        )

    def delete_product(self, product_id: int) -> None:
        self._call("delete_product", lambda s: ProductService(s).delete_product(product_id))

    def get_product(self, product_id: int) -> ProductInfo:
        return self._call("get_product", lambda s: ProductSelector(s).get(product_id))

    def get_product_by_name(self, name: str) -> ProductInfo:
        return self._call("get_product_by_name", lambda s: ProductSelector(s).get_by_name(name))

    def search_products(
        self,
        name_fragment: str | None = None,
        category: str | None = None,
    ) -> list[ProductInfo]:
        return self._call(
            "search_products",
            lambda s: ProductSelector(s).search(name_fragment, category),
        )

    def list_product_categories(self) -> list[str]:
        return self._call(
            "list_product_categories", lambda s: ProductSelector(s).distinct_categories()
        )

    def max_product_id(self) -> int:
        return self._call("max_product_id", lambda s: ProductSelector(s).max_id())

    # -- categories ------------------------------------------------------

    def create_category(self, **fields: Any) -> CategoryInfo:
        return self._call(
            "create_category", lambda s: CategoryService(s).create_category(**fields)
        )

    def update_category(self, category_id: int, **fields: Any) -> CategoryInfo:
        return self._call(
            "update_category",
            lambda s: CategoryService(s).update_category(category_id, **fields),
        )

    def delete_category(self, category_id: int) -> None:
        self._call(
            "delete_category", lambda s: CategoryService(s).delete_category(category_id)
        )

    def get_category(self, category_id: int) -> CategoryInfo:
        return self._call("get_category", lambda s: CategorySelector(s).get(category_id))

    def list_categories(self) -> list[CategoryInfo]:
        return self._call("list_categories", lambda s: CategorySelector(s).list_all())
