"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the stock ledger (the coordinator, the HTTP layer, operator
scripts) must react to failures by TYPE, not by parsing messages:

    try:
        ledger.record_exit(product_id=7, quantity=10, note="sale")
    except InsufficientStockError as e:
        warn(f"only {e.available} left of product {e.product_id}")
    except ProductNotFoundError as e:
        not_found(e.product_id)

Every exception has:
  1. A typed class (catch by type, not message).
  2. A ``code`` class attribute (machine-readable, API-safe).
  3. Structured attributes carrying the failure data.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ProductError
    |   +-- ProductNotFoundError
    |   +-- InvalidProductError
    |
    +-- CategoryError
    |   +-- CategoryNotFoundError
    |   +-- InvalidCategoryError
    |
    +-- MovementError
    |   +-- InsufficientStockError
    |   +-- InvalidQuantityError
    |   +-- InvalidMovementTypeError
    |
    +-- StoreError
    |   +-- StoreFailureError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                   | When Raised
-------------|------------------------|----------------------------------------
Product      | PRODUCT_NOT_FOUND      | Product id does not exist
             | INVALID_PRODUCT        | Field values rejected on create/update
-------------|------------------------|----------------------------------------
Category     | CATEGORY_NOT_FOUND     | Category id does not exist
             | INVALID_CATEGORY       | Field values rejected on create/update
-------------|------------------------|----------------------------------------
Movement     | INSUFFICIENT_STOCK     | Exit quantity exceeds on-hand stock
             | INVALID_QUANTITY       | Movement quantity is not a positive int
             | INVALID_MOVEMENT_TYPE  | Type is neither Entry nor Exit
-------------|------------------------|----------------------------------------
Store        | STORE_FAILURE          | Persistence error inside a transaction
-------------|------------------------|----------------------------------------
Immutability | IMMUTABILITY_VIOLATION | UPDATE/DELETE of a ledger row
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Product-related exceptions


class ProductError(StockKernelError):
    """Base exception for product-related errors."""

    code: str = "PRODUCT_ERROR"


class ProductNotFoundError(ProductError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int | str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class InvalidProductError(ProductError):
    """Product field values were rejected."""

    code: str = "INVALID_PRODUCT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid product field '{field}': {reason}")


# Category-related exceptions


class CategoryError(StockKernelError):
    """Base exception for category-related errors."""

    code: str = "CATEGORY_ERROR"


class CategoryNotFoundError(CategoryError):
    """Category with given ID was not found."""

    code: str = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: int | str):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class InvalidCategoryError(CategoryError):
    """Category field values were rejected."""

    code: str = "INVALID_CATEGORY"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid category field '{field}': {reason}")


# Movement-related exceptions


class MovementError(StockKernelError):
    """Base exception for stock movement errors."""

    code: str = "MOVEMENT_ERROR"


class InsufficientStockError(MovementError):
    """
    Exit quantity exceeds the product's on-hand stock.

    Raised by the pre-transaction check and again when the conditional
    decrement affects no rows because stock dropped in the meantime.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int | None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class InvalidQuantityError(MovementError):
    """Movement quantity is not a positive integer, or is too large to store."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: object, reason: str = "must be a positive integer"):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Movement quantity {reason}, got {quantity!r}")


class InvalidMovementTypeError(MovementError):
    """Movement type is not one of the supported types."""

    code: str = "INVALID_MOVEMENT_TYPE"

    def __init__(self, movement_type: object):
        self.movement_type = movement_type
        super().__init__(
            f"Unknown movement type {movement_type!r}; expected Entry or Exit"
        )


# Store-related exceptions


class StoreError(StockKernelError):
    """Base exception for persistence-layer errors."""

    code: str = "STORE_ERROR"


class StoreFailureError(StoreError):
    """
    The persistent store failed during a transaction.

    Wraps the underlying driver error.  The transaction has been rolled
    back by the time callers see this.
    """

    code: str = "STORE_FAILURE"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store failure during {operation}: {reason}")


# Immutability-related exceptions


class ImmutabilityError(StockKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Movement records are append-only from the moment they are created.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
