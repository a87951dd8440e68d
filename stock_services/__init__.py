"""
Stock services -- transaction-owning entry points over the stock kernel.

MovementCoordinator runs stock movements; InventoryService adds the catalog
operations and is what the HTTP layer talks to.
"""

from stock_services.inventory_service import InventoryService
from stock_services.movement_coordinator import (
    MovementCoordinator,
    MovementResult,
    MovementStatus,
)

__all__ = [
    "InventoryService",
    "MovementCoordinator",
    "MovementResult",
    "MovementStatus",
]
