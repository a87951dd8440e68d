"""FastAPI routes for the stock service: products, categories and movements."""

from fastapi import APIRouter, Depends, Query, Request

from stock_api.schemas import (
    ERROR_RESPONSES,
    CategoryResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    MaxIdResponse,
    MovementOutcomeResponse,
    MovementRequest,
    MovementResponse,
    ProductResponse,
    StockChangeRequest,
    ThresholdSignalResponse,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from stock_config.schema import MovementConfig
from stock_kernel.models.movement import MovementType
from stock_services.inventory_service import InventoryService
from stock_services.movement_coordinator import MovementResult


def get_inventory(request: Request) -> InventoryService:
    return request.app.state.inventory


def get_movement_config(request: Request) -> MovementConfig:
    return request.app.state.movement_config


def _outcome(result: MovementResult) -> MovementOutcomeResponse:
    result.raise_for_error()
    return MovementOutcomeResponse(
        movement=MovementResponse.from_dto(result.movement),
        product=ProductResponse.from_info(result.product),
        signal=ThresholdSignalResponse.from_signal(result.signal),
    )


def _note(note: str | None, default: str | None) -> str | None:
    return note if note is not None else default


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"], responses=ERROR_RESPONSES)


@product_router.post("", status_code=201, response_model=ProductResponse)
def create_product(
    body: CreateProductRequest,
    inventory: InventoryService = Depends(get_inventory),
) -> ProductResponse:
    info = inventory.create_product(**body.model_dump())
    return ProductResponse.from_info(info)


@product_router.get("", response_model=list[ProductResponse])
def list_products(
    name: str | None = None,
    category: str | None = None,
    inventory: InventoryService = Depends(get_inventory),
) -> list[ProductResponse]:
    return [ProductResponse.from_info(p) for p in inventory.search_products(name, category)]


@product_router.get("/categories", response_model=list[str])
def list_product_categories(
    inventory: InventoryService = Depends(get_inventory),
) -> list[str]:
    return inventory.list_product_categories()


@product_router.get("/max-id", response_model=MaxIdResponse)
def get_max_product_id(
    inventory: InventoryService = Depends(get_inventory),
) -> MaxIdResponse:
    return MaxIdResponse(max_id=inventory.max_product_id())


@product_router.get("/by-name/{name}", response_model=ProductResponse)
def get_product_by_name(
    name: str,
    inventory: InventoryService = Depends(get_inventory),
) -> ProductResponse:
    return ProductResponse.from_info(inventory.get_product_by_name(name))


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    inventory: InventoryService = Depends(get_inventory),
) -> ProductResponse:
    return ProductResponse.from_info(inventory.get_product(product_id))


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    body: UpdateProductRequest,
    inventory: InventoryService = Depends(get_inventory),
) -> ProductResponse:
    info = inventory.update_product(product_id, **body.model_dump(exclude_unset=True))
    return ProductResponse.from_info(info)


@product_router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    inventory: InventoryService = Depends(get_inventory),
) -> None:
    inventory.delete_product(product_id)


@product_router.post(
    "/{product_id}/entries", status_code=201, response_model=MovementOutcomeResponse
)
def record_entry(
    product_id: int,
    body: StockChangeRequest,
    inventory: InventoryService = Depends(get_inventory),
    notes: MovementConfig = Depends(get_movement_config),
) -> MovementOutcomeResponse:
    result = inventory.movements.record_entry(
        product_id,
        body.quantity,
        _note(body.note, notes.default_entry_note),
        body.movement_date,
    )
    return _outcome(result)


@product_router.post(
    "/{product_id}/exits", status_code=201, response_model=MovementOutcomeResponse
)
def record_exit(
    product_id: int,
    body: StockChangeRequest,
    inventory: InventoryService = Depends(get_inventory),
    notes: MovementConfig = Depends(get_movement_config),
) -> MovementOutcomeResponse:
    result = inventory.movements.record_exit(
        product_id,
        body.quantity,
        _note(body.note, notes.default_exit_note),
        body.movement_date,
    )
    return _outcome(result)


@product_router.get("/{product_id}/movements", response_model=list[MovementResponse])
def list_product_movements(
    product_id: int,
    inventory: InventoryService = Depends(get_inventory),
) -> list[MovementResponse]:
    return [MovementResponse.from_dto(m) for m in inventory.movements.list_movements(product_id)]


# ---------------------------------------------------------------------------
# Category Router
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"], responses=ERROR_RESPONSES)


@category_router.post("", status_code=201, response_model=CategoryResponse)
def create_category(
    body: CreateCategoryRequest,
    inventory: InventoryService = Depends(get_inventory),
) -> CategoryResponse:
    return CategoryResponse.from_info(inventory.create_category(**body.model_dump()))


@category_router.get("", response_model=list[CategoryResponse])
def list_categories(
    inventory: InventoryService = Depends(get_inventory),
) -> list[CategoryResponse]:
    return [CategoryResponse.from_info(c) for c in inventory.list_categories()]


@category_router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: int,
    inventory: InventoryService = Depends(get_inventory),
) -> CategoryResponse:
    return CategoryResponse.from_info(inventory.get_category(category_id))


@category_router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    body: UpdateCategoryRequest,
    inventory: InventoryService = Depends(get_inventory),
) -> CategoryResponse:
    info = inventory.update_category(category_id, **body.model_dump(exclude_unset=True))
    return CategoryResponse.from_info(info)


@category_router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    inventory: InventoryService = Depends(get_inventory),
) -> None:
    inventory.delete_category(category_id)


# ---------------------------------------------------------------------------
# Movement Router
# ---------------------------------------------------------------------------
movement_router = APIRouter(prefix="/movements", tags=["movements"], responses=ERROR_RESPONSES)


@movement_router.post("", status_code=201, response_model=MovementOutcomeResponse)
def record_movement(
    body: MovementRequest,
    inventory: InventoryService = Depends(get_inventory),
    notes: MovementConfig = Depends(get_movement_config),
) -> MovementOutcomeResponse:
    default_note = {
        MovementType.ENTRY.value: notes.default_entry_note,
        MovementType.EXIT.value: notes.default_exit_note,
    }.get(body.movement_type)
    result = inventory.movements.record_movement(
        body.product_id,
        body.movement_type,
        body.quantity,
        _note(body.note, default_note),
        body.movement_date,
    )
    return _outcome(result)


@movement_router.get("", response_model=list[MovementResponse])
def list_movements(
    product_id: int | None = Query(default=None, alias="productId"),
    inventory: InventoryService = Depends(get_inventory),
) -> list[MovementResponse]:
    return [MovementResponse.from_dto(m) for m in inventory.movements.list_movements(product_id)]
