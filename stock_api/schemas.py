"""Pydantic request/response schemas for the stock HTTP API.

These are the external contracts.  Field names are camelCase on the wire
(``productId``, ``minQuantity``) and snake_case in Python.
"""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from stock_kernel.domain.dtos import CategoryInfo, MovementRecordDTO, ProductInfo
from stock_kernel.domain.thresholds import ThresholdSignal


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Product Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(WireModel):
    name: str
    unit: str = ""
    price: Decimal = Decimal("0.00")
    min_quantity: StrictInt = 0
    max_quantity: StrictInt = 1000
    category: str = ""
    quantity: StrictInt = 0


class UpdateProductRequest(WireModel):
    name: str | None = None
    unit: str | None = None
    price: Decimal | None = None
    min_quantity: StrictInt | None = None
    max_quantity: StrictInt | None = None
    category: str | None = None


class ProductResponse(WireModel):
    id: int
    name: str
    unit: str
    quantity: int
    price: Decimal
    min_quantity: int
    max_quantity: int
    category: str

    @classmethod
    def from_info(cls, info: ProductInfo) -> "ProductResponse":
        return cls(
            id=info.id,
            name=info.name,
            unit=info.unit,
            quantity=info.quantity,
            price=info.price,
            min_quantity=info.min_quantity,
            max_quantity=info.max_quantity,
            category=info.category,
        )


class MaxIdResponse(WireModel):
    max_id: int


# ---------------------------------------------------------------------------
# Category Schemas
# ---------------------------------------------------------------------------
class CreateCategoryRequest(WireModel):
    name: str
    size: str = ""
    packaging: str = ""


class UpdateCategoryRequest(WireModel):
    name: str | None = None
    size: str | None = None
    packaging: str | None = None


class CategoryResponse(WireModel):
    id: int
    name: str
    size: str
    packaging: str

    @classmethod
    def from_info(cls, info: CategoryInfo) -> "CategoryResponse":
        return cls(id=info.id, name=info.name, size=info.size, packaging=info.packaging)


# ---------------------------------------------------------------------------
# Movement Schemas
# ---------------------------------------------------------------------------
class StockChangeRequest(WireModel):
    # JSON true or 2.0 is refused here; range checks belong to the ledger
    quantity: StrictInt
    note: str | None = None
    movement_date: dt.date | None = Field(default=None, alias="date")


class MovementRequest(StockChangeRequest):
    product_id: StrictInt
    movement_type: str = Field(alias="type")


class MovementResponse(WireModel):
    id: int
    product_id: int
    movement_type: Literal["Entry", "Exit"] = Field(alias="type")
    quantity: int
    note: str | None
    movement_date: dt.date = Field(alias="date")

    @classmethod
    def from_dto(cls, dto: MovementRecordDTO) -> "MovementResponse":
        return cls(
            id=dto.id,
            product_id=dto.product_id,
            movement_type=dto.movement_type.value,
            quantity=dto.quantity,
            note=dto.note,
            movement_date=dto.movement_date,
        )


class ThresholdSignalResponse(WireModel):
    status: Literal["below_minimum", "above_maximum", "within_range"]
    message: str
    limit: int | None = None

    @classmethod
    def from_signal(cls, signal: ThresholdSignal) -> "ThresholdSignalResponse":
        return cls(status=signal.status.value, message=signal.message, limit=signal.limit)


class MovementOutcomeResponse(WireModel):
    movement: MovementResponse
    product: ProductResponse
    signal: ThresholdSignalResponse


# ---------------------------------------------------------------------------
# Error Schema
# ---------------------------------------------------------------------------
class ErrorResponse(BaseModel):
    """Body of every failed request; error-specific fields ride along."""

    model_config = ConfigDict(extra="allow")

    code: str
    message: str


ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 404, 409, 422, 503)
}
