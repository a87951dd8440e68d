"""Stock ledger FastAPI application.

Usage:
    uvicorn stock_api.app:create_app --factory --host 0.0.0.0 --port 8000

``create_app()`` reads the active configuration, configures logging and the
database engine, and wires an InventoryService into ``app.state``.  Tests
pass their own InventoryService instead.  Either way the ledger immutability
listeners are registered before the first request.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stock_api.routes import category_router, movement_router, product_router
from stock_config import MovementConfig, StockConfig, get_active_config
from stock_kernel.db.engine import init_engine_from_url
from stock_kernel.db.immutability import register_immutability_listeners
from stock_kernel.exceptions import StockKernelError
from stock_kernel.logging_config import LogContext, configure_logging, get_logger
from stock_services.inventory_service import InventoryService

logger = get_logger("api")

# HTTP status per error code; anything unlisted is a 400
_STATUS_BY_CODE = {
    "PRODUCT_NOT_FOUND": 404,
    "CATEGORY_NOT_FOUND": 404,
    "INSUFFICIENT_STOCK": 409,
    "IMMUTABILITY_VIOLATION": 409,
    "INVALID_PRODUCT": 422,
    "INVALID_CATEGORY": 422,
    "INVALID_QUANTITY": 422,
    "INVALID_MOVEMENT_TYPE": 422,
    "STORE_FAILURE": 503,
}


def status_for(exc: StockKernelError) -> int:
    return _STATUS_BY_CODE.get(exc.code, 400)


async def stock_error_handler(request: Request, exc: StockKernelError) -> JSONResponse:
    status = status_for(exc)
    body = {"code": exc.code, "message": str(exc)}
    # Structured attributes of the exception (product_id, requested, ...)
    for key, value in vars(exc).items():
        if not key.startswith("_") and key not in body:
            body[key] = value
    log = logger.error if status >= 500 else logger.info
    log(
        "request_failed",
        extra={"path": request.url.path, "status": status, "error_code": exc.code},
    )
    return JSONResponse(status_code=status, content=jsonable_encoder(body))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(
            {
                "code": "VALIDATION_ERROR",
                "message": "Request body or parameters failed validation",
                "errors": exc.errors(),
            }
        ),
    )


def create_app(
    config: StockConfig | None = None,
    inventory: InventoryService | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings to use.  Loaded with ``get_active_config()`` when
            neither ``config`` nor ``inventory`` is given.
        inventory: Pre-built service.  When given, no engine is initialized.
    """
    if inventory is None:
        config = config or get_active_config()
        configure_logging(level=config.logging.level)
        db = config.database
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )
        inventory = InventoryService()

    register_immutability_listeners()

    app = FastAPI(
        title="Stock Ledger API",
        description="Products, categories and stock movements",
    )
    app.state.inventory = inventory
    app.state.movement_config = config.movements if config else MovementConfig()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag every log line of the request with its request id."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        with LogContext.bind(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(StockKernelError, stock_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(movement_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
