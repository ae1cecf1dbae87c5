"""Product catalog and stock ledger endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import AdjustStockRequest, CreateProductRequest
from fulfillment.application.dto.responses import (
    ErrorResponse,
    InventoryValueResponse,
    ProductResponse,
    ReorderRequestResponse,
    StockAsOfResponse,
    StockHistoryEntryResponse,
)
from fulfillment.application.services import FulfillmentEngine
from fulfillment.core.entities import ReorderStatus

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_product(
    request: CreateProductRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ProductResponse:
    """Register a product with optional opening stock."""
    product = await engine.catalog.add_product(request.to_entity(), request.initial_stock)
    return ProductResponse.model_validate(product)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ProductResponse]:
    products = await engine.catalog.list_products(limit, offset)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/low-stock", response_model=list[ProductResponse])
async def list_low_stock(
    limit: int = Query(default=100, ge=1, le=500),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ProductResponse]:
    """Products with stock above zero and at or below their reorder limit."""
    products = await engine.catalog.list_low_stock(limit)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/reorders", response_model=list[ReorderRequestResponse])
async def list_reorder_requests(
    status_filter: ReorderStatus | None = Query(default=None, alias="status"),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ReorderRequestResponse]:
    requests = await engine.catalog.list_reorder_requests(status_filter)
    return [ReorderRequestResponse.model_validate(r) for r in requests]


@router.get("/inventory-value", response_model=InventoryValueResponse)
async def inventory_value(
    as_of: date,
    engine: FulfillmentEngine = Depends(get_engine),
) -> InventoryValueResponse:
    """Total stock value at the end of a past day, at current prices."""
    value = await engine.ledger.inventory_value_as_of(as_of)
    return InventoryValueResponse(as_of=as_of, value=value)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ProductResponse:
    return ProductResponse.model_validate(await engine.catalog.get_product(product_id))


@router.post(
    "/{product_id}/adjust",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def adjust_stock(
    product_id: str,
    request: AdjustStockRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ProductResponse:
    """Manual stock correction. Cannot take stock below zero."""
    product = await engine.ledger.adjust(
        product_id,
        request.delta,
        request.reason,
        actor=request.actor,
        effective_date=request.effective_date,
    )
    return ProductResponse.model_validate(product)


@router.get(
    "/{product_id}/history",
    response_model=list[StockHistoryEntryResponse],
    responses={404: {"model": ErrorResponse}},
)
async def stock_history(
    product_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[StockHistoryEntryResponse]:
    entries = await engine.ledger.history(product_id)
    return [StockHistoryEntryResponse.model_validate(e) for e in entries]


@router.get(
    "/{product_id}/stock",
    response_model=StockAsOfResponse,
    responses={404: {"model": ErrorResponse}},
)
async def stock_as_of(
    product_id: str,
    as_of: date,
    engine: FulfillmentEngine = Depends(get_engine),
) -> StockAsOfResponse:
    """Stock level at the end of ``as_of``."""
    stock = await engine.ledger.stock_as_of(product_id, as_of)
    return StockAsOfResponse(product_id=product_id, as_of=as_of, stock=stock)
