"""Purchase order endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import (
    CompletePOInspectionRequest,
    CreatePurchaseOrderRequest,
    PayPurchaseOrderRequest,
)
from fulfillment.application.dto.responses import (
    ErrorResponse,
    PurchaseOrderResponse,
    ReceivingResultResponse,
)
from fulfillment.application.services import FulfillmentEngine

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])

_TRANSITION_RESPONSES = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_purchase_order(
    request: CreatePurchaseOrderRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    po = await engine.procurement.create_purchase_order(
        request.supplier_id,
        request.lines(),
        expected_date=request.expected_date,
        reorder_ids=request.reorder_ids,
    )
    return PurchaseOrderResponse.model_validate(po)


@router.get("", response_model=list[PurchaseOrderResponse])
async def list_purchase_orders(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[PurchaseOrderResponse]:
    orders = await engine.procurement.list_purchase_orders(limit, offset)
    return [PurchaseOrderResponse.model_validate(o) for o in orders]


@router.get(
    "/{po_id}",
    response_model=PurchaseOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_purchase_order(
    po_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(
        await engine.procurement.get_purchase_order(po_id)
    )


@router.post("/{po_id}/ship", response_model=PurchaseOrderResponse, responses=_TRANSITION_RESPONSES)
async def ship_purchase_order(
    po_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(await engine.procurement.mark_shipped(po_id))


@router.post(
    "/{po_id}/deliver", response_model=PurchaseOrderResponse, responses=_TRANSITION_RESPONSES
)
async def deliver_purchase_order(
    po_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(await engine.procurement.mark_delivered(po_id))


@router.post(
    "/{po_id}/cancel", response_model=PurchaseOrderResponse, responses=_TRANSITION_RESPONSES
)
async def cancel_purchase_order(
    po_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(
        await engine.procurement.cancel_purchase_order(po_id)
    )


@router.post(
    "/{po_id}/inspection",
    response_model=ReceivingResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def complete_po_inspection(
    po_id: str,
    request: CompletePOInspectionRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ReceivingResultResponse:
    """Credit the quantities that arrived; shortfalls are reported, not stocked."""
    result = await engine.procurement.complete_po_inspection(
        po_id, request.to_lines(), inspector=request.inspector
    )
    return ReceivingResultResponse.from_result(result)


@router.post(
    "/{po_id}/pay",
    response_model=PurchaseOrderResponse,
    responses={400: {"model": ErrorResponse}, **_TRANSITION_RESPONSES},
)
async def pay_purchase_order(
    po_id: str,
    request: PayPurchaseOrderRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.model_validate(
        await engine.procurement.pay_purchase_order(po_id, request.amount)
    )
