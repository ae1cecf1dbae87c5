"""Return-to-supplier endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import CreateSupplierReturnRequest
from fulfillment.application.dto.responses import ErrorResponse, SupplierReturnResponse
from fulfillment.application.services import FulfillmentEngine
from fulfillment.core.entities import SupplierReturnStatus

router = APIRouter(prefix="/api/supplier-returns", tags=["supplier-returns"])

_TRANSITION_RESPONSES = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=SupplierReturnResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def initiate_supplier_return(
    request: CreateSupplierReturnRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> SupplierReturnResponse:
    """Send received goods back; they leave stock immediately."""
    supplier_return = await engine.procurement.initiate_supplier_return(
        request.purchase_order_id,
        request.lines(),
        request.reason,
        initiated_by=request.initiated_by,
    )
    return SupplierReturnResponse.model_validate(supplier_return)


@router.get("", response_model=list[SupplierReturnResponse])
async def list_supplier_returns(
    status_filter: SupplierReturnStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[SupplierReturnResponse]:
    returns = await engine.procurement.list_supplier_returns(status_filter, limit, offset)
    return [SupplierReturnResponse.model_validate(r) for r in returns]


@router.get(
    "/{return_id}",
    response_model=SupplierReturnResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_supplier_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> SupplierReturnResponse:
    return SupplierReturnResponse.model_validate(
        await engine.procurement.get_supplier_return(return_id)
    )


@router.post(
    "/{return_id}/ship", response_model=SupplierReturnResponse, responses=_TRANSITION_RESPONSES
)
async def ship_supplier_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> SupplierReturnResponse:
    return SupplierReturnResponse.model_validate(
        await engine.procurement.ship_supplier_return(return_id)
    )


@router.post(
    "/{return_id}/complete",
    response_model=SupplierReturnResponse,
    responses=_TRANSITION_RESPONSES,
)
async def complete_supplier_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> SupplierReturnResponse:
    return SupplierReturnResponse.model_validate(
        await engine.procurement.complete_supplier_return(return_id)
    )


@router.post(
    "/{return_id}/cancel", response_model=SupplierReturnResponse, responses=_TRANSITION_RESPONSES
)
async def cancel_supplier_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> SupplierReturnResponse:
    return SupplierReturnResponse.model_validate(
        await engine.procurement.cancel_supplier_return(return_id)
    )
