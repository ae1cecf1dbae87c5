"""Return (RMA) endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import (
    CompleteInspectionRequest,
    CreateReturnRequest,
    ProcessReturnRequest,
)
from fulfillment.application.dto.responses import (
    ErrorResponse,
    InspectionResultResponse,
    ReturnResponse,
)
from fulfillment.application.services import FulfillmentEngine
from fulfillment.core.entities import ReturnStatus

router = APIRouter(prefix="/api/returns", tags=["returns"])


@router.post(
    "",
    response_model=ReturnResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def initiate_return(
    request: CreateReturnRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ReturnResponse:
    ret = await engine.returns.initiate_return(
        request.issuance_id, request.reason, request.lines()
    )
    return ReturnResponse.model_validate(ret)


@router.get("", response_model=list[ReturnResponse])
async def list_returns(
    status_filter: ReturnStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ReturnResponse]:
    returns = await engine.returns.list_returns(status_filter, limit, offset)
    return [ReturnResponse.model_validate(r) for r in returns]


@router.get(
    "/{return_id}",
    response_model=ReturnResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ReturnResponse:
    return ReturnResponse.model_validate(await engine.returns.get_return(return_id))


@router.post(
    "/{return_id}/receive",
    response_model=ReturnResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def receive_return(
    return_id: str,
    request: ProcessReturnRequest | None = None,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ReturnResponse:
    processed_by = request.processed_by if request else None
    return ReturnResponse.model_validate(
        await engine.returns.mark_received(return_id, processed_by)
    )


@router.post(
    "/{return_id}/cancel",
    response_model=ReturnResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def cancel_return(
    return_id: str,
    request: ProcessReturnRequest | None = None,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ReturnResponse:
    processed_by = request.processed_by if request else None
    return ReturnResponse.model_validate(
        await engine.returns.cancel_return(return_id, processed_by)
    )


@router.post(
    "/{return_id}/inspection",
    response_model=InspectionResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def complete_inspection(
    return_id: str,
    request: CompleteInspectionRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> InspectionResultResponse:
    """
    Grade a received return.

    Restocked quantities go back on the shelf; disposal quantities become
    disposal-eligible. Anything not graded is reported as unaccounted.
    """
    result = await engine.returns.complete_inspection(
        return_id,
        request.to_lines(),
        request.inspector,
        inspection_date=request.inspection_date,
    )
    return InspectionResultResponse.from_result(result)


@router.delete(
    "/{return_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_return(
    return_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> None:
    await engine.returns.delete_return(return_id)
