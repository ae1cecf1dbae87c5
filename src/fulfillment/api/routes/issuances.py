"""Issuance endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import CreateIssuanceRequest
from fulfillment.application.dto.responses import ErrorResponse, IssuanceResponse
from fulfillment.application.services import FulfillmentEngine

router = APIRouter(prefix="/api/issuances", tags=["issuances"])


@router.post(
    "",
    response_model=IssuanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_issuance(
    request: CreateIssuanceRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> IssuanceResponse:
    """Issue stock to a client. All lines succeed or none do."""
    issuance = await engine.issuances.create_issuance(
        client_id=request.client_id,
        items=request.lines(),
        remarks=request.remarks,
        issued_by=request.issued_by,
        received_by=request.received_by,
        issue_date=request.issue_date,
    )
    return IssuanceResponse.model_validate(issuance)


@router.get("", response_model=list[IssuanceResponse])
async def list_issuances(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[IssuanceResponse]:
    issuances = await engine.issuances.list_issuances(limit, offset)
    return [IssuanceResponse.model_validate(i) for i in issuances]


@router.get(
    "/{issuance_id}",
    response_model=IssuanceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_issuance(
    issuance_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> IssuanceResponse:
    return IssuanceResponse.model_validate(await engine.issuances.get_issuance(issuance_id))


@router.delete(
    "/{issuance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_issuance(
    issuance_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> None:
    """Delete an issuance and put its stock back. Blocked while returns reference it."""
    await engine.issuances.delete_issuance(issuance_id)
