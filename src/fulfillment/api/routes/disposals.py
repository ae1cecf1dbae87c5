"""Disposal endpoints."""

from fastapi import APIRouter, Depends, Query

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import DisposeItemsRequest, PartOutToolsRequest
from fulfillment.application.dto.responses import (
    DisposalItemsResponse,
    DisposalOutcomeResponse,
    DisposalRecordResponse,
    ErrorResponse,
    PartOutOutcomeResponse,
    SalvagedPartResponse,
)
from fulfillment.application.services import FulfillmentEngine

router = APIRouter(prefix="/api/disposals", tags=["disposals"])


@router.get("/items", response_model=DisposalItemsResponse)
async def list_disposal_items(
    engine: FulfillmentEngine = Depends(get_engine),
) -> DisposalItemsResponse:
    """Open disposal-eligible quantities and tools that can still be disposed."""
    return DisposalItemsResponse.from_items(await engine.disposals.list_disposal_items())


@router.post(
    "",
    response_model=DisposalOutcomeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def dispose_items(
    request: DisposeItemsRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> DisposalOutcomeResponse:
    outcome = await engine.disposals.dispose_items(
        request.to_selection(), request.reason, request.disposed_by
    )
    return DisposalOutcomeResponse.from_outcome(outcome)


@router.get("/records", response_model=list[DisposalRecordResponse])
async def list_disposal_records(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[DisposalRecordResponse]:
    records = await engine.disposals.list_disposal_records(limit, offset)
    return [DisposalRecordResponse.model_validate(r) for r in records]


@router.post(
    "/part-out",
    response_model=PartOutOutcomeResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def part_out_tools(
    request: PartOutToolsRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PartOutOutcomeResponse:
    """Dispose tools for parts and log what was salvaged from each."""
    outcome = await engine.disposals.part_out_tools(
        request.tool_ids, request.to_parts(), request.disposed_by, notes=request.notes
    )
    return PartOutOutcomeResponse.from_outcome(outcome)


@router.get("/salvaged-parts", response_model=list[SalvagedPartResponse])
async def list_salvaged_parts(
    tool_id: str | None = Query(default=None),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[SalvagedPartResponse]:
    parts = await engine.disposals.list_salvaged_parts(tool_id)
    return [SalvagedPartResponse.model_validate(p) for p in parts]
