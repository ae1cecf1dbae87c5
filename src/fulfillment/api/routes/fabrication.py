"""Job order and installation endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import (
    AdvanceInstallationRequest,
    AdvanceItemRequest,
    CreateJobOrderRequest,
    ScheduleInstallationRequest,
)
from fulfillment.application.dto.responses import (
    ErrorResponse,
    InstallationResponse,
    JobOrderResponse,
    QCPassedItemResponse,
)
from fulfillment.application.services import FulfillmentEngine

router = APIRouter(prefix="/api", tags=["fabrication"])


@router.post(
    "/job-orders",
    response_model=JobOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_job_order(
    request: CreateJobOrderRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> JobOrderResponse:
    job = await engine.fabrication.create_job_order(
        request.client_id, request.to_items(), request.description
    )
    return JobOrderResponse.model_validate(job)


@router.get("/job-orders", response_model=list[JobOrderResponse])
async def list_job_orders(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[JobOrderResponse]:
    jobs = await engine.fabrication.list_job_orders(limit, offset)
    return [JobOrderResponse.model_validate(j) for j in jobs]


@router.get("/job-orders/qc-passed", response_model=list[QCPassedItemResponse])
async def list_qc_passed(
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[QCPassedItemResponse]:
    """Items ready to be scheduled for installation."""
    items = await engine.fabrication.list_qc_passed()
    return [QCPassedItemResponse.from_item(i) for i in items]


@router.get(
    "/job-orders/{job_id}",
    response_model=JobOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_job_order(
    job_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> JobOrderResponse:
    return JobOrderResponse.model_validate(await engine.fabrication.get_job_order(job_id))


@router.post(
    "/job-orders/{job_id}/items/{item_id}/advance",
    response_model=JobOrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def advance_job_item(
    job_id: str,
    item_id: str,
    request: AdvanceItemRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> JobOrderResponse:
    """Move an item one step forward. Dispatch happens only through scheduling."""
    job = await engine.fabrication.advance(
        job_id, item_id, request.to_status, qc_notes=request.qc_notes
    )
    return JobOrderResponse.model_validate(job)


@router.post(
    "/installations",
    response_model=InstallationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def schedule_installation(
    request: ScheduleInstallationRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> InstallationResponse:
    installation = await engine.installations.schedule_installation(
        crew_id=request.crew_id,
        start_date=request.start_date,
        end_date=request.end_date,
        items=request.to_refs(),
        notes=request.notes,
    )
    return InstallationResponse.model_validate(installation)


@router.get("/installations", response_model=list[InstallationResponse])
async def list_installations(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[InstallationResponse]:
    installations = await engine.installations.list_installations(limit, offset)
    return [InstallationResponse.model_validate(i) for i in installations]


@router.get(
    "/installations/{installation_id}",
    response_model=InstallationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_installation(
    installation_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> InstallationResponse:
    return InstallationResponse.model_validate(
        await engine.installations.get_installation(installation_id)
    )


@router.post(
    "/installations/{installation_id}/advance",
    response_model=InstallationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def advance_installation(
    installation_id: str,
    request: AdvanceInstallationRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> InstallationResponse:
    installation = await engine.installations.advance_installation(
        installation_id, request.to_status
    )
    return InstallationResponse.model_validate(installation)
