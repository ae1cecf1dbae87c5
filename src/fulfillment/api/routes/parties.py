"""Client, supplier and tool registry endpoints."""

from fastapi import APIRouter, Depends, Query, status

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.requests import CreatePartyRequest, CreateToolRequest
from fulfillment.application.dto.responses import ErrorResponse, PartyResponse, ToolResponse
from fulfillment.application.services import FulfillmentEngine

router = APIRouter(prefix="/api", tags=["parties"])


@router.post("/clients", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: CreatePartyRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PartyResponse:
    return PartyResponse.model_validate(await engine.catalog.add_client(request.to_client()))


@router.get("/clients", response_model=list[PartyResponse])
async def list_clients(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[PartyResponse]:
    clients = await engine.catalog.list_clients(limit, offset)
    return [PartyResponse.model_validate(c) for c in clients]


@router.get(
    "/clients/{client_id}",
    response_model=PartyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_client(
    client_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PartyResponse:
    return PartyResponse.model_validate(await engine.catalog.get_client(client_id))


@router.post("/suppliers", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    request: CreatePartyRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PartyResponse:
    return PartyResponse.model_validate(await engine.catalog.add_supplier(request.to_supplier()))


@router.get("/suppliers", response_model=list[PartyResponse])
async def list_suppliers(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[PartyResponse]:
    suppliers = await engine.catalog.list_suppliers(limit, offset)
    return [PartyResponse.model_validate(s) for s in suppliers]


@router.get(
    "/suppliers/{supplier_id}",
    response_model=PartyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_supplier(
    supplier_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> PartyResponse:
    return PartyResponse.model_validate(await engine.catalog.get_supplier(supplier_id))


@router.post("/tools", response_model=ToolResponse, status_code=status.HTTP_201_CREATED)
async def create_tool(
    request: CreateToolRequest,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ToolResponse:
    return ToolResponse.model_validate(await engine.catalog.add_tool(request.to_entity()))


@router.get("/tools", response_model=list[ToolResponse])
async def list_tools(
    include_disposed: bool = True,
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ToolResponse]:
    tools = await engine.catalog.list_tools(include_disposed)
    return [ToolResponse.model_validate(t) for t in tools]


@router.get(
    "/tools/{tool_id}",
    response_model=ToolResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_tool(
    tool_id: str,
    engine: FulfillmentEngine = Depends(get_engine),
) -> ToolResponse:
    return ToolResponse.model_validate(await engine.catalog.get_tool(tool_id))
