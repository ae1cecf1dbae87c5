"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization, built from core
entities and service results with ``model_validate(..., from_attributes=True)``
or the ``from_*`` constructors below.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fulfillment.core.services import (
    DisposalItems,
    DisposalOutcome,
    InspectionResult,
    PartOutOutcome,
    QCPassedItem,
    ReceivingResult,
)


class _FromEntity(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Products ---


class ProductResponse(_FromEntity):
    id: str
    name: str
    sku: str
    category: str
    stock: int
    price: float
    reorder_limit: int
    max_stock_level: int
    location: str | None = None
    supplier: str | None = None
    is_low_stock: bool
    version: int
    created_at: datetime
    updated_at: datetime


class StockHistoryEntryResponse(_FromEntity):
    effective_date: date
    stock_after: int
    delta: int
    reason: str | None = None
    recorded_at: datetime


class StockAsOfResponse(BaseModel):
    product_id: str
    as_of: date
    stock: int


class InventoryValueResponse(BaseModel):
    as_of: date
    value: float


class ReorderRequestResponse(_FromEntity):
    id: str
    product_id: str
    product_name: str
    quantity: int
    status: str
    source_issuance_id: str | None = None
    purchase_order_id: str | None = None
    created_at: datetime


# --- Parties & tools ---


class PartyResponse(_FromEntity):
    id: str
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime


class ToolResponse(_FromEntity):
    id: str
    name: str
    serial_number: str | None = None
    status: str
    created_at: datetime


# --- Documents ---


class LineItemResponse(_FromEntity):
    product_id: str
    quantity: int


class IssuanceResponse(_FromEntity):
    id: str
    issuance_number: str
    date: date
    client_id: str
    items: list[LineItemResponse]
    remarks: str
    issued_by: str
    received_by: str | None = None
    created_at: datetime


class ReturnItemResponse(_FromEntity):
    product_id: str
    name: str
    sku: str
    quantity: int


class InspectionLineResponse(_FromEntity):
    product_id: str
    returned: int
    restock: int
    disposal: int
    unaccounted: int


class InspectionResponse(_FromEntity):
    date: date
    inspector: str
    lines: list[InspectionLineResponse]
    total_unaccounted: int


class ReturnResponse(_FromEntity):
    id: str
    rma_number: str
    issuance_id: str
    issuance_number: str
    client_id: str
    reason: str
    items: list[ReturnItemResponse]
    status: str
    date_initiated: date
    date_received: date | None = None
    processed_by: str | None = None
    inspection: InspectionResponse | None = None
    created_at: datetime


class DisposalEligibleResponse(_FromEntity):
    id: str
    product_id: str
    product_name: str
    product_sku: str
    return_id: str
    rma_number: str
    quantity: int
    inspection_date: date
    disposed: bool
    disposed_at: datetime | None = None


class InspectionResultResponse(BaseModel):
    """Outcome of a return inspection, including unaccounted quantities."""

    return_record: ReturnResponse
    lines: list[InspectionLineResponse]
    disposal_eligible: list[DisposalEligibleResponse]
    total_restocked: int
    total_disposal: int
    total_unaccounted: int

    @classmethod
    def from_result(cls, result: InspectionResult) -> "InspectionResultResponse":
        return cls(
            return_record=ReturnResponse.model_validate(result.return_record),
            lines=[InspectionLineResponse.model_validate(line) for line in result.lines],
            disposal_eligible=[
                DisposalEligibleResponse.model_validate(e) for e in result.disposal_eligible
            ],
            total_restocked=result.total_restocked,
            total_disposal=result.total_disposal,
            total_unaccounted=result.total_unaccounted,
        )


class PurchaseOrderLineResponse(_FromEntity):
    product_id: str
    quantity: int
    unit_cost: float


class ReceivingLineResponse(_FromEntity):
    product_id: str
    ordered: int
    received: int
    short: int


class ReceivingInspectionResponse(_FromEntity):
    date: date
    inspector: str | None = None
    lines: list[ReceivingLineResponse]
    total_short: int


class PurchaseOrderResponse(_FromEntity):
    id: str
    po_number: str
    supplier_id: str
    items: list[PurchaseOrderLineResponse]
    status: str
    order_date: date
    expected_date: date | None = None
    received_date: date | None = None
    payment_status: str
    amount_paid: float
    paid_at: datetime | None = None
    inspection: ReceivingInspectionResponse | None = None
    total_cost: float
    created_at: datetime


class ReceivingResultResponse(BaseModel):
    purchase_order: PurchaseOrderResponse
    lines: list[ReceivingLineResponse]
    total_received: int
    total_short: int

    @classmethod
    def from_result(cls, result: ReceivingResult) -> "ReceivingResultResponse":
        return cls(
            purchase_order=PurchaseOrderResponse.model_validate(result.purchase_order),
            lines=[ReceivingLineResponse.model_validate(line) for line in result.lines],
            total_received=result.total_received,
            total_short=result.total_short,
        )


class SupplierReturnResponse(_FromEntity):
    id: str
    rts_number: str
    purchase_order_id: str
    po_number: str
    supplier_id: str
    items: list[LineItemResponse]
    reason: str
    status: str
    date_initiated: date
    date_shipped: date | None = None
    initiated_by: str | None = None
    created_at: datetime


# --- Disposal ---


class DisposalItemsResponse(BaseModel):
    products: list[DisposalEligibleResponse]
    tools: list[ToolResponse]

    @classmethod
    def from_items(cls, items: DisposalItems) -> "DisposalItemsResponse":
        return cls(
            products=[DisposalEligibleResponse.model_validate(p) for p in items.products],
            tools=[ToolResponse.model_validate(t) for t in items.tools],
        )


class DisposalRecordResponse(_FromEntity):
    id: str
    source_type: str
    source_id: str
    item_name: str
    quantity: int
    reason: str
    disposed_by: str
    date: datetime


class DisposalSelectionResponse(_FromEntity):
    source_type: str
    source_id: str


class DisposalOutcomeResponse(BaseModel):
    records: list[DisposalRecordResponse]
    skipped: list[DisposalSelectionResponse]

    @classmethod
    def from_outcome(cls, outcome: DisposalOutcome) -> "DisposalOutcomeResponse":
        return cls(
            records=[DisposalRecordResponse.model_validate(r) for r in outcome.records],
            skipped=[DisposalSelectionResponse.model_validate(s) for s in outcome.skipped],
        )


class SalvagedPartResponse(_FromEntity):
    id: str
    name: str
    quantity: int
    condition: str
    original_tool_id: str
    original_tool_name: str
    notes: str | None = None
    salvage_date: datetime


class PartOutOutcomeResponse(BaseModel):
    records: list[DisposalRecordResponse]
    parts: list[SalvagedPartResponse]

    @classmethod
    def from_outcome(cls, outcome: PartOutOutcome) -> "PartOutOutcomeResponse":
        return cls(
            records=[DisposalRecordResponse.model_validate(r) for r in outcome.records],
            parts=[SalvagedPartResponse.model_validate(p) for p in outcome.parts],
        )


# --- Fabrication & installation ---


class JobOrderItemResponse(_FromEntity):
    id: str
    product_id: str | None = None
    description: str
    quantity: int
    status: str
    qc_notes: str | None = None


class JobOrderResponse(_FromEntity):
    id: str
    job_order_number: str
    client_id: str
    description: str
    status: str
    items: list[JobOrderItemResponse]
    created_at: datetime
    updated_at: datetime


class QCPassedItemResponse(BaseModel):
    job_id: str
    job_order_number: str
    client_id: str
    item: JobOrderItemResponse

    @classmethod
    def from_item(cls, entry: QCPassedItem) -> "QCPassedItemResponse":
        return cls(
            job_id=entry.job_id,
            job_order_number=entry.job_order_number,
            client_id=entry.client_id,
            item=JobOrderItemResponse.model_validate(entry.item),
        )


class InstallationItemResponse(_FromEntity):
    job_id: str
    item_id: str


class InstallationResponse(_FromEntity):
    id: str
    installation_number: str
    crew_id: str
    start_date: date
    end_date: date
    items: list[InstallationItemResponse]
    status: str
    notes: str
    created_at: datetime


# --- Activity & health ---


class ActivityResponse(_FromEntity):
    id: str
    name: str
    entity_id: str | None = None
    payload: dict[str, Any]
    occurred_at: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. PRODUCT_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured context")
    retryable: bool = Field(default=False, description="Retrying the same request may succeed")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
