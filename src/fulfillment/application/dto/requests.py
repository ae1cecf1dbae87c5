"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation. Each converts to the core
entities the services take.
"""

from datetime import date

from pydantic import BaseModel, Field

from fulfillment.core.entities import (
    Client,
    DisposalSelection,
    DisposalSourceType,
    InspectionLine,
    InstallationItemRef,
    InstallationStatus,
    IssuanceLine,
    JobItemStatus,
    JobOrderItem,
    Product,
    PurchaseOrderLine,
    ReceivingLine,
    ReturnItem,
    SalvagePart,
    Supplier,
    SupplierReturnLine,
    Tool,
    ToolStatus,
)

# --- Products ---


class CreateProductRequest(BaseModel):
    """Register a product, optionally with opening stock."""

    name: str = Field(..., min_length=1, description="Product name")
    sku: str = Field(..., min_length=1, description="Unique stock keeping unit")
    category: str = Field(default="General", description="Product category")
    price: float = Field(default=0.0, ge=0, description="Unit price")
    reorder_limit: int = Field(default=10, ge=0, description="Low-stock threshold")
    max_stock_level: int = Field(default=100, ge=0, description="Target level for reorders")
    location: str | None = Field(default=None, description="Storage location label")
    supplier: str | None = Field(default=None, description="Supplier label")
    initial_stock: int = Field(default=0, ge=0, description="Opening stock")

    def to_entity(self) -> Product:
        return Product(**self.model_dump(exclude={"initial_stock"}))


class AdjustStockRequest(BaseModel):
    """Manual stock correction."""

    delta: int = Field(..., description="Signed quantity change")
    reason: str = Field(..., min_length=1, description="Why the stock changed")
    actor: str | None = Field(default=None, description="Acting user")
    effective_date: date | None = Field(default=None, description="Business date (defaults to today)")


# --- Parties & tools ---


class CreatePartyRequest(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    def to_client(self) -> Client:
        return Client(**self.model_dump())

    def to_supplier(self) -> Supplier:
        return Supplier(**self.model_dump())


class CreateToolRequest(BaseModel):
    name: str = Field(..., min_length=1)
    serial_number: str | None = None
    status: ToolStatus = ToolStatus.AVAILABLE

    def to_entity(self) -> Tool:
        return Tool(**self.model_dump())


# --- Issuances ---


class LineItemRequest(BaseModel):
    """A product and a quantity."""

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity")


class CreateIssuanceRequest(BaseModel):
    client_id: str = Field(..., description="Receiving client")
    items: list[LineItemRequest] = Field(..., min_length=1)
    remarks: str = Field(default="")
    issued_by: str = Field(..., min_length=1, description="Issuing user")
    received_by: str | None = Field(default=None)
    issue_date: date | None = Field(default=None, description="Issue date (defaults to today)")

    def lines(self) -> list[IssuanceLine]:
        return [IssuanceLine(**item.model_dump()) for item in self.items]


# --- Returns ---


class CreateReturnRequest(BaseModel):
    issuance_id: str = Field(..., description="Originating issuance")
    reason: str = Field(default="", description="Why the goods come back")
    items: list[LineItemRequest] = Field(..., min_length=1)

    def lines(self) -> list[ReturnItem]:
        return [ReturnItem(**item.model_dump()) for item in self.items]


class ProcessReturnRequest(BaseModel):
    processed_by: str | None = Field(default=None, description="Acting user")


class InspectionLineRequest(BaseModel):
    product_id: str
    restock: int = Field(default=0, ge=0, description="Quantity put back into stock")
    disposal: int = Field(default=0, ge=0, description="Quantity marked for disposal")


class CompleteInspectionRequest(BaseModel):
    inspector: str = Field(..., min_length=1)
    lines: list[InspectionLineRequest] = Field(default_factory=list)
    inspection_date: date | None = None

    def to_lines(self) -> list[InspectionLine]:
        return [InspectionLine(**line.model_dump()) for line in self.lines]


# --- Purchase orders ---


class PurchaseOrderLineRequest(LineItemRequest):
    unit_cost: float = Field(default=0.0, ge=0)


class CreatePurchaseOrderRequest(BaseModel):
    supplier_id: str
    items: list[PurchaseOrderLineRequest] = Field(..., min_length=1)
    expected_date: date | None = None
    reorder_ids: list[str] = Field(
        default_factory=list, description="Pending reorder requests this order restocks"
    )

    def lines(self) -> list[PurchaseOrderLine]:
        return [PurchaseOrderLine(**item.model_dump()) for item in self.items]


class ReceivingLineRequest(BaseModel):
    product_id: str
    received: int = Field(..., ge=0, description="Quantity that actually arrived")


class CompletePOInspectionRequest(BaseModel):
    lines: list[ReceivingLineRequest] = Field(default_factory=list)
    inspector: str | None = None

    def to_lines(self) -> list[ReceivingLine]:
        return [ReceivingLine(**line.model_dump()) for line in self.lines]


class PayPurchaseOrderRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Amount paid")


class CreateSupplierReturnRequest(BaseModel):
    purchase_order_id: str = Field(..., description="Received purchase order")
    items: list[LineItemRequest] = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, description="Why the goods go back")
    initiated_by: str | None = None

    def lines(self) -> list[SupplierReturnLine]:
        return [SupplierReturnLine(**item.model_dump()) for item in self.items]


# --- Disposal ---


class DisposalSelectionRequest(BaseModel):
    source_type: DisposalSourceType
    source_id: str


class DisposeItemsRequest(BaseModel):
    selection: list[DisposalSelectionRequest] = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    disposed_by: str = Field(..., min_length=1)

    def to_selection(self) -> list[DisposalSelection]:
        return [DisposalSelection(**entry.model_dump()) for entry in self.selection]


class SalvagePartRequest(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, gt=0, description="Recovered from each tool")
    condition: str = Field(default="")


class PartOutToolsRequest(BaseModel):
    tool_ids: list[str] = Field(..., min_length=1)
    parts: list[SalvagePartRequest] = Field(..., min_length=1)
    disposed_by: str = Field(..., min_length=1)
    notes: str | None = None

    def to_parts(self) -> list[SalvagePart]:
        return [SalvagePart(**part.model_dump()) for part in self.parts]


# --- Fabrication & installation ---


class JobOrderItemRequest(BaseModel):
    product_id: str | None = None
    description: str = ""
    quantity: int = Field(default=1, gt=0)


class CreateJobOrderRequest(BaseModel):
    client_id: str
    description: str = ""
    items: list[JobOrderItemRequest] = Field(..., min_length=1)

    def to_items(self) -> list[JobOrderItem]:
        return [JobOrderItem(**item.model_dump()) for item in self.items]


class AdvanceItemRequest(BaseModel):
    to_status: JobItemStatus
    qc_notes: str | None = None


class InstallationItemRequest(BaseModel):
    job_id: str
    item_id: str


class ScheduleInstallationRequest(BaseModel):
    crew_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    items: list[InstallationItemRequest] = Field(..., min_length=1)
    notes: str = ""

    def to_refs(self) -> list[InstallationItemRef]:
        return [InstallationItemRef(**item.model_dump()) for item in self.items]


class AdvanceInstallationRequest(BaseModel):
    to_status: InstallationStatus
