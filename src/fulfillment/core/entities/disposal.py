"""Disposal entities: eligible quantities, tools and the disposal log."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import new_id, utc_now


class DisposalSourceType(str, Enum):
    """What a disposal selection points at."""

    PRODUCT = "product"
    TOOL = "tool"


class DisposalEligibleQuantity(BaseModel):
    """
    Quantity an inspection marked for disposal.

    Created when a return inspection completes. Disposing it sets
    ``disposed``; product stock is never touched, since these units were
    never restocked.
    """

    id: str = Field(default_factory=new_id)
    product_id: str
    product_name: str = ""
    product_sku: str = ""
    return_id: str
    rma_number: str = ""
    quantity: int = Field(gt=0)
    inspection_date: date
    disposed: bool = False
    disposed_at: datetime | None = None


class ToolStatus(str, Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    UNDER_MAINTENANCE = "Under Maintenance"
    DISPOSED = "Disposed"


class Tool(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    serial_number: str | None = None
    status: ToolStatus = ToolStatus.AVAILABLE
    created_at: datetime = Field(default_factory=utc_now)


class DisposalSelection(BaseModel):
    """One entry of a disposal request."""

    source_type: DisposalSourceType
    source_id: str


class DisposalRecord(BaseModel):
    """Audit line written for every source actually disposed."""

    id: str = Field(default_factory=new_id)
    source_type: DisposalSourceType
    source_id: str
    item_name: str
    quantity: int = 1
    reason: str
    disposed_by: str
    date: datetime = Field(default_factory=utc_now)


class SalvagePart(BaseModel):
    """A part type recovered from each tool being parted out."""

    name: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)
    condition: str = ""


class SalvagedPart(BaseModel):
    """Salvaged part logged against the tool it came from."""

    id: str = Field(default_factory=new_id)
    name: str
    quantity: int = Field(gt=0)
    condition: str = ""
    original_tool_id: str
    original_tool_name: str
    notes: str | None = None
    salvage_date: datetime = Field(default_factory=utc_now)
