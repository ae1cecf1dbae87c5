"""Return (RMA) and inspection entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now


class ReturnStatus(LifecycleStatus):
    """Return lifecycle: Pending -> Received -> Completed, or Pending -> Cancelled."""

    PENDING = "Pending"
    RECEIVED = "Received"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Pending": frozenset({"Received", "Cancelled"}),
            "Received": frozenset({"Completed"}),
        }


class ReturnItem(BaseModel):
    product_id: str
    name: str = ""
    sku: str = ""
    quantity: int


class InspectionLine(BaseModel):
    """How the returned quantity of one product was split."""

    product_id: str
    returned: int = 0
    restock: int = Field(default=0, ge=0)
    disposal: int = Field(default=0, ge=0)

    @property
    def unaccounted(self) -> int:
        return self.returned - self.restock - self.disposal


class Inspection(BaseModel):
    date: date
    inspector: str
    lines: list[InspectionLine]

    @property
    def total_unaccounted(self) -> int:
        return sum(line.unaccounted for line in self.lines)


class Return(BaseModel):
    """Goods coming back against an issuance."""

    id: str = Field(default_factory=new_id)
    rma_number: str = ""
    issuance_id: str
    issuance_number: str = ""
    client_id: str
    reason: str = ""
    items: list[ReturnItem]
    status: ReturnStatus = ReturnStatus.PENDING
    date_initiated: date
    date_received: date | None = None
    processed_by: str | None = None
    inspection: Inspection | None = None
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)

    def quantities(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for item in self.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
        return totals
