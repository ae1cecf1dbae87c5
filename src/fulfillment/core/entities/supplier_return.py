"""Return-to-supplier entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now


class SupplierReturnStatus(LifecycleStatus):
    """Stock leaves on initiation; cancelling a Pending return puts it back."""

    PENDING = "Pending"
    SHIPPED = "Shipped"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Pending": frozenset({"Shipped", "Cancelled"}),
            "Shipped": frozenset({"Completed"}),
        }


class SupplierReturnLine(BaseModel):
    product_id: str
    quantity: int


class SupplierReturn(BaseModel):
    """Received goods sent back to the supplier of a purchase order."""

    id: str = Field(default_factory=new_id)
    rts_number: str = ""
    purchase_order_id: str
    po_number: str = ""
    supplier_id: str
    items: list[SupplierReturnLine]
    reason: str = ""
    status: SupplierReturnStatus = SupplierReturnStatus.PENDING
    date_initiated: date
    date_shipped: date | None = None
    initiated_by: str | None = None
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)

    def quantities(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for line in self.items:
            totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        return totals
