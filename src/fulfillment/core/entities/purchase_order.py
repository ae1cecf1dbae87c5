"""Purchase order entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now


class PurchaseOrderStatus(LifecycleStatus):
    """Order lifecycle. Received is reached only through inspection."""

    PENDING = "Pending"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Pending": frozenset({"Shipped", "Delivered", "Cancelled"}),
            "Shipped": frozenset({"Delivered", "Cancelled"}),
            "Delivered": frozenset({"Received"}),
        }


class PaymentStatus(LifecycleStatus):
    UNPAID = "Unpaid"
    PAID = "Paid"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {"Unpaid": frozenset({"Paid"})}


class PurchaseOrderLine(BaseModel):
    product_id: str
    quantity: int
    unit_cost: float = Field(default=0.0, ge=0)


class ReceivingLine(BaseModel):
    """Inspection outcome for one ordered product."""

    product_id: str
    ordered: int = 0
    received: int = Field(ge=0)

    @property
    def short(self) -> int:
        return self.ordered - self.received


class ReceivingInspection(BaseModel):
    date: date
    inspector: str | None = None
    lines: list[ReceivingLine]

    @property
    def total_short(self) -> int:
        return sum(line.short for line in self.lines)


class PurchaseOrder(BaseModel):
    """Stock ordered from a supplier."""

    id: str = Field(default_factory=new_id)
    po_number: str = ""
    supplier_id: str
    items: list[PurchaseOrderLine]
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    order_date: date
    expected_date: date | None = None
    received_date: date | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    amount_paid: float = 0.0
    paid_at: datetime | None = None
    inspection: ReceivingInspection | None = None
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)

    def quantities(self) -> dict[str, int]:
        totals: dict[str, int] = {}
        for line in self.items:
            totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        return totals

    @property
    def total_cost(self) -> float:
        return sum(line.quantity * line.unit_cost for line in self.items)
