"""Product, stock history and reorder entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now

DEFAULT_REORDER_LIMIT = 10
DEFAULT_MAX_STOCK_LEVEL = 100


class Product(BaseModel):
    """A stocked product. ``stock`` is only ever changed through the ledger."""

    id: str = Field(default_factory=new_id)
    name: str
    sku: str
    category: str = "General"
    stock: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0)
    reorder_limit: int = Field(default=DEFAULT_REORDER_LIMIT, ge=0)
    max_stock_level: int = Field(default=DEFAULT_MAX_STOCK_LEVEL, ge=0)
    location: str | None = None
    supplier: str | None = None
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_low_stock(self) -> bool:
        """In stock but at or below the reorder limit."""
        return 0 < self.stock <= self.reorder_limit

    @property
    def stock_value(self) -> float:
        return self.stock * self.price


class StockHistoryEntry(BaseModel):
    """
    One immutable line of a product's stock history.

    ``recorded_at`` is when the change was committed and orders the history.
    ``effective_date`` is the business date the change applies to.
    """

    id: int | None = None
    product_id: str
    effective_date: date
    stock_after: int = Field(ge=0)
    delta: int
    reason: str | None = None
    recorded_at: datetime = Field(default_factory=utc_now)


class ReorderStatus(LifecycleStatus):
    """Automatic reorder request status."""

    PENDING = "Pending"
    ORDERED = "Ordered"
    FULFILLED = "Fulfilled"

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {
            "Pending": frozenset({"Ordered", "Fulfilled"}),
            # Back to Pending when the purchase order is cancelled
            "Ordered": frozenset({"Fulfilled", "Pending"}),
        }

    @classmethod
    def active(cls) -> tuple["ReorderStatus", ...]:
        return (cls.PENDING, cls.ORDERED)


class ReorderRequest(BaseModel):
    """Request to restock a product that fell to its reorder limit."""

    id: str = Field(default_factory=new_id)
    product_id: str
    product_name: str = ""
    quantity: int = Field(gt=0)
    status: ReorderStatus = ReorderStatus.PENDING
    source_issuance_id: str | None = None
    purchase_order_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
