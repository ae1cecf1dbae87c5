"""Issuance entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import new_id, utc_now


class IssuanceLine(BaseModel):
    product_id: str
    quantity: int


class Issuance(BaseModel):
    """Stock handed out to a client. Creating one decrements stock."""

    id: str = Field(default_factory=new_id)
    issuance_number: str = ""
    date: date
    client_id: str
    items: list[IssuanceLine]
    remarks: str = ""
    issued_by: str
    received_by: str | None = None
    version: int = 1
    created_at: datetime = Field(default_factory=utc_now)

    def quantities(self) -> dict[str, int]:
        """Total issued quantity per product."""
        totals: dict[str, int] = {}
        for line in self.items:
            totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        return totals
