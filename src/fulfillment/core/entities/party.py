"""Clients and suppliers."""

from datetime import datetime

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import new_id, utc_now


class Client(BaseModel):
    """Customer that receives issuances, job orders and installations."""

    id: str = Field(default_factory=new_id)
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class Supplier(BaseModel):
    """Vendor that purchase orders are placed with."""

    id: str = Field(default_factory=new_id)
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
