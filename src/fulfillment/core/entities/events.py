"""Domain events published to the activity feed after commit."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from fulfillment.core.entities.common import new_id, utc_now


class DomainEvent(BaseModel):
    """Something that happened, e.g. ``issuance.created``."""

    id: str = Field(default_factory=new_id)
    name: str
    entity_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utc_now)
