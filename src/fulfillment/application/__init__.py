"""Application layer - DTOs and service wiring."""

from fulfillment.application.services import (
    FulfillmentEngine,
    build_engine,
    get_fulfillment_engine,
    reset_fulfillment_engine,
)

__all__ = [
    "FulfillmentEngine",
    "build_engine",
    "get_fulfillment_engine",
    "reset_fulfillment_engine",
]
