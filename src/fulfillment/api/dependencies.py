"""
Dependency injection for FastAPI.

Route handlers receive the engine through ``Depends(get_engine)``; tests
swap it with ``app.dependency_overrides[get_engine]``.
"""

from functools import lru_cache

from fulfillment.application.services import FulfillmentEngine, get_fulfillment_engine
from fulfillment.config import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


def get_engine() -> FulfillmentEngine:
    """Get the fulfillment engine."""
    return get_fulfillment_engine()
