"""Configuration module."""

from fulfillment.config.logging import configure_logging, get_logger
from fulfillment.config.settings import (
    EngineSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "EngineSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
