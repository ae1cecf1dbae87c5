"""Infrastructure layer implementations."""

from fulfillment.infrastructure import events, storage

__all__ = ["storage", "events"]
