"""Domain event sinks."""

from fulfillment.infrastructure.events.activity_feed import (
    SQLiteActivityFeed,
    StructlogEventSink,
)

__all__ = ["StructlogEventSink", "SQLiteActivityFeed"]
