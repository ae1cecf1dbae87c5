"""Activity feed sinks for domain events."""

import json

from fulfillment.config import get_logger
from fulfillment.core.entities import DomainEvent
from fulfillment.core.interfaces import IEventSink
from fulfillment.infrastructure.storage.sqlite.base import (
    from_db_timestamp,
    to_db_timestamp,
)
from fulfillment.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__)


class StructlogEventSink(IEventSink):
    """Writes each event as one structured log line."""

    async def publish(self, event: DomainEvent) -> None:
        logger.info(
            "domain_event",
            event_name=event.name,
            entity_id=event.entity_id,
            **event.payload,
        )


class SQLiteActivityFeed(IEventSink):
    """
    Persists events to the ``notifications`` table.

    Writes outside the producing transaction, after it committed.
    """

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    async def publish(self, event: DomainEvent) -> None:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO notifications (id, name, entity_id, payload, occurred_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    event.id,
                    event.name,
                    event.entity_id,
                    json.dumps(event.payload, default=str),
                    to_db_timestamp(event.occurred_at),
                ),
            )
        logger.debug("activity_recorded", event_name=event.name, entity_id=event.entity_id)

    async def recent(self, limit: int = 50) -> list[DomainEvent]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM notifications ORDER BY occurred_at DESC LIMIT ?",
                (limit,),
            )
            rows = await cursor.fetchall()
        return [
            DomainEvent(
                id=row["id"],
                name=row["name"],
                entity_id=row["entity_id"],
                payload=json.loads(row["payload"]),
                occurred_at=from_db_timestamp(row["occurred_at"]),
            )
            for row in rows
        ]
