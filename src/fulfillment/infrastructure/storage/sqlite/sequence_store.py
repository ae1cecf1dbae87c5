"""Document number counters."""

from fulfillment.core.interfaces import ISequenceRepository
from fulfillment.infrastructure.storage.sqlite.base import SQLiteRepository


class SQLiteSequenceRepository(SQLiteRepository, ISequenceRepository):
    async def next_value(self, name: str) -> int:
        await self._conn.execute(
            """
            INSERT INTO sequences (name, value) VALUES (?, 1)
            ON CONFLICT(name) DO UPDATE SET value = value + 1
            """,
            (name,),
        )
        row = await self._fetchone("SELECT value FROM sequences WHERE name = ?", (name,))
        return int(row["value"])
