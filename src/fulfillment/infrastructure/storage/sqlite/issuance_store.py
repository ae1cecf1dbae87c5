"""SQLite implementation of issuance storage."""

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import Issuance, IssuanceLine
from fulfillment.core.interfaces import IIssuanceRepository
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    dump_models,
    from_db_date,
    from_db_timestamp,
    load_json,
    to_db_date,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteIssuanceRepository(SQLiteRepository, IIssuanceRepository):
    async def add(self, issuance: Issuance) -> Issuance:
        await self._conn.execute(
            """
            INSERT INTO issuances (
                id, issuance_number, date, client_id, items, remarks,
                issued_by, received_by, version, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                issuance.id,
                issuance.issuance_number,
                to_db_date(issuance.date),
                issuance.client_id,
                dump_models(issuance.items),
                issuance.remarks,
                issuance.issued_by,
                issuance.received_by,
                issuance.version,
                to_db_timestamp(issuance.created_at),
            ),
        )
        logger.info(
            "issuance_inserted",
            issuance_id=issuance.id,
            issuance_number=issuance.issuance_number,
        )
        return issuance

    async def get(self, issuance_id: str) -> Issuance | None:
        row = await self._fetchone("SELECT * FROM issuances WHERE id = ?", (issuance_id,))
        return self._row_to_issuance(row) if row else None

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Issuance]:
        rows = await self._fetchall(
            "SELECT * FROM issuances ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_issuance(row) for row in rows]

    async def delete(self, issuance: Issuance) -> None:
        await self._execute_versioned(
            "issuance",
            issuance.id,
            "DELETE FROM issuances WHERE id = ? AND version = ?",
            (issuance.id, issuance.version),
        )
        logger.info("issuance_removed", issuance_id=issuance.id)

    @staticmethod
    def _row_to_issuance(row: aiosqlite.Row) -> Issuance:
        return Issuance(
            id=row["id"],
            issuance_number=row["issuance_number"],
            date=from_db_date(row["date"]),
            client_id=row["client_id"],
            items=[IssuanceLine(**line) for line in load_json(row["items"]) or []],
            remarks=row["remarks"],
            issued_by=row["issued_by"],
            received_by=row["received_by"],
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
        )
