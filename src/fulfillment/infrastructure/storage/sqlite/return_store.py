"""SQLite implementation of return (RMA) storage."""

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import Inspection, Return, ReturnItem, ReturnStatus
from fulfillment.core.interfaces import IReturnRepository
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    dump_model,
    dump_models,
    from_db_date,
    from_db_timestamp,
    load_json,
    to_db_date,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteReturnRepository(SQLiteRepository, IReturnRepository):
    async def add(self, ret: Return) -> Return:
        await self._conn.execute(
            """
            INSERT INTO returns (
                id, rma_number, issuance_id, issuance_number, client_id, reason,
                items, status, date_initiated, date_received, processed_by,
                inspection, version, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                ret.id,
                ret.rma_number,
                ret.issuance_id,
                ret.issuance_number,
                ret.client_id,
                ret.reason,
                dump_models(ret.items),
                ret.status.value,
                to_db_date(ret.date_initiated),
                to_db_date(ret.date_received),
                ret.processed_by,
                dump_model(ret.inspection),
                ret.version,
                to_db_timestamp(ret.created_at),
            ),
        )
        logger.info("return_inserted", return_id=ret.id, rma_number=ret.rma_number)
        return ret

    async def get(self, return_id: str) -> Return | None:
        row = await self._fetchone("SELECT * FROM returns WHERE id = ?", (return_id,))
        return self._row_to_return(row) if row else None

    async def update(self, ret: Return) -> Return:
        await self._execute_versioned(
            "return",
            ret.id,
            """
            UPDATE returns SET
                reason = ?, items = ?, status = ?, date_received = ?,
                processed_by = ?, inspection = ?, version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                ret.reason,
                dump_models(ret.items),
                ret.status.value,
                to_db_date(ret.date_received),
                ret.processed_by,
                dump_model(ret.inspection),
                ret.id,
                ret.version,
            ),
        )
        return ret.model_copy(update={"version": ret.version + 1})

    async def delete(self, ret: Return) -> None:
        await self._execute_versioned(
            "return",
            ret.id,
            "DELETE FROM returns WHERE id = ? AND version = ?",
            (ret.id, ret.version),
        )
        logger.info("return_removed", return_id=ret.id)

    async def list_all(
        self, status: ReturnStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Return]:
        if status is None:
            rows = await self._fetchall(
                "SELECT * FROM returns ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (limit, offset),
            )
        else:
            rows = await self._fetchall(
                """
                SELECT * FROM returns WHERE status = ?
                ORDER BY created_at DESC LIMIT ? OFFSET ?
                """,
                (status.value, limit, offset),
            )
        return [self._row_to_return(row) for row in rows]

    async def list_for_issuance(self, issuance_id: str) -> list[Return]:
        rows = await self._fetchall(
            "SELECT * FROM returns WHERE issuance_id = ? ORDER BY created_at",
            (issuance_id,),
        )
        return [self._row_to_return(row) for row in rows]

    @staticmethod
    def _row_to_return(row: aiosqlite.Row) -> Return:
        inspection = load_json(row["inspection"])
        return Return(
            id=row["id"],
            rma_number=row["rma_number"],
            issuance_id=row["issuance_id"],
            issuance_number=row["issuance_number"],
            client_id=row["client_id"],
            reason=row["reason"],
            items=[ReturnItem(**item) for item in load_json(row["items"]) or []],
            status=ReturnStatus(row["status"]),
            date_initiated=from_db_date(row["date_initiated"]),
            date_received=from_db_date(row["date_received"]),
            processed_by=row["processed_by"],
            inspection=Inspection.model_validate(inspection) if inspection else None,
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
        )
