"""SQLite implementation of return-to-supplier storage."""

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import SupplierReturn, SupplierReturnLine, SupplierReturnStatus
from fulfillment.core.interfaces import ISupplierReturnRepository
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


class SQLiteSupplierReturnRepository(SQLiteRepository, ISupplierReturnRepository):
    async def add(self, supplier_return: SupplierReturn) -> SupplierReturn:
        await self._conn.execute(
            """
            INSERT INTO supplier_returns (
                id, rts_number, purchase_order_id, po_number, supplier_id, items, reason,
                status, date_initiated, date_shipped, initiated_by, version, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                supplier_return.id,
                supplier_return.rts_number,
                supplier_return.purchase_order_id,
                supplier_return.po_number,
                supplier_return.supplier_id,
                dump_models(supplier_return.items),
                supplier_return.reason,
                supplier_return.status.value,
                to_db_date(supplier_return.date_initiated),
                to_db_date(supplier_return.date_shipped),
                supplier_return.initiated_by,
                supplier_return.version,
                to_db_timestamp(supplier_return.created_at),
            ),
        )
        logger.info(
            "supplier_return_inserted",
            supplier_return_id=supplier_return.id,
            rts_number=supplier_return.rts_number,
        )
        return supplier_return

    async def get(self, return_id: str) -> SupplierReturn | None:
        row = await self._fetchone("SELECT * FROM supplier_returns WHERE id = ?", (return_id,))
        return self._row_to_return(row) if row else None

    async def update(self, supplier_return: SupplierReturn) -> SupplierReturn:
        await self._execute_versioned(
            "supplier_return",
            supplier_return.id,
            """
            UPDATE supplier_returns SET
                status = ?, date_shipped = ?, reason = ?, version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                supplier_return.status.value,
                to_db_date(supplier_return.date_shipped),
                supplier_return.reason,
                supplier_return.id,
                supplier_return.version,
            ),
        )
        return supplier_return.model_copy(update={"version": supplier_return.version + 1})

    async def list_all(
        self, status: SupplierReturnStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[SupplierReturn]:
        if status is None:
            rows = await self._fetchall(
                "SELECT * FROM supplier_returns ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (limit, offset),
            )
        else:
            rows = await self._fetchall(
                """
                SELECT * FROM supplier_returns WHERE status = ?
                ORDER BY created_at DESC LIMIT ? OFFSET ?
                """,
                (status.value, limit, offset),
            )
        return [self._row_to_return(row) for row in rows]

    async def list_for_purchase_order(self, po_id: str) -> list[SupplierReturn]:
        rows = await self._fetchall(
            "SELECT * FROM supplier_returns WHERE purchase_order_id = ? ORDER BY created_at",
            (po_id,),
        )
        return [self._row_to_return(row) for row in rows]

    @staticmethod
    def _row_to_return(row: aiosqlite.Row) -> SupplierReturn:
        return SupplierReturn(
            id=row["id"],
            rts_number=row["rts_number"],
            purchase_order_id=row["purchase_order_id"],
            po_number=row["po_number"],
            supplier_id=row["supplier_id"],
            items=[SupplierReturnLine(**line) for line in load_json(row["items"]) or []],
            reason=row["reason"],
            status=SupplierReturnStatus(row["status"]),
            date_initiated=from_db_date(row["date_initiated"]),
            date_shipped=from_db_date(row["date_shipped"]),
            initiated_by=row["initiated_by"],
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
        )
