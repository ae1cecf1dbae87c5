"""SQLite implementation of disposal and tool storage."""

from datetime import datetime

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    DisposalEligibleQuantity,
    DisposalRecord,
    DisposalSourceType,
    SalvagedPart,
    Tool,
    ToolStatus,
)
from fulfillment.core.interfaces import IDisposalRepository, IToolRepository
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_date,
    from_db_timestamp,
    to_db_date,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteDisposalRepository(SQLiteRepository, IDisposalRepository):
    async def add_eligible(
        self, eligible: DisposalEligibleQuantity
    ) -> DisposalEligibleQuantity:
        await self._conn.execute(
            """
            INSERT INTO disposal_eligible (
                id, product_id, product_name, product_sku, return_id, rma_number,
                quantity, inspection_date, disposed, disposed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                eligible.id,
                eligible.product_id,
                eligible.product_name,
                eligible.product_sku,
                eligible.return_id,
                eligible.rma_number,
                eligible.quantity,
                to_db_date(eligible.inspection_date),
                int(eligible.disposed),
                to_db_timestamp(eligible.disposed_at),
            ),
        )
        return eligible

    async def get_eligible(self, eligible_id: str) -> DisposalEligibleQuantity | None:
        row = await self._fetchone(
            "SELECT * FROM disposal_eligible WHERE id = ?", (eligible_id,)
        )
        return self._row_to_eligible(row) if row else None

    async def mark_disposed(self, eligible_id: str, disposed_at: datetime) -> bool:
        cursor = await self._conn.execute(
            """
            UPDATE disposal_eligible SET disposed = 1, disposed_at = ?
            WHERE id = ? AND disposed = 0
            """,
            (to_db_timestamp(disposed_at), eligible_id),
        )
        return cursor.rowcount == 1

    async def list_eligible(
        self, include_disposed: bool = False
    ) -> list[DisposalEligibleQuantity]:
        sql = "SELECT * FROM disposal_eligible"
        if not include_disposed:
            sql += " WHERE disposed = 0"
        rows = await self._fetchall(sql + " ORDER BY inspection_date, id")
        return [self._row_to_eligible(row) for row in rows]

    async def add_record(self, record: DisposalRecord) -> DisposalRecord:
        await self._conn.execute(
            """
            INSERT INTO disposal_records (
                id, source_type, source_id, item_name, quantity, reason, disposed_by, date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.source_type.value,
                record.source_id,
                record.item_name,
                record.quantity,
                record.reason,
                record.disposed_by,
                to_db_timestamp(record.date),
            ),
        )
        logger.info(
            "disposal_record_inserted",
            source_type=record.source_type.value,
            source_id=record.source_id,
        )
        return record

    async def list_records(self, limit: int = 100, offset: int = 0) -> list[DisposalRecord]:
        rows = await self._fetchall(
            "SELECT * FROM disposal_records ORDER BY date DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [
            DisposalRecord(
                id=row["id"],
                source_type=DisposalSourceType(row["source_type"]),
                source_id=row["source_id"],
                item_name=row["item_name"],
                quantity=row["quantity"],
                reason=row["reason"],
                disposed_by=row["disposed_by"],
                date=from_db_timestamp(row["date"]),
            )
            for row in rows
        ]

    async def add_salvaged_part(self, part: SalvagedPart) -> SalvagedPart:
        await self._conn.execute(
            """
            INSERT INTO salvaged_parts (
                id, name, quantity, condition, original_tool_id, original_tool_name,
                notes, salvage_date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                part.id,
                part.name,
                part.quantity,
                part.condition,
                part.original_tool_id,
                part.original_tool_name,
                part.notes,
                to_db_timestamp(part.salvage_date),
            ),
        )
        return part

    async def list_salvaged_parts(self, tool_id: str | None = None) -> list[SalvagedPart]:
        if tool_id is None:
            rows = await self._fetchall(
                "SELECT * FROM salvaged_parts ORDER BY salvage_date DESC, name"
            )
        else:
            rows = await self._fetchall(
                "SELECT * FROM salvaged_parts WHERE original_tool_id = ? ORDER BY name",
                (tool_id,),
            )
        return [
            SalvagedPart(
                id=row["id"],
                name=row["name"],
                quantity=row["quantity"],
                condition=row["condition"],
                original_tool_id=row["original_tool_id"],
                original_tool_name=row["original_tool_name"],
                notes=row["notes"],
                salvage_date=from_db_timestamp(row["salvage_date"]),
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_eligible(row: aiosqlite.Row) -> DisposalEligibleQuantity:
        return DisposalEligibleQuantity(
            id=row["id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            product_sku=row["product_sku"],
            return_id=row["return_id"],
            rma_number=row["rma_number"],
            quantity=row["quantity"],
            inspection_date=from_db_date(row["inspection_date"]),
            disposed=bool(row["disposed"]),
            disposed_at=from_db_timestamp(row["disposed_at"]),
        )


class SQLiteToolRepository(SQLiteRepository, IToolRepository):
    async def add(self, tool: Tool) -> Tool:
        await self._conn.execute(
            "INSERT INTO tools (id, name, serial_number, status, created_at) VALUES (?, ?, ?, ?, ?)",
            (
                tool.id,
                tool.name,
                tool.serial_number,
                tool.status.value,
                to_db_timestamp(tool.created_at),
            ),
        )
        return tool

    async def get(self, tool_id: str) -> Tool | None:
        row = await self._fetchone("SELECT * FROM tools WHERE id = ?", (tool_id,))
        return self._row_to_tool(row) if row else None

    async def update(self, tool: Tool) -> Tool:
        await self._conn.execute(
            "UPDATE tools SET name = ?, serial_number = ?, status = ? WHERE id = ?",
            (tool.name, tool.serial_number, tool.status.value, tool.id),
        )
        return tool

    async def list_all(self, include_disposed: bool = True) -> list[Tool]:
        if include_disposed:
            rows = await self._fetchall("SELECT * FROM tools ORDER BY name, id")
        else:
            rows = await self._fetchall(
                "SELECT * FROM tools WHERE status != ? ORDER BY name, id",
                (ToolStatus.DISPOSED.value,),
            )
        return [self._row_to_tool(row) for row in rows]

    @staticmethod
    def _row_to_tool(row: aiosqlite.Row) -> Tool:
        return Tool(
            id=row["id"],
            name=row["name"],
            serial_number=row["serial_number"],
            status=ToolStatus(row["status"]),
            created_at=from_db_timestamp(row["created_at"]),
        )
