"""SQLite implementation of job order and installation storage."""

import aiosqlite

from fulfillment.core.entities import (
    Installation,
    InstallationItemRef,
    InstallationStatus,
    JobItemStatus,
    JobOrder,
    JobOrderItem,
    JobOrderStatus,
)
from fulfillment.core.interfaces import IInstallationRepository, IJobOrderRepository
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    dump_models,
    from_db_date,
    from_db_timestamp,
    load_json,
    to_db_date,
    to_db_timestamp,
)


class SQLiteJobOrderRepository(SQLiteRepository, IJobOrderRepository):
    """Job orders; items live in a JSON column and version with the order."""

    async def add(self, job: JobOrder) -> JobOrder:
        await self._conn.execute(
            """
            INSERT INTO job_orders (
                id, job_order_number, client_id, description, status, items,
                version, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                job.id,
                job.job_order_number,
                job.client_id,
                job.description,
                job.status.value,
                dump_models(job.items),
                job.version,
                to_db_timestamp(job.created_at),
                to_db_timestamp(job.updated_at),
            ),
        )
        return job

    async def get(self, job_id: str) -> JobOrder | None:
        row = await self._fetchone("SELECT * FROM job_orders WHERE id = ?", (job_id,))
        return self._row_to_job(row) if row else None

    async def update(self, job: JobOrder) -> JobOrder:
        await self._execute_versioned(
            "job_order",
            job.id,
            """
            UPDATE job_orders SET
                description = ?, status = ?, items = ?, updated_at = ?,
                version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                job.description,
                job.status.value,
                dump_models(job.items),
                to_db_timestamp(job.updated_at),
                job.id,
                job.version,
            ),
        )
        return job.model_copy(update={"version": job.version + 1})

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[JobOrder]:
        rows = await self._fetchall(
            "SELECT * FROM job_orders ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_job(row) for row in rows]

    async def list_with_item_status(self, status: JobItemStatus) -> list[JobOrder]:
        rows = await self._fetchall(
            """
            SELECT * FROM job_orders
            WHERE EXISTS (
                SELECT 1 FROM json_each(job_orders.items)
                WHERE json_extract(json_each.value, '$.status') = ?
            )
            ORDER BY created_at
            """,
            (status.value,),
        )
        return [self._row_to_job(row) for row in rows]

    @staticmethod
    def _row_to_job(row: aiosqlite.Row) -> JobOrder:
        return JobOrder(
            id=row["id"],
            job_order_number=row["job_order_number"],
            client_id=row["client_id"],
            description=row["description"],
            status=JobOrderStatus(row["status"]),
            items=[JobOrderItem(**item) for item in load_json(row["items"]) or []],
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )


class SQLiteInstallationRepository(SQLiteRepository, IInstallationRepository):
    async def add(self, installation: Installation) -> Installation:
        await self._conn.execute(
            """
            INSERT INTO installations (
                id, installation_number, crew_id, start_date, end_date, items,
                status, notes, version, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                installation.id,
                installation.installation_number,
                installation.crew_id,
                to_db_date(installation.start_date),
                to_db_date(installation.end_date),
                dump_models(installation.items),
                installation.status.value,
                installation.notes,
                installation.version,
                to_db_timestamp(installation.created_at),
            ),
        )
        return installation

    async def get(self, installation_id: str) -> Installation | None:
        row = await self._fetchone(
            "SELECT * FROM installations WHERE id = ?", (installation_id,)
        )
        return self._row_to_installation(row) if row else None

    async def update(self, installation: Installation) -> Installation:
        await self._execute_versioned(
            "installation",
            installation.id,
            """
            UPDATE installations SET status = ?, notes = ?, version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                installation.status.value,
                installation.notes,
                installation.id,
                installation.version,
            ),
        )
        return installation.model_copy(update={"version": installation.version + 1})

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Installation]:
        rows = await self._fetchall(
            "SELECT * FROM installations ORDER BY start_date DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_installation(row) for row in rows]

    @staticmethod
    def _row_to_installation(row: aiosqlite.Row) -> Installation:
        return Installation(
            id=row["id"],
            installation_number=row["installation_number"],
            crew_id=row["crew_id"],
            start_date=from_db_date(row["start_date"]),
            end_date=from_db_date(row["end_date"]),
            items=[InstallationItemRef(**ref) for ref in load_json(row["items"]) or []],
            status=InstallationStatus(row["status"]),
            notes=row["notes"],
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
        )
