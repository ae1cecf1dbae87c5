"""SQLite implementation of purchase order storage."""

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    PaymentStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    ReceivingInspection,
)
from fulfillment.core.interfaces import IPurchaseOrderRepository
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


class SQLitePurchaseOrderRepository(SQLiteRepository, IPurchaseOrderRepository):
    async def add(self, order: PurchaseOrder) -> PurchaseOrder:
        await self._conn.execute(
            """
            INSERT INTO purchase_orders (
                id, po_number, supplier_id, items, status, order_date, expected_date,
                received_date, payment_status, amount_paid, paid_at, inspection,
                version, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order.id,
                order.po_number,
                order.supplier_id,
                dump_models(order.items),
                order.status.value,
                to_db_date(order.order_date),
                to_db_date(order.expected_date),
                to_db_date(order.received_date),
                order.payment_status.value,
                order.amount_paid,
                to_db_timestamp(order.paid_at),
                dump_model(order.inspection),
                order.version,
                to_db_timestamp(order.created_at),
            ),
        )
        logger.info("purchase_order_inserted", po_id=order.id, po_number=order.po_number)
        return order

    async def get(self, po_id: str) -> PurchaseOrder | None:
        row = await self._fetchone("SELECT * FROM purchase_orders WHERE id = ?", (po_id,))
        return self._row_to_order(row) if row else None

    async def update(self, order: PurchaseOrder) -> PurchaseOrder:
        await self._execute_versioned(
            "purchase_order",
            order.id,
            """
            UPDATE purchase_orders SET
                status = ?, expected_date = ?, received_date = ?, payment_status = ?,
                amount_paid = ?, paid_at = ?, inspection = ?, version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                order.status.value,
                to_db_date(order.expected_date),
                to_db_date(order.received_date),
                order.payment_status.value,
                order.amount_paid,
                to_db_timestamp(order.paid_at),
                dump_model(order.inspection),
                order.id,
                order.version,
            ),
        )
        return order.model_copy(update={"version": order.version + 1})

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[PurchaseOrder]:
        rows = await self._fetchall(
            "SELECT * FROM purchase_orders ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_order(row) for row in rows]

    @staticmethod
    def _row_to_order(row: aiosqlite.Row) -> PurchaseOrder:
        inspection = load_json(row["inspection"])
        return PurchaseOrder(
            id=row["id"],
            po_number=row["po_number"],
            supplier_id=row["supplier_id"],
            items=[PurchaseOrderLine(**line) for line in load_json(row["items"]) or []],
            status=PurchaseOrderStatus(row["status"]),
            order_date=from_db_date(row["order_date"]),
            expected_date=from_db_date(row["expected_date"]),
            received_date=from_db_date(row["received_date"]),
            payment_status=PaymentStatus(row["payment_status"]),
            amount_paid=row["amount_paid"],
            paid_at=from_db_timestamp(row["paid_at"]),
            inspection=ReceivingInspection.model_validate(inspection) if inspection else None,
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
        )
