"""SQLite implementation of product, stock history and reorder storage."""

from datetime import datetime

import aiosqlite

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    Product,
    ReorderRequest,
    ReorderStatus,
    StockHistoryEntry,
)
from fulfillment.core.exceptions import DuplicateError
from fulfillment.core.interfaces import (
    IProductRepository,
    IReorderRepository,
    IStockHistoryRepository,
)
from fulfillment.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_date,
    from_db_timestamp,
    to_db_date,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteProductRepository(SQLiteRepository, IProductRepository):
    """Products with optimistic version checks."""

    async def add(self, product: Product) -> Product:
        try:
            await self._conn.execute(
                """
                INSERT INTO products (
                    id, name, sku, category, stock, price, reorder_limit,
                    max_stock_level, location, supplier, version, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.id,
                    product.name,
                    product.sku,
                    product.category,
                    product.stock,
                    product.price,
                    product.reorder_limit,
                    product.max_stock_level,
                    product.location,
                    product.supplier,
                    product.version,
                    to_db_timestamp(product.created_at),
                    to_db_timestamp(product.updated_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if "products.sku" in str(e):
                raise DuplicateError("product", "sku", product.sku) from e
            raise
        logger.info("product_inserted", product_id=product.id, sku=product.sku)
        return product

    async def get(self, product_id: str) -> Product | None:
        row = await self._fetchone("SELECT * FROM products WHERE id = ?", (product_id,))
        return self._row_to_product(row) if row else None

    async def get_by_sku(self, sku: str) -> Product | None:
        row = await self._fetchone("SELECT * FROM products WHERE sku = ?", (sku,))
        return self._row_to_product(row) if row else None

    async def update(self, product: Product) -> Product:
        await self._execute_versioned(
            "product",
            product.id,
            """
            UPDATE products SET
                name = ?, category = ?, stock = ?, price = ?, reorder_limit = ?,
                max_stock_level = ?, location = ?, supplier = ?, updated_at = ?,
                version = version + 1
            WHERE id = ? AND version = ?
            """,
            (
                product.name,
                product.category,
                product.stock,
                product.price,
                product.reorder_limit,
                product.max_stock_level,
                product.location,
                product.supplier,
                to_db_timestamp(product.updated_at),
                product.id,
                product.version,
            ),
        )
        return product.model_copy(update={"version": product.version + 1})

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Product]:
        rows = await self._fetchall(
            "SELECT * FROM products ORDER BY name, id LIMIT ? OFFSET ?", (limit, offset)
        )
        return [self._row_to_product(row) for row in rows]

    async def list_low_stock(self, limit: int = 100) -> list[Product]:
        rows = await self._fetchall(
            """
            SELECT * FROM products
            WHERE stock > 0 AND stock <= reorder_limit
            ORDER BY stock, name
            LIMIT ?
            """,
            (limit,),
        )
        return [self._row_to_product(row) for row in rows]

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            sku=row["sku"],
            category=row["category"],
            stock=row["stock"],
            price=row["price"],
            reorder_limit=row["reorder_limit"],
            max_stock_level=row["max_stock_level"],
            location=row["location"],
            supplier=row["supplier"],
            version=row["version"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )


class SQLiteStockHistoryRepository(SQLiteRepository, IStockHistoryRepository):
    """Append-only history; the schema rejects UPDATE and DELETE."""

    async def append(self, entry: StockHistoryEntry) -> StockHistoryEntry:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_history (
                product_id, effective_date, stock_after, delta, reason, recorded_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                entry.product_id,
                to_db_date(entry.effective_date),
                entry.stock_after,
                entry.delta,
                entry.reason,
                to_db_timestamp(entry.recorded_at),
            ),
        )
        return entry.model_copy(update={"id": cursor.lastrowid})

    async def list_for_product(self, product_id: str) -> list[StockHistoryEntry]:
        rows = await self._fetchall(
            """
            SELECT * FROM stock_history
            WHERE product_id = ?
            ORDER BY recorded_at, id
            """,
            (product_id,),
        )
        return [self._row_to_entry(row) for row in rows]

    async def last_entry(self, product_id: str) -> StockHistoryEntry | None:
        row = await self._fetchone(
            """
            SELECT * FROM stock_history
            WHERE product_id = ?
            ORDER BY recorded_at DESC, id DESC
            LIMIT 1
            """,
            (product_id,),
        )
        return self._row_to_entry(row) if row else None

    async def latest_at_or_before(
        self, product_id: str, cutoff: datetime
    ) -> StockHistoryEntry | None:
        row = await self._fetchone(
            """
            SELECT * FROM stock_history
            WHERE product_id = ? AND recorded_at <= ?
            ORDER BY recorded_at DESC, id DESC
            LIMIT 1
            """,
            (product_id, to_db_timestamp(cutoff)),
        )
        return self._row_to_entry(row) if row else None

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> StockHistoryEntry:
        return StockHistoryEntry(
            id=row["id"],
            product_id=row["product_id"],
            effective_date=from_db_date(row["effective_date"]),
            stock_after=row["stock_after"],
            delta=row["delta"],
            reason=row["reason"],
            recorded_at=from_db_timestamp(row["recorded_at"]),
        )


class SQLiteReorderRepository(SQLiteRepository, IReorderRepository):
    async def add(self, request: ReorderRequest) -> ReorderRequest:
        await self._conn.execute(
            """
            INSERT INTO reorder_requests (
                id, product_id, product_name, quantity, status, source_issuance_id,
                purchase_order_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                request.id,
                request.product_id,
                request.product_name,
                request.quantity,
                request.status.value,
                request.source_issuance_id,
                request.purchase_order_id,
                to_db_timestamp(request.created_at),
            ),
        )
        logger.info(
            "reorder_request_inserted",
            reorder_id=request.id,
            product_id=request.product_id,
            quantity=request.quantity,
        )
        return request

    async def get(self, reorder_id: str) -> ReorderRequest | None:
        row = await self._fetchone("SELECT * FROM reorder_requests WHERE id = ?", (reorder_id,))
        return self._row_to_request(row) if row else None

    async def update(self, request: ReorderRequest) -> ReorderRequest:
        await self._conn.execute(
            """
            UPDATE reorder_requests SET quantity = ?, status = ?, purchase_order_id = ?
            WHERE id = ?
            """,
            (request.quantity, request.status.value, request.purchase_order_id, request.id),
        )
        logger.info(
            "reorder_request_updated",
            reorder_id=request.id,
            status=request.status.value,
            purchase_order_id=request.purchase_order_id,
        )
        return request

    async def find_active(self, product_id: str) -> ReorderRequest | None:
        active = [s.value for s in ReorderStatus.active()]
        row = await self._fetchone(
            f"""
            SELECT * FROM reorder_requests
            WHERE product_id = ? AND status IN ({", ".join("?" for _ in active)})
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (product_id, *active),
        )
        return self._row_to_request(row) if row else None

    async def list_all(self, status: ReorderStatus | None = None) -> list[ReorderRequest]:
        if status is None:
            rows = await self._fetchall("SELECT * FROM reorder_requests ORDER BY created_at DESC")
        else:
            rows = await self._fetchall(
                "SELECT * FROM reorder_requests WHERE status = ? ORDER BY created_at DESC",
                (status.value,),
            )
        return [self._row_to_request(row) for row in rows]

    async def list_for_purchase_order(self, po_id: str) -> list[ReorderRequest]:
        rows = await self._fetchall(
            "SELECT * FROM reorder_requests WHERE purchase_order_id = ? ORDER BY created_at",
            (po_id,),
        )
        return [self._row_to_request(row) for row in rows]

    @staticmethod
    def _row_to_request(row: aiosqlite.Row) -> ReorderRequest:
        return ReorderRequest(
            id=row["id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            status=ReorderStatus(row["status"]),
            source_issuance_id=row["source_issuance_id"],
            purchase_order_id=row["purchase_order_id"],
            created_at=from_db_timestamp(row["created_at"]),
        )
