"""SQLite unit of work and transactional store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from fulfillment.core.interfaces import ITransactionalStore, IUnitOfWork
from fulfillment.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool
from fulfillment.infrastructure.storage.sqlite.disposal_store import (
    SQLiteDisposalRepository,
    SQLiteToolRepository,
)
from fulfillment.infrastructure.storage.sqlite.fabrication_store import (
    SQLiteInstallationRepository,
    SQLiteJobOrderRepository,
)
from fulfillment.infrastructure.storage.sqlite.issuance_store import SQLiteIssuanceRepository
from fulfillment.infrastructure.storage.sqlite.party_store import (
    SQLiteClientRepository,
    SQLiteSupplierRepository,
)
from fulfillment.infrastructure.storage.sqlite.product_store import (
    SQLiteProductRepository,
    SQLiteReorderRepository,
    SQLiteStockHistoryRepository,
)
from fulfillment.infrastructure.storage.sqlite.purchase_order_store import (
    SQLitePurchaseOrderRepository,
)
from fulfillment.infrastructure.storage.sqlite.return_store import SQLiteReturnRepository
from fulfillment.infrastructure.storage.sqlite.sequence_store import SQLiteSequenceRepository
from fulfillment.infrastructure.storage.sqlite.supplier_return_store import (
    SQLiteSupplierReturnRepository,
)


class SQLiteUnitOfWork(IUnitOfWork):
    """All repositories bound to one pooled connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self.conn = conn
        self.products = SQLiteProductRepository(conn)
        self.history = SQLiteStockHistoryRepository(conn)
        self.clients = SQLiteClientRepository(conn)
        self.suppliers = SQLiteSupplierRepository(conn)
        self.issuances = SQLiteIssuanceRepository(conn)
        self.returns = SQLiteReturnRepository(conn)
        self.purchase_orders = SQLitePurchaseOrderRepository(conn)
        self.supplier_returns = SQLiteSupplierReturnRepository(conn)
        self.job_orders = SQLiteJobOrderRepository(conn)
        self.installations = SQLiteInstallationRepository(conn)
        self.tools = SQLiteToolRepository(conn)
        self.disposals = SQLiteDisposalRepository(conn)
        self.reorders = SQLiteReorderRepository(conn)
        self.sequences = SQLiteSequenceRepository(conn)


class SQLiteTransactionalStore(ITransactionalStore):
    """
    Hands out units of work over the connection pool.

    Uses the global pool unless one is injected (tests pass their own).
    """

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[IUnitOfWork]:
        pool = await self._get_pool()
        async with pool.transaction() as conn:
            yield SQLiteUnitOfWork(conn)

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[IUnitOfWork]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            yield SQLiteUnitOfWork(conn)
