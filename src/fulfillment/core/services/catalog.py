"""Product, party and tool registry."""

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    Client,
    Product,
    ReorderRequest,
    ReorderStatus,
    Supplier,
    Tool,
)
from fulfillment.core.exceptions import (
    ClientNotFoundError,
    DuplicateError,
    ProductNotFoundError,
    SupplierNotFoundError,
    ToolNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.stock_ledger import StockLedger
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


class CatalogService:
    """
    Registers the records the workflows reference.

    Opening stock of a new product is booked through the ledger so the
    product's history starts with it.
    """

    def __init__(self, runner: TransactionRunner, ledger: StockLedger):
        self._runner = runner
        self._ledger = ledger

    # Products

    async def add_product(self, product: Product, initial_stock: int = 0) -> Product:
        if not product.name.strip():
            raise ValidationError("name", "Product name is required")
        if not product.sku.strip():
            raise ValidationError("sku", "SKU is required")
        if initial_stock < 0:
            raise ValidationError("initial_stock", "Initial stock cannot be negative", initial_stock)

        async def work(tx: TransactionScope) -> Product:
            if await tx.uow.products.get_by_sku(product.sku) is not None:
                raise DuplicateError("product", "sku", product.sku)
            created = await tx.uow.products.add(product.model_copy(update={"stock": 0}))
            if initial_stock:
                await self._ledger.adjust_stock(
                    tx, created.id, initial_stock, reason="Opening stock"
                )
                created = await tx.uow.products.get(created.id) or created
            tx.emit("product.created", created.id, sku=created.sku, stock=created.stock)
            return created

        created = await self._runner.run("add_product", work)
        logger.info("product_created", product_id=created.id, sku=created.sku)
        return created

    async def get_product(self, product_id: str) -> Product:
        async def query(uow: IUnitOfWork) -> Product:
            product = await uow.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            return product

        return await self._runner.read(query)

    async def list_products(self, limit: int = 100, offset: int = 0) -> list[Product]:
        return await self._runner.read(lambda uow: uow.products.list_all(limit, offset))

    async def list_low_stock(self, limit: int = 100) -> list[Product]:
        return await self._runner.read(lambda uow: uow.products.list_low_stock(limit))

    async def list_reorder_requests(
        self, status: ReorderStatus | None = None
    ) -> list[ReorderRequest]:
        return await self._runner.read(lambda uow: uow.reorders.list_all(status))

    # Parties

    async def add_client(self, client: Client) -> Client:
        if not client.name.strip():
            raise ValidationError("name", "Client name is required")
        created = await self._runner.run("add_client", lambda tx: tx.uow.clients.add(client))
        logger.info("client_created", client_id=created.id)
        return created

    async def get_client(self, client_id: str) -> Client:
        async def query(uow: IUnitOfWork) -> Client:
            client = await uow.clients.get(client_id)
            if client is None:
                raise ClientNotFoundError(client_id)
            return client

        return await self._runner.read(query)

    async def list_clients(self, limit: int = 100, offset: int = 0) -> list[Client]:
        return await self._runner.read(lambda uow: uow.clients.list_all(limit, offset))

    async def add_supplier(self, supplier: Supplier) -> Supplier:
        if not supplier.name.strip():
            raise ValidationError("name", "Supplier name is required")
        created = await self._runner.run("add_supplier", lambda tx: tx.uow.suppliers.add(supplier))
        logger.info("supplier_created", supplier_id=created.id)
        return created

    async def get_supplier(self, supplier_id: str) -> Supplier:
        async def query(uow: IUnitOfWork) -> Supplier:
            supplier = await uow.suppliers.get(supplier_id)
            if supplier is None:
                raise SupplierNotFoundError(supplier_id)
            return supplier

        return await self._runner.read(query)

    async def list_suppliers(self, limit: int = 100, offset: int = 0) -> list[Supplier]:
        return await self._runner.read(lambda uow: uow.suppliers.list_all(limit, offset))

    # Tools

    async def add_tool(self, tool: Tool) -> Tool:
        if not tool.name.strip():
            raise ValidationError("name", "Tool name is required")
        created = await self._runner.run("add_tool", lambda tx: tx.uow.tools.add(tool))
        logger.info("tool_created", tool_id=created.id)
        return created

    async def get_tool(self, tool_id: str) -> Tool:
        async def query(uow: IUnitOfWork) -> Tool:
            tool = await uow.tools.get(tool_id)
            if tool is None:
                raise ToolNotFoundError(tool_id)
            return tool

        return await self._runner.read(query)

    async def list_tools(self, include_disposed: bool = True) -> list[Tool]:
        return await self._runner.read(lambda uow: uow.tools.list_all(include_disposed))
