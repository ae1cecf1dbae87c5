"""
Abstract repository interfaces.

Repositories are bound to one unit of work and never commit on their own.
Updates of versioned records (products, documents) are conditional on the
version that was read and raise ``WriteConflictError`` when another writer
changed the row first.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from fulfillment.core.entities import (
    Client,
    DisposalEligibleQuantity,
    DisposalRecord,
    Installation,
    Issuance,
    JobItemStatus,
    JobOrder,
    Product,
    PurchaseOrder,
    ReorderRequest,
    ReorderStatus,
    Return,
    ReturnStatus,
    SalvagedPart,
    StockHistoryEntry,
    Supplier,
    SupplierReturn,
    SupplierReturnStatus,
    Tool,
)


class IProductRepository(ABC):
    """Product persistence."""

    @abstractmethod
    async def add(self, product: Product) -> Product:
        """Insert a new product. Raises DuplicateError on SKU clash."""
        pass

    @abstractmethod
    async def get(self, product_id: str) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU."""
        pass

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """Write product fields if its version is unchanged; returns the bumped copy."""
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products ordered by name."""
        pass

    @abstractmethod
    async def list_low_stock(self, limit: int = 100) -> list[Product]:
        """List in-stock products at or below their reorder limit."""
        pass


class IStockHistoryRepository(ABC):
    """Append-only stock history."""

    @abstractmethod
    async def append(self, entry: StockHistoryEntry) -> StockHistoryEntry:
        """Append one history entry."""
        pass

    @abstractmethod
    async def list_for_product(self, product_id: str) -> list[StockHistoryEntry]:
        """Full history for a product, oldest first."""
        pass

    @abstractmethod
    async def last_entry(self, product_id: str) -> StockHistoryEntry | None:
        """Most recently recorded entry."""
        pass

    @abstractmethod
    async def latest_at_or_before(
        self, product_id: str, cutoff: datetime
    ) -> StockHistoryEntry | None:
        """Latest entry with ``recorded_at <= cutoff``."""
        pass


class IClientRepository(ABC):
    @abstractmethod
    async def add(self, client: Client) -> Client:
        pass

    @abstractmethod
    async def get(self, client_id: str) -> Client | None:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Client]:
        pass


class ISupplierRepository(ABC):
    @abstractmethod
    async def add(self, supplier: Supplier) -> Supplier:
        pass

    @abstractmethod
    async def get(self, supplier_id: str) -> Supplier | None:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Supplier]:
        pass


class IIssuanceRepository(ABC):
    """Issuance persistence."""

    @abstractmethod
    async def add(self, issuance: Issuance) -> Issuance:
        pass

    @abstractmethod
    async def get(self, issuance_id: str) -> Issuance | None:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Issuance]:
        """List issuances, newest first."""
        pass

    @abstractmethod
    async def delete(self, issuance: Issuance) -> None:
        """Delete the issuance if its version is unchanged."""
        pass


class IReturnRepository(ABC):
    """Return (RMA) persistence."""

    @abstractmethod
    async def add(self, ret: Return) -> Return:
        pass

    @abstractmethod
    async def get(self, return_id: str) -> Return | None:
        pass

    @abstractmethod
    async def update(self, ret: Return) -> Return:
        pass

    @abstractmethod
    async def delete(self, ret: Return) -> None:
        pass

    @abstractmethod
    async def list_all(
        self, status: ReturnStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Return]:
        pass

    @abstractmethod
    async def list_for_issuance(self, issuance_id: str) -> list[Return]:
        """All returns raised against an issuance, any status."""
        pass


class IPurchaseOrderRepository(ABC):
    @abstractmethod
    async def add(self, order: PurchaseOrder) -> PurchaseOrder:
        pass

    @abstractmethod
    async def get(self, po_id: str) -> PurchaseOrder | None:
        pass

    @abstractmethod
    async def update(self, order: PurchaseOrder) -> PurchaseOrder:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[PurchaseOrder]:
        pass


class IJobOrderRepository(ABC):
    """Job orders and their embedded items."""

    @abstractmethod
    async def add(self, job: JobOrder) -> JobOrder:
        pass

    @abstractmethod
    async def get(self, job_id: str) -> JobOrder | None:
        pass

    @abstractmethod
    async def update(self, job: JobOrder) -> JobOrder:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[JobOrder]:
        pass

    @abstractmethod
    async def list_with_item_status(self, status: JobItemStatus) -> list[JobOrder]:
        """Job orders having at least one item in ``status``."""
        pass


class IInstallationRepository(ABC):
    @abstractmethod
    async def add(self, installation: Installation) -> Installation:
        pass

    @abstractmethod
    async def get(self, installation_id: str) -> Installation | None:
        pass

    @abstractmethod
    async def update(self, installation: Installation) -> Installation:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100, offset: int = 0) -> list[Installation]:
        pass


class IToolRepository(ABC):
    @abstractmethod
    async def add(self, tool: Tool) -> Tool:
        pass

    @abstractmethod
    async def get(self, tool_id: str) -> Tool | None:
        pass

    @abstractmethod
    async def update(self, tool: Tool) -> Tool:
        pass

    @abstractmethod
    async def list_all(self, include_disposed: bool = True) -> list[Tool]:
        pass


class IDisposalRepository(ABC):
    """Disposal-eligible quantities and the disposal log."""

    @abstractmethod
    async def add_eligible(
        self, eligible: DisposalEligibleQuantity
    ) -> DisposalEligibleQuantity:
        pass

    @abstractmethod
    async def get_eligible(self, eligible_id: str) -> DisposalEligibleQuantity | None:
        pass

    @abstractmethod
    async def mark_disposed(
        self, eligible_id: str, disposed_at: datetime
    ) -> bool:
        """Flag an eligible quantity as disposed. False if it already was."""
        pass

    @abstractmethod
    async def list_eligible(
        self, include_disposed: bool = False
    ) -> list[DisposalEligibleQuantity]:
        pass

    @abstractmethod
    async def add_record(self, record: DisposalRecord) -> DisposalRecord:
        pass

    @abstractmethod
    async def list_records(self, limit: int = 100, offset: int = 0) -> list[DisposalRecord]:
        """Disposal log, newest first."""
        pass

    @abstractmethod
    async def add_salvaged_part(self, part: SalvagedPart) -> SalvagedPart:
        pass

    @abstractmethod
    async def list_salvaged_parts(self, tool_id: str | None = None) -> list[SalvagedPart]:
        """Salvaged parts, newest first, optionally for one tool."""
        pass


class IReorderRepository(ABC):
    @abstractmethod
    async def add(self, request: ReorderRequest) -> ReorderRequest:
        pass

    @abstractmethod
    async def get(self, reorder_id: str) -> ReorderRequest | None:
        pass

    @abstractmethod
    async def update(self, request: ReorderRequest) -> ReorderRequest:
        """Write status, quantity and purchase order link."""
        pass

    @abstractmethod
    async def find_active(self, product_id: str) -> ReorderRequest | None:
        """Pending or Ordered request for a product, if any."""
        pass

    @abstractmethod
    async def list_all(self, status: ReorderStatus | None = None) -> list[ReorderRequest]:
        pass

    @abstractmethod
    async def list_for_purchase_order(self, po_id: str) -> list[ReorderRequest]:
        """Requests linked to a purchase order."""
        pass


class ISupplierReturnRepository(ABC):
    """Returns to supplier."""

    @abstractmethod
    async def add(self, supplier_return: SupplierReturn) -> SupplierReturn:
        pass

    @abstractmethod
    async def get(self, return_id: str) -> SupplierReturn | None:
        pass

    @abstractmethod
    async def update(self, supplier_return: SupplierReturn) -> SupplierReturn:
        pass

    @abstractmethod
    async def list_all(
        self, status: SupplierReturnStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[SupplierReturn]:
        pass

    @abstractmethod
    async def list_for_purchase_order(self, po_id: str) -> list[SupplierReturn]:
        """All returns raised against a purchase order, any status."""
        pass


class ISequenceRepository(ABC):
    @abstractmethod
    async def next_value(self, name: str) -> int:
        """Increment and return the named counter (first value is 1)."""
        pass
