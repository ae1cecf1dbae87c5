"""Core domain entities."""

from fulfillment.core.entities.common import LifecycleStatus, new_id, utc_now
from fulfillment.core.entities.disposal import (
    DisposalEligibleQuantity,
    DisposalRecord,
    DisposalSelection,
    DisposalSourceType,
    SalvagedPart,
    SalvagePart,
    Tool,
    ToolStatus,
)
from fulfillment.core.entities.events import DomainEvent
from fulfillment.core.entities.fabrication import (
    JobItemStatus,
    JobOrder,
    JobOrderItem,
    JobOrderStatus,
)
from fulfillment.core.entities.installation import (
    Installation,
    InstallationItemRef,
    InstallationStatus,
)
from fulfillment.core.entities.issuance import Issuance, IssuanceLine
from fulfillment.core.entities.party import Client, Supplier
from fulfillment.core.entities.product import (
    DEFAULT_MAX_STOCK_LEVEL,
    DEFAULT_REORDER_LIMIT,
    Product,
    ReorderRequest,
    ReorderStatus,
    StockHistoryEntry,
)
from fulfillment.core.entities.purchase_order import (
    PaymentStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    ReceivingInspection,
    ReceivingLine,
)
from fulfillment.core.entities.returns import (
    Inspection,
    InspectionLine,
    Return,
    ReturnItem,
    ReturnStatus,
)
from fulfillment.core.entities.supplier_return import (
    SupplierReturn,
    SupplierReturnLine,
    SupplierReturnStatus,
)

__all__ = [
    # Common
    "LifecycleStatus",
    "new_id",
    "utc_now",
    # Product
    "Product",
    "StockHistoryEntry",
    "ReorderRequest",
    "ReorderStatus",
    "DEFAULT_REORDER_LIMIT",
    "DEFAULT_MAX_STOCK_LEVEL",
    # Parties
    "Client",
    "Supplier",
    # Issuance
    "Issuance",
    "IssuanceLine",
    # Returns
    "Return",
    "ReturnItem",
    "ReturnStatus",
    "Inspection",
    "InspectionLine",
    # Purchase orders
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
    "PaymentStatus",
    "ReceivingInspection",
    "ReceivingLine",
    # Returns to supplier
    "SupplierReturn",
    "SupplierReturnLine",
    "SupplierReturnStatus",
    # Fabrication
    "JobOrder",
    "JobOrderItem",
    "JobItemStatus",
    "JobOrderStatus",
    # Installation
    "Installation",
    "InstallationItemRef",
    "InstallationStatus",
    # Disposal
    "DisposalEligibleQuantity",
    "DisposalRecord",
    "DisposalSelection",
    "DisposalSourceType",
    "SalvagePart",
    "SalvagedPart",
    "Tool",
    "ToolStatus",
    # Events
    "DomainEvent",
]
