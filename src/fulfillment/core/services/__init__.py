"""Core business services."""

from fulfillment.core.services.catalog import CatalogService
from fulfillment.core.services.disposal_workflow import (
    DisposalItems,
    DisposalOutcome,
    DisposalWorkflow,
    PartOutOutcome,
)
from fulfillment.core.services.fabrication import FabricationEngine, QCPassedItem
from fulfillment.core.services.installation_scheduler import InstallationScheduler
from fulfillment.core.services.issuance_workflow import IssuanceWorkflow
from fulfillment.core.services.procurement_workflow import (
    ProcurementWorkflow,
    ReceivingResult,
)
from fulfillment.core.services.return_workflow import InspectionResult, ReturnWorkflow
from fulfillment.core.services.stock_ledger import StockLedger, end_of_day
from fulfillment.core.services.transactions import (
    EventPublisher,
    TransactionRunner,
    TransactionScope,
)

__all__ = [
    # Transactions
    "TransactionRunner",
    "TransactionScope",
    "EventPublisher",
    # Ledger
    "StockLedger",
    "end_of_day",
    # Workflows
    "IssuanceWorkflow",
    "ReturnWorkflow",
    "InspectionResult",
    "ProcurementWorkflow",
    "ReceivingResult",
    "DisposalWorkflow",
    "DisposalItems",
    "DisposalOutcome",
    "PartOutOutcome",
    "FabricationEngine",
    "QCPassedItem",
    "InstallationScheduler",
    # Registry
    "CatalogService",
]
