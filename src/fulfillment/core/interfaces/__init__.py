"""Core interfaces (ports) for dependency injection."""

from fulfillment.core.interfaces.event_sink import IEventSink
from fulfillment.core.interfaces.repositories import (
    IClientRepository,
    IDisposalRepository,
    IInstallationRepository,
    IIssuanceRepository,
    IJobOrderRepository,
    IProductRepository,
    IPurchaseOrderRepository,
    IReorderRepository,
    IReturnRepository,
    ISequenceRepository,
    IStockHistoryRepository,
    ISupplierRepository,
    ISupplierReturnRepository,
    IToolRepository,
)
from fulfillment.core.interfaces.unit_of_work import ITransactionalStore, IUnitOfWork

__all__ = [
    # Repositories
    "IProductRepository",
    "IStockHistoryRepository",
    "IClientRepository",
    "ISupplierRepository",
    "IIssuanceRepository",
    "IReturnRepository",
    "IPurchaseOrderRepository",
    "IJobOrderRepository",
    "IInstallationRepository",
    "IToolRepository",
    "IDisposalRepository",
    "IReorderRepository",
    "ISupplierReturnRepository",
    "ISequenceRepository",
    # Transactions
    "IUnitOfWork",
    "ITransactionalStore",
    # Events
    "IEventSink",
]
