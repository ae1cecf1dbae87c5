"""Unit of work and transactional store ports."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

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


class IUnitOfWork(ABC):
    """
    Repositories sharing one connection.

    Inside ``ITransactionalStore.transaction()`` everything done through
    these repositories commits or rolls back together.
    """

    products: IProductRepository
    history: IStockHistoryRepository
    clients: IClientRepository
    suppliers: ISupplierRepository
    issuances: IIssuanceRepository
    returns: IReturnRepository
    purchase_orders: IPurchaseOrderRepository
    supplier_returns: ISupplierReturnRepository
    job_orders: IJobOrderRepository
    installations: IInstallationRepository
    tools: IToolRepository
    disposals: IDisposalRepository
    reorders: IReorderRepository
    sequences: ISequenceRepository


class ITransactionalStore(ABC):
    """Document store that hands out units of work."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[IUnitOfWork]:
        """
        Open a serializable write transaction.

        Commits when the block exits normally, rolls back on any exception.
        Raises WriteConflictError when a concurrent writer prevents commit.
        """
        pass

    @abstractmethod
    def reader(self) -> AbstractAsyncContextManager[IUnitOfWork]:
        """Open a read-only unit of work outside any transaction."""
        pass
