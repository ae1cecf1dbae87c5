"""Fixtures for service unit tests: an in-memory store over AsyncMock repositories."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from fulfillment.core.exceptions import WriteConflictError
from fulfillment.core.interfaces import ITransactionalStore, IUnitOfWork
from fulfillment.core.services import EventPublisher, StockLedger, TransactionRunner

REPOSITORIES = (
    "products",
    "history",
    "clients",
    "suppliers",
    "issuances",
    "returns",
    "purchase_orders",
    "supplier_returns",
    "job_orders",
    "installations",
    "tools",
    "disposals",
    "reorders",
    "sequences",
)


class FakeStore(ITransactionalStore):
    """
    Hands out the same mocked unit of work for every transaction.

    ``conflicts`` makes the next N transactions fail to open with a write
    conflict, the way a busy SQLite database does.
    """

    def __init__(self, uow: IUnitOfWork):
        self.uow = uow
        self.conflicts = 0
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[IUnitOfWork]:
        if self.conflicts:
            self.conflicts -= 1
            raise WriteConflictError("database", reason="database is locked")
        try:
            yield self.uow
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[IUnitOfWork]:
        yield self.uow


@pytest.fixture
def mock_uow() -> MagicMock:
    uow = MagicMock(spec=IUnitOfWork)
    for name in REPOSITORIES:
        setattr(uow, name, AsyncMock())
    uow.history.last_entry.return_value = None
    uow.reorders.find_active.return_value = None
    uow.returns.list_for_issuance.return_value = []
    uow.sequences.next_value.return_value = 1
    # Repositories that persist return what they were given
    uow.products.update.side_effect = lambda p: p.model_copy(update={"version": p.version + 1})
    uow.issuances.add.side_effect = lambda i: i
    uow.reorders.add.side_effect = lambda r: r
    uow.reorders.update.side_effect = lambda r: r
    uow.reorders.list_for_purchase_order.return_value = []
    uow.history.append.side_effect = lambda e: e
    return uow


@pytest.fixture
def fake_store(mock_uow: MagicMock) -> FakeStore:
    return FakeStore(mock_uow)


@pytest.fixture
def mock_sink() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def runner(fake_store: FakeStore, mock_sink: AsyncMock) -> TransactionRunner:
    return TransactionRunner(
        fake_store, publisher=EventPublisher(mock_sink), max_attempts=3, retry_delay=0.001
    )


@pytest.fixture
def ledger(runner: TransactionRunner) -> StockLedger:
    return StockLedger(runner)


@pytest.fixture
def published(mock_sink: AsyncMock):
    """Names of the events delivered to the sink so far."""

    def _names() -> list[str]:
        return [call.args[0].name for call in mock_sink.publish.await_args_list]

    return _names
