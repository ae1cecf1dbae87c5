"""
Service factory functions for dependency injection.

Wires the SQLite store, the activity feed sink and settings into the core
services. The API depends on ``get_fulfillment_engine``; tests build their
own engine with ``build_engine``.
"""

from dataclasses import dataclass

from fulfillment.config import Settings, get_settings
from fulfillment.core.interfaces import IEventSink, ITransactionalStore
from fulfillment.core.services import (
    CatalogService,
    DisposalWorkflow,
    EventPublisher,
    FabricationEngine,
    InstallationScheduler,
    IssuanceWorkflow,
    ProcurementWorkflow,
    ReturnWorkflow,
    StockLedger,
    TransactionRunner,
)


@dataclass
class FulfillmentEngine:
    """Every engine service, sharing one runner and ledger."""

    runner: TransactionRunner
    ledger: StockLedger
    catalog: CatalogService
    issuances: IssuanceWorkflow
    returns: ReturnWorkflow
    procurement: ProcurementWorkflow
    disposals: DisposalWorkflow
    fabrication: FabricationEngine
    installations: InstallationScheduler
    sink: IEventSink | None = None


def build_engine(
    store: ITransactionalStore,
    settings: Settings | None = None,
    sink: IEventSink | None = None,
) -> FulfillmentEngine:
    """
    Assemble the engine over a store.

    Args:
        store: Transactional document store
        settings: Engine settings (default: global settings)
        sink: Activity feed for committed events (default: none)
    """
    engine_settings = (settings or get_settings()).engine
    runner = TransactionRunner(
        store,
        publisher=EventPublisher(sink, timeout=engine_settings.event_publish_timeout),
        max_attempts=engine_settings.max_transaction_attempts,
        retry_delay=engine_settings.retry_delay,
        retry_multiplier=engine_settings.retry_multiplier,
    )
    ledger = StockLedger(runner, low_stock_alerts=engine_settings.low_stock_alerts)

    return FulfillmentEngine(
        runner=runner,
        ledger=ledger,
        catalog=CatalogService(runner, ledger),
        issuances=IssuanceWorkflow(runner, ledger, auto_reorder=engine_settings.auto_reorder),
        returns=ReturnWorkflow(runner, ledger),
        procurement=ProcurementWorkflow(runner, ledger),
        disposals=DisposalWorkflow(runner),
        fabrication=FabricationEngine(runner),
        installations=InstallationScheduler(runner),
        sink=sink,
    )


# Singleton engine instance
_engine: FulfillmentEngine | None = None


def get_fulfillment_engine() -> FulfillmentEngine:
    """Get or create the engine over the global SQLite pool."""
    global _engine
    if _engine is None:
        # Lazy import infrastructure to keep the core importable on its own
        from fulfillment.infrastructure.events import SQLiteActivityFeed, StructlogEventSink
        from fulfillment.infrastructure.storage.sqlite import get_transactional_store

        settings = get_settings()
        sink: IEventSink = (
            SQLiteActivityFeed()
            if settings.engine.activity_feed == "sqlite"
            else StructlogEventSink()
        )
        _engine = build_engine(get_transactional_store(), settings, sink)
    return _engine


def reset_fulfillment_engine() -> None:
    """Reset the engine singleton (for testing)."""
    global _engine
    _engine = None
