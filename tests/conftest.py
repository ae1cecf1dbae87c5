"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from fulfillment.application.services import FulfillmentEngine, build_engine
from fulfillment.config import EngineSettings, Settings, StorageSettings, reset_settings
from fulfillment.core.entities import Client, DomainEvent, Product, Supplier
from fulfillment.core.interfaces import IEventSink
from fulfillment.infrastructure.storage.sqlite import ConnectionPool, SQLiteTransactionalStore
from fulfillment.infrastructure.storage.sqlite.migrations import initialize_database


class RecordingSink(IEventSink):
    """Keeps every published event in memory."""

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    async def recent(self, limit: int = 50) -> list[DomainEvent]:
        return list(reversed(self.events))[:limit]

    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.fixture(autouse=True)
def _reset_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        storage=StorageSettings(data_dir=tmp_path, db_name="test.db", pool_size=2, busy_timeout=5000),
        engine=EngineSettings(retry_delay=0.001, activity_feed="log"),
    )


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with the full schema applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def store(pool: ConnectionPool) -> SQLiteTransactionalStore:
    return SQLiteTransactionalStore(pool)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(
    store: SQLiteTransactionalStore, test_settings: Settings, sink: RecordingSink
) -> FulfillmentEngine:
    """Fully wired engine over a migrated temporary database."""
    return build_engine(store, test_settings, sink)


@pytest.fixture
async def client_record(engine: FulfillmentEngine) -> Client:
    return await engine.catalog.add_client(Client(name="Acme Builders"))


@pytest.fixture
async def supplier_record(engine: FulfillmentEngine) -> Supplier:
    return await engine.catalog.add_supplier(Supplier(name="Northwind Supply"))


@pytest.fixture
def make_product(engine: FulfillmentEngine):
    """Factory: register a product with opening stock."""
    counter = 0

    async def _make(stock: int = 0, **fields) -> Product:
        nonlocal counter
        counter += 1
        fields.setdefault("name", f"Product {counter}")
        fields.setdefault("sku", f"SKU-{counter:03d}")
        return await engine.catalog.add_product(Product(**fields), initial_stock=stock)

    return _make
