"""Committed events recorded in the SQLite activity feed."""

import pytest

from fulfillment.application import build_engine
from fulfillment.core.entities import Client, IssuanceLine, Product
from fulfillment.core.exceptions import InsufficientStockError
from fulfillment.infrastructure.events import SQLiteActivityFeed


@pytest.fixture
def feed(pool) -> SQLiteActivityFeed:
    return SQLiteActivityFeed(pool)


@pytest.fixture
def feed_engine(store, test_settings, feed):
    return build_engine(store, test_settings, feed)


class TestSQLiteActivityFeed:
    async def test_records_committed_events(self, feed_engine, feed):
        client = await feed_engine.catalog.add_client(Client(name="Acme"))
        product = await feed_engine.catalog.add_product(
            Product(name="Cable", sku="CBL-1"), initial_stock=5
        )

        issuance = await feed_engine.issuances.create_issuance(
            client.id, [IssuanceLine(product_id=product.id, quantity=2)], issued_by="alice"
        )

        events = await feed.recent()
        names = [event.name for event in events]
        assert {"product.created", "stock.adjusted", "issuance.created"} <= set(names)
        assert names.index("issuance.created") < names.index("product.created")
        created = next(e for e in events if e.name == "issuance.created")
        assert created.entity_id == issuance.id
        assert created.payload["issuance_number"] == "IS-000001"

    async def test_rolled_back_work_records_nothing(self, feed_engine, feed):
        client = await feed_engine.catalog.add_client(Client(name="Acme"))
        product = await feed_engine.catalog.add_product(Product(name="Cable", sku="CBL-1"))
        before = len(await feed.recent())

        with pytest.raises(InsufficientStockError):
            await feed_engine.issuances.create_issuance(
                client.id, [IssuanceLine(product_id=product.id, quantity=1)], issued_by="alice"
            )

        assert len(await feed.recent()) == before

    async def test_recent_respects_limit(self, feed_engine, feed):
        for n in range(3):
            await feed_engine.catalog.add_product(Product(name=f"P{n}", sku=f"P-{n}"))

        assert len(await feed.recent(limit=2)) == 2
