"""
End-to-end stock flows against a real SQLite database.

Each test drives the engine the way the API does and checks stock, history
and the events that reached the activity feed.
"""

import asyncio
from datetime import date, timedelta

import pytest

from fulfillment.core.entities import (
    DisposalSelection,
    DisposalSourceType,
    InspectionLine,
    IssuanceLine,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    ReceivingLine,
    ReorderStatus,
    ReturnItem,
    ReturnStatus,
    SalvagePart,
    SupplierReturnLine,
    SupplierReturnStatus,
    Tool,
    ToolStatus,
    utc_now,
)
from fulfillment.core.exceptions import (
    ConflictingStateError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidStateError,
    InvalidTransitionError,
    ReorderNotFoundError,
    ValidationError,
)


async def _stock(engine, product_id: str) -> int:
    return (await engine.catalog.get_product(product_id)).stock


class TestIssuanceFlow:
    async def test_create_then_delete_restores_stock(self, engine, client_record, make_product, sink):
        cable = await make_product(stock=30)
        pipe = await make_product(stock=8)

        issuance = await engine.issuances.create_issuance(
            client_record.id,
            [
                IssuanceLine(product_id=cable.id, quantity=10),
                IssuanceLine(product_id=pipe.id, quantity=3),
                IssuanceLine(product_id=cable.id, quantity=5),
            ],
            issued_by="alice",
        )
        assert issuance.issuance_number == "IS-000001"
        assert await _stock(engine, cable.id) == 15
        assert await _stock(engine, pipe.id) == 5

        await engine.issuances.delete_issuance(issuance.id)

        assert await _stock(engine, cable.id) == 30
        assert await _stock(engine, pipe.id) == 8
        history = await engine.ledger.history(cable.id)
        assert [entry.stock_after for entry in history] == [30, 15, 30]
        assert history[-1].reason == "Reversal of IS-000001"
        assert "issuance.deleted" in sink.names()

    async def test_failed_line_leaves_nothing_behind(self, engine, client_record, make_product, sink):
        cable = await make_product(stock=30)
        pipe = await make_product(stock=2)

        with pytest.raises(InsufficientStockError) as exc_info:
            await engine.issuances.create_issuance(
                client_record.id,
                [
                    IssuanceLine(product_id=cable.id, quantity=10),
                    IssuanceLine(product_id=pipe.id, quantity=3),
                ],
                issued_by="alice",
            )

        assert exc_info.value.details["line"] == 1
        assert await _stock(engine, cable.id) == 30
        assert await engine.issuances.list_issuances() == []
        assert len(await engine.ledger.history(cable.id)) == 1
        assert "issuance.created" not in sink.names()

    async def test_concurrent_issuances_cannot_oversell(self, engine, client_record, make_product):
        product = await make_product(stock=10)

        async def issue():
            return await engine.issuances.create_issuance(
                client_record.id,
                [IssuanceLine(product_id=product.id, quantity=6)],
                issued_by="alice",
            )

        results = await asyncio.gather(issue(), issue(), return_exceptions=True)

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockError)
        assert await _stock(engine, product.id) == 4

    async def test_reorder_requested_once(self, engine, client_record, make_product, sink):
        product = await make_product(stock=12, reorder_limit=5, max_stock_level=40)

        for _ in range(3):
            await engine.issuances.create_issuance(
                client_record.id,
                [IssuanceLine(product_id=product.id, quantity=4)],
                issued_by="alice",
            )

        requests = await engine.catalog.list_reorder_requests()
        assert len(requests) == 1
        assert requests[0].quantity == 36
        assert "stock.low" in sink.names()

    async def test_delete_blocked_by_return(self, engine, client_record, make_product):
        product = await make_product(stock=10)
        issuance = await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=4)], issued_by="alice"
        )
        await engine.returns.initiate_return(
            issuance.id, "wrong size", [ReturnItem(product_id=product.id, quantity=1)]
        )

        with pytest.raises(ConflictingStateError):
            await engine.issuances.delete_issuance(issuance.id)

        assert await _stock(engine, product.id) == 6


class TestReturnFlow:
    @pytest.fixture
    async def issued(self, engine, client_record, make_product):
        product = await make_product(stock=20)
        issuance = await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=5)], issued_by="alice"
        )
        return product, issuance

    async def test_inspection_splits_quantity(self, engine, issued, sink):
        product, issuance = issued
        ret = await engine.returns.initiate_return(
            issuance.id, "damaged in transit", [ReturnItem(product_id=product.id, quantity=5)]
        )
        assert ret.rma_number == "RMA-000001"
        await engine.returns.mark_received(ret.id, processed_by="bob")
        assert await _stock(engine, product.id) == 15

        result = await engine.returns.complete_inspection(
            ret.id,
            [InspectionLine(product_id=product.id, restock=3, disposal=1)],
            inspector="carol",
        )

        assert result.return_record.status == ReturnStatus.COMPLETED
        assert (result.total_restocked, result.total_disposal, result.total_unaccounted) == (3, 1, 1)
        assert await _stock(engine, product.id) == 18
        items = await engine.disposals.list_disposal_items()
        assert [(e.product_id, e.quantity) for e in items.products] == [(product.id, 1)]
        assert "return.inspected" in sink.names()

    async def test_over_split_rejected_atomically(self, engine, issued):
        product, issuance = issued
        ret = await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=2)]
        )
        await engine.returns.mark_received(ret.id)

        with pytest.raises(InvalidQuantityError):
            await engine.returns.complete_inspection(
                ret.id,
                [InspectionLine(product_id=product.id, restock=2, disposal=1)],
                inspector="carol",
            )

        assert await _stock(engine, product.id) == 15
        assert (await engine.returns.get_return(ret.id)).status == ReturnStatus.RECEIVED

    async def test_inspection_requires_received(self, engine, issued):
        product, issuance = issued
        ret = await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=1)]
        )

        with pytest.raises(InvalidStateError):
            await engine.returns.complete_inspection(
                ret.id, [InspectionLine(product_id=product.id, restock=1)], inspector="carol"
            )

    async def test_cannot_return_more_than_issued(self, engine, issued):
        product, issuance = issued
        await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=4)]
        )

        with pytest.raises(InvalidQuantityError) as exc_info:
            await engine.returns.initiate_return(
                issuance.id, "", [ReturnItem(product_id=product.id, quantity=2)]
            )

        assert exc_info.value.details["returnable"] == 1

    async def test_cancelled_return_frees_quantity(self, engine, issued):
        product, issuance = issued
        first = await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=5)]
        )
        await engine.returns.cancel_return(first.id)

        second = await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=5)]
        )

        assert second.status == ReturnStatus.PENDING
        with pytest.raises(InvalidTransitionError):
            await engine.returns.mark_received(first.id)


class TestProcurementFlow:
    async def test_partial_receipt(self, engine, supplier_record, make_product, sink):
        product = await make_product(stock=5)
        order = await engine.procurement.create_purchase_order(
            supplier_record.id, [PurchaseOrderLine(product_id=product.id, quantity=20, unit_cost=2.0)]
        )
        await engine.procurement.mark_shipped(order.id)
        await engine.procurement.mark_delivered(order.id)
        assert await _stock(engine, product.id) == 5

        result = await engine.procurement.complete_po_inspection(
            order.id, [ReceivingLine(product_id=product.id, received=15)], inspector="dave"
        )

        assert result.purchase_order.status == PurchaseOrderStatus.RECEIVED
        assert result.total_short == 5
        assert await _stock(engine, product.id) == 20
        assert "po.received" in sink.names()

        paid = await engine.procurement.pay_purchase_order(order.id, 30.0)
        assert paid.amount_paid == 30.0

    async def test_receiving_more_than_ordered(self, engine, supplier_record, make_product):
        product = await make_product(stock=5)
        order = await engine.procurement.create_purchase_order(
            supplier_record.id, [PurchaseOrderLine(product_id=product.id, quantity=10)]
        )
        await engine.procurement.mark_delivered(order.id)

        with pytest.raises(InvalidQuantityError):
            await engine.procurement.complete_po_inspection(
                order.id, [ReceivingLine(product_id=product.id, received=11)]
            )

        assert await _stock(engine, product.id) == 5

    async def test_cancelled_order_cannot_be_delivered(self, engine, supplier_record, make_product):
        product = await make_product()
        order = await engine.procurement.create_purchase_order(
            supplier_record.id, [PurchaseOrderLine(product_id=product.id, quantity=3)]
        )
        await engine.procurement.cancel_purchase_order(order.id)

        with pytest.raises(InvalidTransitionError):
            await engine.procurement.mark_delivered(order.id)


async def _open_reorder(engine, client_record, make_product):
    """A product issued down to its reorder limit and the request that opened."""
    product = await make_product(stock=12, reorder_limit=5, max_stock_level=40)
    await engine.issuances.create_issuance(
        client_record.id, [IssuanceLine(product_id=product.id, quantity=8)], issued_by="alice"
    )
    [request] = await engine.catalog.list_reorder_requests(ReorderStatus.PENDING)
    return product, request


class TestReorderLifecycle:
    async def test_request_follows_its_purchase_order(
        self, engine, client_record, supplier_record, make_product, sink
    ):
        product, request = await _open_reorder(engine, client_record, make_product)
        assert request.quantity == 36

        order = await engine.procurement.create_purchase_order(
            supplier_record.id,
            [PurchaseOrderLine(product_id=product.id, quantity=36)],
            reorder_ids=[request.id],
        )
        [ordered] = await engine.catalog.list_reorder_requests(ReorderStatus.ORDERED)
        assert ordered.id == request.id
        assert ordered.purchase_order_id == order.id

        # Still low while on order: no second request
        await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=1)], issued_by="alice"
        )
        assert len(await engine.catalog.list_reorder_requests()) == 1

        await engine.procurement.mark_delivered(order.id)
        await engine.procurement.complete_po_inspection(
            order.id, [ReceivingLine(product_id=product.id, received=36)]
        )
        [fulfilled] = await engine.catalog.list_reorder_requests(ReorderStatus.FULFILLED)
        assert fulfilled.id == request.id
        assert "reorder.fulfilled" in sink.names()

        # Restocked to 39; issuing down to the limit again opens a fresh request
        await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=35)], issued_by="alice"
        )
        [reopened] = await engine.catalog.list_reorder_requests(ReorderStatus.PENDING)
        assert reopened.id != request.id
        assert reopened.quantity == 36

    async def test_cancelled_order_puts_request_back(
        self, engine, client_record, supplier_record, make_product
    ):
        product, request = await _open_reorder(engine, client_record, make_product)
        lines = [PurchaseOrderLine(product_id=product.id, quantity=36)]
        first = await engine.procurement.create_purchase_order(
            supplier_record.id, lines, reorder_ids=[request.id]
        )

        await engine.procurement.cancel_purchase_order(first.id)

        [pending] = await engine.catalog.list_reorder_requests(ReorderStatus.PENDING)
        assert pending.id == request.id
        assert pending.purchase_order_id is None
        second = await engine.procurement.create_purchase_order(
            supplier_record.id, lines, reorder_ids=[request.id]
        )
        [ordered] = await engine.catalog.list_reorder_requests(ReorderStatus.ORDERED)
        assert ordered.purchase_order_id == second.id

    async def test_request_cannot_be_ordered_twice(
        self, engine, client_record, supplier_record, make_product
    ):
        product, request = await _open_reorder(engine, client_record, make_product)
        lines = [PurchaseOrderLine(product_id=product.id, quantity=36)]
        await engine.procurement.create_purchase_order(
            supplier_record.id, lines, reorder_ids=[request.id]
        )

        with pytest.raises(InvalidStateError):
            await engine.procurement.create_purchase_order(
                supplier_record.id, lines, reorder_ids=[request.id]
            )

        assert len(await engine.procurement.list_purchase_orders()) == 1

    async def test_request_for_product_not_on_order(
        self, engine, client_record, supplier_record, make_product
    ):
        _, request = await _open_reorder(engine, client_record, make_product)
        other = await make_product()

        with pytest.raises(ValidationError):
            await engine.procurement.create_purchase_order(
                supplier_record.id,
                [PurchaseOrderLine(product_id=other.id, quantity=5)],
                reorder_ids=[request.id],
            )

        [pending] = await engine.catalog.list_reorder_requests()
        assert pending.status == ReorderStatus.PENDING

    async def test_unknown_request(self, engine, supplier_record, make_product):
        product = await make_product()

        with pytest.raises(ReorderNotFoundError):
            await engine.procurement.create_purchase_order(
                supplier_record.id,
                [PurchaseOrderLine(product_id=product.id, quantity=5)],
                reorder_ids=["missing"],
            )


async def _received_order(engine, supplier_record, product, quantity: int = 10):
    order = await engine.procurement.create_purchase_order(
        supplier_record.id, [PurchaseOrderLine(product_id=product.id, quantity=quantity)]
    )
    await engine.procurement.mark_delivered(order.id)
    await engine.procurement.complete_po_inspection(
        order.id, [ReceivingLine(product_id=product.id, received=quantity)]
    )
    return order


class TestSupplierReturnFlow:
    async def test_return_takes_goods_out_of_stock(
        self, engine, supplier_record, make_product, sink
    ):
        product = await make_product(stock=5)
        order = await _received_order(engine, supplier_record, product)

        rts = await engine.procurement.initiate_supplier_return(
            order.id, [SupplierReturnLine(product_id=product.id, quantity=4)], "wrong gauge"
        )

        assert rts.rts_number == "RTS-000001"
        assert rts.status == SupplierReturnStatus.PENDING
        assert rts.po_number == order.po_number
        assert await _stock(engine, product.id) == 11
        history = await engine.ledger.history(product.id)
        assert history[-1].reason == "Returned to supplier on RTS-000001"
        assert "supplier_return.initiated" in sink.names()

        await engine.procurement.ship_supplier_return(rts.id)
        done = await engine.procurement.complete_supplier_return(rts.id)
        assert done.status == SupplierReturnStatus.COMPLETED
        assert done.date_shipped is not None
        assert await _stock(engine, product.id) == 11

    async def test_insufficient_stock_rejects_return(
        self, engine, client_record, supplier_record, make_product
    ):
        product = await make_product()
        order = await _received_order(engine, supplier_record, product)
        await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=8)], issued_by="alice"
        )

        with pytest.raises(InsufficientStockError) as exc_info:
            await engine.procurement.initiate_supplier_return(
                order.id, [SupplierReturnLine(product_id=product.id, quantity=5)], "damaged"
            )

        assert exc_info.value.details["available"] == 2
        assert await _stock(engine, product.id) == 2
        assert await engine.procurement.list_supplier_returns() == []

    async def test_cannot_return_more_than_received(self, engine, supplier_record, make_product):
        product = await make_product(stock=50)
        order = await _received_order(engine, supplier_record, product)
        await engine.procurement.initiate_supplier_return(
            order.id, [SupplierReturnLine(product_id=product.id, quantity=6)], "damaged"
        )

        with pytest.raises(InvalidQuantityError) as exc_info:
            await engine.procurement.initiate_supplier_return(
                order.id, [SupplierReturnLine(product_id=product.id, quantity=5)], "damaged"
            )

        assert exc_info.value.details["returnable"] == 4
        assert await _stock(engine, product.id) == 54

    async def test_cancel_restores_stock_and_returnable(
        self, engine, supplier_record, make_product
    ):
        product = await make_product()
        order = await _received_order(engine, supplier_record, product)
        lines = [SupplierReturnLine(product_id=product.id, quantity=10)]
        rts = await engine.procurement.initiate_supplier_return(order.id, lines, "damaged")
        assert await _stock(engine, product.id) == 0

        cancelled = await engine.procurement.cancel_supplier_return(rts.id)

        assert cancelled.status == SupplierReturnStatus.CANCELLED
        assert await _stock(engine, product.id) == 10
        again = await engine.procurement.initiate_supplier_return(order.id, lines, "damaged")
        assert again.rts_number == "RTS-000002"

    async def test_only_received_orders(self, engine, supplier_record, make_product):
        product = await make_product(stock=10)
        order = await engine.procurement.create_purchase_order(
            supplier_record.id, [PurchaseOrderLine(product_id=product.id, quantity=5)]
        )

        with pytest.raises(InvalidStateError):
            await engine.procurement.initiate_supplier_return(
                order.id, [SupplierReturnLine(product_id=product.id, quantity=1)], "damaged"
            )

    async def test_shipped_return_cannot_be_cancelled(
        self, engine, supplier_record, make_product
    ):
        product = await make_product()
        order = await _received_order(engine, supplier_record, product)
        rts = await engine.procurement.initiate_supplier_return(
            order.id, [SupplierReturnLine(product_id=product.id, quantity=2)], "damaged"
        )
        await engine.procurement.ship_supplier_return(rts.id)

        with pytest.raises(InvalidTransitionError):
            await engine.procurement.cancel_supplier_return(rts.id)

        assert await _stock(engine, product.id) == 8


class TestDisposalFlow:
    async def test_disposal_keeps_stock_and_is_idempotent(self, engine, client_record, make_product):
        product = await make_product(stock=10)
        issuance = await engine.issuances.create_issuance(
            client_record.id, [IssuanceLine(product_id=product.id, quantity=3)], issued_by="alice"
        )
        ret = await engine.returns.initiate_return(
            issuance.id, "", [ReturnItem(product_id=product.id, quantity=3)]
        )
        await engine.returns.mark_received(ret.id)
        await engine.returns.complete_inspection(
            ret.id, [InspectionLine(product_id=product.id, disposal=3)], inspector="carol"
        )
        items = await engine.disposals.list_disposal_items()
        chosen = [
            DisposalSelection(source_type=DisposalSourceType.PRODUCT, source_id=items.products[0].id)
        ]
        first = await engine.disposals.dispose_items(chosen, "crushed", "erin")
        again = await engine.disposals.dispose_items(chosen, "crushed", "erin")

        assert len(first.records) == 1
        assert again.records == [] and len(again.skipped) == 1
        assert await _stock(engine, product.id) == 7
        assert len(await engine.disposals.list_disposal_records()) == 1


class TestPointInTimeQueries:
    async def test_stock_as_of(self, engine, make_product):
        product = await make_product(stock=10, price=2.5)
        today = utc_now().date()
        await engine.ledger.adjust(product.id, -4, reason="cycle count", actor="frank")

        assert await engine.ledger.stock_as_of(product.id, today - timedelta(days=1)) == 0
        assert await engine.ledger.stock_as_of(product.id, today) == 6
        assert await engine.ledger.inventory_value_as_of(today) == pytest.approx(15.0)
        assert await engine.ledger.inventory_value_as_of(date(2000, 1, 1)) == 0.0


class TestPartOutFlow:
    async def test_part_out_disposes_tool_and_logs_parts(self, engine, sink):
        drill = await engine.catalog.add_tool(Tool(name="Drill", serial_number="D-1"))

        outcome = await engine.disposals.part_out_tools(
            [drill.id], [SalvagePart(name="Motor"), SalvagePart(name="Chuck")], "erin"
        )

        assert len(outcome.records) == 1
        assert (await engine.catalog.get_tool(drill.id)).status == ToolStatus.DISPOSED
        parts = await engine.disposals.list_salvaged_parts(drill.id)
        assert sorted(p.name for p in parts) == ["Chuck", "Motor"]
        records = await engine.disposals.list_disposal_records()
        assert records[0].reason == "For Parts Out"
        assert "tools.parted_out" in sink.names()

    async def test_disposed_tool_cannot_be_parted_out(self, engine):
        drill = await engine.catalog.add_tool(Tool(name="Drill"))
        await engine.disposals.part_out_tools([drill.id], [SalvagePart(name="Motor")], "erin")

        with pytest.raises(InvalidStateError):
            await engine.disposals.part_out_tools([drill.id], [SalvagePart(name="Motor")], "erin")

        assert len(await engine.disposals.list_salvaged_parts()) == 1
