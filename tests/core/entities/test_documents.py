"""Unit tests for product and document entities."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from fulfillment.core.entities import (
    Inspection,
    InspectionLine,
    Issuance,
    IssuanceLine,
    JobItemStatus,
    JobOrder,
    JobOrderItem,
    JobOrderStatus,
    Product,
    PurchaseOrder,
    PurchaseOrderLine,
    ReceivingLine,
)


class TestProduct:
    def test_defaults(self):
        product = Product(name="Cable", sku="CBL-1")
        assert product.stock == 0
        assert product.reorder_limit == 10
        assert product.max_stock_level == 100
        assert product.version == 1
        assert len(product.id) == 32

    def test_negative_stock_rejected(self):
        with pytest.raises(PydanticValidationError):
            Product(name="Cable", sku="CBL-1", stock=-1)

    @pytest.mark.parametrize(
        ("stock", "low"),
        [(0, False), (1, True), (10, True), (11, False)],
    )
    def test_is_low_stock(self, stock, low):
        assert Product(name="Cable", sku="CBL-1", stock=stock).is_low_stock is low

    def test_stock_value(self):
        assert Product(name="Cable", sku="CBL-1", stock=4, price=2.5).stock_value == 10.0


class TestIssuance:
    def test_quantities_sum_repeated_products(self):
        issuance = Issuance(
            date=date(2024, 5, 1),
            client_id="c1",
            issued_by="alice",
            items=[
                IssuanceLine(product_id="p1", quantity=2),
                IssuanceLine(product_id="p2", quantity=1),
                IssuanceLine(product_id="p1", quantity=3),
            ],
        )
        assert issuance.quantities() == {"p1": 5, "p2": 1}


class TestInspection:
    def test_unaccounted(self):
        line = InspectionLine(product_id="p1", returned=5, restock=3, disposal=1)
        assert line.unaccounted == 1

    def test_total_unaccounted(self):
        inspection = Inspection(
            date=date(2024, 5, 2),
            inspector="bob",
            lines=[
                InspectionLine(product_id="p1", returned=5, restock=3, disposal=1),
                InspectionLine(product_id="p2", returned=2),
            ],
        )
        assert inspection.total_unaccounted == 3

    def test_negative_split_rejected(self):
        with pytest.raises(PydanticValidationError):
            InspectionLine(product_id="p1", returned=1, restock=-1)


class TestPurchaseOrder:
    def test_total_cost_and_quantities(self):
        order = PurchaseOrder(
            supplier_id="s1",
            order_date=date(2024, 5, 1),
            items=[
                PurchaseOrderLine(product_id="p1", quantity=20, unit_cost=1.5),
                PurchaseOrderLine(product_id="p2", quantity=2, unit_cost=10.0),
            ],
        )
        assert order.total_cost == 50.0
        assert order.quantities() == {"p1": 20, "p2": 2}

    def test_receiving_short(self):
        assert ReceivingLine(product_id="p1", ordered=20, received=15).short == 5


class TestJobOrder:
    def _job(self, *statuses: JobItemStatus) -> JobOrder:
        return JobOrder(
            client_id="c1",
            items=[JobOrderItem(description=f"item {i}", status=s) for i, s in enumerate(statuses)],
        )

    def test_all_pending(self):
        job = self._job(JobItemStatus.PENDING, JobItemStatus.PENDING)
        assert job.rolled_up_status() == JobOrderStatus.PENDING

    def test_any_started_is_in_progress(self):
        job = self._job(JobItemStatus.PENDING, JobItemStatus.COMPLETED)
        assert job.rolled_up_status() == JobOrderStatus.IN_PROGRESS

    def test_all_passed_or_dispatched_is_completed(self):
        job = self._job(JobItemStatus.QC_PASSED, JobItemStatus.DISPATCHED)
        assert job.rolled_up_status() == JobOrderStatus.COMPLETED

    def test_get_item(self):
        job = self._job(JobItemStatus.PENDING)
        item = job.items[0]
        assert job.get_item(item.id) is item
        assert job.get_item("missing") is None
