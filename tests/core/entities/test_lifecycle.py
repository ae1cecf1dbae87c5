"""Unit tests for status enums and their transition tables."""

import pytest

from fulfillment.core.entities import (
    InstallationStatus,
    JobItemStatus,
    PaymentStatus,
    PurchaseOrderStatus,
    ReorderStatus,
    ReturnStatus,
    SupplierReturnStatus,
)


class TestReturnStatus:
    def test_all_statuses_exist(self):
        assert {s.value for s in ReturnStatus} == {"Pending", "Received", "Completed", "Cancelled"}

    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            (ReturnStatus.PENDING, ReturnStatus.RECEIVED, True),
            (ReturnStatus.PENDING, ReturnStatus.CANCELLED, True),
            (ReturnStatus.PENDING, ReturnStatus.COMPLETED, False),
            (ReturnStatus.RECEIVED, ReturnStatus.COMPLETED, True),
            (ReturnStatus.RECEIVED, ReturnStatus.CANCELLED, False),
            (ReturnStatus.COMPLETED, ReturnStatus.PENDING, False),
        ],
    )
    def test_transitions(self, current, target, allowed):
        assert current.can_transition_to(target) is allowed

    def test_terminal_statuses(self):
        assert ReturnStatus.COMPLETED.is_terminal
        assert ReturnStatus.CANCELLED.is_terminal
        assert not ReturnStatus.PENDING.is_terminal


class TestPurchaseOrderStatus:
    def test_delivery_can_skip_shipping(self):
        assert PurchaseOrderStatus.PENDING.can_transition_to(PurchaseOrderStatus.DELIVERED)

    def test_received_only_after_delivery(self):
        assert not PurchaseOrderStatus.PENDING.can_transition_to(PurchaseOrderStatus.RECEIVED)
        assert not PurchaseOrderStatus.SHIPPED.can_transition_to(PurchaseOrderStatus.RECEIVED)
        assert PurchaseOrderStatus.DELIVERED.can_transition_to(PurchaseOrderStatus.RECEIVED)

    def test_delivered_cannot_be_cancelled(self):
        assert not PurchaseOrderStatus.DELIVERED.can_transition_to(PurchaseOrderStatus.CANCELLED)

    def test_payment(self):
        assert PaymentStatus.UNPAID.can_transition_to(PaymentStatus.PAID)
        assert PaymentStatus.PAID.is_terminal


class TestJobItemStatus:
    def test_single_step_chain(self):
        chain = list(JobItemStatus)
        for current, following in zip(chain, chain[1:]):
            assert current.can_transition_to(following)

    def test_no_skipping_or_going_back(self):
        assert not JobItemStatus.PENDING.can_transition_to(JobItemStatus.COMPLETED)
        assert not JobItemStatus.COMPLETED.can_transition_to(JobItemStatus.IN_PROGRESS)

    def test_dispatched_is_terminal(self):
        assert JobItemStatus.DISPATCHED.is_terminal


class TestOtherStatuses:
    def test_installation_chain(self):
        assert InstallationStatus.SCHEDULED.can_transition_to(InstallationStatus.IN_PROGRESS)
        assert not InstallationStatus.SCHEDULED.can_transition_to(InstallationStatus.COMPLETED)

    def test_reorder_active(self):
        assert set(ReorderStatus.active()) == {ReorderStatus.PENDING, ReorderStatus.ORDERED}

    def test_reorder_reopens_only_from_ordered(self):
        assert ReorderStatus.ORDERED.can_transition_to(ReorderStatus.PENDING)
        assert not ReorderStatus.FULFILLED.can_transition_to(ReorderStatus.PENDING)

    def test_supplier_return_chain(self):
        assert SupplierReturnStatus.PENDING.can_transition_to(SupplierReturnStatus.SHIPPED)
        assert SupplierReturnStatus.SHIPPED.can_transition_to(SupplierReturnStatus.COMPLETED)
        assert not SupplierReturnStatus.SHIPPED.can_transition_to(SupplierReturnStatus.CANCELLED)
        assert SupplierReturnStatus.CANCELLED.is_terminal
