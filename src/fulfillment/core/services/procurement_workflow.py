"""
Procurement receiving workflow.

Purchase orders move Pending -> Shipped -> Delivered without touching
stock. The receiving inspection credits what actually arrived, never more
than was ordered, and closes the order as Received in the same transaction.

Reorder requests named when an order is placed move to Ordered with it,
to Fulfilled when it is received and back to Pending if it is cancelled.
Received goods can be sent back to the supplier (RTS); stock leaves when
the return is initiated.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    PaymentStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    ReceivingInspection,
    ReceivingLine,
    ReorderRequest,
    ReorderStatus,
    SupplierReturn,
    SupplierReturnLine,
    SupplierReturnStatus,
    utc_now,
)
from fulfillment.core.exceptions import (
    InvalidQuantityError,
    InvalidStateError,
    InvalidTransitionError,
    ProductNotFoundError,
    PurchaseOrderNotFoundError,
    ReorderNotFoundError,
    SupplierNotFoundError,
    SupplierReturnNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.line_items import validate_lines
from fulfillment.core.services.stock_ledger import StockLedger
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


@dataclass
class ReceivingResult:
    purchase_order: PurchaseOrder
    lines: list[ReceivingLine]

    @property
    def total_received(self) -> int:
        return sum(line.received for line in self.lines)

    @property
    def total_short(self) -> int:
        return sum(line.short for line in self.lines)


class ProcurementWorkflow:
    """Purchase order lifecycle and receiving."""

    def __init__(self, runner: TransactionRunner, ledger: StockLedger):
        self._runner = runner
        self._ledger = ledger

    async def _load(self, uow: IUnitOfWork, po_id: str) -> PurchaseOrder:
        order = await uow.purchase_orders.get(po_id)
        if order is None:
            raise PurchaseOrderNotFoundError(po_id)
        return order

    async def _load_reorder(self, uow: IUnitOfWork, reorder_id: str) -> ReorderRequest:
        request = await uow.reorders.get(reorder_id)
        if request is None:
            raise ReorderNotFoundError(reorder_id)
        return request

    async def _settle_reorders(
        self, tx: TransactionScope, order: PurchaseOrder, status: ReorderStatus
    ) -> list[str]:
        """Move the order's Ordered requests to ``status``; Pending drops the link."""
        moved = []
        for request in await tx.uow.reorders.list_for_purchase_order(order.id):
            if request.status != ReorderStatus.ORDERED:
                continue
            changes: dict = {"status": status}
            if status == ReorderStatus.PENDING:
                changes["purchase_order_id"] = None
            await tx.uow.reorders.update(request.model_copy(update=changes))
            moved.append(request.id)
        if moved:
            tx.emit(
                "reorder.fulfilled" if status == ReorderStatus.FULFILLED else "reorder.reopened",
                order.id,
                po_number=order.po_number,
                reorder_ids=moved,
            )
        return moved

    async def create_purchase_order(
        self,
        supplier_id: str,
        items: Sequence[PurchaseOrderLine],
        expected_date: date | None = None,
        order_date: date | None = None,
        reorder_ids: Sequence[str] = (),
    ) -> PurchaseOrder:
        """
        Place a Pending order with a supplier. One line per product.

        Each request in ``reorder_ids`` must be Pending and for a product on
        the order; it moves to Ordered in the same transaction.

        Raises:
            ReorderNotFoundError: Unknown reorder request
            InvalidStateError: A request is already Ordered or Fulfilled
            ValidationError: A request's product is not on the order
        """
        validate_lines(items, allow_repeats=False)
        reorder_ids = list(dict.fromkeys(reorder_ids))
        today = utc_now().date()
        if expected_date and expected_date < (order_date or today):
            raise ValidationError(
                "expected_date", "Expected date is before the order date", expected_date
            )

        async def work(tx: TransactionScope) -> PurchaseOrder:
            if await tx.uow.suppliers.get(supplier_id) is None:
                raise SupplierNotFoundError(supplier_id)
            for index, item in enumerate(items):
                if await tx.uow.products.get(item.product_id) is None:
                    raise ProductNotFoundError(item.product_id, line=index)

            number = await tx.uow.sequences.next_value("purchase_order")
            order = await tx.uow.purchase_orders.add(
                PurchaseOrder(
                    po_number=f"PO-{number:06d}",
                    supplier_id=supplier_id,
                    items=list(items),
                    order_date=order_date or today,
                    expected_date=expected_date,
                )
            )
            ordered = order.quantities()
            for reorder_id in reorder_ids:
                request = await self._load_reorder(tx.uow, reorder_id)
                if request.status != ReorderStatus.PENDING:
                    raise InvalidStateError(
                        "reorder",
                        reorder_id,
                        request.status.value,
                        expected=[ReorderStatus.PENDING.value],
                    )
                if request.product_id not in ordered:
                    raise ValidationError(
                        "reorder_ids",
                        f"Reorder product is not on {order.po_number}",
                        reorder_id,
                    )
                await tx.uow.reorders.update(
                    request.model_copy(
                        update={"status": ReorderStatus.ORDERED, "purchase_order_id": order.id}
                    )
                )
            tx.emit(
                "po.created",
                order.id,
                po_number=order.po_number,
                supplier_id=supplier_id,
                total_cost=order.total_cost,
                reorder_ids=reorder_ids,
            )
            return order

        order = await self._runner.run("create_purchase_order", work)
        logger.info("purchase_order_created", po_id=order.id, po_number=order.po_number)
        return order

    async def _transition(
        self, operation: str, po_id: str, target: PurchaseOrderStatus, event: str
    ) -> PurchaseOrder:
        async def work(tx: TransactionScope) -> PurchaseOrder:
            order = await self._load(tx.uow, po_id)
            if not order.status.can_transition_to(target):
                raise InvalidTransitionError(
                    "purchase_order", po_id, order.status.value, target.value
                )
            changes: dict = {"status": target}
            if target == PurchaseOrderStatus.DELIVERED:
                changes["received_date"] = utc_now().date()
            updated = await tx.uow.purchase_orders.update(order.model_copy(update=changes))
            if target == PurchaseOrderStatus.CANCELLED:
                await self._settle_reorders(tx, order, ReorderStatus.PENDING)
            tx.emit(event, po_id, po_number=order.po_number)
            return updated

        order = await self._runner.run(operation, work)
        logger.info(operation, po_id=po_id, status=order.status.value)
        return order

    async def mark_shipped(self, po_id: str) -> PurchaseOrder:
        return await self._transition(
            "mark_po_shipped", po_id, PurchaseOrderStatus.SHIPPED, "po.shipped"
        )

    async def mark_delivered(self, po_id: str) -> PurchaseOrder:
        """Pending/Shipped -> Delivered. Goods are on site, stock unchanged."""
        return await self._transition(
            "mark_po_delivered", po_id, PurchaseOrderStatus.DELIVERED, "po.delivered"
        )

    async def cancel_purchase_order(self, po_id: str) -> PurchaseOrder:
        return await self._transition(
            "cancel_purchase_order", po_id, PurchaseOrderStatus.CANCELLED, "po.cancelled"
        )

    async def complete_po_inspection(
        self,
        po_id: str,
        lines: Sequence[ReceivingLine],
        inspector: str | None = None,
    ) -> ReceivingResult:
        """
        Credit received quantities and close a delivered order.

        Products on the order but absent from ``lines`` are received as 0.

        Raises:
            InvalidStateError: Order is not Delivered
            ValidationError: A line names a product not on the order
            InvalidQuantityError: Received exceeds ordered on any line
        """
        seen: set[str] = set()
        for index, line in enumerate(lines):
            if line.product_id in seen:
                raise ValidationError(
                    "product_id", "Product inspected more than once", line.product_id, line=index
                )
            seen.add(line.product_id)

        async def work(tx: TransactionScope) -> ReceivingResult:
            order = await self._load(tx.uow, po_id)
            if order.status != PurchaseOrderStatus.DELIVERED:
                raise InvalidStateError(
                    "purchase_order",
                    po_id,
                    order.status.value,
                    expected=[PurchaseOrderStatus.DELIVERED.value],
                )

            ordered = order.quantities()
            received: dict[str, int] = {}
            for index, line in enumerate(lines):
                if line.product_id not in ordered:
                    raise ValidationError(
                        "product_id",
                        f"Product is not on {order.po_number}",
                        line.product_id,
                        line=index,
                    )
                if line.received > ordered[line.product_id]:
                    raise InvalidQuantityError(
                        line.product_id,
                        f"received {line.received} exceeds ordered {ordered[line.product_id]}",
                        line=index,
                        ordered=ordered[line.product_id],
                        received=line.received,
                    )
                received[line.product_id] = line.received

            when = order.received_date or utc_now().date()
            graded: list[ReceivingLine] = []
            for index, item in enumerate(order.items):
                line = ReceivingLine(
                    product_id=item.product_id,
                    ordered=item.quantity,
                    received=received.get(item.product_id, 0),
                )
                graded.append(line)
                if line.received:
                    await self._ledger.adjust_stock(
                        tx,
                        item.product_id,
                        line.received,
                        effective_date=when,
                        reason=f"Received on {order.po_number}",
                        line=index,
                    )

            inspection = ReceivingInspection(date=when, inspector=inspector, lines=graded)
            updated = await tx.uow.purchase_orders.update(
                order.model_copy(
                    update={
                        "status": PurchaseOrderStatus.RECEIVED,
                        "inspection": inspection,
                        "received_date": when,
                    }
                )
            )
            await self._settle_reorders(tx, order, ReorderStatus.FULFILLED)
            tx.emit(
                "po.received",
                po_id,
                po_number=order.po_number,
                received=sum(line.received for line in graded),
                short=inspection.total_short,
            )
            return ReceivingResult(purchase_order=updated, lines=graded)

        result = await self._runner.run("complete_po_inspection", work)
        logger.info(
            "purchase_order_received",
            po_id=po_id,
            received=result.total_received,
            short=result.total_short,
        )
        return result

    async def pay_purchase_order(self, po_id: str, amount: float) -> PurchaseOrder:
        """Record payment for a received, unpaid order."""
        if amount <= 0:
            raise ValidationError("amount", "Payment amount must be positive", amount)

        async def work(tx: TransactionScope) -> PurchaseOrder:
            order = await self._load(tx.uow, po_id)
            if order.status != PurchaseOrderStatus.RECEIVED:
                raise InvalidStateError(
                    "purchase_order",
                    po_id,
                    order.status.value,
                    expected=[PurchaseOrderStatus.RECEIVED.value],
                    message=f"{order.po_number} cannot be paid before it is received",
                )
            if order.payment_status == PaymentStatus.PAID:
                raise InvalidStateError(
                    "purchase_order",
                    po_id,
                    order.payment_status.value,
                    expected=[PaymentStatus.UNPAID.value],
                    message=f"{order.po_number} is already paid",
                )
            updated = await tx.uow.purchase_orders.update(
                order.model_copy(
                    update={
                        "payment_status": PaymentStatus.PAID,
                        "amount_paid": amount,
                        "paid_at": utc_now(),
                    }
                )
            )
            tx.emit("po.paid", po_id, po_number=order.po_number, amount=amount)
            return updated

        order = await self._runner.run("pay_purchase_order", work)
        logger.info("purchase_order_paid", po_id=po_id, amount=amount)
        return order

    async def get_purchase_order(self, po_id: str) -> PurchaseOrder:
        return await self._runner.read(lambda uow: self._load(uow, po_id))

    async def list_purchase_orders(self, limit: int = 100, offset: int = 0) -> list[PurchaseOrder]:
        return await self._runner.read(lambda uow: uow.purchase_orders.list_all(limit, offset))

    # Returns to supplier

    async def _load_supplier_return(self, uow: IUnitOfWork, return_id: str) -> SupplierReturn:
        supplier_return = await uow.supplier_returns.get(return_id)
        if supplier_return is None:
            raise SupplierReturnNotFoundError(return_id)
        return supplier_return

    async def initiate_supplier_return(
        self,
        po_id: str,
        items: Sequence[SupplierReturnLine],
        reason: str,
        initiated_by: str | None = None,
    ) -> SupplierReturn:
        """
        Send received goods back to the order's supplier and take them out of stock.

        A product can be returned up to the quantity received on the order,
        less what earlier non-cancelled returns already sent back.

        Raises:
            PurchaseOrderNotFoundError: Unknown order
            InvalidStateError: Order is not Received
            ValidationError: A line names a product not on the order
            InvalidQuantityError: A line exceeds what is still returnable
            InsufficientStockError: Stock on hand is below a returned quantity
        """
        validate_lines(items, allow_repeats=False)
        if not reason.strip():
            raise ValidationError("reason", "A return reason is required")

        async def work(tx: TransactionScope) -> SupplierReturn:
            order = await self._load(tx.uow, po_id)
            if order.status != PurchaseOrderStatus.RECEIVED or order.inspection is None:
                raise InvalidStateError(
                    "purchase_order",
                    po_id,
                    order.status.value,
                    expected=[PurchaseOrderStatus.RECEIVED.value],
                    message=f"Only received goods can be returned; {order.po_number} is "
                    f"{order.status.value}",
                )

            returnable = {line.product_id: line.received for line in order.inspection.lines}
            for earlier in await tx.uow.supplier_returns.list_for_purchase_order(po_id):
                if earlier.status == SupplierReturnStatus.CANCELLED:
                    continue
                for product_id, quantity in earlier.quantities().items():
                    returnable[product_id] = returnable.get(product_id, 0) - quantity

            for index, item in enumerate(items):
                if item.product_id not in returnable:
                    raise ValidationError(
                        "product_id",
                        f"Product is not on {order.po_number}",
                        item.product_id,
                        line=index,
                    )
                if item.quantity > returnable[item.product_id]:
                    raise InvalidQuantityError(
                        item.product_id,
                        f"returning {item.quantity} exceeds returnable "
                        f"{returnable[item.product_id]}",
                        line=index,
                        returnable=returnable[item.product_id],
                        requested=item.quantity,
                    )

            number = await tx.uow.sequences.next_value("supplier_return")
            rts_number = f"RTS-{number:06d}"
            today = utc_now().date()
            for index, item in enumerate(items):
                await self._ledger.adjust_stock(
                    tx,
                    item.product_id,
                    -item.quantity,
                    effective_date=today,
                    reason=f"Returned to supplier on {rts_number}",
                    line=index,
                )

            supplier_return = await tx.uow.supplier_returns.add(
                SupplierReturn(
                    rts_number=rts_number,
                    purchase_order_id=order.id,
                    po_number=order.po_number,
                    supplier_id=order.supplier_id,
                    items=list(items),
                    reason=reason,
                    date_initiated=today,
                    initiated_by=initiated_by,
                )
            )
            tx.emit(
                "supplier_return.initiated",
                supplier_return.id,
                rts_number=rts_number,
                po_number=order.po_number,
                supplier_id=order.supplier_id,
                quantity=sum(item.quantity for item in items),
            )
            return supplier_return

        supplier_return = await self._runner.run("initiate_supplier_return", work)
        logger.info(
            "supplier_return_initiated",
            supplier_return_id=supplier_return.id,
            rts_number=supplier_return.rts_number,
            po_id=po_id,
        )
        return supplier_return

    async def _move_supplier_return(
        self, operation: str, return_id: str, target: SupplierReturnStatus, event: str
    ) -> SupplierReturn:
        async def work(tx: TransactionScope) -> SupplierReturn:
            supplier_return = await self._load_supplier_return(tx.uow, return_id)
            if not supplier_return.status.can_transition_to(target):
                raise InvalidTransitionError(
                    "supplier_return", return_id, supplier_return.status.value, target.value
                )
            changes: dict = {"status": target}
            if target == SupplierReturnStatus.SHIPPED:
                changes["date_shipped"] = utc_now().date()
            elif target == SupplierReturnStatus.CANCELLED:
                for index, item in enumerate(supplier_return.items):
                    await self._ledger.adjust_stock(
                        tx,
                        item.product_id,
                        item.quantity,
                        reason=f"Cancelled {supplier_return.rts_number}",
                        line=index,
                    )
            updated = await tx.uow.supplier_returns.update(
                supplier_return.model_copy(update=changes)
            )
            tx.emit(event, return_id, rts_number=supplier_return.rts_number)
            return updated

        supplier_return = await self._runner.run(operation, work)
        logger.info(operation, supplier_return_id=return_id, status=supplier_return.status.value)
        return supplier_return

    async def ship_supplier_return(self, return_id: str) -> SupplierReturn:
        return await self._move_supplier_return(
            "ship_supplier_return",
            return_id,
            SupplierReturnStatus.SHIPPED,
            "supplier_return.shipped",
        )

    async def complete_supplier_return(self, return_id: str) -> SupplierReturn:
        return await self._move_supplier_return(
            "complete_supplier_return",
            return_id,
            SupplierReturnStatus.COMPLETED,
            "supplier_return.completed",
        )

    async def cancel_supplier_return(self, return_id: str) -> SupplierReturn:
        """Pending -> Cancelled, putting the goods back in stock."""
        return await self._move_supplier_return(
            "cancel_supplier_return",
            return_id,
            SupplierReturnStatus.CANCELLED,
            "supplier_return.cancelled",
        )

    async def get_supplier_return(self, return_id: str) -> SupplierReturn:
        return await self._runner.read(lambda uow: self._load_supplier_return(uow, return_id))

    async def list_supplier_returns(
        self,
        status: SupplierReturnStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SupplierReturn]:
        return await self._runner.read(
            lambda uow: uow.supplier_returns.list_all(status, limit, offset)
        )
