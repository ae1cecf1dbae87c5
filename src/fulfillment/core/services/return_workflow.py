"""
Return and inspection workflow.

Intake (initiate, receive, cancel) never touches stock. Inspection splits
each returned quantity into restock, disposal and whatever is left over;
restock goes back through the ledger, disposal becomes a first-class
disposal-eligible quantity, and the remainder is reported as unaccounted.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    DisposalEligibleQuantity,
    Inspection,
    InspectionLine,
    Return,
    ReturnItem,
    ReturnStatus,
    utc_now,
)
from fulfillment.core.exceptions import (
    InvalidQuantityError,
    InvalidStateError,
    InvalidTransitionError,
    IssuanceNotFoundError,
    ReturnNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.line_items import validate_lines
from fulfillment.core.services.stock_ledger import StockLedger
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


@dataclass
class InspectionResult:
    """Outcome of a completed inspection."""

    return_record: Return
    lines: list[InspectionLine]
    disposal_eligible: list[DisposalEligibleQuantity] = field(default_factory=list)

    @property
    def total_restocked(self) -> int:
        return sum(line.restock for line in self.lines)

    @property
    def total_disposal(self) -> int:
        return sum(line.disposal for line in self.lines)

    @property
    def total_unaccounted(self) -> int:
        return sum(line.unaccounted for line in self.lines)


class ReturnWorkflow:
    """Return intake and inspection."""

    def __init__(self, runner: TransactionRunner, ledger: StockLedger):
        self._runner = runner
        self._ledger = ledger

    async def _load(self, uow: IUnitOfWork, return_id: str) -> Return:
        ret = await uow.returns.get(return_id)
        if ret is None:
            raise ReturnNotFoundError(return_id)
        return ret

    async def initiate_return(
        self,
        issuance_id: str,
        reason: str,
        items: Sequence[ReturnItem],
        date_initiated: date | None = None,
    ) -> Return:
        """
        Open a Pending return against an issuance.

        Each product must have been issued, and its quantity may not exceed
        what was issued minus what other non-cancelled returns already claim.
        """
        validate_lines(items, allow_repeats=False)

        async def work(tx: TransactionScope) -> Return:
            issuance = await tx.uow.issuances.get(issuance_id)
            if issuance is None:
                raise IssuanceNotFoundError(issuance_id)

            issued = issuance.quantities()
            claimed: dict[str, int] = {}
            for existing in await tx.uow.returns.list_for_issuance(issuance_id):
                if existing.status == ReturnStatus.CANCELLED:
                    continue
                for product_id, quantity in existing.quantities().items():
                    claimed[product_id] = claimed.get(product_id, 0) + quantity

            lines: list[ReturnItem] = []
            for index, item in enumerate(items):
                if item.product_id not in issued:
                    raise ValidationError(
                        "product_id",
                        f"Product was not issued on {issuance.issuance_number}",
                        item.product_id,
                        line=index,
                    )
                returnable = issued[item.product_id] - claimed.get(item.product_id, 0)
                if item.quantity > returnable:
                    raise InvalidQuantityError(
                        item.product_id,
                        f"returning {item.quantity} but only {returnable} can be returned",
                        line=index,
                        requested=item.quantity,
                        returnable=returnable,
                    )
                product = await tx.uow.products.get(item.product_id)
                lines.append(
                    ReturnItem(
                        product_id=item.product_id,
                        name=product.name if product else item.name,
                        sku=product.sku if product else item.sku,
                        quantity=item.quantity,
                    )
                )

            number = await tx.uow.sequences.next_value("return")
            ret = await tx.uow.returns.add(
                Return(
                    rma_number=f"RMA-{number:06d}",
                    issuance_id=issuance.id,
                    issuance_number=issuance.issuance_number,
                    client_id=issuance.client_id,
                    reason=reason,
                    items=lines,
                    date_initiated=date_initiated or utc_now().date(),
                )
            )
            tx.emit(
                "return.initiated",
                ret.id,
                rma_number=ret.rma_number,
                issuance_id=issuance.id,
            )
            return ret

        ret = await self._runner.run("initiate_return", work)
        logger.info("return_initiated", return_id=ret.id, rma_number=ret.rma_number)
        return ret

    async def _transition(
        self,
        operation: str,
        return_id: str,
        target: ReturnStatus,
        processed_by: str | None,
        event: str,
    ) -> Return:
        async def work(tx: TransactionScope) -> Return:
            ret = await self._load(tx.uow, return_id)
            if not ret.status.can_transition_to(target):
                raise InvalidTransitionError(
                    "return", return_id, ret.status.value, target.value
                )
            changes: dict = {"status": target, "processed_by": processed_by}
            if target == ReturnStatus.RECEIVED:
                changes["date_received"] = utc_now().date()
            updated = await tx.uow.returns.update(ret.model_copy(update=changes))
            tx.emit(event, return_id, rma_number=ret.rma_number, processed_by=processed_by)
            return updated

        ret = await self._runner.run(operation, work)
        logger.info(operation, return_id=return_id, status=ret.status.value)
        return ret

    async def mark_received(self, return_id: str, processed_by: str | None = None) -> Return:
        """Pending -> Received. Goods are back but not yet graded."""
        return await self._transition(
            "mark_return_received", return_id, ReturnStatus.RECEIVED, processed_by, "return.received"
        )

    async def cancel_return(self, return_id: str, processed_by: str | None = None) -> Return:
        """Pending -> Cancelled. Received or Completed returns cannot be cancelled."""
        return await self._transition(
            "cancel_return", return_id, ReturnStatus.CANCELLED, processed_by, "return.cancelled"
        )

    async def delete_return(self, return_id: str) -> None:
        """Delete a return that has not been inspected yet."""

        async def work(tx: TransactionScope) -> None:
            ret = await self._load(tx.uow, return_id)
            if ret.status == ReturnStatus.COMPLETED:
                raise InvalidStateError(
                    "return",
                    return_id,
                    ret.status.value,
                    message=f"Return {ret.rma_number} is Completed and cannot be deleted",
                )
            await tx.uow.returns.delete(ret)
            tx.emit("return.deleted", return_id, rma_number=ret.rma_number)

        await self._runner.run("delete_return", work)
        logger.info("return_deleted", return_id=return_id)

    async def complete_inspection(
        self,
        return_id: str,
        lines: Sequence[InspectionLine],
        inspector: str,
        inspection_date: date | None = None,
    ) -> InspectionResult:
        """
        Grade a received return.

        All-or-nothing across the return: if any line has
        ``restock + disposal > returned`` nothing is applied. Returned
        products missing from ``lines`` count as fully unaccounted.

        Raises:
            InvalidStateError: Return is not Received
            ValidationError: Inspection names a product not on the return
            InvalidQuantityError: A line splits more than was returned
        """
        if not inspector:
            raise ValidationError("inspector", "Inspector is required")
        seen: set[str] = set()
        for index, line in enumerate(lines):
            if line.product_id in seen:
                raise ValidationError(
                    "product_id", "Product inspected more than once", line.product_id, line=index
                )
            seen.add(line.product_id)

        async def work(tx: TransactionScope) -> InspectionResult:
            ret = await self._load(tx.uow, return_id)
            if ret.status != ReturnStatus.RECEIVED:
                raise InvalidStateError(
                    "return", return_id, ret.status.value, expected=[ReturnStatus.RECEIVED.value]
                )

            returned = ret.quantities()
            by_product: dict[str, InspectionLine] = {}
            for index, line in enumerate(lines):
                if line.product_id not in returned:
                    raise ValidationError(
                        "product_id",
                        f"Product is not on return {ret.rma_number}",
                        line.product_id,
                        line=index,
                    )
                quantity = returned[line.product_id]
                if line.restock + line.disposal > quantity:
                    raise InvalidQuantityError(
                        line.product_id,
                        f"restock {line.restock} + disposal {line.disposal} "
                        f"exceeds returned {quantity}",
                        line=index,
                        returned=quantity,
                        restock=line.restock,
                        disposal=line.disposal,
                    )
                by_product[line.product_id] = line

            when = inspection_date or utc_now().date()
            graded: list[InspectionLine] = []
            eligible: list[DisposalEligibleQuantity] = []
            for index, item in enumerate(ret.items):
                given = by_product.get(item.product_id)
                line = InspectionLine(
                    product_id=item.product_id,
                    returned=item.quantity,
                    restock=given.restock if given else 0,
                    disposal=given.disposal if given else 0,
                )
                graded.append(line)

                if line.restock:
                    await self._ledger.adjust_stock(
                        tx,
                        item.product_id,
                        line.restock,
                        effective_date=when,
                        reason=f"Restocked from {ret.rma_number}",
                        line=index,
                    )
                if line.disposal:
                    eligible.append(
                        await tx.uow.disposals.add_eligible(
                            DisposalEligibleQuantity(
                                product_id=item.product_id,
                                product_name=item.name,
                                product_sku=item.sku,
                                return_id=ret.id,
                                rma_number=ret.rma_number,
                                quantity=line.disposal,
                                inspection_date=when,
                            )
                        )
                    )

            inspection = Inspection(date=when, inspector=inspector, lines=graded)
            updated = await tx.uow.returns.update(
                ret.model_copy(
                    update={"status": ReturnStatus.COMPLETED, "inspection": inspection}
                )
            )
            tx.emit(
                "return.inspected",
                ret.id,
                rma_number=ret.rma_number,
                restocked=sum(line.restock for line in graded),
                disposal=sum(line.disposal for line in graded),
                unaccounted=inspection.total_unaccounted,
            )
            return InspectionResult(return_record=updated, lines=graded, disposal_eligible=eligible)

        result = await self._runner.run("complete_inspection", work)
        log = logger.warning if result.total_unaccounted else logger.info
        log(
            "return_inspected",
            return_id=return_id,
            restocked=result.total_restocked,
            disposal=result.total_disposal,
            unaccounted=result.total_unaccounted,
        )
        return result

    async def get_return(self, return_id: str) -> Return:
        return await self._runner.read(lambda uow: self._load(uow, return_id))

    async def list_returns(
        self, status: ReturnStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Return]:
        return await self._runner.read(lambda uow: uow.returns.list_all(status, limit, offset))
