"""
Issuance workflow.

Creating an issuance decrements stock for every line and records the
document in one transaction. Deleting it puts the stock back, unless a
return already references it.
"""

from collections.abc import Sequence
from datetime import date

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    Issuance,
    IssuanceLine,
    Product,
    ReorderRequest,
    utc_now,
)
from fulfillment.core.exceptions import (
    ClientNotFoundError,
    ConflictingStateError,
    InsufficientStockError,
    IssuanceNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.line_items import aggregate_lines, validate_lines
from fulfillment.core.services.stock_ledger import StockLedger
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


class IssuanceWorkflow:
    """Issue stock to clients and reverse issuances."""

    def __init__(
        self,
        runner: TransactionRunner,
        ledger: StockLedger,
        auto_reorder: bool = True,
    ):
        self._runner = runner
        self._ledger = ledger
        self._auto_reorder = auto_reorder

    async def create_issuance(
        self,
        client_id: str,
        items: Sequence[IssuanceLine],
        remarks: str = "",
        issued_by: str = "",
        received_by: str | None = None,
        issue_date: date | None = None,
    ) -> Issuance:
        """
        Issue stock to a client.

        Lines naming the same product are summed before the stock check.
        Either every line is decremented and the issuance stored, or
        nothing changes.

        Raises:
            ValidationError: Empty items, non-positive quantity, no issuer
            ClientNotFoundError: Unknown client
            ProductNotFoundError: Unknown product on a line
            InsufficientStockError: A product lacks stock for its total
        """
        validate_lines(items)
        if not issued_by:
            raise ValidationError("issued_by", "Issuer is required")

        totals = aggregate_lines(items)

        async def work(tx: TransactionScope) -> Issuance:
            if await tx.uow.clients.get(client_id) is None:
                raise ClientNotFoundError(client_id)

            # Re-validate against the transaction's own reads
            products: dict[str, Product] = {}
            for product_id, (quantity, line) in totals.items():
                product = await tx.uow.products.get(product_id)
                if product is None:
                    raise ProductNotFoundError(product_id, line=line)
                if product.stock < quantity:
                    raise InsufficientStockError(
                        product_id=product_id,
                        requested=quantity,
                        available=product.stock,
                        line=line,
                    )
                products[product_id] = product

            number = await tx.uow.sequences.next_value("issuance")
            issuance = Issuance(
                issuance_number=f"IS-{number:06d}",
                date=issue_date or utc_now().date(),
                client_id=client_id,
                items=[IssuanceLine(product_id=i.product_id, quantity=i.quantity) for i in items],
                remarks=remarks,
                issued_by=issued_by,
                received_by=received_by,
            )
            await tx.uow.issuances.add(issuance)

            for product_id, (quantity, line) in totals.items():
                new_stock = await self._ledger.adjust_stock(
                    tx,
                    product_id,
                    -quantity,
                    effective_date=issuance.date,
                    reason=f"Issued on {issuance.issuance_number}",
                    line=line,
                )
                if self._auto_reorder:
                    await self._request_reorder(tx, products[product_id], new_stock, issuance)

            tx.emit(
                "issuance.created",
                issuance.id,
                issuance_number=issuance.issuance_number,
                client_id=client_id,
                lines=len(issuance.items),
            )
            return issuance

        issuance = await self._runner.run("create_issuance", work)
        logger.info(
            "issuance_created",
            issuance_id=issuance.id,
            issuance_number=issuance.issuance_number,
            lines=len(issuance.items),
        )
        return issuance

    async def _request_reorder(
        self,
        tx: TransactionScope,
        product: Product,
        new_stock: int,
        issuance: Issuance,
    ) -> None:
        """Open a reorder request when stock fell to the reorder limit."""
        if new_stock > product.reorder_limit:
            return
        quantity = product.max_stock_level - new_stock
        if quantity <= 0:
            return
        if await tx.uow.reorders.find_active(product.id) is not None:
            return

        request = await tx.uow.reorders.add(
            ReorderRequest(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                source_issuance_id=issuance.id,
            )
        )
        tx.emit(
            "reorder.requested",
            product.id,
            reorder_id=request.id,
            quantity=quantity,
            stock=new_stock,
        )

    async def delete_issuance(self, issuance_id: str) -> Issuance:
        """
        Delete an issuance and restore the stock it took.

        Raises:
            IssuanceNotFoundError: Unknown issuance
            ConflictingStateError: A return references the issuance
        """

        async def work(tx: TransactionScope) -> Issuance:
            issuance = await tx.uow.issuances.get(issuance_id)
            if issuance is None:
                raise IssuanceNotFoundError(issuance_id)

            returns = await tx.uow.returns.list_for_issuance(issuance_id)
            if returns:
                raise ConflictingStateError(
                    "issuance",
                    issuance_id,
                    "returns reference this issuance",
                    return_ids=[r.id for r in returns],
                )

            for product_id, (quantity, line) in aggregate_lines(issuance.items).items():
                await self._ledger.adjust_stock(
                    tx,
                    product_id,
                    quantity,
                    reason=f"Reversal of {issuance.issuance_number}",
                    line=line,
                )
            await tx.uow.issuances.delete(issuance)

            tx.emit(
                "issuance.deleted",
                issuance.id,
                issuance_number=issuance.issuance_number,
            )
            return issuance

        issuance = await self._runner.run("delete_issuance", work)
        logger.info(
            "issuance_deleted",
            issuance_id=issuance.id,
            issuance_number=issuance.issuance_number,
        )
        return issuance

    async def get_issuance(self, issuance_id: str) -> Issuance:
        async def query(uow: IUnitOfWork) -> Issuance:
            issuance = await uow.issuances.get(issuance_id)
            if issuance is None:
                raise IssuanceNotFoundError(issuance_id)
            return issuance

        return await self._runner.read(query)

    async def list_issuances(self, limit: int = 100, offset: int = 0) -> list[Issuance]:
        return await self._runner.read(lambda uow: uow.issuances.list_all(limit, offset))
