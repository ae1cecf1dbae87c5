"""
Stock ledger.

The only code path that writes ``Product.stock`` and appends stock history.
Workflows call ``adjust_stock`` as one step of their own transaction; the
manual ``adjust`` entry point wraps a single adjustment in its own.
"""

from datetime import UTC, date, datetime, time, timedelta

from fulfillment.config import get_logger
from fulfillment.core.entities import Product, StockHistoryEntry, utc_now
from fulfillment.core.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)

_MIN_STEP = timedelta(microseconds=1)


def end_of_day(day: date) -> datetime:
    """Last representable instant of ``day`` in UTC."""
    return datetime.combine(day, time.max, tzinfo=UTC)


class StockLedger:
    """Authoritative stock counter and append-only history per product."""

    def __init__(self, runner: TransactionRunner, low_stock_alerts: bool = True):
        self._runner = runner
        self._low_stock_alerts = low_stock_alerts

    async def adjust_stock(
        self,
        tx: TransactionScope,
        product_id: str,
        delta: int,
        effective_date: date | None = None,
        reason: str | None = None,
        line: int | None = None,
    ) -> int:
        """
        Apply ``delta`` to a product's stock inside the caller's transaction.

        Args:
            tx: Scope of the enclosing transaction
            product_id: Product to adjust
            delta: Signed quantity change
            effective_date: Business date of the change (defaults to today)
            reason: Free-text reason kept in history
            line: Index of the document line driving the change, for errors

        Returns:
            The new stock level

        Raises:
            ProductNotFoundError: Unknown product
            InsufficientStockError: The change would make stock negative
        """
        updated = await self._apply(tx, product_id, delta, effective_date, reason, line)
        return updated.stock

    async def _apply(
        self,
        tx: TransactionScope,
        product_id: str,
        delta: int,
        effective_date: date | None,
        reason: str | None,
        line: int | None,
    ) -> Product:
        product = await tx.uow.products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id, line=line)

        new_stock = product.stock + delta
        if new_stock < 0:
            raise InsufficientStockError(
                product_id=product_id,
                requested=-delta,
                available=product.stock,
                line=line,
            )

        recorded_at = utc_now()
        last = await tx.uow.history.last_entry(product_id)
        if last is not None and last.recorded_at >= recorded_at:
            # Wall clock went backwards or two writes landed in one tick
            recorded_at = last.recorded_at + _MIN_STEP

        updated = await tx.uow.products.update(
            product.model_copy(update={"stock": new_stock, "updated_at": recorded_at})
        )
        await tx.uow.history.append(
            StockHistoryEntry(
                product_id=product_id,
                effective_date=effective_date or recorded_at.date(),
                stock_after=new_stock,
                delta=delta,
                reason=reason,
                recorded_at=recorded_at,
            )
        )

        tx.emit(
            "stock.adjusted",
            product_id,
            sku=product.sku,
            delta=delta,
            stock=new_stock,
            reason=reason,
        )
        if self._low_stock_alerts and updated.is_low_stock:
            tx.emit(
                "stock.low",
                product_id,
                sku=product.sku,
                product_name=product.name,
                stock=new_stock,
                reorder_limit=product.reorder_limit,
            )

        logger.debug(
            "stock_adjusted",
            product_id=product_id,
            delta=delta,
            stock=new_stock,
        )
        return updated

    async def adjust(
        self,
        product_id: str,
        delta: int,
        reason: str,
        actor: str | None = None,
        effective_date: date | None = None,
    ) -> Product:
        """Manual stock correction in its own transaction."""
        if delta == 0:
            raise ValidationError("delta", "Adjustment must change stock", delta)
        if not reason or not reason.strip():
            raise ValidationError("reason", "A reason is required for manual adjustments")

        history_reason = f"{reason.strip()} (by {actor})" if actor else reason.strip()

        async def work(tx: TransactionScope) -> Product:
            return await self._apply(
                tx, product_id, delta, effective_date, history_reason, line=None
            )

        product = await self._runner.run("adjust_stock", work)
        logger.info(
            "stock_manually_adjusted",
            product_id=product_id,
            delta=delta,
            stock=product.stock,
            actor=actor,
        )
        return product

    async def stock_as_of(self, product_id: str, as_of: date) -> int:
        """
        Stock level at the end of ``as_of``.

        Zero when the product has no history recorded up to that day.
        """

        async def query(uow: IUnitOfWork) -> int:
            if await uow.products.get(product_id) is None:
                raise ProductNotFoundError(product_id)
            entry = await uow.history.latest_at_or_before(product_id, end_of_day(as_of))
            return entry.stock_after if entry else 0

        return await self._runner.read(query)

    async def history(self, product_id: str) -> list[StockHistoryEntry]:
        """Full history of a product, oldest first."""

        async def query(uow: IUnitOfWork) -> list[StockHistoryEntry]:
            if await uow.products.get(product_id) is None:
                raise ProductNotFoundError(product_id)
            return await uow.history.list_for_product(product_id)

        return await self._runner.read(query)

    async def inventory_value_as_of(self, as_of: date) -> float:
        """Sum of point-in-time stock times current price over all products."""
        cutoff = end_of_day(as_of)

        async def query(uow: IUnitOfWork) -> float:
            total = 0.0
            offset = 0
            while True:
                page = await uow.products.list_all(limit=500, offset=offset)
                for product in page:
                    entry = await uow.history.latest_at_or_before(product.id, cutoff)
                    if entry:
                        total += entry.stock_after * product.price
                if len(page) < 500:
                    return total
                offset += 500

        return await self._runner.read(query)
